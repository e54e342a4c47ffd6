"""Custom exceptions for registry-creds.

This module defines the exception hierarchy used throughout the controller.
Errors raised while reconciling a single namespace are collected by the
reconciler and reported together at the end of a cycle.
"""

from collections.abc import Sequence


class RegistryCredsError(Exception):
    """Base exception for all registry-creds errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all registry-creds errors with a single
    except clause if desired.
    """

    pass


class ClusterConnectionError(RegistryCredsError):
    """Raised when connection to the Kubernetes cluster fails.

    This can occur when:
    - The kubeconfig is invalid or missing
    - No in-cluster service account is mounted
    - The requested context does not exist
    """

    pass


class ClusterApiError(RegistryCredsError):
    """Raised when a Kubernetes API call fails.

    Attributes:
        status: The HTTP status returned by the API server, if any.

    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ObjectExistsError(ClusterApiError):
    """Raised when creating an object whose name is already taken."""

    pass


class ObjectNotFoundError(ClusterApiError):
    """Raised when the requested object does not exist."""

    pass


class ObjectConflictError(ClusterApiError):
    """Raised when an update loses against a concurrent modification."""

    pass


class NamespaceListError(RegistryCredsError):
    """Raised when the namespaces of the cluster cannot be enumerated."""

    pass


class CredentialFetchError(RegistryCredsError):
    """Raised when a registry provider does not hand out a token.

    This can occur when:
    - The provider endpoint is unreachable
    - The ambient cloud credentials are missing or unauthorized
    - The provider response carries no authorization data
    """

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {provider} credentials: {reason}")
        self.provider = provider


class SecretSyncError(RegistryCredsError):
    """Raised when a managed secret can be neither created nor updated."""

    def __init__(self, namespace: str, secret_name: str, reason: str) -> None:
        super().__init__(f"Failed to sync secret {namespace}/{secret_name}: {reason}")
        self.namespace = namespace
        self.secret_name = secret_name


class IdentityNotFoundError(RegistryCredsError):
    """Raised when the namespace has no default service account yet.

    This usually means the namespace was created moments ago and the
    service account controller has not caught up.
    """

    def __init__(self, namespace: str, account: str, reason: str | None = None) -> None:
        message = f"Service account {namespace}/{account} not found"
        super().__init__(f"{message}: {reason}" if reason else message)
        self.namespace = namespace
        self.account = account


class IdentityUpdateError(RegistryCredsError):
    """Raised when the service account cannot be written back."""

    def __init__(self, namespace: str, account: str, reason: str) -> None:
        super().__init__(f"Failed to update service account {namespace}/{account}: {reason}")
        self.namespace = namespace
        self.account = account


class ReconcileError(RegistryCredsError):
    """Raised at the end of a cycle in which at least one unit failed.

    Attributes:
        errors: Every error collected during the cycle, in the order seen.
        report: The CycleReport of the failed cycle.

    """

    def __init__(self, errors: Sequence[RegistryCredsError], report: object = None) -> None:
        self.errors: list[RegistryCredsError] = list(errors)
        self.report = report
        summary = "; ".join(str(err) for err in self.errors)
        super().__init__(f"{len(self.errors)} error(s) during reconciliation: {summary}")
