"""Data models for registry-creds.

This module provides the type-safe data structures passed between the
credential sources, the cluster stores and the reconciler.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from registry_creds.exceptions import RegistryCredsError
    from registry_creds.providers import CredentialSource


class SecretKind(str, Enum):
    """Supported registry-login secret types.

    Inherits from str so members can be used directly as the secret
    ``type`` field of a Kubernetes Secret.
    """

    DOCKER_CFG = "kubernetes.io/dockercfg"
    DOCKER_CONFIG_JSON = "kubernetes.io/dockerconfigjson"

    @property
    def data_key(self) -> str:
        """The single data key holding the docker config blob."""
        if self is SecretKind.DOCKER_CFG:
            return ".dockercfg"
        return ".dockerconfigjson"


class RegistryCredential(NamedTuple):
    """A short-lived registry token and the endpoint it is valid for.

    Attributes:
        token: The docker ``auth`` value (base64 of ``user:password``).
        endpoint: The registry endpoint the token authenticates against.

    """

    token: str
    endpoint: str

    def __repr__(self) -> str:
        return f"RegistryCredential(endpoint={self.endpoint!r}, token=<redacted>)"


@dataclass(frozen=True, slots=True)
class ManagedSecret:
    """A registry-login secret owned by this controller.

    Attributes:
        namespace: The namespace the secret lives in.
        name: The secret name.
        kind: The secret type.
        payload: The serialized docker config stored under ``kind.data_key``.

    """

    namespace: str
    name: str
    kind: SecretKind
    payload: bytes = field(repr=False)

    @property
    def data(self) -> dict[str, bytes]:
        """The secret data mapping as stored in the cluster (undecoded)."""
        return {self.kind.data_key: self.payload}


@dataclass(slots=True)
class ServiceAccount:
    """The attributes of a service account the patcher cares about.

    Attributes:
        namespace: The namespace of the account.
        name: The account name, normally ``default``.
        image_pull_secrets: Ordered names from ``imagePullSecrets``.
        resource_version: Version used to guard the write back.

    """

    namespace: str
    name: str
    image_pull_secrets: list[str] = field(default_factory=list)
    resource_version: str | None = None


@dataclass(frozen=True, slots=True)
class Provider:
    """A registry provider as registered with the reconciler.

    Providers are kept in an explicit ordered list; that order decides
    the order of the managed entries in ``imagePullSecrets``.

    Attributes:
        name: Human readable provider name (e.g. ``GCR``).
        secret_name: Name of the managed secret in every namespace.
        kind: The secret type written for this provider.
        source: The credential source, or None when not configured.

    """

    name: str
    secret_name: str
    kind: SecretKind
    source: "CredentialSource | None" = None

    @property
    def enabled(self) -> bool:
        """Whether the provider takes part in reconciliation."""
        return self.source is not None


@dataclass(slots=True)
class CycleReport:
    """Outcome of a single reconciliation cycle."""

    providers: list[str] = field(default_factory=list)
    namespaces: list[str] = field(default_factory=list)
    secrets_synced: int = 0
    references_added: int = 0
    errors: list["RegistryCredsError"] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
