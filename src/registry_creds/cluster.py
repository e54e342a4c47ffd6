"""Kubernetes cluster interaction utilities.

This module provides the Cluster class, which loads the Kubernetes
configuration, enumerates namespaces, and hands out secret and service
account stores scoped to a single namespace.
"""

import base64
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from icecream import ic
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError, MaxRetryError

from registry_creds import console
from registry_creds.exceptions import (
    ClusterApiError,
    ClusterConnectionError,
    ObjectConflictError,
    ObjectExistsError,
    ObjectNotFoundError,
)
from registry_creds.models import ManagedSecret, ServiceAccount

# Set by the kubelet inside every pod
_IN_CLUSTER_ENV = "KUBERNETES_SERVICE_HOST"


class SecretStore(Protocol):
    """Secret write access scoped to one namespace."""

    namespace: str

    def create(self, secret: ManagedSecret) -> None:
        """Create the secret; raise ObjectExistsError if the name is taken."""
        ...

    def update(self, secret: ManagedSecret) -> None:
        """Overwrite type and data of an existing secret."""
        ...


class ServiceAccountStore(Protocol):
    """Service account access scoped to one namespace."""

    namespace: str

    def get(self, name: str) -> ServiceAccount:
        """Read a service account; raise ObjectNotFoundError if absent."""
        ...

    def update(self, account: ServiceAccount) -> None:
        """Write back ``imagePullSecrets``; raise ObjectConflictError on a stale version."""
        ...


class ClusterClient(Protocol):
    """The cluster operations the reconciler depends on."""

    def list_namespaces(self) -> list[str]: ...

    def secrets(self, namespace: str) -> SecretStore: ...

    def service_accounts(self, namespace: str) -> ServiceAccountStore: ...


@contextmanager
def _api_errors(action: str, *, on_conflict: type[ClusterApiError] = ClusterApiError) -> Iterator[None]:
    """Translate kubernetes client failures into ClusterApiError subclasses.

    Transport failures (any ``urllib3`` HTTPError) become a plain
    ClusterApiError so callers only ever see the registry-creds hierarchy.

    Args:
        action: Short description used in the error message.
        on_conflict: Exception class raised for HTTP 409.

    """
    try:
        yield
    except ApiException as e:
        error_class: type[ClusterApiError] = ClusterApiError
        if e.status == 404:
            error_class = ObjectNotFoundError
        elif e.status == 409:
            error_class = on_conflict
        raise error_class(f"{action}: {e.status} {e.reason}", status=e.status) from e
    except MaxRetryError as e:
        raise ClusterApiError(f"{action}: failed to connect to the Kubernetes cluster: {e.reason}") from e
    except HTTPError as e:
        # POST and PATCH are not retried, so read errors surface unwrapped
        raise ClusterApiError(f"{action}: connection to the Kubernetes cluster failed: {e}") from e


class KubeSecretStore:
    """SecretStore backed by the CoreV1 API."""

    def __init__(self, api: client.CoreV1Api, namespace: str) -> None:
        self.api = api
        self.namespace = namespace

    def _body(self, secret: ManagedSecret) -> client.V1Secret:
        data = {key: base64.b64encode(value).decode("ascii") for key, value in secret.data.items()}
        return client.V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=client.V1ObjectMeta(name=secret.name, namespace=self.namespace),
            type=secret.kind.value,
            data=data,
        )

    def create(self, secret: ManagedSecret) -> None:
        with _api_errors(f"create secret {self.namespace}/{secret.name}", on_conflict=ObjectExistsError):
            self.api.create_namespaced_secret(namespace=self.namespace, body=self._body(secret))

    def update(self, secret: ManagedSecret) -> None:
        # replace without resourceVersion overwrites unconditionally
        with _api_errors(f"replace secret {self.namespace}/{secret.name}"):
            self.api.replace_namespaced_secret(name=secret.name, namespace=self.namespace, body=self._body(secret))


class KubeServiceAccountStore:
    """ServiceAccountStore backed by the CoreV1 API."""

    def __init__(self, api: client.CoreV1Api, namespace: str) -> None:
        self.api = api
        self.namespace = namespace

    def get(self, name: str) -> ServiceAccount:
        with _api_errors(f"read service account {self.namespace}/{name}"):
            account = self.api.read_namespaced_service_account(name=name, namespace=self.namespace)

        return ServiceAccount(
            namespace=self.namespace,
            name=name,
            image_pull_secrets=[ref.name for ref in account.image_pull_secrets or []],
            resource_version=account.metadata.resource_version,
        )

    def update(self, account: ServiceAccount) -> None:
        body: dict = {"imagePullSecrets": [{"name": name} for name in account.image_pull_secrets]}
        if account.resource_version:
            # The API server rejects the patch with 409 if the account changed since it was read
            body["metadata"] = {"resourceVersion": account.resource_version}
        ic(body)

        with _api_errors(
            f"patch service account {self.namespace}/{account.name}", on_conflict=ObjectConflictError
        ):
            self.api.patch_namespaced_service_account(name=account.name, namespace=self.namespace, body=body)


class Cluster:
    """Manages Kubernetes cluster interactions for the controller.

    Attributes:
        context: The active kubeconfig context, or ``in-cluster``.
        api: The CoreV1 API client shared by all stores.

    """

    def __init__(
        self,
        *,
        kubeconfig: str | None = None,
        context: str | None = None,
        in_cluster: bool | None = None,
    ) -> None:
        """Load the Kubernetes configuration.

        Args:
            kubeconfig: Path to a kubeconfig file. Defaults to the client default.
            context: Kubeconfig context to use. Defaults to the current context.
            in_cluster: Force (or forbid) the in-cluster configuration. When None,
                it is used whenever the process runs inside a pod.

        """
        if in_cluster is None:
            in_cluster = kubeconfig is None and context is None and _IN_CLUSTER_ENV in os.environ

        self.context: str = self._load_config(kubeconfig=kubeconfig, context=context, in_cluster=in_cluster)
        self.api: client.CoreV1Api = client.CoreV1Api()

    @staticmethod
    def _load_config(*, kubeconfig: str | None, context: str | None, in_cluster: bool) -> str:
        """Load in-cluster or kubeconfig based client configuration.

        Returns:
            The name of the context in use.

        Raises:
            ClusterConnectionError: If no usable configuration is found.

        """
        if in_cluster:
            try:
                config.load_incluster_config()
            except ConfigException as e:
                raise ClusterConnectionError(f"Invalid in-cluster configuration: {e}") from e
            console.action(f"Working with {console.highlight('in-cluster')} configuration")
            return "in-cluster"

        try:
            contexts, current_context = config.list_kube_config_contexts(config_file=kubeconfig)
        except ConfigException as e:
            raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e

        if context is None:
            context = str(current_context["name"])
        elif context not in [ctx["name"] for ctx in contexts]:
            raise ClusterConnectionError(f"Context '{context}' not found in kubeconfig")

        try:
            config.load_kube_config(config_file=kubeconfig, context=context)
        except ConfigException as e:
            raise ClusterConnectionError(f"Failed to load kubeconfig context '{context}': {e}") from e

        console.action(f"Working with {console.highlight(context)} cluster")
        return context

    def list_namespaces(self) -> list[str]:
        """Get all namespaces in the cluster.

        Returns:
            List of namespace names.

        Raises:
            ClusterApiError: If the namespaces cannot be listed.

        """
        with _api_errors("list namespaces"):
            ns_list = [ns.metadata.name for ns in self.api.list_namespace().items]
        ic(ns_list)

        return ns_list

    def secrets(self, namespace: str) -> KubeSecretStore:
        """Return a secret store scoped to ``namespace``."""
        return KubeSecretStore(self.api, namespace)

    def service_accounts(self, namespace: str) -> KubeServiceAccountStore:
        """Return a service account store scoped to ``namespace``."""
        return KubeServiceAccountStore(self.api, namespace)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Cluster(context={self.context!r})"
