"""Shared test fixtures for registry-creds tests."""

from unittest.mock import MagicMock, patch

import pytest

from registry_creds.exceptions import (
    ClusterApiError,
    CredentialFetchError,
    ObjectConflictError,
    ObjectExistsError,
    ObjectNotFoundError,
)
from registry_creds.models import ManagedSecret, Provider, RegistryCredential, SecretKind, ServiceAccount

GCR_SECRET = "gcr-secret"
ECR_SECRET = "awsecr-cred"
FAKE_ENDPOINT = "fakeEndpoint"
FAKE_TOKEN = "fakeToken"


class FakeSecretStore:
    """In-memory SecretStore honouring the create-fails-if-exists contract."""

    def __init__(self, namespace):
        self.namespace = namespace
        self.objects = {}
        self.create_calls = 0
        self.update_calls = 0
        self.create_error = None
        self.update_error = None

    def create(self, secret):
        self.create_calls += 1
        if self.create_error is not None:
            raise self.create_error
        if secret.name in self.objects:
            raise ObjectExistsError(f"secret {secret.name} already exists", status=409)
        self.objects[secret.name] = secret

    def update(self, secret):
        self.update_calls += 1
        if self.update_error is not None:
            raise self.update_error
        if secret.name not in self.objects:
            raise ObjectNotFoundError(f"secret {secret.name} not found", status=404)
        self.objects[secret.name] = secret


class FakeServiceAccountStore:
    """In-memory ServiceAccountStore with resourceVersion conflict detection."""

    def __init__(self, namespace, accounts=None):
        self.namespace = namespace
        self.accounts = {name: (list(refs), 1) for name, refs in (accounts or {}).items()}
        self.update_calls = 0
        self.get_error = None
        self.update_error = None

    def pull_secrets(self, name="default"):
        return self.accounts[name][0]

    def get(self, name):
        if self.get_error is not None:
            raise self.get_error
        if name not in self.accounts:
            raise ObjectNotFoundError(f"serviceaccount {name} not found", status=404)
        refs, version = self.accounts[name]
        return ServiceAccount(
            namespace=self.namespace,
            name=name,
            image_pull_secrets=list(refs),
            resource_version=str(version),
        )

    def update(self, account):
        self.update_calls += 1
        if self.update_error is not None:
            raise self.update_error
        if account.name not in self.accounts:
            raise ObjectNotFoundError(f"serviceaccount {account.name} not found", status=404)
        _, version = self.accounts[account.name]
        if account.resource_version != str(version):
            raise ObjectConflictError("the object has been modified", status=409)
        self.accounts[account.name] = (list(account.image_pull_secrets), version + 1)


class FakeCluster:
    """In-memory ClusterClient; every namespace starts with an empty default service account."""

    def __init__(self, namespaces):
        self.namespace_names = list(namespaces)
        self.secret_stores = {ns: FakeSecretStore(ns) for ns in self.namespace_names}
        self.account_stores = {ns: FakeServiceAccountStore(ns, {"default": []}) for ns in self.namespace_names}
        self.list_error = None
        self.list_calls = 0

    def list_namespaces(self):
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.namespace_names)

    def secrets(self, namespace):
        return self.secret_stores[namespace]

    def service_accounts(self, namespace):
        return self.account_stores[namespace]


class FakeSource:
    """CredentialSource returning a fixed credential or raising CredentialFetchError."""

    def __init__(self, name, credential=None, fail=False):
        self.name = name
        self.credential = credential or RegistryCredential(token=FAKE_TOKEN, endpoint=FAKE_ENDPOINT)
        self.fail = fail
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.fail:
            raise CredentialFetchError(self.name, "access denied")
        return self.credential


@pytest.fixture
def make_cluster():
    """Factory for in-memory clusters with the given namespaces."""
    return FakeCluster


@pytest.fixture
def make_source():
    """Factory for credential sources returning a fixed credential."""
    return FakeSource


@pytest.fixture
def secret_store():
    """Empty secret store for namespace1."""
    return FakeSecretStore("namespace1")


@pytest.fixture
def make_account_store():
    """Factory for namespace1 service account stores holding the given accounts."""

    def _make(accounts):
        return FakeServiceAccountStore("namespace1", accounts)

    return _make


@pytest.fixture
def cluster():
    """Fake cluster with two managed namespaces and kube-system."""
    return FakeCluster(["namespace1", "namespace2", "kube-system"])


@pytest.fixture
def gcr_source():
    return FakeSource("GCR")


@pytest.fixture
def ecr_source():
    return FakeSource("ECR")


@pytest.fixture
def providers(gcr_source, ecr_source):
    """Both providers enabled, in registration order."""
    return [
        Provider(name="GCR", secret_name=GCR_SECRET, kind=SecretKind.DOCKER_CFG, source=gcr_source),
        Provider(name="ECR", secret_name=ECR_SECRET, kind=SecretKind.DOCKER_CONFIG_JSON, source=ecr_source),
    ]


@pytest.fixture
def foreign_secret():
    """A pre-existing secret with unrelated type and content."""
    return ManagedSecret(
        namespace="namespace1",
        name=GCR_SECRET,
        kind=SecretKind.DOCKER_CONFIG_JSON,
        payload=b"some other config",
    )


@pytest.fixture
def mock_core_v1_api():
    """Mock CoreV1Api used by the kubernetes-backed stores."""
    with patch("kubernetes.client.CoreV1Api") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        ns_items = []
        for name in ["default", "kube-system", "monitoring"]:
            ns = MagicMock()
            ns.metadata.name = name
            ns_items.append(ns)
        api_instance.list_namespace.return_value.items = ns_items
        yield api_instance


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}, {"name": "other-context"}], {"name": "test-context"})
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def api_error():
    """Factory for ClusterApiError instances."""

    def _make(status=500):
        return ClusterApiError(f"boom: {status}", status=status)

    return _make
