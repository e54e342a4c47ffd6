"""registry-creds: keep container registry pull secrets current.

This package provides a reconciliation controller that fetches
short-lived registry tokens from GCR and ECR, writes them as
registry-login secrets into every namespace of a cluster, and adds them
to each namespace's default service account.

Example usage:
    from registry_creds import Cluster, Reconciler, Settings

    settings = Settings(aws_region="eu-west-1", gcr_url="https://eu.gcr.io")
    reconciler = Reconciler(Cluster(), settings.build_providers())
    reconciler.process()
"""

__version__ = "0.1.0"

from registry_creds.cli import cli
from registry_creds.cluster import Cluster
from registry_creds.config import Settings
from registry_creds.core.reconciler import Reconciler
from registry_creds.exceptions import (
    ClusterApiError,
    ClusterConnectionError,
    CredentialFetchError,
    IdentityNotFoundError,
    IdentityUpdateError,
    ReconcileError,
    RegistryCredsError,
    SecretSyncError,
)

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "Cluster",
    "Reconciler",
    "Settings",
    # Exceptions
    "RegistryCredsError",
    "ClusterApiError",
    "ClusterConnectionError",
    "CredentialFetchError",
    "IdentityNotFoundError",
    "IdentityUpdateError",
    "ReconcileError",
    "SecretSyncError",
]
