"""Idempotent upsert of managed registry secrets.

The synchronizer never reads before writing: it attempts a create and
falls back to an update when the store reports that the name is taken.
"""

from icecream import ic

from registry_creds import console
from registry_creds.cluster import SecretStore
from registry_creds.exceptions import ClusterApiError, ObjectExistsError, SecretSyncError
from registry_creds.models import ManagedSecret, SecretKind


def sync_secret(
    store: SecretStore,
    namespace: str,
    secret_name: str,
    kind: SecretKind,
    payload: bytes,
) -> ManagedSecret:
    """Ensure a secret with exactly this kind and payload exists.

    Args:
        store: Secret store scoped to ``namespace``.
        namespace: The target namespace.
        secret_name: Name of the managed secret.
        kind: The secret type to write.
        payload: The docker config blob.

    Returns:
        The secret as written.

    Raises:
        SecretSyncError: If the secret could be neither created nor updated.

    """
    secret = ManagedSecret(namespace=namespace, name=secret_name, kind=kind, payload=payload)
    ic(secret)

    try:
        store.create(secret)
    except ObjectExistsError:
        pass
    except ClusterApiError as e:
        raise SecretSyncError(namespace, secret_name, str(e)) from e
    else:
        console.step(f"Created secret {console.highlight(f'{namespace}/{secret_name}')}")
        return secret

    try:
        store.update(secret)
    except ClusterApiError as e:
        raise SecretSyncError(namespace, secret_name, str(e)) from e

    console.step(f"Updated secret {console.highlight(f'{namespace}/{secret_name}')}")
    return secret
