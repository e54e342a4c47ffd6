"""Service account image pull secret patching.

This module wires managed secrets into a namespace's default service
account. References added by other actors are left untouched and the
same secret is never listed twice.
"""

from icecream import ic

from registry_creds import console
from registry_creds.cluster import ServiceAccountStore
from registry_creds.exceptions import (
    ClusterApiError,
    IdentityNotFoundError,
    IdentityUpdateError,
    ObjectNotFoundError,
)

DEFAULT_SERVICE_ACCOUNT = "default"


def ensure_pull_secret_reference(
    store: ServiceAccountStore,
    secret_name: str,
    account_name: str = DEFAULT_SERVICE_ACCOUNT,
) -> bool:
    """Make sure the service account lists ``secret_name`` in imagePullSecrets.

    A missing reference is appended to the end of the list; existing
    entries keep their order.

    Args:
        store: Service account store scoped to the target namespace.
        secret_name: Name of the managed secret to reference.
        account_name: The service account to patch.

    Returns:
        True if the account was updated, False if the reference was already present.

    Raises:
        IdentityNotFoundError: If the service account does not exist or cannot be read.
        IdentityUpdateError: If the account could not be written back.

    """
    namespace = store.namespace
    try:
        account = store.get(account_name)
    except ObjectNotFoundError as e:
        raise IdentityNotFoundError(namespace, account_name) from e
    except ClusterApiError as e:
        raise IdentityNotFoundError(namespace, account_name, reason=str(e)) from e

    ic(account)
    if secret_name in account.image_pull_secrets:
        return False

    account.image_pull_secrets.append(secret_name)
    try:
        store.update(account)
    except ClusterApiError as e:
        raise IdentityUpdateError(namespace, account_name, str(e)) from e

    console.step(
        f"Added {console.highlight(secret_name)} to service account {console.highlight(f'{namespace}/{account_name}')}"
    )
    return True
