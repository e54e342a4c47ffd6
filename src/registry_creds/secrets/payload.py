"""Docker config payload construction.

This module renders the ``.dockercfg`` and ``.dockerconfigjson`` blobs
stored in managed secrets. The output is compact JSON with a fixed key
order, so the same endpoint and token always produce the same bytes.
"""

import json

from registry_creds.models import RegistryCredential, SecretKind

# Placeholder email expected by legacy .dockercfg consumers
_DOCKERCFG_EMAIL = "none"


def _dump(document: dict) -> bytes:
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def build_dockercfg(credential: RegistryCredential) -> bytes:
    """Render a legacy ``.dockercfg`` document.

    Args:
        credential: The token and endpoint to embed.

    Returns:
        The serialized document, keyed directly by registry endpoint.

    """
    return _dump({credential.endpoint: {"auth": credential.token, "email": _DOCKERCFG_EMAIL}})


def build_dockerconfigjson(credential: RegistryCredential) -> bytes:
    """Render a ``.dockerconfigjson`` document.

    Args:
        credential: The token and endpoint to embed.

    Returns:
        The serialized document with the nested ``auths`` map.

    """
    return _dump({"auths": {credential.endpoint: {"auth": credential.token}}})


def build_payload(kind: SecretKind, credential: RegistryCredential) -> bytes:
    """Render the payload for the given secret kind."""
    match kind:
        case SecretKind.DOCKER_CFG:
            return build_dockercfg(credential)
        case SecretKind.DOCKER_CONFIG_JSON:
            return build_dockerconfigjson(credential)
    raise ValueError(f"Unsupported secret kind: {kind!r}")
