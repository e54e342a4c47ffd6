"""Managed secrets subpackage.

This package contains the docker config payload builders and the
create-or-update synchronizer for registry-login secrets.
"""

from registry_creds.secrets.payload import build_dockercfg, build_dockerconfigjson, build_payload
from registry_creds.secrets.sync import sync_secret

__all__ = [
    # payload
    "build_dockercfg",
    "build_dockerconfigjson",
    "build_payload",
    # sync
    "sync_secret",
]
