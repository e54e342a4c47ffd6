"""Core reconciliation subpackage.

This package contains the Reconciler facade that drives one cycle over
the credential sources, secret synchronizer and service account patcher.
"""

from registry_creds.core.reconciler import Reconciler

__all__ = [
    "Reconciler",
]
