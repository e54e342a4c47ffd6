"""Reconciler facade class.

This module provides the Reconciler class which runs one reconciliation
cycle: fetch every provider's credential once, then write the managed
secrets and service account references into every eligible namespace.
"""

from collections.abc import Iterable, Sequence

from icecream import ic

from registry_creds import console
from registry_creds.cluster import ClusterClient
from registry_creds.config import DEFAULT_EXCLUDED_NAMESPACES
from registry_creds.exceptions import (
    ClusterApiError,
    CredentialFetchError,
    IdentityNotFoundError,
    NamespaceListError,
    ReconcileError,
    RegistryCredsError,
)
from registry_creds.models import CycleReport, Provider, RegistryCredential
from registry_creds.secrets.payload import build_payload
from registry_creds.secrets.sync import sync_secret
from registry_creds.serviceaccounts import DEFAULT_SERVICE_ACCOUNT, ensure_pull_secret_reference


class Reconciler:
    """Keeps registry pull secrets current across cluster namespaces.

    A cycle holds no state from the previous one: namespaces are listed
    again, credentials fetched again, and every write is an idempotent
    create-or-update or scan-before-append.

    Attributes:
        cluster: The cluster client used for all reads and writes.
        providers: Registered providers, in reference order.
        excluded_namespaces: Namespaces that are never touched.
        service_account: Name of the service account patched in each namespace.

    """

    def __init__(
        self,
        cluster: ClusterClient,
        providers: Sequence[Provider],
        *,
        excluded_namespaces: Iterable[str] = DEFAULT_EXCLUDED_NAMESPACES,
        service_account: str = DEFAULT_SERVICE_ACCOUNT,
    ) -> None:
        self.cluster = cluster
        self.providers: list[Provider] = list(providers)
        self.excluded_namespaces: frozenset[str] = frozenset(excluded_namespaces)
        self.service_account = service_account

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        names = [provider.name for provider in self.providers if provider.enabled]
        return f"Reconciler(providers={names!r}, excluded_namespaces={sorted(self.excluded_namespaces)!r})"

    def fetch_credentials(self, report: CycleReport) -> list[tuple[Provider, RegistryCredential]]:
        """Fetch one credential per enabled provider.

        Providers without a source are skipped silently; failed fetches are
        recorded in ``report`` and leave the provider out of this cycle.

        Returns:
            The providers that produced a credential, in registration order.

        """
        fetched: list[tuple[Provider, RegistryCredential]] = []
        for provider in self.providers:
            if provider.source is None:
                ic(provider)
                continue

            try:
                credential = provider.source.fetch()
            except CredentialFetchError as e:
                console.error(str(e))
                report.errors.append(e)
                continue

            console.info(f"Fetched {provider.name} token for {console.highlight(credential.endpoint)}")
            report.providers.append(provider.name)
            fetched.append((provider, credential))

        return fetched

    def eligible_namespaces(self) -> list[str]:
        """List the namespaces to reconcile, without the excluded ones.

        Raises:
            NamespaceListError: If the namespaces cannot be listed.

        """
        try:
            namespaces = self.cluster.list_namespaces()
        except ClusterApiError as e:
            raise NamespaceListError(f"Failed to list namespaces: {e}") from e

        return [namespace for namespace in namespaces if namespace not in self.excluded_namespaces]

    def reconcile_namespace(
        self,
        namespace: str,
        fetched: Sequence[tuple[Provider, RegistryCredential]],
        report: CycleReport,
    ) -> None:
        """Sync every fetched provider's secret and reference into ``namespace``.

        Each (namespace, provider) pair is independent: a failure is recorded
        and the next pair is processed. The reference is only added once the
        secret has been written.

        """
        secrets = self.cluster.secrets(namespace)
        accounts = self.cluster.service_accounts(namespace)

        for provider, credential in fetched:
            try:
                sync_secret(
                    secrets,
                    namespace=namespace,
                    secret_name=provider.secret_name,
                    kind=provider.kind,
                    payload=build_payload(provider.kind, credential),
                )
                report.secrets_synced += 1

                if ensure_pull_secret_reference(accounts, provider.secret_name, self.service_account):
                    report.references_added += 1
            except IdentityNotFoundError as e:
                console.error(f"{e} (namespace not ready yet?)")
                report.errors.append(e)
            except RegistryCredsError as e:
                console.warning(str(e))
                report.errors.append(e)

    def process(self) -> CycleReport:
        """Run a single reconciliation cycle.

        Returns:
            The report of a cycle in which every unit succeeded.

        Raises:
            ReconcileError: If any provider, namespace or unit failed. The
                error carries the report and every collected error.

        """
        report = CycleReport()
        fetched = self.fetch_credentials(report)

        if fetched:
            try:
                namespaces = self.eligible_namespaces()
            except NamespaceListError as e:
                console.error(str(e))
                report.errors.append(e)
                namespaces = []

            for namespace in namespaces:
                console.action(f"Reconciling namespace {console.highlight(namespace)}")
                report.namespaces.append(namespace)
                self.reconcile_namespace(namespace, fetched, report)
        else:
            console.warning("No registry credentials available, nothing to sync")

        console.cycle_summary(report)

        if report.errors:
            raise ReconcileError(report.errors, report)
        return report
