#!/usr/bin/env python
"""Command-line interface for registry-creds.

This module provides the main CLI entry point for the controller,
turning command-line options and environment variables into Settings
and driving the reconciliation loop.
"""

import sys
import time

import click
from icecream import ic

from registry_creds import __version__, console
from registry_creds.cluster import Cluster
from registry_creds.config import (
    DEFAULT_AWS_REGION,
    DEFAULT_AWS_SECRET_NAME,
    DEFAULT_EXCLUDED_NAMESPACES,
    DEFAULT_GCR_SECRET_NAME,
    DEFAULT_GCR_URL,
    DEFAULT_REFRESH_MINS,
    Settings,
)
from registry_creds.core.reconciler import Reconciler
from registry_creds.exceptions import ClusterConnectionError, ReconcileError, RegistryCredsError


def run_forever(reconciler: Reconciler, interval: float) -> None:
    """Run a reconciliation cycle every ``interval`` seconds until interrupted.

    A failed cycle is reported and the next one runs on schedule; there is
    no retry within a cycle.

    Args:
        reconciler: The reconciler to drive.
        interval: Seconds to sleep between cycles.

    """
    cycle = 0
    try:
        while True:
            cycle += 1
            console.action(f"Starting reconciliation cycle {cycle}")
            try:
                reconciler.process()
            except ReconcileError as e:
                console.error(f"Cycle {cycle} finished with {len(e.errors)} error(s)")
            except RegistryCredsError as e:
                console.error(f"Cycle {cycle} aborted: {e}")
            else:
                console.success(f"Cycle {cycle} finished")
            time.sleep(interval)
    except KeyboardInterrupt:
        console.warning("Interrupted, stopping reconciliation loop")


@click.command(help="Keep container registry pull secrets current across all namespaces")
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--once", required=False, is_flag=True, help="run a single reconciliation cycle and exit")
@click.option(
    "--kubeconfig", envvar="KUBECONFIG", required=False,
    help="path to a kubeconfig file (default: in-cluster or ~/.kube/config)",
)
@click.option("--context", required=False, help="kubeconfig context to use")
@click.option(
    "--aws-region",
    envvar=["awsregion", "AWS_REGION"],
    default=DEFAULT_AWS_REGION,
    show_default=True,
    help="ECR region, empty to disable ECR",
)
@click.option("--aws-account", envvar=["awsaccount", "AWS_ACCOUNT"], required=False, help="ECR registry (account) id")
@click.option(
    "--aws-assume-role", envvar=["aws_assume_role", "AWS_ASSUME_ROLE"], required=False, help="IAM role ARN to assume"
)
@click.option(
    "--aws-secret-name", envvar="AWS_SECRET_NAME", default=DEFAULT_AWS_SECRET_NAME, show_default=True,
    help="name of the managed ECR secret",
)
@click.option(
    "--gcr-url", envvar=["gcrurl", "GCR_URL"], default=DEFAULT_GCR_URL, show_default=True,
    help="GCR registry URL, empty to disable GCR",
)
@click.option("--disable-ecr", envvar="DISABLE_ECR", is_flag=True, help="do not manage the ECR secret")
@click.option("--disable-gcr", envvar="DISABLE_GCR", is_flag=True, help="do not manage the GCR secret")
@click.option(
    "--gcr-secret-name", envvar="GCR_SECRET_NAME", default=DEFAULT_GCR_SECRET_NAME, show_default=True,
    help="name of the managed GCR secret",
)
@click.option(
    "--exclude-namespace",
    "exclude_namespaces",
    envvar="EXCLUDE_NAMESPACES",
    multiple=True,
    default=DEFAULT_EXCLUDED_NAMESPACES,
    show_default=True,
    help="namespace to leave untouched (repeatable)",
)
@click.option(
    "--refresh-mins", envvar="REFRESH_MINS", type=click.IntRange(min=1), default=DEFAULT_REFRESH_MINS,
    show_default=True, help="minutes between reconciliation cycles",
)
def cli(
    version: bool,
    debug: bool,
    once: bool,
    kubeconfig: str | None,
    context: str | None,
    aws_region: str,
    aws_account: str | None,
    aws_assume_role: str | None,
    aws_secret_name: str,
    disable_ecr: bool,
    disable_gcr: bool,
    gcr_url: str,
    gcr_secret_name: str,
    exclude_namespaces: tuple[str, ...],
    refresh_mins: int,
) -> None:
    """Process CLI arguments and run the controller.

    Args:
        version: Print version and exit.
        debug: Enable debug output.
        once: Run one cycle and exit with its outcome.
        kubeconfig: Path to a kubeconfig file.
        context: Kubeconfig context name.
        aws_region: ECR region.
        aws_account: ECR registry id.
        aws_assume_role: IAM role assumed before fetching the ECR token.
        aws_secret_name: Managed ECR secret name.
        disable_ecr: Leave ECR out of every cycle.
        disable_gcr: Leave GCR out of every cycle.
        gcr_url: GCR registry URL.
        gcr_secret_name: Managed GCR secret name.
        exclude_namespaces: Namespaces left untouched.
        refresh_mins: Minutes between cycles.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    settings = Settings(
        aws_region="" if disable_ecr else aws_region,
        aws_account=aws_account,
        aws_assume_role=aws_assume_role,
        aws_secret_name=aws_secret_name,
        gcr_url="" if disable_gcr else gcr_url,
        gcr_secret_name=gcr_secret_name,
        excluded_namespaces=tuple(exclude_namespaces),
        refresh_mins=refresh_mins,
    )
    ic(settings)

    try:
        cluster = Cluster(kubeconfig=kubeconfig, context=context)
    except ClusterConnectionError as e:
        console.error(f"Cluster connection failed: {e}")
        sys.exit(1)

    reconciler = Reconciler(
        cluster,
        settings.build_providers(),
        excluded_namespaces=settings.excluded_namespaces,
    )
    ic(reconciler)

    if once:
        try:
            reconciler.process()
        except ReconcileError:
            sys.exit(1)
        except RegistryCredsError as e:
            console.error(f"Cycle aborted: {e}")
            sys.exit(1)
        return

    run_forever(reconciler, interval=settings.refresh_mins * 60)


if __name__ == "__main__":
    cli()
