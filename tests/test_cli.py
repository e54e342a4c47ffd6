"""Tests for cli.py module."""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from registry_creds import __version__
from registry_creds.cli import cli, run_forever
from registry_creds.config import Settings
from registry_creds.exceptions import ClusterApiError, ClusterConnectionError, ReconcileError


@pytest.fixture
def mock_cluster():
    with patch("registry_creds.cli.Cluster") as mock:
        yield mock


@pytest.fixture
def mock_reconciler():
    with patch("registry_creds.cli.Reconciler") as mock:
        yield mock


class TestCliVersion:
    """Tests for version command."""

    def test_version_flag(self):
        """Test --version flag prints version."""
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_short_flag(self):
        """Test -v flag prints version."""
        result = CliRunner().invoke(cli, ["-v"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestCliHelp:
    """Tests for help output."""

    def test_help_flag(self):
        """Test --help flag shows help text."""
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Keep container registry pull secrets current" in result.output
        for option in ("--once", "--aws-region", "--aws-account", "--gcr-url", "--exclude-namespace", "--refresh-mins"):
            assert option in result.output


class TestCliSettings:
    """Tests for flag and environment defaulting."""

    def _settings(self, mock_reconciler, args, env=None):
        with patch("registry_creds.cli.Settings", wraps=Settings) as mock_settings:
            result = CliRunner().invoke(cli, ["--once", *args], env=env)
        assert result.exit_code == 0, result.output
        return mock_settings.call_args.kwargs

    def test_defaults(self, mock_cluster, mock_reconciler):
        """Test the default configuration."""
        kwargs = self._settings(mock_reconciler, [], env={"awsregion": None, "AWS_REGION": None})

        assert kwargs["aws_region"] == "us-east-1"
        assert kwargs["gcr_url"] == "https://gcr.io"
        assert kwargs["excluded_namespaces"] == ("kube-system",)
        assert kwargs["refresh_mins"] == 60

    def test_region_from_env(self, mock_cluster, mock_reconciler):
        """Test the region and account are read from the environment."""
        kwargs = self._settings(mock_reconciler, [], env={"awsregion": "us-steve-1", "awsaccount": "12345678"})

        assert kwargs["aws_region"] == "us-steve-1"
        assert kwargs["aws_account"] == "12345678"

    def test_flag_overrides_env(self, mock_cluster, mock_reconciler):
        """Test command-line flags win over the environment."""
        kwargs = self._settings(mock_reconciler, ["--aws-region", "eu-west-1"], env={"awsregion": "us-steve-1"})

        assert kwargs["aws_region"] == "eu-west-1"

    def test_exclude_namespaces(self, mock_cluster, mock_reconciler):
        """Test repeated exclusions replace the default."""
        kwargs = self._settings(mock_reconciler, ["--exclude-namespace", "sys", "--exclude-namespace", "infra"])

        assert kwargs["excluded_namespaces"] == ("sys", "infra")

    def test_exclude_namespaces_from_env(self, mock_cluster, mock_reconciler):
        """Test the exclusion list is split from the environment."""
        kwargs = self._settings(mock_reconciler, [], env={"EXCLUDE_NAMESPACES": "sys infra"})

        assert kwargs["excluded_namespaces"] == ("sys", "infra")

    def test_disable_flags(self, mock_cluster, mock_reconciler):
        """Test the disable switches blank the provider settings."""
        kwargs = self._settings(mock_reconciler, ["--disable-gcr", "--aws-region", "eu-west-1"])

        assert kwargs["gcr_url"] == ""
        assert kwargs["aws_region"] == "eu-west-1"

    def test_disable_from_env(self, mock_cluster, mock_reconciler):
        """Test a provider can be disabled from the environment."""
        kwargs = self._settings(mock_reconciler, [], env={"DISABLE_ECR": "true", "gcrurl": None, "GCR_URL": None})

        assert kwargs["aws_region"] == ""
        assert kwargs["gcr_url"] == "https://gcr.io"

    def test_invalid_refresh(self, mock_cluster, mock_reconciler):
        """Test a non-positive refresh interval is rejected."""
        result = CliRunner().invoke(cli, ["--refresh-mins", "0"])

        assert result.exit_code != 0


class TestCliRun:
    """Tests for running the controller."""

    def test_once_success(self, mock_cluster, mock_reconciler):
        """Test --once runs a single cycle."""
        result = CliRunner().invoke(cli, ["--once", "--context", "prod"], env={"KUBECONFIG": None})

        assert result.exit_code == 0
        mock_cluster.assert_called_once_with(kubeconfig=None, context="prod")
        mock_reconciler.return_value.process.assert_called_once()

    def test_once_failure(self, mock_cluster, mock_reconciler):
        """Test --once exits non-zero when the cycle failed."""
        mock_reconciler.return_value.process.side_effect = ReconcileError([])

        result = CliRunner().invoke(cli, ["--once"])

        assert result.exit_code == 1

    def test_kubeconfig_from_env(self, mock_cluster, mock_reconciler):
        """Test KUBECONFIG is used when no flag is given."""
        result = CliRunner().invoke(cli, ["--once"], env={"KUBECONFIG": "/etc/kube/config"})

        assert result.exit_code == 0
        mock_cluster.assert_called_once_with(kubeconfig="/etc/kube/config", context=None)

    def test_once_aborted_cycle(self, mock_cluster, mock_reconciler):
        """Test --once exits non-zero when the cycle stops on an unexpected error."""
        mock_reconciler.return_value.process.side_effect = ClusterApiError("connection reset")

        result = CliRunner().invoke(cli, ["--once"])

        assert result.exit_code == 1

    def test_cluster_connection_error(self, mock_cluster, mock_reconciler):
        """Test a cluster connection failure exits with 1."""
        mock_cluster.side_effect = ClusterConnectionError("Invalid or missing kubeconfig")

        result = CliRunner().invoke(cli, ["--once"])

        assert result.exit_code == 1
        mock_reconciler.assert_not_called()

    def test_loop(self, mock_cluster, mock_reconciler):
        """Test the loop sleeps the refresh interval between cycles."""
        with patch("registry_creds.cli.run_forever") as mock_run:
            result = CliRunner().invoke(cli, ["--refresh-mins", "5"])

        assert result.exit_code == 0
        mock_run.assert_called_once_with(mock_reconciler.return_value, interval=300)


class TestRunForever:
    """Tests for the reconciliation loop."""

    def test_runs_until_interrupted(self):
        """Test cycles repeat, failures included, until interrupted."""
        reconciler = MagicMock()
        reconciler.process.side_effect = [None, ReconcileError([]), None]

        with patch("registry_creds.cli.time.sleep", side_effect=[None, None, KeyboardInterrupt]) as mock_sleep:
            run_forever(reconciler, interval=60)

        assert reconciler.process.call_count == 3
        mock_sleep.assert_called_with(60)

    def test_aborted_cycle_keeps_looping(self):
        """Test an unexpected controller error is reported and the loop goes on."""
        reconciler = MagicMock()
        reconciler.process.side_effect = [ClusterApiError("connection reset"), None]

        with (
            patch("registry_creds.cli.console.error") as mock_error,
            patch("registry_creds.cli.time.sleep", side_effect=[None, KeyboardInterrupt]),
        ):
            run_forever(reconciler, interval=60)

        assert reconciler.process.call_count == 2
        assert "connection reset" in mock_error.call_args[0][0]
