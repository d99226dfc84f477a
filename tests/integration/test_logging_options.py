"""Integration tests for the global logging options."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from kubeprime_cli.main import cli


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.mark.cli_integration
class TestLoggingOptions:
    """Tests for -v, --log-file and --log-json."""

    def test_options_passed_to_configure_logging(self, runner, kubeconfig_file, tmp_path):
        log_file = tmp_path / "kubeprime.log"
        with patch("kubeprime_cli.main.configure_logging") as mock_configure:
            result = runner.invoke(
                cli,
                [
                    "-v",
                    "--log-file",
                    str(log_file),
                    "--log-json",
                    "ctx",
                    "-b",
                    "--kubeconfig",
                    str(kubeconfig_file),
                ],
            )

        assert result.exit_code == 0
        mock_configure.assert_called_once_with("info", log_file=str(log_file), json_output=True)

    def test_defaults_log_warnings_to_stderr(self, runner, kubeconfig_file):
        with patch("kubeprime_cli.main.configure_logging") as mock_configure:
            runner.invoke(cli, ["ctx", "-b", "--kubeconfig", str(kubeconfig_file)])

        mock_configure.assert_called_once_with("warning", log_file=None, json_output=False)

    def test_switch_logged_to_file(self, runner, kubeconfig_file, tmp_path):
        log_file = tmp_path / "kubeprime.log"

        result = runner.invoke(
            cli,
            ["-v", "--log-file", str(log_file), "ctx", "staging", "--kubeconfig", str(kubeconfig_file)],
        )

        assert result.exit_code == 0
        assert "switched context" in log_file.read_text()
        assert "switched context" not in result.output
