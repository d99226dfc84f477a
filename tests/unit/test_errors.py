"""Unit tests for the error taxonomy."""

import pytest

from kubeprime_cli.errors import (
    NO_CONTEXTS_MESSAGE,
    CommandError,
    InvalidArgumentError,
    KubeprimeError,
    MissingOptionError,
    NoContextsError,
    ValidationError,
    WaitTimeoutError,
    format_duration,
)


@pytest.mark.cli_unit
class TestErrorMessages:
    """Tests for rendered error messages."""

    def test_hint_is_appended(self):
        error = KubeprimeError("helm init failed", hint="Is tiller running?")
        assert str(error) == "helm init failed\nIs tiller running?"

    def test_missing_option(self):
        error = MissingOptionError(option="namespace")
        assert str(error) == "Missing option: --namespace"
        assert isinstance(error, ValidationError)

    def test_invalid_argument_lists_choices(self):
        error = InvalidArgumentError(value="missing", choices=["prod", "staging"])
        assert str(error) == "Invalid option: missing\nPossible values: prod, staging"

    def test_no_contexts(self):
        assert str(NoContextsError()) == NO_CONTEXTS_MESSAGE

    def test_command_error_uses_stderr(self):
        error = CommandError(command=["kubectl", "get", "ns"], stderr="forbidden\n")
        assert error.message == "kubectl get ns failed: forbidden"
        assert error.retryable is True

    def test_wait_timeout(self):
        error = WaitTimeoutError(what="deployment kube-system/jxing", timeout_seconds=600)
        assert str(error) == "Timed out after 10m0s waiting for deployment kube-system/jxing"


@pytest.mark.cli_unit
class TestFormatDuration:
    """Tests for format_duration()."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(45, "45s"), (600, "10m0s"), (1800, "30m0s"), (90, "1m30s")],
    )
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected
