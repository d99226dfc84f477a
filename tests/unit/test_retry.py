"""Unit tests for the fixed-interval retry helper."""

from unittest.mock import MagicMock

import pytest

from kubeprime_cli.errors import CommandError
from kubeprime_cli.retry import RetryPolicy, retry


@pytest.mark.cli_unit
class TestRetryPolicy:
    """Tests for RetryPolicy validation."""

    def test_valid_policy(self):
        policy = RetryPolicy(max_attempts=3, delay_seconds=10)
        assert policy.max_attempts == 3
        assert policy.delay_seconds == 10

    def test_zero_attempts_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0, delay_seconds=1)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=1, delay_seconds=-1)


@pytest.mark.cli_unit
class TestRetry:
    """Tests for retry()."""

    def test_first_attempt_succeeds(self):
        """Test no sleep happens when the first attempt works."""
        sleep = MagicMock()
        operation = MagicMock(return_value="ok")

        assert retry(RetryPolicy(3, 10), operation, sleep=sleep) == "ok"
        operation.assert_called_once()
        sleep.assert_not_called()

    def test_succeeds_after_failures(self):
        """Test the first successful value is returned."""
        sleep = MagicMock()
        operation = MagicMock(side_effect=[CommandError(command=["kubectl"]), "bound"])

        assert retry(RetryPolicy(3, 10), operation, sleep=sleep) == "bound"
        assert operation.call_count == 2
        sleep.assert_called_once_with(10)

    def test_always_failing_spends_whole_budget(self):
        """Test max_attempts calls, max_attempts - 1 sleeps and the last error raised."""
        sleep = MagicMock()
        errors = [CommandError(command=["helm"], stderr=f"boom {i}") for i in range(3)]
        operation = MagicMock(side_effect=errors)

        with pytest.raises(CommandError) as exc_info:
            retry(RetryPolicy(3, 2), operation, sleep=sleep)

        assert exc_info.value is errors[-1]
        assert operation.call_count == 3
        assert sleep.call_count == 2
        assert all(call.args == (2,) for call in sleep.call_args_list)

    def test_on_failure_called_per_failed_attempt(self):
        """Test the failure callback sees attempt numbers and the error."""
        on_failure = MagicMock()
        error = RuntimeError("not yet")
        operation = MagicMock(side_effect=[error, error, "done"])

        retry(RetryPolicy(4, 1), operation, on_failure=on_failure, sleep=MagicMock())

        assert [call.args for call in on_failure.call_args_list] == [
            (1, 4, error),
            (2, 4, error),
        ]

    def test_not_retryable_error_raised_at_once(self):
        """Test an error marked not retryable stops the loop without sleeping."""
        sleep = MagicMock()
        on_failure = MagicMock()
        error = CommandError(command=["kubectl"], hint="Install kubectl", retryable=False)
        operation = MagicMock(side_effect=error)

        with pytest.raises(CommandError) as exc_info:
            retry(RetryPolicy(3, 10), operation, on_failure=on_failure, sleep=sleep)

        assert exc_info.value is error
        operation.assert_called_once()
        on_failure.assert_called_once_with(1, 3, error)
        sleep.assert_not_called()

    def test_errors_without_retryable_flag_are_retried(self):
        sleep = MagicMock()
        operation = MagicMock(side_effect=[ValueError("bad json"), "ok"])

        assert retry(RetryPolicy(2, 1), operation, sleep=sleep) == "ok"
        sleep.assert_called_once_with(1)

    def test_single_attempt_never_sleeps(self):
        sleep = MagicMock()
        operation = MagicMock(side_effect=RuntimeError("nope"))

        with pytest.raises(RuntimeError):
            retry(RetryPolicy(1, 5), operation, sleep=sleep)

        sleep.assert_not_called()
