"""Fixed-interval retry for flaky cluster-mutating calls.

Failures at the call sites are expected to be eventual-consistency delays
(a binding not yet visible, an intermittent API error), so attempts are spaced
by a constant delay with no growth or jitter.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from .shared.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget for one call site."""

    max_attempts: int
    delay_seconds: float

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")


def retry(
    policy: RetryPolicy,
    operation: Callable[[], T],
    on_failure: Callable[[int, int, Exception], None] | None = None,
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run operation until it succeeds or the attempt budget is spent.

    Args:
        policy: Attempt count and inter-attempt delay.
        operation: Zero-argument callable to invoke.
        on_failure: Optional callback called with (attempt, max_attempts, error)
                    after every failed attempt.
        description: Name used in log events.
        sleep: Sleep function, replaceable in tests.

    Returns:
        The value returned by the first successful attempt.

    Raises:
        Exception: The error raised by the last attempt once all attempts failed,
                   or at once by an attempt whose error is marked not retryable.
    """
    last_error: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation()
        except Exception as e:
            last_error = e
            logger.warning(
                "attempt failed",
                operation=description,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                error=str(e),
            )
            if on_failure:
                on_failure(attempt, policy.max_attempts, e)
            if getattr(e, "retryable", True) is False:
                raise

        # Wait before next attempt (unless this was the last one)
        if attempt < policy.max_attempts:
            sleep(policy.delay_seconds)

    assert last_error is not None
    raise last_error
