"""Retry utilities for handling transient failures.

Every call to the issue tracker and the narrative generator goes through a
``RetryPolicy``. The policy retries with a fixed delay between attempts:
no backoff growth and no jitter. Callers pick the policy per call type
(shorter delays for reads, longer for generation).

Key Exports:
    RetryPolicy: Value object holding attempt count and delay.

Example:
    >>> from issue_steward.utils.retry import RetryPolicy
    >>>
    >>> reads = RetryPolicy(max_attempts=3, delay=1.0)
    >>> issue = await reads.run(lambda: tracker.get_issue(42), "get_issue")

Thread Safety:
    Policies are immutable and hold no per-call state, so a single policy
    can be shared by every stage of a run.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry policy.

    Attributes:
        max_attempts: Total number of calls made before giving up.
        delay: Seconds to wait between a failed attempt and the next one.
    """

    max_attempts: int = 3
    delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "operation") -> T:
        """Invoke ``operation`` until it succeeds or attempts run out.

        Args:
            operation: Zero-argument callable returning a fresh awaitable on
                each call. A coroutine object cannot be awaited twice, so a
                factory (usually a lambda) is required.
            label: Operation name used in log events.

        Returns:
            Whatever the operation's awaitable resolves to.

        Raises:
            Exception: The last error raised by the operation once all
                attempts are exhausted.
        """
        for attempt in range(1, self.max_attempts + 1):
            log.info("retry_attempt", operation=label, attempt=attempt, max_attempts=self.max_attempts)
            try:
                return await operation()
            except Exception as e:
                if attempt == self.max_attempts:
                    log.error(
                        "retry_exhausted",
                        operation=label,
                        attempts=attempt,
                        error=str(e),
                    )
                    raise

                log.warning(
                    "retry_attempt_failed",
                    operation=label,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay=self.delay,
                    error=str(e),
                )
                await asyncio.sleep(self.delay)

        raise RuntimeError("Retry logic error")
