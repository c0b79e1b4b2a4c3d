# src/batch/retry.py - v1
"""Retry policy with exponential backoff for batch items.

Only errors listed in ``RetryPolicy.retry_on`` are retried; by default that
is CalculationError. Validation errors are user-correctable and never
retried.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from astroreport.core.errors import CalculationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for batch items."""

    max_retries: int = 0
    base_delay_s: float = 0.5
    backoff_factor: float = 2.0
    jitter: bool = True
    retry_on: tuple[type[Exception], ...] = (CalculationError,)


NO_RETRY = RetryPolicy()


def _compute_delay(policy: RetryPolicy, attempt: int) -> float:
    """Compute delay for a given attempt (0-based)."""
    delay = policy.base_delay_s * (policy.backoff_factor ** attempt)
    if policy.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    policy: RetryPolicy = NO_RETRY,
    label: str = "unknown",
    **kwargs: Any,
) -> Any:
    """Execute an async function, retrying the policy's error types.

    The last error is re-raised unchanged once retries are exhausted.
    """
    attempts = 0

    while True:
        try:
            return await fn(*args, **kwargs)
        except policy.retry_on as e:
            attempts += 1
            if attempts > policy.max_retries:
                raise

            delay = _compute_delay(policy, attempts - 1)
            logger.warning(
                "Item '%s' - %s (attempt %d/%d), retrying in %.2fs",
                label, type(e).__name__, attempts, policy.max_retries, delay,
            )
            await asyncio.sleep(delay)
