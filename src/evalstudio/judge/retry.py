"""Transient error retry with exponential backoff and full jitter.

Handles timeout, connection, and HTTP status-code errors that are
likely transient.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

log = structlog.get_logger(__name__)

# Exception types considered transient (network-level issues)
TRANSIENT_EXCEPTIONS: tuple[type[Exception], ...] = (TimeoutError, ConnectionError)

# HTTP status codes considered transient (rate-limit, server errors)
TRANSIENT_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503})


def is_transient(exc: Exception) -> bool:
    """Check if an exception represents a transient error.

    Matches known transient exception types, then any HTTP status code
    attribute commonly set by provider SDK exceptions.
    """
    if isinstance(exc, TRANSIENT_EXCEPTIONS):
        return True

    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    return status is not None and status in TRANSIENT_STATUS_CODES


async def retry_with_backoff(
    coro_factory: Callable[[], Awaitable[Any]],
    max_retries: int = 2,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
) -> tuple[Any, int]:
    """Await ``coro_factory()`` until it succeeds or a non-transient error occurs.

    Args:
        coro_factory: Callable that creates a new awaitable each call.
        max_retries: Retry attempts after the first call.
        base_delay: Initial backoff delay in seconds.
        max_delay: Backoff delay cap in seconds.

    Returns:
        Tuple of (result, retries_used).

    Raises:
        Exception: The last exception once retries are exhausted, or any
            non-transient exception immediately.
    """
    for attempt in range(max_retries + 1):
        try:
            return await coro_factory(), attempt
        except Exception as exc:
            if not is_transient(exc) or attempt == max_retries:
                raise
            delay = random.uniform(0, min(base_delay * (2**attempt), max_delay))  # noqa: S311
            log.info(
                "judge.retrying",
                attempt=attempt + 1,
                error=type(exc).__name__,
                delay_seconds=round(delay, 3),
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Retry loop exited unexpectedly")  # pragma: no cover
