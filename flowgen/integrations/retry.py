"""Retry helper for calls to external HTTP services."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from flowgen.core.errors import IntegrationError
from flowgen.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def is_transient(error: Exception) -> bool:
    """Whether ``error`` is worth retrying: network failures, 429 and 5xx."""
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS
    if isinstance(error, IntegrationError):
        return error.status_code in RETRYABLE_STATUS
    return False


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    backoff: float = 1.0,
    description: str = "request",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or a non-transient error occurs.

    Waits ``backoff * 2**n`` seconds before retry ``n + 1``. The last error is
    re-raised once ``attempts`` calls have failed.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if not is_transient(e) or attempt == attempts:
                raise
            delay = backoff * (2 ** (attempt - 1))
            logger.warning(
                "retrying_after_transient_error",
                operation=description,
                attempt=attempt,
                delay=delay,
                error=str(e),
            )
            await sleep(delay)
    raise RuntimeError("unreachable")
