"""Async retry with exponential backoff for research and agent calls."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

from campaign_clients.exceptions import OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def status_code_of(error: BaseException) -> int | None:
    """Best-effort HTTP status of an SDK, httpx or campaign-client error."""
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def default_should_retry(error: BaseException) -> bool:
    """Retry everything except 4xx client errors other than 429."""
    status = status_code_of(error)
    if status is None:
        return True
    return not (400 <= status < 500 and status != 429)


def _agent_should_retry(error: BaseException) -> bool:
    status = status_code_of(error)
    if status in (401, 403):
        logger.info("Authentication error - not retrying")
        return False
    if status == 404:
        logger.info("Resource not found - not retrying")
        return False
    return default_should_retry(error)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    attempts: int = 2,
    backoff: float = 1.0,
    max_backoff: float = 10.0,
    exponential: bool = True,
    should_retry: Callable[[BaseException], bool] = default_should_retry,
    operation: str = "operation",
) -> T:
    """Await ``fn()`` up to ``attempts`` times; re-raises the last error."""
    start = time.monotonic()
    for attempt in range(1, attempts + 1):
        try:
            result = await fn()
            if attempt > 1:
                logger.info(
                    f"{operation} succeeded on attempt {attempt} "
                    f"after {time.monotonic() - start:.1f}s"
                )
            return result
        except Exception as e:
            status = status_code_of(e)
            logger.warning(
                f"{operation} attempt {attempt}/{attempts} failed "
                f"(status {status or 'unknown'}): {e}"
            )
            if attempt == attempts:
                logger.error(
                    f"{operation}: all {attempts} attempts failed "
                    f"after {time.monotonic() - start:.1f}s"
                )
                raise
            if not should_retry(e):
                logger.warning(f"{operation}: not retrying error with status {status}")
                raise

            delay = backoff
            if exponential:
                delay = min(backoff * 2 ** (attempt - 1), max_backoff)
            logger.info(f"Retrying {operation} in {delay}s (attempt {attempt + 1})")
            await asyncio.sleep(delay)

    raise ValueError("attempts must be at least 1")


async def with_agent_retry(fn: Callable[[], Awaitable[T]], operation: str = "Agent API call") -> T:
    return await with_retry(
        fn, attempts=2, backoff=1.0, should_retry=_agent_should_retry, operation=operation
    )


async def with_research_retry(
    fn: Callable[[], Awaitable[T]], operation: str = "Research API call"
) -> T:
    return await with_retry(fn, attempts=3, backoff=0.5, max_backoff=5.0, operation=operation)


async def with_memory_retry(
    fn: Callable[[], Awaitable[T]], operation: str = "Memory operation"
) -> T:
    return await with_retry(fn, attempts=2, backoff=0.5, operation=operation)


async def with_timeout(
    fn: Callable[[], Awaitable[Any]], timeout: float, operation: str = "Operation"
) -> Any:
    """Await ``fn()`` but give up after ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(fn(), timeout)
    except asyncio.TimeoutError as e:
        raise OperationTimeoutError(f"{operation} timed out after {timeout}s") from e
