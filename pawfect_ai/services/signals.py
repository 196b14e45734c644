"""
Signal Gathering

Concurrent collection of independent input signals, each with its own
fallback.

Usage:
    results = await gather_signals({
        "sentiment": bounded(provider.judge_sentiment(texts)),
        "trust": bounded(provider.judge_trustworthiness(sitter)),
    })
    sentiment = resolve(results, "sentiment", lambda: 0.5)
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, NamedTuple, Optional, TypeVar

from pawfect_ai.core.config import settings
from pawfect_ai.core.errors import AppError, DataUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Resolved(NamedTuple):
    value: Any
    from_source: bool


async def bounded(awaitable: Awaitable[T], timeout: Optional[float] = None) -> T:
    """Await with the external-insight time budget."""
    limit = settings.INSIGHT_TIMEOUT_SECONDS if timeout is None else timeout
    return await asyncio.wait_for(awaitable, timeout=limit)


async def gather_signals(calls: Dict[str, Awaitable[Any]]) -> Dict[str, Any]:
    """
    Run all calls concurrently. A failing call does not cancel the others;
    its exception is returned in place of its value.
    """
    names = list(calls)
    results = await asyncio.gather(*calls.values(), return_exceptions=True)
    return dict(zip(names, results))


async def fetch_required(awaitable: Awaitable[T], what: str) -> T:
    """
    Await a data store call whose failure fails the request.

    AppErrors (NotFound, DataUnavailable, ...) pass through; anything else a
    store raises is reported as DataUnavailableError.
    """
    try:
        return await awaitable
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Data store failed loading {what}: {type(e).__name__}: {e}")
        raise DataUnavailableError(f"Could not load {what}") from e


def resolve(results: Dict[str, Any], name: str, fallback: Callable[[], T]) -> Resolved:
    """
    Value of one gathered signal, or its fallback if the call failed.

    Cancellation is re-raised; every other failure is logged and replaced.
    """
    result = results[name]
    if isinstance(result, Exception):
        reason = "timed out" if isinstance(result, asyncio.TimeoutError) else f"{type(result).__name__}: {result}"
        logger.warning(f"Signal '{name}' unavailable ({reason}), using fallback")
        return Resolved(fallback(), False)
    if isinstance(result, BaseException):
        raise result
    return Resolved(result, True)
