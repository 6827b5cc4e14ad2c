from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Set, TypeVar

from .errors import Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to calls that lost the race; the event loop only keeps weak ones.
_abandoned: Set["asyncio.Future[object]"] = set()


def _log_late_outcome(label: str):
    def _done(fut: "asyncio.Future[object]") -> None:
        _abandoned.discard(fut)
        if fut.cancelled():
            logger.debug("Abandoned call %s was cancelled", label)
            return
        exc = fut.exception()
        if exc is not None:
            logger.debug("Abandoned call %s failed late: %r", label, exc)
        else:
            logger.debug("Abandoned call %s settled after its deadline", label)

    return _done


def _abandon(fut: "asyncio.Future[object]", label: str) -> None:
    _abandoned.add(fut)
    fut.add_done_callback(_log_late_outcome(label))


# PUBLIC_INTERFACE
async def with_timeout(awaitable: Awaitable[T], timeout_ms: int, label: str = "operation") -> T:
    """
    Race an in-flight operation against a deadline.

    The operation is never cancelled when it loses: it keeps running on the loop
    and is simply no longer awaited. A reported Timeout therefore says nothing
    about whether the remote side effect happened.

    Args:
        awaitable: coroutine or future performing the remote call.
        timeout_ms: deadline in milliseconds.
        label: human readable name of the call, carried by the Timeout error.

    Returns:
        The operation's result when it settles first.

    Raises:
        Timeout: when the deadline passes first.
        Exception: whatever the operation raised, when it fails first.
    """
    fut = asyncio.ensure_future(awaitable)
    try:
        done, _ = await asyncio.wait({fut}, timeout=max(timeout_ms, 0) / 1000)
    except asyncio.CancelledError:
        if not fut.done():
            _abandon(fut, label)
        raise

    if fut in done:
        return fut.result()

    _abandon(fut, label)
    raise Timeout(timeout_ms, label)
