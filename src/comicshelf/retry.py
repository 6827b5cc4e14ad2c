from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with exponential backoff.

    - retries: additional attempts after the first one
    - base_delay_ms: sleep before the first retry
    - factor: multiplier applied to the delay for each further retry
    - retry_on: exception types that are retried; anything else propagates at once
    """
    retries: int = 2
    base_delay_ms: int = 700
    factor: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)

    @property
    def attempts(self) -> int:
        return 1 + max(self.retries, 0)

    def delay_ms(self, attempt: int) -> float:
        """Backoff before retry number `attempt` (1-based)."""
        return self.base_delay_ms * (self.factor ** (attempt - 1))


def _log_retry(label: str, attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        logger.warning(
            "%s attempt %d/%d failed: %s; retrying in %.0fms",
            label,
            state.attempt_number,
            attempts,
            exc,
            delay * 1000,
        )

    return before_sleep


# PUBLIC_INTERFACE
async def retry_async(
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    label: str = "operation",
    sleep: Optional[Sleep] = None,
) -> T:
    """
    Await `call()` until it succeeds or the attempt budget is spent.

    Attempts are strictly sequential. There is no sleep after the final attempt,
    whose failure propagates unchanged.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.attempts),
        wait=wait_exponential(multiplier=policy.base_delay_ms / 1000, exp_base=policy.factor),
        retry=retry_if_exception_type(policy.retry_on),
        reraise=True,
        sleep=sleep or asyncio.sleep,
        before_sleep=_log_retry(label, policy.attempts),
    )
    try:
        return await retrying(call)
    except policy.retry_on as exc:
        logger.error("%s failed after %d attempt(s): %s", label, policy.attempts, exc)
        raise
