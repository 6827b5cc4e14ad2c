from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import ClientConfig
from .errors import InvalidArgument, Unreachable
from .functions import FunctionService
from .normalizer import normalize_execution
from .retry import Sleep, retry_async
from .timeouts import with_timeout

logger = logging.getLogger(__name__)


def _coerce_rating(rating: Any) -> int:
    try:
        return int(rating)
    except (TypeError, ValueError):
        return 0


def build_request_body(title: Optional[str], status: Optional[str], rating: Any = 0) -> str:
    """
    Validate the inputs and serialize them into the function's request body.

    Raises:
        InvalidArgument: title or status missing or blank.
    """
    title_s = (title or "").strip()
    status_s = (status or "").strip()
    if not title_s or not status_s:
        logger.error("Description request rejected: title=%r status=%r", title, status)
        raise InvalidArgument("Title and status are required fields")
    return json.dumps({"title": title_s, "status": status_s, "rating": _coerce_rating(rating)})


# PUBLIC_INTERFACE
class DescriptionGenerator:
    """
    Requests an AI-generated description for a comic.

    Composition: input validation, an optional short reachability probe, then the
    execution call raced against its deadline and retried with backoff, then
    response normalization. Only the execution call is retried.
    """

    def __init__(self, functions: FunctionService, config: ClientConfig, sleep: Optional[Sleep] = None) -> None:
        self._functions = functions
        self._config = config
        self._sleep = sleep

    async def _probe(self) -> None:
        try:
            ok = await with_timeout(
                self._functions.probe(), self._config.probe_timeout_ms, "Appwrite endpoint ping"
            )
        except Exception as e:
            logger.error("Appwrite endpoint unreachable: %s", e)
            raise Unreachable(f"Network error or endpoint unreachable: {e}", cause=e) from e
        if not ok:
            logger.warning("Appwrite ping returned non-OK")

    async def generate(self, title: Optional[str], status: Optional[str], rating: Any = 0) -> str:
        """
        Return a generated description for the given comic.

        Raises:
            InvalidArgument: missing title or status.
            Unreachable: the reachability probe failed.
            MalformedResponse, EmptyResponse, InvalidResponse, RemoteError:
                the execution result could not be turned into a description.
            Timeout or the transport error of the last attempt, when every
                attempt failed.
        """
        body = build_request_body(title, status, rating)
        function_id = self._config.appwrite.function_id
        logger.info("Calling AI function %s with data: %s", function_id, body)

        try:
            if self._config.probe_before_execute:
                await self._probe()

            execution = await retry_async(
                lambda: with_timeout(
                    self._functions.execute(function_id, body),
                    self._config.execution_timeout_ms,
                    "Appwrite createExecution",
                ),
                self._config.execution_retry,
                label="createExecution",
                sleep=self._sleep,
            )
            logger.debug("Function execution response: %r", execution)
            return normalize_execution(execution)
        except Exception as e:
            logger.error("Error executing AI function %s: %s", function_id, e)
            raise
