from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

import httpx

from .config import AppwriteConfig
from .errors import MalformedResponse, RemoteError


# PUBLIC_INTERFACE
class FunctionService(ABC):
    """Boundary contract of the remote function-execution service."""

    @abstractmethod
    async def probe(self) -> bool:
        """
        Cheap reachability check. Returns whether the service answered OK;
        raises when it could not be reached at all.
        """

    @abstractmethod
    async def execute(self, function_id: str, body: str) -> Dict[str, Any]:
        """Run `function_id` synchronously with a JSON string body and return the execution."""


class AppwriteFunctionService(FunctionService):
    """Appwrite Functions REST client. The httpx client is owned by the caller."""

    def __init__(self, http: httpx.AsyncClient, config: AppwriteConfig) -> None:
        self._http = http
        self._config = config

    async def probe(self) -> bool:
        response = await self._http.get(self._config.url("health"), headers=self._config.headers())
        return response.is_success

    async def execute(self, function_id: str, body: str) -> Dict[str, Any]:
        response = await self._http.post(
            self._config.url("functions", function_id, "executions"),
            json={"body": body, "async": False},
            headers=self._config.headers(),
        )
        if not response.is_success:
            message = response.reason_phrase or "execution failed"
            try:
                detail = response.json()
            except ValueError:
                detail = None
            if isinstance(detail, dict) and detail.get("message"):
                message = str(detail["message"])
            raise RemoteError(f"[{response.status_code}] {message}")
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse("Execution result is not JSON", cause=e) from e
