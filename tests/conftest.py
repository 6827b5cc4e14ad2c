from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from comicshelf.config import AppwriteConfig, ClientConfig, MediaConfig
from comicshelf.functions import FunctionService
from comicshelf.retry import RetryPolicy
from comicshelf.store import InMemoryDocumentStore


class FakeFunctions(FunctionService):
    """
    Scripted function service. Each execute() consumes the next outcome; the
    last outcome repeats. Exceptions are raised, anything else returned.
    """

    def __init__(
        self,
        outcomes: Optional[List[Any]] = None,
        probe_ok: bool = True,
        probe_error: Optional[BaseException] = None,
        execute_delay: float = 0.0,
    ) -> None:
        self.outcomes = list(outcomes or [{"response": {"success": True, "description": "A classic."}}])
        self.probe_ok = probe_ok
        self.probe_error = probe_error
        self.execute_delay = execute_delay
        self.calls: List[Tuple[str, str]] = []
        self.probes = 0

    async def probe(self) -> bool:
        self.probes += 1
        if self.probe_error is not None:
            raise self.probe_error
        return self.probe_ok

    async def execute(self, function_id: str, body: str) -> Dict[str, Any]:
        self.calls.append((function_id, body))
        if self.execute_delay:
            await asyncio.sleep(self.execute_delay)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        appwrite=AppwriteConfig(
            endpoint="https://appwrite.test/v1",
            project_id="proj",
            database_id="db",
            collection_id="comics",
            function_id="comics_description_ai",
        ),
        media=MediaConfig(cloud_name="demo", upload_preset="covers"),
        execution_retry=RetryPolicy(retries=2, base_delay_ms=700),
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


def comic_payload(
    title: str = "Saga Vol. 1",
    status: str = "read",
    rating: int = 5,
    description: str = "Space opera.",
    cover: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "title": title,
        "status": status,
        "rating": rating,
        "description": description,
        "createdAt": "2025-01-25T10:15:30.123+00:00",
        "updatedAt": "2025-01-25T10:15:30.123+00:00",
    }
    if cover is not None:
        payload["coverImage"] = cover
    return payload
