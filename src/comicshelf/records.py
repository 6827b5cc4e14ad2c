from __future__ import annotations

import logging
from typing import Any, Awaitable, List, Optional, TypeVar

from .config import DEFAULT_RECORD_TIMEOUT_MS
from .errors import InvalidArgument
from .models import ComicPayload, ComicRecord, to_record
from .store import UNIQUE_ID, DocumentStore
from .timeouts import with_timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require_id(document_id: Optional[str], operation: str) -> str:
    if not document_id:
        logger.error("Error in %s: Document ID is required", operation)
        raise InvalidArgument("Document ID is required")
    return document_id


# PUBLIC_INTERFACE
class ComicRecords:
    """
    Create/read/list/update/delete of comic records.

    Every store call is raced against `timeout_ms`. Failures are logged with the
    operation and target id, then re-raised unchanged. Nothing is retried, and
    payloads are forwarded exactly as given.
    """

    def __init__(self, store: DocumentStore, timeout_ms: int = DEFAULT_RECORD_TIMEOUT_MS) -> None:
        self._store = store
        self._timeout_ms = timeout_ms

    async def _guarded(self, operation: str, target: Optional[str], call: Awaitable[T]) -> T:
        try:
            return await with_timeout(call, self._timeout_ms, f"Appwrite {operation}")
        except Exception as exc:
            logger.error("Error in %s (target=%s): %s", operation, target or "-", exc)
            raise

    async def list(self) -> List[ComicRecord]:
        """Return every comic in the store's native order; empty when there are none."""
        response: Any = await self._guarded("listDocuments", None, self._store.list_documents())
        documents = response.get("documents") if response else None
        if not documents:
            logger.info("No documents found in response")
            return []
        logger.info("Found %d comics", len(documents))
        return [to_record(d) for d in documents]

    async def get(self, document_id: Optional[str]) -> ComicRecord:
        doc_id = _require_id(document_id, "getDocument")
        document = await self._guarded("getDocument", doc_id, self._store.get_document(doc_id))
        return to_record(document)

    async def create(self, payload: ComicPayload) -> ComicRecord:
        document = await self._guarded(
            "createDocument", payload.get("title"), self._store.create_document(UNIQUE_ID, dict(payload))
        )
        return to_record(document)

    async def update(self, document_id: Optional[str], payload: ComicPayload) -> ComicRecord:
        doc_id = _require_id(document_id, "updateDocument")
        document = await self._guarded("updateDocument", doc_id, self._store.update_document(doc_id, dict(payload)))
        return to_record(document)

    async def delete(self, document_id: Optional[str]) -> None:
        doc_id = _require_id(document_id, "deleteDocument")
        await self._guarded("deleteDocument", doc_id, self._store.delete_document(doc_id))
