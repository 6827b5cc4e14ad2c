from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, List, Optional

import httpx

from .config import AppwriteConfig
from .errors import StoreError

# Asks the store to assign a fresh identifier.
UNIQUE_ID = "unique()"

Document = Dict[str, Any]


# PUBLIC_INTERFACE
class DocumentStore(ABC):
    """Boundary contract of the remote document collection holding comics."""

    @abstractmethod
    async def list_documents(self) -> Dict[str, Any]:
        """Return the store's list envelope: {'documents': [...], 'total': n}."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Document:
        """Return one document or raise StoreError (404 when missing)."""

    @abstractmethod
    async def create_document(self, document_id: str, data: Dict[str, Any]) -> Document:
        """Create a document; `UNIQUE_ID` lets the store pick the id."""

    @abstractmethod
    async def update_document(self, document_id: str, data: Dict[str, Any]) -> Document:
        """Merge `data` into an existing document and return it."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> None:
        """Delete a document. Missing ids are reported however the store reports them."""


def _raise_for_store_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    body: Any = None
    message = response.reason_phrase or "Document store request failed"
    error_type: Optional[str] = None
    try:
        body = response.json()
    except ValueError:
        body = response.text or None
    if isinstance(body, dict):
        message = str(body.get("message") or message)
        error_type = body.get("type")
    raise StoreError(response.status_code, message, error_type=error_type, body=body)


class AppwriteDocumentStore(DocumentStore):
    """
    Appwrite Databases REST client for a single collection.

    The httpx client is owned by the caller; this class never closes it.
    """

    def __init__(self, http: httpx.AsyncClient, config: AppwriteConfig) -> None:
        self._http = http
        self._config = config

    def _documents_url(self, document_id: Optional[str] = None) -> str:
        parts = ["databases", self._config.database_id, "collections", self._config.collection_id, "documents"]
        if document_id is not None:
            parts.append(document_id)
        return self._config.url(*parts)

    async def _send(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._http.request(method, url, json=json, headers=self._config.headers())
        _raise_for_store_status(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def list_documents(self) -> Dict[str, Any]:
        return await self._send("GET", self._documents_url()) or {}

    async def get_document(self, document_id: str) -> Document:
        return await self._send("GET", self._documents_url(document_id))

    async def create_document(self, document_id: str, data: Dict[str, Any]) -> Document:
        return await self._send("POST", self._documents_url(), json={"documentId": document_id, "data": data})

    async def update_document(self, document_id: str, data: Dict[str, Any]) -> Document:
        return await self._send("PATCH", self._documents_url(document_id), json={"data": data})

    async def delete_document(self, document_id: str) -> None:
        await self._send("DELETE", self._documents_url(document_id))


class InMemoryDocumentStore(DocumentStore):
    """
    Thread-safe in-memory store with Appwrite semantics, suitable for testing
    and local runs without a backend.
    """

    def __init__(self, database_id: str = "local", collection_id: str = "comics") -> None:
        self._lock = RLock()
        self._items: Dict[str, Document] = {}
        self._database_id = database_id
        self._collection_id = collection_id

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds")

    def _not_found(self, document_id: str) -> StoreError:
        return StoreError(
            404,
            f"Document with the requested ID '{document_id}' could not be found.",
            error_type="document_not_found",
        )

    async def list_documents(self) -> Dict[str, Any]:
        with self._lock:
            docs: List[Document] = [d.copy() for d in self._items.values()]
        return {"total": len(docs), "documents": docs}

    async def get_document(self, document_id: str) -> Document:
        with self._lock:
            item = self._items.get(document_id)
            if item is None:
                raise self._not_found(document_id)
            return item.copy()

    async def create_document(self, document_id: str, data: Dict[str, Any]) -> Document:
        new_id = uuid.uuid4().hex[:20] if document_id == UNIQUE_ID else document_id
        now = self._now()
        with self._lock:
            if new_id in self._items:
                raise StoreError(
                    409,
                    "Document with the requested ID already exists.",
                    error_type="document_already_exists",
                )
            document: Document = {
                **data,
                "$id": new_id,
                "$databaseId": self._database_id,
                "$collectionId": self._collection_id,
                "$createdAt": now,
                "$updatedAt": now,
            }
            self._items[new_id] = document
            return document.copy()

    async def update_document(self, document_id: str, data: Dict[str, Any]) -> Document:
        with self._lock:
            existing = self._items.get(document_id)
            if existing is None:
                raise self._not_found(document_id)

            # Only the supplied fields change
            updated = existing.copy()
            updated.update({k: v for k, v in data.items() if not k.startswith("$")})
            updated["$updatedAt"] = self._now()

            self._items[document_id] = updated
            return updated.copy()

    async def delete_document(self, document_id: str) -> None:
        with self._lock:
            if self._items.pop(document_id, None) is None:
                raise self._not_found(document_id)
