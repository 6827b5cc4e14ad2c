from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, TypedDict


# PUBLIC_INTERFACE
class ReadStatus(str, Enum):
    """Reading status of a catalogued comic."""

    READ = "read"
    TO_READ = "to-read"


class _ComicFields(TypedDict, total=False):
    coverImage: Optional[str]
    description: str
    createdAt: str
    updatedAt: str


# PUBLIC_INTERFACE
class ComicRecord(_ComicFields):
    """
    A comic document as returned by the document store.

    Fields:
    - id: store-assigned identifier, immutable and never reused
    - title: 1..255 chars
    - status: 'read' or 'to-read'
    - rating: 0..5; 0 for 'to-read', 1..5 for 'read' (enforced by callers)
    - coverImage: optional opaque media reference
    - description: generated on create or edited by the user
    - createdAt / updatedAt: ISO8601 strings stamped by the caller

    Store system attributes ($createdAt, $permissions, ...) are kept as-is.
    """

    id: str
    title: str
    status: str
    rating: int


# Payload accepted by create/update; passed to the store without re-validation.
ComicPayload = Dict[str, Any]


def to_record(document: Dict[str, Any]) -> ComicRecord:
    """Expose the store's `$id` as `id`, leaving every other field untouched."""
    record = dict(document)
    if "id" not in record and "$id" in record:
        record["id"] = record["$id"]
    return record  # type: ignore[return-value]
