"""
Decoding of function-execution results into a single description string.

The execution service does not promise one envelope: depending on runtime and
version the function's reply sits under `response` or `responseBody`, either as
a JSON string or as an already parsed object. Every shape is enumerated here so
no other module has to care.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .errors import EmptyResponse, InvalidResponse, MalformedResponse, RemoteError

logger = logging.getLogger(__name__)


class PayloadField(str, Enum):
    """Envelope fields that may carry the function's reply, in order of preference."""

    RESPONSE = "response"
    RESPONSE_BODY = "responseBody"


@dataclass(frozen=True)
class RawPayload:
    field: PayloadField
    value: Any


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


def select_payload(execution: Optional[Mapping[str, Any]]) -> Optional[RawPayload]:
    """Return the first present payload field, or None when neither is present."""
    if not execution:
        return None
    for field in PayloadField:
        value = execution.get(field.value)
        if _is_present(value):
            return RawPayload(field=field, value=value)
    return None


def decode_payload(raw: RawPayload) -> Any:
    """Parse string payloads as JSON; structured payloads are returned as-is."""
    if isinstance(raw.value, (str, bytes, bytearray)):
        try:
            return json.loads(raw.value)
        except ValueError as e:
            logger.error("Failed to parse %s: %r", raw.field.value, raw.value)
            raise MalformedResponse(f"Invalid response format from AI function ({raw.field.value})", cause=e) from e
    return raw.value


def _is_empty(parsed: Any) -> bool:
    # objects and arrays count as data even when empty; other falsy JSON values do not
    if isinstance(parsed, (Mapping, list)):
        return False
    return not parsed


def extract_description(parsed: Any) -> str:
    """
    Validate a decoded payload and return its description.

    Raises:
        RemoteError: payload carries an explicit `error`.
        InvalidResponse: payload is not an object, lacks a truthy `success`
            or lacks a non-empty string `description`.
    """
    if not isinstance(parsed, Mapping):
        logger.error("Invalid response format: %r", parsed)
        raise InvalidResponse("Invalid response from AI function")

    error = parsed.get("error")
    if error:
        raise RemoteError(str(error))

    description = parsed.get("description")
    if not parsed.get("success") or not isinstance(description, str) or not description:
        logger.error("Invalid response format: %r", parsed)
        raise InvalidResponse("Invalid response from AI function")
    return description


# PUBLIC_INTERFACE
def normalize_execution(execution: Optional[Mapping[str, Any]]) -> str:
    """
    Reduce an execution result to its generated description.

    Order of checks:
    1. pick `response`, else `responseBody`
    2. parse a string payload (MalformedResponse on failure)
    3. no payload, or a null, false, zero or empty-string one, is EmptyResponse
    4. an explicit `error` is RemoteError
    5. missing `success` or `description` is InvalidResponse
    """
    raw = select_payload(execution)
    if raw is None:
        logger.error("No response data received from function")
        raise EmptyResponse("No response received from AI function")

    parsed = decode_payload(raw)
    if _is_empty(parsed):
        logger.error("Empty response data received from function: %r", parsed)
        raise EmptyResponse("No response received from AI function")
    return extract_description(parsed)
