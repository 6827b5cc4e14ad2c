from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .retry import RetryPolicy

DEFAULT_ENDPOINT = "https://fra.cloud.appwrite.io/v1"
DEFAULT_FUNCTION_ID = "comics_description_ai"

DEFAULT_RECORD_TIMEOUT_MS = 15000
DEFAULT_EXECUTION_TIMEOUT_MS = 45000
DEFAULT_PROBE_TIMEOUT_MS = 5000
DEFAULT_UPLOAD_TIMEOUT_MS = 30000


@dataclass(frozen=True)
class AppwriteConfig:
    """
    Identifiers of the Appwrite project hosting the comics collection and the
    description function. Values are opaque; nothing here is validated.
    """

    endpoint: str = DEFAULT_ENDPOINT
    project_id: str = ""
    database_id: str = ""
    collection_id: str = ""
    function_id: str = DEFAULT_FUNCTION_ID
    api_key: Optional[str] = None

    def url(self, *parts: str) -> str:
        base = self.endpoint.rstrip("/")
        return "/".join([base, *(p.strip("/") for p in parts)])

    def headers(self) -> Dict[str, str]:
        headers = {"X-Appwrite-Project": self.project_id}
        if self.api_key:
            headers["X-Appwrite-Key"] = self.api_key
        return headers


@dataclass(frozen=True)
class MediaConfig:
    """Cloudinary account used for cover images (unsigned uploads)."""

    cloud_name: str = ""
    upload_preset: str = ""
    api_base: str = "https://api.cloudinary.com/v1_1"
    delivery_base: str = "https://res.cloudinary.com"

    @property
    def upload_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/{self.cloud_name}/image/upload"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration object handed to every operation set at startup.

    Deadlines are in milliseconds. `execution_retry` applies to the description
    function only; record and upload calls are never retried.
    """

    appwrite: AppwriteConfig = field(default_factory=AppwriteConfig)
    media: MediaConfig = field(default_factory=MediaConfig)
    record_timeout_ms: int = DEFAULT_RECORD_TIMEOUT_MS
    execution_timeout_ms: int = DEFAULT_EXECUTION_TIMEOUT_MS
    probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS
    upload_timeout_ms: int = DEFAULT_UPLOAD_TIMEOUT_MS
    execution_retry: RetryPolicy = field(default_factory=RetryPolicy)
    probe_before_execute: bool = True
