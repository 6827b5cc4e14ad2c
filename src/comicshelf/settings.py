from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from .config import (
    DEFAULT_ENDPOINT,
    DEFAULT_EXECUTION_TIMEOUT_MS,
    DEFAULT_FUNCTION_ID,
    DEFAULT_PROBE_TIMEOUT_MS,
    DEFAULT_RECORD_TIMEOUT_MS,
    DEFAULT_UPLOAD_TIMEOUT_MS,
    AppwriteConfig,
    ClientConfig,
    MediaConfig,
)
from .retry import RetryPolicy


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - STORE_BACKEND: 'appwrite' (default) or 'memory'
    - APPWRITE_ENDPOINT: API endpoint; blank falls back to the Frankfurt cloud region
    - APPWRITE_PROJECT_ID / APPWRITE_DATABASE_ID / APPWRITE_COLLECTION_ID
    - APPWRITE_API_KEY: optional server key
    - APPWRITE_FUNCTION_ID_GENERATE_DESC: description function id
    - CLOUDINARY_CLOUD_NAME / CLOUDINARY_UPLOAD_PRESET: unsigned cover uploads
    - RECORD_TIMEOUT_MS, EXECUTION_TIMEOUT_MS, PROBE_TIMEOUT_MS, UPLOAD_TIMEOUT_MS
    - EXECUTION_RETRIES / EXECUTION_BACKOFF_MS: description retry budget
    - PROBE_BEFORE_EXECUTE: 'false' skips the health probe
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name, INFO by default
    """

    store_backend: str
    appwrite_endpoint: str
    appwrite_project_id: str
    appwrite_database_id: str
    appwrite_collection_id: str
    appwrite_api_key: Optional[str]
    function_id: str
    cloudinary_cloud_name: str
    cloudinary_upload_preset: str
    record_timeout_ms: int
    execution_timeout_ms: int
    probe_timeout_ms: int
    upload_timeout_ms: int
    execution_retries: int
    execution_backoff_ms: int
    probe_before_execute: bool
    cors_allow_origins: List[str]
    log_level: str

    def to_client_config(self) -> ClientConfig:
        """Build the configuration object handed to the façade."""
        return ClientConfig(
            appwrite=AppwriteConfig(
                endpoint=self.appwrite_endpoint,
                project_id=self.appwrite_project_id,
                database_id=self.appwrite_database_id,
                collection_id=self.appwrite_collection_id,
                function_id=self.function_id,
                api_key=self.appwrite_api_key,
            ),
            media=MediaConfig(
                cloud_name=self.cloudinary_cloud_name,
                upload_preset=self.cloudinary_upload_preset,
            ),
            record_timeout_ms=self.record_timeout_ms,
            execution_timeout_ms=self.execution_timeout_ms,
            probe_timeout_ms=self.probe_timeout_ms,
            upload_timeout_ms=self.upload_timeout_ms,
            execution_retry=RetryPolicy(
                retries=self.execution_retries,
                base_delay_ms=self.execution_backoff_ms,
            ),
            probe_before_execute=self.probe_before_execute,
        )


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value: str, default: int) -> int:
    try:
        n = int(value)
    except ValueError:
        return default
    return n if n >= 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("STORE_BACKEND", "appwrite").lower()
    if backend not in {"appwrite", "memory"}:
        backend = "appwrite"

    return Settings(
        store_backend=backend,
        appwrite_endpoint=_get_env("APPWRITE_ENDPOINT", DEFAULT_ENDPOINT),
        appwrite_project_id=_get_env("APPWRITE_PROJECT_ID", ""),
        appwrite_database_id=_get_env("APPWRITE_DATABASE_ID", ""),
        appwrite_collection_id=_get_env("APPWRITE_COLLECTION_ID", ""),
        appwrite_api_key=os.getenv("APPWRITE_API_KEY") or None,
        function_id=_get_env("APPWRITE_FUNCTION_ID_GENERATE_DESC", DEFAULT_FUNCTION_ID),
        cloudinary_cloud_name=_get_env("CLOUDINARY_CLOUD_NAME", ""),
        cloudinary_upload_preset=_get_env("CLOUDINARY_UPLOAD_PRESET", ""),
        record_timeout_ms=_parse_int(_get_env("RECORD_TIMEOUT_MS", ""), DEFAULT_RECORD_TIMEOUT_MS),
        execution_timeout_ms=_parse_int(_get_env("EXECUTION_TIMEOUT_MS", ""), DEFAULT_EXECUTION_TIMEOUT_MS),
        probe_timeout_ms=_parse_int(_get_env("PROBE_TIMEOUT_MS", ""), DEFAULT_PROBE_TIMEOUT_MS),
        upload_timeout_ms=_parse_int(_get_env("UPLOAD_TIMEOUT_MS", ""), DEFAULT_UPLOAD_TIMEOUT_MS),
        execution_retries=_parse_int(_get_env("EXECUTION_RETRIES", ""), 2),
        execution_backoff_ms=_parse_int(_get_env("EXECUTION_BACKOFF_MS", ""), 700),
        probe_before_execute=_parse_bool(_get_env("PROBE_BEFORE_EXECUTE", "true"), True),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").upper(),
    )
