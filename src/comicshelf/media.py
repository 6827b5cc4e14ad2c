from __future__ import annotations

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from .config import DEFAULT_UPLOAD_TIMEOUT_MS, MediaConfig
from .errors import InvalidArgument, UploadFailed
from .timeouts import with_timeout

logger = logging.getLogger(__name__)

# Returned by derive_url when a record has no cover; the presentation layer
# swaps it for its placeholder artwork.
COVER_PLACEHOLDER = "placeholder:cover"

_UPLOAD_MARKER = "/upload/"


def _dimension(value: Any) -> Optional[int]:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _transformation(width: Any, height: Any) -> str:
    parts = ["c_fill"]
    w, h = _dimension(width), _dimension(height)
    if w:
        parts.append(f"w_{w}")
    if h:
        parts.append(f"h_{h}")
    parts.extend(["q_auto", "f_auto"])
    return ",".join(parts)


# PUBLIC_INTERFACE
class CloudinaryMedia:
    """
    Cover image adapter for Cloudinary.

    `upload` pushes a local file through an unsigned upload preset and returns
    the asset's public id. `derive_url` turns that id into a resized delivery URL
    using Cloudinary's on-the-fly transformations, without any network call.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        config: MediaConfig,
        timeout_ms: int = DEFAULT_UPLOAD_TIMEOUT_MS,
    ) -> None:
        self._http = http
        self._config = config
        self._timeout_ms = timeout_ms

    async def upload(self, path: Union[str, Path, None]) -> str:
        """
        Upload a local image and return its opaque reference.

        Raises:
            InvalidArgument: path is empty or not a readable file.
            UploadFailed: the media host rejected or failed the upload.
            Timeout: the upload did not finish within the deadline.
        """
        if not path:
            logger.error("Upload called without an image path")
            raise InvalidArgument("Image path is required")
        file_path = Path(path)
        if not file_path.is_file():
            logger.error("Image file not found: %s", file_path)
            raise InvalidArgument(f"Image file not found: {file_path}")

        try:
            content = await asyncio.to_thread(file_path.read_bytes)
        except OSError as e:
            logger.error("Error reading %s: %s", file_path.name, e)
            raise UploadFailed(f"Could not read {file_path.name}", cause=e) from e

        mime = mimetypes.guess_type(file_path.name)[0] or "image/jpeg"
        try:
            response = await with_timeout(
                self._http.post(
                    self._config.upload_url,
                    data={"upload_preset": self._config.upload_preset},
                    files={"file": (file_path.name, content, mime)},
                ),
                self._timeout_ms,
                "Cloudinary upload",
            )
        except httpx.HTTPError as e:
            logger.error("Error uploading %s: %s", file_path.name, e)
            raise UploadFailed(f"Upload of {file_path.name} failed", cause=e) from e
        except Exception as e:
            logger.error("Error uploading %s: %s", file_path.name, e)
            raise

        return self._reference_from(response, file_path.name)

    def _reference_from(self, response: httpx.Response, name: str) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            message = response.reason_phrase or "upload rejected"
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                message = body["error"].get("message") or message
            logger.error("Cloudinary rejected %s: [%s] %s", name, response.status_code, message)
            raise UploadFailed(f"Upload of {name} rejected: {message}")

        reference = body.get("public_id") if isinstance(body, dict) else None
        if not reference:
            logger.error("Cloudinary response for %s has no public_id: %r", name, body)
            raise UploadFailed(f"Upload of {name} returned no reference")
        return str(reference)

    def derive_url(self, reference: Optional[str], width: Optional[int] = None, height: Optional[int] = None) -> str:
        """
        Build the delivery URL of a resized variant.

        Pure string work, never raises. An absent reference yields
        COVER_PLACEHOLDER. Full delivery URLs get the transformation inserted
        after '/upload/'; other absolute URLs are returned unchanged.
        """
        if not reference:
            return COVER_PLACEHOLDER
        transformation = _transformation(width, height)
        if reference.startswith(("http://", "https://")):
            if _UPLOAD_MARKER not in reference:
                return reference
            head, tail = reference.split(_UPLOAD_MARKER, 1)
            return f"{head}{_UPLOAD_MARKER}{transformation}/{tail}"
        base = self._config.delivery_base.rstrip("/")
        return f"{base}/{self._config.cloud_name}/image/upload/{transformation}/{reference.lstrip('/')}"
