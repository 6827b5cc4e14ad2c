from __future__ import annotations

from typing import Optional

import httpx

from .config import ClientConfig
from .descriptions import DescriptionGenerator
from .functions import AppwriteFunctionService, FunctionService
from .media import CloudinaryMedia
from .records import ComicRecords
from .retry import Sleep
from .store import AppwriteDocumentStore, DocumentStore


# PUBLIC_INTERFACE
class ComicsClient:
    """
    The façade handed to the presentation layer: record operations, cover media
    and description generation, all built from one explicit ClientConfig.

    Usage:
        async with ComicsClient.from_config(config) as client:
            comics = await client.records.list()
    """

    def __init__(
        self,
        records: ComicRecords,
        media: CloudinaryMedia,
        descriptions: DescriptionGenerator,
        http: Optional[httpx.AsyncClient] = None,
        owns_http: bool = False,
    ) -> None:
        self.records = records
        self.media = media
        self.descriptions = descriptions
        self._http = http
        self._owns_http = owns_http

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        http: Optional[httpx.AsyncClient] = None,
        store: Optional[DocumentStore] = None,
        functions: Optional[FunctionService] = None,
        sleep: Optional[Sleep] = None,
    ) -> "ComicsClient":
        """
        Wire the operation sets. Any boundary not supplied talks to Appwrite or
        Cloudinary over `http`; a client is created (and later closed) when
        `http` is None. Deadlines are enforced by the façade, so the created
        client has no transport timeout of its own.
        """
        owns_http = http is None
        if http is None:
            http = httpx.AsyncClient(timeout=None)
        store = store or AppwriteDocumentStore(http, config.appwrite)
        functions = functions or AppwriteFunctionService(http, config.appwrite)
        return cls(
            records=ComicRecords(store, timeout_ms=config.record_timeout_ms),
            media=CloudinaryMedia(http, config.media, timeout_ms=config.upload_timeout_ms),
            descriptions=DescriptionGenerator(functions, config, sleep=sleep),
            http=http,
            owns_http=owns_http,
        )

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()

    async def __aenter__(self) -> "ComicsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
