from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .client import ComicsClient
from .errors import ComicsError, ErrorKind, StoreError
from .logging_config import setup_logging
from .routers import comics as comics_router
from .settings import Settings, get_settings
from .store import InMemoryDocumentStore

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "comics",
        "description": "Comic records, cover URLs and generated descriptions.",
    },
]

_STATUS_BY_KIND = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UNREACHABLE: 503,
    ErrorKind.MALFORMED_RESPONSE: 502,
    ErrorKind.EMPTY_RESPONSE: 502,
    ErrorKind.INVALID_RESPONSE: 502,
    ErrorKind.REMOTE_ERROR: 502,
    ErrorKind.STORE_ERROR: 502,
    ErrorKind.UPLOAD_FAILED: 502,
}

_MESSAGES = {
    ErrorKind.INVALID_ARGUMENT: "The request is missing required information.",
    ErrorKind.TIMEOUT: "The service took too long to respond. Please try again.",
    ErrorKind.UNREACHABLE: "The service is unreachable. Check your connection and try again.",
    ErrorKind.MALFORMED_RESPONSE: "The description service returned an unreadable response.",
    ErrorKind.EMPTY_RESPONSE: "The description service returned no response.",
    ErrorKind.INVALID_RESPONSE: "The description service returned an unexpected response.",
    ErrorKind.REMOTE_ERROR: "The description service reported an error.",
    ErrorKind.STORE_ERROR: "The comic collection could not be reached.",
    ErrorKind.UPLOAD_FAILED: "The cover image could not be uploaded.",
}


def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raised ValueError, which is not JSON serializable
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


# PUBLIC_INTERFACE
def build_client(settings: Settings) -> ComicsClient:
    """
    Factory returning the façade configured by settings.
    - appwrite: records go to Appwrite Databases
    - memory: records live in an InMemoryDocumentStore for local runs
    """
    config = settings.to_client_config()
    store = InMemoryDocumentStore() if settings.store_backend == "memory" else None
    return ComicsClient.from_config(config, store=store)


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, client: Optional[ComicsClient] = None) -> FastAPI:
    """
    Build the HTTP adapter exposing the façade to the presentation layer.

    A supplied `client` is used as-is and left open; otherwise one is built from
    settings at startup and closed at shutdown.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "client", None) is not None:
            yield
            return
        logger.info("Starting with %s store backend", settings.store_backend)
        app.state.client = build_client(settings)
        try:
            yield
        finally:
            await app.state.client.aclose()

    app = FastAPI(
        title="Comicshelf",
        description="Personal comic tracker backed by Appwrite and Cloudinary.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.client = client

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic error details ...]
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": _jsonable_errors(exc),
            },
        )

    @app.exception_handler(ComicsError)
    async def comics_error_handler(request: Request, exc: ComicsError) -> JSONResponse:
        """Map each failure kind to a status code and a readable message."""
        status_code = _STATUS_BY_KIND.get(exc.kind, 500)
        message = _MESSAGES.get(exc.kind, "Unexpected error.")
        if isinstance(exc, StoreError) and exc.not_found:
            status_code = 404
            message = "Comic not found."
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.kind.value, "message": message, "detail": str(exc)},
        )

    @app.exception_handler(httpx.HTTPError)
    async def network_error_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={
                "error": "NetworkError",
                "message": "The service is unreachable. Check your connection and try again.",
                "detail": str(exc),
            },
        )

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the configured store backend.
        """
        return {"message": "Healthy", "backend": settings.store_backend}

    app.include_router(comics_router.router)
    return app
