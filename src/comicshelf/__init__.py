"""
Comicshelf: remote-operation façade for a personal comic tracker.

Records live in Appwrite Databases, covers on Cloudinary and descriptions come
from an Appwrite Function. Build a ComicsClient from a ClientConfig and call its
`records`, `media` and `descriptions` operation sets.
"""

from .client import ComicsClient
from .config import AppwriteConfig, ClientConfig, MediaConfig
from .errors import (
    ComicsError,
    EmptyResponse,
    ErrorKind,
    InvalidArgument,
    InvalidResponse,
    MalformedResponse,
    RemoteError,
    StoreError,
    Timeout,
    Unreachable,
    UploadFailed,
)
from .retry import RetryPolicy, retry_async
from .timeouts import with_timeout

__all__ = [
    "AppwriteConfig",
    "ClientConfig",
    "ComicsClient",
    "ComicsError",
    "EmptyResponse",
    "ErrorKind",
    "InvalidArgument",
    "InvalidResponse",
    "MalformedResponse",
    "MediaConfig",
    "RemoteError",
    "RetryPolicy",
    "StoreError",
    "Timeout",
    "Unreachable",
    "UploadFailed",
    "retry_async",
    "with_timeout",
]
