"""s3content - mirror a local directory tree into an S3 bucket."""

__version__ = "0.1.0"

from .exceptions import (
    ContentConfigError,
    ContentError,
    ContentIOError,
    ContentStoreError,
)
from .store import S3ContentClient, make_client
from .sync import ContentReconciler, ContentResource, ContentState

__all__ = [
    "ContentConfigError",
    "ContentError",
    "ContentIOError",
    "ContentReconciler",
    "ContentResource",
    "ContentState",
    "ContentStoreError",
    "S3ContentClient",
    "make_client",
]
