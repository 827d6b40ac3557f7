"""Reconciliation engine for s3content - enumerate, diff, upload, delete."""

from .comparator import DiffResult, diff_mappings
from .content_types import (
    DEFAULT_CONTENT_TYPES,
    build_content_types,
    extension_of,
    resolve_content_type,
)
from .engine import ApplyResult, ContentReconciler
from .operations import SyncOperations
from .pair import ContentResource, load_resources_from_json
from .paths import normalize_key, remote_identifier
from .scanner import DirectoryScanner, LocalFile, enumerate_files
from .state import ContentState, ContentStateManager

__all__ = [
    "ApplyResult",
    "ContentReconciler",
    "ContentResource",
    "ContentState",
    "ContentStateManager",
    "DEFAULT_CONTENT_TYPES",
    "DiffResult",
    "DirectoryScanner",
    "LocalFile",
    "SyncOperations",
    "build_content_types",
    "diff_mappings",
    "enumerate_files",
    "extension_of",
    "load_resources_from_json",
    "normalize_key",
    "remote_identifier",
    "resolve_content_type",
]
