"""Content-type table construction and lookup."""

import posixpath
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

DEFAULT_CONTENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        ".html": "text/html",
        ".htm": "text/html",
        ".css": "text/css",
        ".scss": "text/less",
        ".gif": "image/gif",
        ".ico": "image/x-icon",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".js": "application/javascript",
        ".json": "application/json",
        ".mpeg": "video/mpeg",
        ".png": "image/png",
        ".svg": "image/svg+xml",
        ".swf": "application/x-shockwave-flash",
        ".ts": "application/typescript",
        ".woff": "font/woff",
        ".woff2": "font/woff2",
        ".xhtml": "application/xhtml+xml",
        ".xml": "application/xml",
    }
)


def build_content_types(
    *overrides: Optional[Mapping[str, str]],
) -> Mapping[str, str]:
    """Merge override mappings on top of the default table.

    Sources are applied in argument order, so a later mapping wins over an
    earlier one and every override wins over the defaults. ``None`` sources
    are skipped. The returned table is read-only.

    Args:
        *overrides: Extension to MIME type mappings

    Returns:
        Immutable merged content-type table
    """
    table = dict(DEFAULT_CONTENT_TYPES)
    for source in overrides:
        if not source:
            continue
        for extension, mime in source.items():
            table[str(extension)] = str(mime)
    return MappingProxyType(table)


def extension_of(path: str) -> str:
    """Return the extension of path including its leading dot, case as typed."""
    return posixpath.splitext(path.replace("\\", "/"))[1]


def resolve_content_type(table: Mapping[str, str], extension: str) -> str:
    """Look up the MIME type for an extension.

    Returns:
        MIME type, or ``""`` when the extension is unknown (content type unset)
    """
    return table.get(extension, "")
