"""Utility functions and shared constants for s3content."""

# =============================================================================
# Constants for store operations
# =============================================================================

# Maximum number of keys accepted by a single S3 DeleteObjects request
DELETE_BATCH_SIZE: int = 1000

# Objects requested per ListObjectsV2 page
LIST_PAGE_SIZE: int = 1000

# Upload workers used when nothing else is configured
DEFAULT_MAX_WORKERS: int = 1


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


def chunked(items: list, size: int) -> list[list]:
    """Split a list into consecutive chunks of at most ``size`` items.

    Args:
        items: Items to split
        size: Maximum chunk length (must be positive)

    Returns:
        List of chunks; empty when ``items`` is empty
    """
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [items[i : i + size] for i in range(0, len(items), size)]


def parse_type_overrides(values: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Parse ``EXT=MIME`` strings into a content-type override mapping.

    A missing leading dot on the extension is added.

    Args:
        values: Strings such as ``".md=text/markdown"``

    Returns:
        Mapping of extension to MIME type

    Raises:
        ValueError: If an entry is not of the form ``EXT=MIME``
    """
    overrides: dict[str, str] = {}
    for value in values:
        ext, sep, mime = value.partition("=")
        ext = ext.strip()
        mime = mime.strip()
        if not sep or not ext or not mime:
            raise ValueError(f"Invalid content type override {value!r}, use EXT=TYPE")
        if not ext.startswith("."):
            ext = "." + ext
        overrides[ext] = mime
    return overrides
