"""Canonical store keys for local paths."""

from pathlib import Path, PurePath
from typing import Union

PathLike = Union[str, PurePath]


def normalize_key(root: PathLike, path: PathLike) -> str:
    """Convert a path below ``root`` into a canonical store key.

    The root prefix is stripped and the remaining parts are joined with
    forward slashes, regardless of the host separator. A relative path
    that starts with a relative root is stripped the same way; any other
    relative path is taken as an already normalized key and returned
    unchanged.

    Args:
        root: Root directory of the enumeration
        path: File path below root, or an already normalized key

    Returns:
        Relative key such as ``"img/b.png"``

    Raises:
        ValueError: If path is not below root or the key would be empty

    Examples:
        >>> normalize_key("/site", "/site/img/b.png")
        'img/b.png'
        >>> normalize_key("site", "site/img/b.png")
        'img/b.png'
        >>> normalize_key("/site", "img/b.png")
        'img/b.png'
    """
    candidate = Path(path)
    root_path = Path(root)
    if candidate.is_absolute():
        try:
            parts = candidate.relative_to(root_path.absolute()).parts
        except ValueError:
            raise ValueError(
                f"Path {str(path)!r} is not below root {str(root)!r}"
            ) from None
    else:
        # Host separators only; a literal backslash in a POSIX name is kept
        parts = candidate.parts
        root_parts = root_path.parts
        if (
            root_parts
            and not root_path.is_absolute()
            and parts[: len(root_parts)] == root_parts
        ):
            parts = parts[len(root_parts) :]

    parts = tuple(part for part in parts if part not in ("", ".", "/"))
    if not parts:
        raise ValueError(
            f"Path {str(path)!r} does not name a file below {str(root)!r}"
        )
    if ".." in parts:
        raise ValueError(f"Path {str(path)!r} escapes root {str(root)!r}")
    return "/".join(parts)


def remote_identifier(instance_id: str, key: str) -> str:
    """Build the composite identifier for a remote object.

    Args:
        instance_id: Identifier of the reconciliation instance (its root path)
        key: Raw remote store key

    Returns:
        ``"<instance_id>/<normalized key>"`` in forward-slash form
    """
    base = instance_id.replace("\\", "/").rstrip("/")
    normalized = "/".join(part for part in key.split("/") if part)
    return f"{base}/{normalized}"
