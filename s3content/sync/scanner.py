"""Directory scanning utilities for content reconciliation."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..exceptions import ContentIOError
from .paths import normalize_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """Represents a regular file discovered below a root directory."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Canonical store key (forward slashes, root prefix stripped)"""

    size: int = 0
    """File size in bytes"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            base_path: Root directory the key is relative to

        Returns:
            LocalFile instance
        """
        return cls(
            path=file_path,
            relative_path=normalize_key(base_path, file_path),
            size=file_path.stat().st_size,
        )


class DirectoryScanner:
    """Recursively enumerates the regular files below a root directory.

    Directories are traversed but never reported. Symbolic links to files
    are reported under the link's own path; symbolic links to directories
    are traversed unless they point back into a directory that is already
    being walked. Any filesystem error aborts the whole scan.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> files = scanner.scan_local(Path("/srv/site"))
        >>> sorted(f.relative_path for f in files)
        ['a.html', 'img/b.png']
    """

    def scan_local(self, directory: Union[str, Path]) -> list[LocalFile]:
        """Scan a directory tree.

        Args:
            directory: Root directory to enumerate

        Returns:
            List of LocalFile objects sorted by relative path

        Raises:
            ContentIOError: If the root is missing or not a directory, or a
                directory or file below it cannot be read
        """
        root = Path(directory).absolute()
        if not root.exists():
            raise ContentIOError(
                f"Local directory does not exist: {root}", resource=str(root)
            )
        if not root.is_dir():
            raise ContentIOError(
                f"Local path is not a directory: {root}", resource=str(root)
            )

        files: list[LocalFile] = []
        self._scan_directory(root, root, files, ancestors=set())
        files.sort(key=lambda f: f.relative_path)
        logger.debug(f"Enumerated {len(files)} file(s) below {root}")
        return files

    def _scan_directory(
        self,
        directory: Path,
        base_path: Path,
        files: list[LocalFile],
        ancestors: set[str],
    ) -> None:
        real = os.path.realpath(directory)
        if real in ancestors:
            logger.debug(f"Skipping symlink loop at {directory}")
            return
        ancestors = ancestors | {real}

        try:
            items = sorted(directory.iterdir())
        except OSError as e:
            raise ContentIOError(
                f"Unable to read directory {directory}: {e}", resource=str(directory)
            ) from e

        for item in items:
            try:
                if item.is_dir():
                    self._scan_directory(item, base_path, files, ancestors)
                elif item.is_file():
                    files.append(LocalFile.from_path(item, base_path))
                elif item.is_symlink():
                    raise ContentIOError(
                        f"Broken symbolic link: {item}", resource=str(item)
                    )
                else:
                    # Sockets, FIFOs and device nodes are not content
                    logger.debug(f"Skipping non-regular file {item}")
            except ContentIOError:
                raise
            except OSError as e:
                raise ContentIOError(
                    f"Unable to read {item}: {e}", resource=str(item)
                ) from e


def enumerate_files(
    root: Union[str, Path], scanner: Optional[DirectoryScanner] = None
) -> dict[str, str]:
    """Build the Local Key Mapping for a directory tree.

    Args:
        root: Root directory to enumerate
        scanner: Scanner to use (a default scanner when omitted)

    Returns:
        Mapping of absolute local path to canonical store key

    Raises:
        ContentIOError: If any part of the tree cannot be read
    """
    scanner = scanner or DirectoryScanner()
    return {str(f.path): f.relative_path for f in scanner.scan_local(root)}
