"""Recorded state of content resources.

The state of a resource is the Local Key Mapping written by its last
successful create or update. It is the "previous" side of every diff, so
an unreadable state file is an error rather than an empty state.
"""

import hashlib
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..exceptions import ContentConfigError, ContentIOError

logger = logging.getLogger(__name__)


@dataclass
class ContentState:
    """Computed state recorded for one content resource."""

    id: str
    """Instance identifier (the declared local path)"""

    path: str
    """Absolute root directory that was enumerated"""

    bucket: str
    """Bucket the files were uploaded to"""

    files: dict[str, str] = field(default_factory=dict)
    """Local Key Mapping: absolute local path -> store key"""

    profile: Optional[str] = None
    """Credential profile used for the last write"""

    region: Optional[str] = None
    """Region used for the last write"""

    last_sync: Optional[str] = None
    """ISO timestamp of the last successful write"""

    def to_dict(self) -> dict:
        """Convert state to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "path": self.path,
            "bucket": self.bucket,
            "files": dict(sorted(self.files.items())),
            "profile": self.profile,
            "region": self.region,
            "last_sync": self.last_sync,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ContentState":
        """Create ContentState from dictionary."""
        if not isinstance(data, dict):
            raise ContentConfigError("Recorded state must be a JSON object")
        files = data.get("files") or {}
        if not isinstance(files, dict):
            raise ContentConfigError("Recorded files must be a mapping")
        return cls(
            id=data["id"],
            path=data.get("path", data["id"]),
            bucket=data["bucket"],
            files={str(k): str(v) for k, v in files.items()},
            profile=data.get("profile"),
            region=data.get("region"),
            last_sync=data.get("last_sync"),
        )


class ContentStateManager:
    """Persists ContentState objects as JSON files.

    One file per resource, named after a hash of the resource's absolute
    root path, so the same directory always maps to the same state file
    regardless of the bucket it was last synced to.
    """

    def __init__(self, state_dir: Optional[Path] = None):
        """Initialize state manager.

        Args:
            state_dir: Directory to store state files. Defaults to
                      ~/.config/s3content/state/
        """
        if state_dir is None:
            state_dir = Path.home() / ".config" / "s3content" / "state"
        self.state_dir = Path(state_dir)

    def _get_state_key(self, instance_id: str) -> str:
        local_abs = str(Path(instance_id).expanduser().absolute())
        return hashlib.sha256(local_abs.encode()).hexdigest()[:16]

    def _get_state_file(self, instance_id: str) -> Path:
        return self.state_dir / f"{self._get_state_key(instance_id)}.json"

    def load_state(self, instance_id: str) -> Optional[ContentState]:
        """Load the recorded state of a resource.

        Args:
            instance_id: Resource identifier (its declared path)

        Returns:
            ContentState if recorded, None otherwise

        Raises:
            ContentConfigError: If the state file exists but is unreadable
        """
        state_file = self._get_state_file(instance_id)

        if not state_file.exists():
            logger.debug(f"No recorded state at {state_file}")
            return None

        try:
            with open(state_file, encoding="utf-8") as f:
                data = json.load(f)
            state = ContentState.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise ContentConfigError(
                f"Failed to load recorded state {state_file}: {e}",
                resource=instance_id,
            ) from e

        logger.debug(
            f"Loaded state with {len(state.files)} files from {state.last_sync}"
        )
        return state

    def save_state(self, state: ContentState) -> Path:
        """Record the state of a resource.

        The file is written to a temporary name and moved into place.

        Args:
            state: State to record; ``last_sync`` is set to now

        Returns:
            Path of the state file

        Raises:
            ContentIOError: If the state file cannot be written
        """
        state.last_sync = datetime.now().isoformat()
        state_file = self._get_state_file(state.id)
        tmp_file = state_file.with_suffix(".json.tmp")

        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_file, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2)
            os.replace(tmp_file, state_file)
        except OSError as e:
            raise ContentIOError(
                f"Failed to save state to {state_file}: {e}", resource=state.id
            ) from e

        logger.debug(f"Saved state with {len(state.files)} files to {state_file}")
        return state_file

    def clear_state(self, instance_id: str) -> bool:
        """Forget the recorded state of a resource.

        Returns:
            True if state was cleared, False if no state existed
        """
        state_file = self._get_state_file(instance_id)

        if state_file.exists():
            state_file.unlink()
            logger.debug(f"Cleared state at {state_file}")
            return True
        return False
