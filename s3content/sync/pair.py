"""Declared fields of a content resource."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import ContentConfigError

logger = logging.getLogger(__name__)


@dataclass
class ContentResource:
    """Desired state of one directory-to-bucket association.

    The resource is identified by its local path, which is used both as the
    directory to enumerate and as the opaque instance identifier.
    """

    path: str
    """Local directory whose files are mirrored"""

    bucket: str
    """Destination bucket name"""

    types: dict[str, str] = field(default_factory=dict)
    """Extension to MIME type overrides (e.g. {".md": "text/markdown"})"""

    profile: Optional[str] = None
    """Credential profile"""

    region: Optional[str] = None
    """Bucket region"""

    name: Optional[str] = None
    """Optional display name"""

    def __post_init__(self) -> None:
        if isinstance(self.path, Path):
            self.path = str(self.path)
        if not isinstance(self.path, str) or not self.path.strip():
            raise ContentConfigError("Resource path cannot be empty")
        if not isinstance(self.bucket, str) or not self.bucket.strip():
            raise ContentConfigError(
                "Resource bucket cannot be empty", resource=self.path
            )
        self.bucket = self.bucket.strip()
        if not isinstance(self.types, dict):
            raise ContentConfigError(
                "Resource types must be a mapping of extension to MIME type",
                resource=self.path,
            )
        for extension, mime in self.types.items():
            if not isinstance(extension, str) or not isinstance(mime, str):
                raise ContentConfigError(
                    f"Invalid content type override {extension!r}: {mime!r}",
                    resource=self.path,
                )

    @property
    def instance_id(self) -> str:
        """Identifier recorded for this resource (the declared path)."""
        return self.path

    @property
    def root(self) -> Path:
        """Absolute root directory."""
        return Path(self.path).expanduser().absolute()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentResource":
        """Create a resource from a dictionary of declared fields.

        Args:
            data: Dictionary with keys path, bucket and optionally types,
                profile, region and name

        Returns:
            ContentResource instance

        Raises:
            ContentConfigError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise ContentConfigError("Resource declaration must be an object")
        missing = [key for key in ("path", "bucket") if not data.get(key)]
        if missing:
            raise ContentConfigError(
                f"Missing required fields: {', '.join(missing)}",
                resource=data.get("path"),
            )
        return cls(
            path=data["path"],
            bucket=data["bucket"],
            types=data.get("types") or {},
            profile=data.get("profile") or None,
            region=data.get("region") or None,
            name=data.get("name") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the resource to a dictionary, omitting unset fields."""
        data: dict[str, Any] = {"path": self.path, "bucket": self.bucket}
        if self.types:
            data["types"] = dict(self.types)
        if self.profile:
            data["profile"] = self.profile
        if self.region:
            data["region"] = self.region
        if self.name:
            data["name"] = self.name
        return data

    def __str__(self) -> str:
        target = f"{self.path} -> s3://{self.bucket}"
        if self.name:
            return f"{self.name}: {target}"
        return target


def load_resources_from_json(
    source: Union[str, Path, list, dict],
) -> list[ContentResource]:
    """Load resource declarations from a JSON file or parsed JSON data.

    The JSON document is either a single resource object or a list of them.

    Args:
        source: Path to a JSON file, or already parsed data

    Returns:
        List of ContentResource objects

    Raises:
        ContentConfigError: If the file cannot be read or a declaration is
            invalid
    """
    if isinstance(source, (str, Path)):
        file_path = Path(source)
        try:
            with open(file_path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ContentConfigError(
                f"Cannot read resource file {file_path}: {e}", resource=str(file_path)
            ) from e
        except json.JSONDecodeError as e:
            raise ContentConfigError(
                f"Invalid JSON in resource file {file_path}: {e}",
                resource=str(file_path),
            ) from e
    else:
        data = source

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ContentConfigError("Resource file must contain an object or a list")

    resources = [ContentResource.from_dict(item) for item in data]
    logger.debug(f"Loaded {len(resources)} resource declaration(s)")
    return resources
