"""Configuration management for s3content."""

import os
from pathlib import Path
from typing import Optional

from .utils import DEFAULT_MAX_WORKERS

CONFIG_KEYS = (
    "S3CONTENT_PROFILE",
    "S3CONTENT_REGION",
    "S3CONTENT_ENDPOINT_URL",
    "S3CONTENT_STATE_DIR",
    "S3CONTENT_MAX_WORKERS",
)


class Config:
    """Configuration manager.

    Values are read from environment variables first and fall back to
    ``~/.config/s3content/config``, a plain ``KEY=VALUE`` file.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".config" / "s3content"
        self.config_file = self.config_dir / "config"
        self._file_values: Optional[dict[str, str]] = None

    def _load_file(self) -> dict[str, str]:
        if self._file_values is None:
            values: dict[str, str] = {}
            if self.config_file.exists():
                with open(self.config_file, encoding="utf-8") as f:
                    for line in f:
                        line = line.strip()
                        if not line or line.startswith("#") or "=" not in line:
                            continue
                        key, value = line.split("=", 1)
                        values[key.strip()] = value.strip().strip("\"'")
            self._file_values = values
        return self._file_values

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a configuration value, environment first."""
        value = os.environ.get(key)
        if value:
            return value
        return self._load_file().get(key, default)

    @property
    def profile(self) -> Optional[str]:
        return self.get("S3CONTENT_PROFILE")

    @property
    def region(self) -> Optional[str]:
        return self.get("S3CONTENT_REGION")

    @property
    def endpoint_url(self) -> Optional[str]:
        return self.get("S3CONTENT_ENDPOINT_URL")

    @property
    def state_dir(self) -> Path:
        value = self.get("S3CONTENT_STATE_DIR")
        if value:
            return Path(value).expanduser()
        return self.config_dir / "state"

    @property
    def max_workers(self) -> int:
        value = self.get("S3CONTENT_MAX_WORKERS")
        if not value:
            return DEFAULT_MAX_WORKERS
        try:
            return max(1, int(value))
        except ValueError:
            return DEFAULT_MAX_WORKERS

    def save(self, values: dict[str, str]) -> Path:
        """Merge values into the config file and write it back.

        Args:
            values: Mapping of config keys to values

        Returns:
            Path of the written config file
        """
        merged = dict(self._load_file())
        merged.update(values)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            for key in sorted(merged):
                f.write(f"{key}={merged[key]}\n")
        self.config_file.chmod(0o600)
        self._file_values = merged
        return self.config_file


config = Config()
