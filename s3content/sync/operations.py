"""Upload and delete batches against the store client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Callable, Optional

from .content_types import extension_of, resolve_content_type

if TYPE_CHECKING:
    from ..store import S3ContentClient

logger = logging.getLogger(__name__)


class SyncOperations:
    """Applies uploads and deletions for a reconciliation pass."""

    def __init__(self, client: S3ContentClient):
        """Initialize sync operations.

        Args:
            client: Store client used for all network calls
        """
        self.client = client

    def upload_one(
        self,
        bucket: str,
        local_path: str,
        key: str,
        content_types: Mapping[str, str],
    ) -> str:
        """Upload one file with the content type resolved from its extension.

        Returns:
            The content type that was sent ("" when unset)
        """
        content_type = resolve_content_type(content_types, extension_of(local_path))
        logger.debug(f"Uploading {local_path} -> {key}")
        self.client.upload_file(bucket, local_path, key, content_type)
        return content_type

    def upload_all(
        self,
        bucket: str,
        files: Mapping[str, str],
        content_types: Mapping[str, str],
        max_workers: int = 1,
        progress_callback: Optional[Callable[[str], None]] = None,
    ) -> int:
        """Upload every entry of a key mapping.

        Uploads are independent and may run in parallel. The first failure
        stops the batch: uploads not yet started are cancelled, running ones
        finish, and the error is raised. Files uploaded before the failure
        stay in the bucket.

        Args:
            bucket: Destination bucket
            files: Mapping of local path to store key
            content_types: Merged content-type table
            max_workers: Number of parallel uploads
            progress_callback: Called with the key after each successful upload

        Returns:
            Number of files uploaded
        """
        if not files:
            return 0

        items = sorted(files.items(), key=lambda item: item[1])

        if max_workers <= 1 or len(items) == 1:
            for local_path, key in items:
                self.upload_one(bucket, local_path, key, content_types)
                if progress_callback:
                    progress_callback(key)
            return len(items)

        logger.debug(f"Uploading {len(items)} file(s) with {max_workers} workers")
        uploaded = 0
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(
                    self.upload_one, bucket, local_path, key, content_types
                ): key
                for local_path, key in items
            }
            for future in as_completed(futures):
                key = futures[future]
                error = future.exception()
                if error is not None:
                    for other in futures:
                        other.cancel()
                    logger.debug(f"Upload of {key} failed: {error}")
                    # Leaving the executor waits for uploads already running
                    raise error
                uploaded += 1
                if progress_callback:
                    progress_callback(key)

        return uploaded

    def delete_all(self, bucket: str, files: Mapping[str, str]) -> int:
        """Delete the store keys of a key mapping as one batch.

        Returns:
            Number of keys requested for deletion
        """
        keys = set(files.values())
        if not keys:
            return 0
        logger.debug(f"Deleting {len(keys)} object(s) from {bucket}")
        self.client.batch_delete(bucket, keys)
        return len(keys)
