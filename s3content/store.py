"""Object store client for s3content.

Wraps the three S3 calls the reconciler needs (paged listing, single-object
upload and batch deletion) and converts boto3/botocore failures into
:class:`~s3content.exceptions.ContentStoreError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import ContentIOError, ContentStoreError
from .sync.paths import remote_identifier
from .utils import DELETE_BATCH_SIZE, LIST_PAGE_SIZE, chunked

logger = logging.getLogger(__name__)

STORE_ERRORS = (ClientError, BotoCoreError, Boto3Error)


class S3ContentClient:
    """Client for listing, uploading and deleting objects in a bucket."""

    def __init__(self, client: Any):
        """Initialize the store client.

        Args:
            client: Authenticated boto3 S3 client
        """
        self._client = client

    @property
    def client(self) -> Any:
        """The underlying boto3 client."""
        return self._client

    def list_objects(self, bucket: str, instance_id: str) -> dict[str, str]:
        """List every object in a bucket.

        Pages are requested until the store reports no further page. Results
        of a failed listing are discarded.

        Args:
            bucket: Bucket name
            instance_id: Identifier of the reconciliation instance, used to
                build the composite identifier of each object

        Returns:
            Remote Key Mapping of composite identifier to raw store key

        Raises:
            ContentStoreError: If any page request fails
        """
        files: dict[str, str] = {}
        pages = 0
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(
                Bucket=bucket, PaginationConfig={"PageSize": LIST_PAGE_SIZE}
            ):
                pages += 1
                for item in page.get("Contents", []):
                    key = item["Key"]
                    files[remote_identifier(instance_id, key)] = key
        except STORE_ERRORS as e:
            raise ContentStoreError(
                f"Unable to list items in bucket {bucket!r}: {e}", resource=bucket
            ) from e

        logger.debug(f"Listed {len(files)} object(s) in {pages} page(s) of {bucket}")
        return files

    def upload_file(
        self,
        bucket: str,
        local_path: str | Path,
        key: str,
        content_type: str = "",
    ) -> None:
        """Upload a single local file.

        The file is streamed from an open handle that is closed on every
        exit path.

        Args:
            bucket: Destination bucket
            local_path: File to upload
            key: Destination object key
            content_type: MIME type; an empty string leaves it unset

        Raises:
            ContentIOError: If the local file cannot be opened
            ContentStoreError: If the upload fails
        """
        try:
            handle = open(local_path, "rb")
        except OSError as e:
            raise ContentIOError(
                f"Failed to open file {str(local_path)!r}: {e}",
                resource=str(local_path),
            ) from e

        extra_args = {"ContentType": content_type} if content_type else None
        with handle:
            try:
                self._client.upload_fileobj(handle, bucket, key, ExtraArgs=extra_args)
            except STORE_ERRORS as e:
                raise ContentStoreError(
                    f"{str(local_path)!r} upload to s3://{bucket}/{key} failed: {e}",
                    resource=bucket,
                ) from e

        logger.debug(
            f"Uploaded {local_path} to s3://{bucket}/{key} "
            f"({content_type or 'no content type'})"
        )

    def batch_delete(self, bucket: str, keys: Iterable[str]) -> None:
        """Delete a set of keys as one logical batch.

        Keys are sent in requests of at most ``DELETE_BATCH_SIZE`` keys.
        Keys that do not exist are not an error. When the store reports
        that any key could not be deleted the whole call fails; which of
        the other keys were removed is not reported.

        Args:
            bucket: Bucket name
            keys: Object keys to delete

        Raises:
            ContentStoreError: If a request fails or any key is reported
                as not deleted
        """
        unique_keys = sorted(set(keys))
        if not unique_keys:
            return

        failed: list[str] = []
        for batch in chunked(unique_keys, DELETE_BATCH_SIZE):
            try:
                response = self._client.delete_objects(
                    Bucket=bucket,
                    Delete={
                        "Objects": [{"Key": key} for key in batch],
                        "Quiet": True,
                    },
                )
            except STORE_ERRORS as e:
                raise ContentStoreError(
                    f"Batch delete in bucket {bucket!r} failed: {e}", resource=bucket
                ) from e

            for error in response.get("Errors", []):
                logger.debug(
                    f"Delete of s3://{bucket}/{error.get('Key')} failed: "
                    f"{error.get('Code')} {error.get('Message')}"
                )
                failed.append(error.get("Key", ""))

        if failed:
            raise ContentStoreError(
                f"Batch delete in bucket {bucket!r} failed for {len(failed)} "
                f"of {len(unique_keys)} key(s)",
                resource=bucket,
                failed_keys=failed,
            )

        logger.debug(f"Deleted {len(unique_keys)} object(s) from {bucket}")


def make_client(
    profile: str | None = None,
    region: str | None = None,
    endpoint_url: str | None = None,
    session: Any | None = None,
) -> S3ContentClient:
    """Create an authenticated store client.

    Credentials come from the ambient boto3 discovery chain; ``profile``
    and ``region`` are layered on top when given.

    Args:
        profile: Shared config profile name
        region: Region name
        endpoint_url: Endpoint of an S3-compatible service
        session: Pre-built boto3 session (profile and region are ignored)

    Returns:
        S3ContentClient wrapping a boto3 S3 client

    Raises:
        ContentStoreError: If the session cannot be created (e.g. unknown
            profile)
    """
    if session is None:
        session_kwargs: dict[str, Any] = {}
        if profile:
            session_kwargs["profile_name"] = profile
        if region:
            session_kwargs["region_name"] = region
        try:
            session = boto3.session.Session(**session_kwargs)
        except STORE_ERRORS as e:
            raise ContentStoreError(
                f"Unable to create AWS session: {e}", resource=profile
            ) from e

    client = session.client(
        "s3",
        endpoint_url=endpoint_url,
        config=BotoConfig(user_agent_extra="s3content"),
    )
    return S3ContentClient(client)
