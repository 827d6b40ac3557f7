"""Shared fixtures for s3content tests."""

from collections import defaultdict
from pathlib import Path
from typing import Any, Optional

import pytest

from s3content.store import S3ContentClient
from s3content.sync import ContentStateManager


class FakePaginator:
    """In-memory stand-in for the list_objects_v2 paginator."""

    def __init__(self, client: "FakeS3Client"):
        self.client = client

    def paginate(self, Bucket: str, PaginationConfig: Optional[dict] = None):
        self.client.list_calls += 1
        keys = sorted(self.client.buckets[Bucket])
        size = self.client.page_size
        for start in range(0, max(len(keys), 1), size):
            chunk = keys[start : start + size]
            page: dict[str, Any] = {"KeyCount": len(chunk)}
            if chunk:
                page["Contents"] = [{"Key": key} for key in chunk]
            yield page


class FakeS3Client:
    """Minimal in-memory S3 client implementing the calls s3content uses."""

    def __init__(self, page_size: int = 2):
        self.buckets: dict[str, dict[str, dict]] = defaultdict(dict)
        self.page_size = page_size
        self.fail_delete_keys: set[str] = set()
        self.list_calls = 0
        self.delete_requests: list[list[str]] = []

    def get_paginator(self, name: str) -> FakePaginator:
        assert name == "list_objects_v2"
        return FakePaginator(self)

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        self.buckets[bucket][key] = {
            "body": fileobj.read(),
            "content_type": (ExtraArgs or {}).get("ContentType"),
        }

    def delete_objects(self, Bucket: str, Delete: dict) -> dict:
        keys = [obj["Key"] for obj in Delete["Objects"]]
        self.delete_requests.append(keys)
        errors = []
        for key in keys:
            if key in self.fail_delete_keys:
                errors.append(
                    {"Key": key, "Code": "AccessDenied", "Message": "Access Denied"}
                )
                continue
            self.buckets[Bucket].pop(key, None)
        return {"Errors": errors} if errors else {}


@pytest.fixture
def fake_s3():
    """Provide an in-memory S3 client."""
    return FakeS3Client()


@pytest.fixture
def store_client(fake_s3):
    """Provide an S3ContentClient backed by the in-memory client."""
    return S3ContentClient(fake_s3)


@pytest.fixture
def state_manager(tmp_path):
    """Provide a state manager writing below the test's temp directory."""
    return ContentStateManager(tmp_path / "state")


@pytest.fixture
def site(tmp_path) -> Path:
    """Create a small site tree: a.html and img/b.png."""
    root = tmp_path / "site"
    (root / "img").mkdir(parents=True)
    (root / "a.html").write_text("<html></html>")
    (root / "img" / "b.png").write_bytes(b"\x89PNG")
    return root
