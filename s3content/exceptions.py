"""Exceptions raised by s3content."""

from typing import Optional


class ContentError(Exception):
    """Base exception for all content reconciliation errors.

    Attributes:
        operation: Reconciler transition that failed
            ("create", "read", "update" or "delete"), if known
        resource: Bucket name or local path the error concerns
    """

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation} failed: {self.message}"
        return self.message


class ContentIOError(ContentError):
    """Local filesystem error (missing root, permission denied, broken path)."""


class ContentStoreError(ContentError):
    """Remote object store operation failed."""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        operation: Optional[str] = None,
        failed_keys: Optional[list[str]] = None,
    ):
        super().__init__(message, resource=resource, operation=operation)
        self.failed_keys = failed_keys or []


class ContentConfigError(ContentError, ValueError):
    """Malformed or missing declared fields, or unreadable recorded state."""
