"""Reconciliation engine for content resources."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from ..exceptions import ContentError
from ..output import OutputFormatter
from .comparator import DiffResult, diff_mappings
from .content_types import build_content_types
from .operations import SyncOperations
from .pair import ContentResource
from .scanner import DirectoryScanner, enumerate_files
from .state import ContentState, ContentStateManager

if TYPE_CHECKING:
    from ..store import S3ContentClient

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Outcome of an apply call."""

    action: str
    """One of create, update, replace, noop or plan"""

    state: ContentState
    """State recorded after the apply"""

    uploads: int = 0
    deletes: int = 0
    unchanged: int = 0

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "id": self.state.id,
            "bucket": self.state.bucket,
            "files": len(self.state.files),
            "uploads": self.uploads,
            "deletes": self.deletes,
            "unchanged": self.unchanged,
        }


class ContentReconciler:
    """Converges a bucket to mirror a local directory tree.

    The reconciler implements four transitions for a content resource:

    - create: upload every local file and return the new state
    - read: list the objects currently in the bucket
    - update: delete removed keys, then upload added files
    - delete: remove every recorded key from the bucket

    ``apply`` and ``destroy`` combine these with a state manager, loading
    the previous state and recording the new one.
    """

    def __init__(
        self,
        client: S3ContentClient,
        output: Optional[OutputFormatter] = None,
        state_manager: Optional[ContentStateManager] = None,
        max_workers: int = 1,
        scanner: Optional[DirectoryScanner] = None,
    ):
        """Initialize the reconciler.

        Args:
            client: Store client
            output: Output formatter for displaying progress/status
            state_manager: Recorded state store used by apply and destroy
            max_workers: Number of parallel uploads
            scanner: Directory scanner used to enumerate local trees
        """
        self.client = client
        self.output = output or OutputFormatter(quiet=True)
        self.state_manager = state_manager or ContentStateManager()
        self.max_workers = max(1, max_workers)
        self.scanner = scanner or DirectoryScanner()
        self.operations = SyncOperations(client)

    @contextmanager
    def _transition(self, operation: str, resource: str) -> Iterator[None]:
        """Tag errors escaping a transition with its operation and resource."""
        start = time.time()
        try:
            yield
        except ContentError as e:
            if e.operation is None:
                e.operation = operation
            if e.resource is None:
                e.resource = resource
            logger.debug(f"{operation} of {resource} failed: {e.message}")
            raise
        logger.debug(f"{operation} of {resource} took {time.time() - start:.2f}s")

    # -- Transitions -------------------------------------------------------------

    def create(self, resource: ContentResource) -> ContentState:
        """Upload every file below the resource path.

        A failed upload aborts the create; files uploaded before the failure
        remain in the bucket and no state is returned.

        Args:
            resource: Declared resource

        Returns:
            State holding the Local Key Mapping that was uploaded
        """
        return self._create(resource)[0]

    def read(self, state: ContentState) -> dict[str, str]:
        """List the objects currently in the recorded bucket.

        Args:
            state: Recorded state of the resource

        Returns:
            Remote Key Mapping (composite identifier -> store key)
        """
        with self._transition("read", state.bucket):
            return self.client.list_objects(state.bucket, state.id)

    def update(self, resource: ContentResource, state: ContentState) -> ContentState:
        """Apply the difference between the recorded and current trees.

        Removed keys are deleted before added files are uploaded. If the
        delete fails nothing is uploaded; if an upload fails the deleted
        keys are not restored. Unchanged files are not touched.

        Args:
            resource: Declared resource
            state: Recorded state from the previous create or update

        Returns:
            State holding the new Local Key Mapping
        """
        return self._update(resource, state)[0]

    def delete(self, state: ContentState) -> None:
        """Delete every recorded key from the bucket.

        Args:
            state: Recorded state of the resource
        """
        with self._transition("delete", state.bucket):
            deleted = self.operations.delete_all(state.bucket, state.files)
        logger.info(f"Deleted {deleted} object(s) from {state.bucket}")

    def plan(
        self, resource: ContentResource, state: Optional[ContentState] = None
    ) -> DiffResult:
        """Compute what apply would do without calling the store.

        Args:
            resource: Declared resource
            state: Recorded state, or None when nothing was created yet

        Returns:
            DiffResult of the recorded mapping against the current tree
        """
        with self._transition("plan", resource.path):
            current = enumerate_files(resource.root, self.scanner)
        if state is None:
            return diff_mappings({}, current)
        if self.needs_replacement(resource, state):
            return DiffResult(added=dict(current), removed=dict(state.files))
        return diff_mappings(state.files, current)

    @staticmethod
    def needs_replacement(resource: ContentResource, state: ContentState) -> bool:
        """True when the declared bucket or root differs from the recorded one."""
        return state.bucket != resource.bucket or state.path != str(resource.root)

    # -- State-managed entry points ----------------------------------------------

    def apply(self, resource: ContentResource, dry_run: bool = False) -> ApplyResult:
        """Converge the bucket to the declared resource and record the state.

        Creates when no state is recorded, updates otherwise. A changed
        bucket replaces the resource: the old objects are deleted and the
        tree is created in the new bucket.

        Args:
            resource: Declared resource
            dry_run: Only report the plan; nothing is uploaded, deleted or
                recorded

        Returns:
            ApplyResult with the recorded state and counts
        """
        state = self.state_manager.load_state(resource.instance_id)

        if dry_run:
            diff = self.plan(resource, state)
            self._display_plan(resource, diff, dry_run=True)
            preview = ContentState(
                id=resource.instance_id,
                path=str(resource.root),
                bucket=resource.bucket,
                files={**diff.unchanged, **diff.added},
                profile=resource.profile,
                region=resource.region,
            )
            return ApplyResult(
                action="plan",
                state=preview,
                uploads=len(diff.added),
                deletes=len(set(diff.removed.values())),
                unchanged=len(diff.unchanged),
            )

        if state is None:
            new_state, uploads = self._create(resource)
            result = ApplyResult("create", new_state, uploads=uploads)
        elif self.needs_replacement(resource, state):
            self.output.info(
                f"Replacing s3://{state.bucket} ({state.path}) with {resource}"
            )
            self.delete(state)
            self.state_manager.clear_state(state.id)
            new_state, uploads = self._create(resource)
            result = ApplyResult(
                "replace",
                new_state,
                uploads=uploads,
                deletes=len(set(state.files.values())),
            )
        else:
            new_state, stats = self._update(resource, state)
            action = "update" if stats["uploads"] or stats["deletes"] else "noop"
            result = ApplyResult(action, new_state, **stats)

        self.state_manager.save_state(result.state)
        return result

    def destroy(self, instance_id: str) -> Optional[ContentState]:
        """Delete the recorded objects of a resource and forget its state.

        Args:
            instance_id: Resource identifier (its declared path)

        Returns:
            The state that was destroyed, or None if nothing was recorded
        """
        state = self.state_manager.load_state(instance_id)
        if state is None:
            logger.debug(f"Nothing recorded for {instance_id}")
            return None
        self.delete(state)
        self.state_manager.clear_state(instance_id)
        return state

    # -- Internals ---------------------------------------------------------------

    def _create(self, resource: ContentResource) -> tuple[ContentState, int]:
        with self._transition("create", resource.bucket):
            local_files = self.scanner.scan_local(resource.root)
            files = {str(f.path): f.relative_path for f in local_files}
            total_size = sum(f.size for f in local_files)
            table = build_content_types(resource.types)
            self.output.info(
                f"Uploading {len(files)} file(s) "
                f"({self.output.format_size(total_size)}) to s3://{resource.bucket}"
            )
            uploads = self._upload(resource.bucket, files, table)

        state = ContentState(
            id=resource.instance_id,
            path=str(resource.root),
            bucket=resource.bucket,
            files=files,
            profile=resource.profile,
            region=resource.region,
        )
        logger.info(f"Created {resource} with {uploads} object(s)")
        return state, uploads

    def _update(
        self, resource: ContentResource, state: ContentState
    ) -> tuple[ContentState, dict[str, int]]:
        with self._transition("update", resource.bucket):
            current = enumerate_files(resource.root, self.scanner)
            diff = diff_mappings(state.files, current)
            self._display_plan(resource, diff, dry_run=False)

            deletes = 0
            uploads = 0
            if not diff.is_empty:
                live_keys = set(diff.unchanged.values())
                stale = {
                    identifier: key
                    for identifier, key in diff.removed.items()
                    if key not in live_keys
                }
                deletes = self.operations.delete_all(resource.bucket, stale)
                table = build_content_types(resource.types)
                uploads = self._upload(resource.bucket, diff.added, table)

        new_state = ContentState(
            id=resource.instance_id,
            path=str(resource.root),
            bucket=resource.bucket,
            files=current,
            profile=resource.profile,
            region=resource.region,
        )
        stats = {
            "uploads": uploads,
            "deletes": deletes,
            "unchanged": len(diff.unchanged),
        }
        logger.info(
            f"Updated {resource}: {uploads} uploaded, {deletes} deleted, "
            f"{len(diff.unchanged)} unchanged"
        )
        return new_state, stats

    def _upload(
        self, bucket: str, files: Mapping[str, str], table: Mapping[str, str]
    ) -> int:
        if not files:
            return 0

        if not self.output.is_interactive:
            return self.operations.upload_all(
                bucket, files, table, max_workers=self.max_workers
            )

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            transient=True,
        ) as progress:
            task = progress.add_task("Uploading...", total=len(files))
            return self.operations.upload_all(
                bucket,
                files,
                table,
                max_workers=self.max_workers,
                progress_callback=lambda key: progress.update(task, advance=1),
            )

    def _display_plan(
        self, resource: ContentResource, diff: DiffResult, dry_run: bool
    ) -> None:
        if self.output.quiet or self.output.json_output:
            return

        if dry_run:
            self.output.info(f"Plan for {resource}:")
        if diff.is_empty:
            self.output.info("No changes needed - bucket is in sync!")
            return
        for key in sorted(set(diff.removed.values())):
            self.output.info(f"  - {key}")
        for key in sorted(diff.added.values()):
            self.output.info(f"  + {key}")
        self.output.info(
            f"  {len(diff.added)} to upload, {len(set(diff.removed.values()))} "
            f"to delete, {len(diff.unchanged)} unchanged"
        )
