"""CLI interface for s3content."""

import logging
from typing import Any, Optional

import click

from . import __version__
from .config import config
from .exceptions import ContentConfigError, ContentError
from .output import OutputFormatter
from .store import make_client
from .sync import (
    ContentReconciler,
    ContentResource,
    ContentStateManager,
    build_content_types,
    load_resources_from_json,
)
from .utils import parse_type_overrides

logger = logging.getLogger(__name__)


def _build_reconciler(
    ctx: Any,
    profile: Optional[str] = None,
    region: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> ContentReconciler:
    """Create a reconciler for one resource.

    A profile or region declared on the resource wins over the global
    options, which win over the config file.
    """
    obj = ctx.obj
    client = make_client(
        profile=profile or obj["profile"] or config.profile,
        region=region or obj["region"] or config.region,
        endpoint_url=obj["endpoint_url"] or config.endpoint_url,
    )
    return ContentReconciler(
        client,
        output=obj["out"],
        state_manager=ContentStateManager(obj["state_dir"]),
        max_workers=max_workers or config.max_workers,
    )


def _collect_resources(
    path: Optional[str],
    bucket: Optional[str],
    types: tuple[str, ...],
    resource_file: Optional[str],
) -> list[ContentResource]:
    """Build resources from a JSON file or from PATH/BUCKET arguments."""
    if resource_file:
        if path or bucket:
            raise ContentConfigError("Use either PATH BUCKET or --file, not both")
        return load_resources_from_json(resource_file)
    if not path or not bucket:
        raise ContentConfigError("PATH and BUCKET are required without --file")
    try:
        overrides = parse_type_overrides(types)
    except ValueError as e:
        raise ContentConfigError(str(e)) from e
    return [ContentResource(path=path, bucket=bucket, types=overrides)]


@click.group()
@click.option(
    "--profile", "-p", help="AWS credential profile, unless the resource declares one"
)
@click.option(
    "--region", "-r", help="AWS region of the bucket, unless the resource declares one"
)
@click.option("--endpoint-url", help="Endpoint of an S3-compatible service")
@click.option(
    "--state-dir",
    type=click.Path(file_okay=False),
    help="Directory holding recorded state (default: ~/.config/s3content/state)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: Any,
    profile: Optional[str],
    region: Optional[str],
    endpoint_url: Optional[str],
    state_dir: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """s3content - Mirror a local directory tree into an S3 bucket."""
    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["region"] = region
    ctx.obj["endpoint_url"] = endpoint_url
    ctx.obj["state_dir"] = state_dir or config.state_dir
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("s3content").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--profile", "-p", help="Default AWS credential profile")
@click.option("--region", "-r", help="Default AWS region")
@click.option("--endpoint-url", help="Default S3-compatible endpoint")
@click.option("--workers", "-j", type=int, help="Default number of parallel uploads")
@click.pass_context
def init(
    ctx: Any,
    profile: Optional[str],
    region: Optional[str],
    endpoint_url: Optional[str],
    workers: Optional[int],
) -> None:
    """Store default settings in ~/.config/s3content/config."""
    out: OutputFormatter = ctx.obj["out"]

    values: dict[str, str] = {}
    if profile:
        values["S3CONTENT_PROFILE"] = profile
    if region:
        values["S3CONTENT_REGION"] = region
    if endpoint_url:
        values["S3CONTENT_ENDPOINT_URL"] = endpoint_url
    if workers:
        values["S3CONTENT_MAX_WORKERS"] = str(workers)

    if not values:
        out.error("Nothing to save. Pass at least one option.")
        ctx.exit(1)

    try:
        config_file = config.save(values)
    except OSError as e:
        out.error(f"Failed to write configuration: {e}")
        ctx.exit(1)

    out.success(f"Configuration saved to {config_file}")


@main.command()
@click.argument("path", required=False)
@click.argument("bucket", required=False)
@click.option(
    "--type",
    "-t",
    "types",
    multiple=True,
    help="Content type override EXT=TYPE (e.g. .md=text/markdown), repeatable",
)
@click.option(
    "--file",
    "-f",
    "resource_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file declaring one or more resources",
)
@click.option("--workers", "-j", type=int, help="Number of parallel uploads")
@click.option("--dry-run", is_flag=True, help="Show what would be done")
@click.pass_context
def apply(
    ctx: Any,
    path: Optional[str],
    bucket: Optional[str],
    types: tuple[str, ...],
    resource_file: Optional[str],
    workers: Optional[int],
    dry_run: bool,
) -> None:
    """Upload PATH to BUCKET, or apply only the changes since the last run.

    The first apply uploads every file below PATH. Later runs delete the
    objects of files that disappeared and upload new files; unchanged
    files are left alone.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        resources = _collect_resources(path, bucket, types, resource_file)
    except ContentConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    results = []
    for resource in resources:
        try:
            reconciler = _build_reconciler(
                ctx, resource.profile, resource.region, workers
            )
            result = reconciler.apply(resource, dry_run=dry_run)
        except ContentError as e:
            out.error(str(e))
            ctx.exit(1)

        results.append(result.to_dict())
        if result.action == "plan":
            continue
        if result.action == "noop":
            out.success(f"{resource}: already in sync")
        else:
            out.success(
                f"{resource}: {result.action} complete "
                f"({result.uploads} uploaded, {result.deletes} deleted)"
            )

    if out.json_output:
        out.output_json(results if len(results) != 1 else results[0])


@main.command()
@click.argument("path")
@click.argument("bucket")
@click.option("--type", "-t", "types", multiple=True, help="Content type EXT=TYPE")
@click.pass_context
def plan(ctx: Any, path: str, bucket: str, types: tuple[str, ...]) -> None:
    """Show which objects apply would upload or delete."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        resource = _collect_resources(path, bucket, types, None)[0]
        state_manager = ContentStateManager(ctx.obj["state_dir"])
        state = state_manager.load_state(resource.instance_id)
        # Planning never touches the store, so no client is needed
        reconciler = ContentReconciler(
            client=None,  # type: ignore[arg-type]
            output=out,
            state_manager=state_manager,
        )
        diff = reconciler.plan(resource, state)
    except ContentError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(diff.to_dict())
        return

    out.info(f"Plan for {resource}:")
    if diff.is_empty:
        out.info("No changes needed - bucket is in sync!")
        return
    for key in sorted(set(diff.removed.values())):
        out.print(f"  - {key}")
    for key in sorted(diff.added.values()):
        out.print(f"  + {key}")
    out.info(
        f"{len(diff.added)} to upload, {len(set(diff.removed.values()))} to delete, "
        f"{len(diff.unchanged)} unchanged"
    )


@main.command()
@click.argument("path")
@click.pass_context
def read(ctx: Any, path: str) -> None:
    """List the objects in the bucket recorded for PATH.

    Objects that are recorded but missing from the bucket, and objects in
    the bucket that were not uploaded from PATH, are reported as drift.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        state_manager = ContentStateManager(ctx.obj["state_dir"])
        state = state_manager.load_state(path)
        if state is None:
            out.error(f"No recorded state for {path}. Run 'apply' first.")
            ctx.exit(1)
        reconciler = _build_reconciler(ctx, state.profile, state.region)
        remote = reconciler.read(state)
    except ContentError as e:
        out.error(str(e))
        ctx.exit(1)

    remote_keys = set(remote.values())
    recorded_keys = set(state.files.values())
    missing = sorted(recorded_keys - remote_keys)
    extra = sorted(remote_keys - recorded_keys)

    if out.json_output:
        out.output_json(
            {
                "id": state.id,
                "bucket": state.bucket,
                "objects": remote,
                "missing": missing,
                "untracked": extra,
            }
        )
        return

    rows = [
        {"key": key, "status": "tracked" if key in recorded_keys else "untracked"}
        for key in sorted(remote_keys)
    ]
    rows.extend({"key": key, "status": "missing"} for key in missing)
    out.output_table(rows, ["key", "status"], {"key": "Key", "status": "Status"})
    out.info(f"\n{len(remote_keys)} object(s) in s3://{state.bucket}")
    if missing:
        out.warning(f"{len(missing)} recorded object(s) missing from the bucket")


@main.command()
@click.argument("path")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def destroy(ctx: Any, path: str, yes: bool) -> None:
    """Delete every object uploaded from PATH and forget its state."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        state_manager = ContentStateManager(ctx.obj["state_dir"])
        state = state_manager.load_state(path)
        if state is None:
            out.info(f"Nothing recorded for {path}")
            return
        if not yes and not click.confirm(
            f"Delete {len(state.files)} object(s) from s3://{state.bucket}?"
        ):
            out.info("Aborted")
            return
        reconciler = _build_reconciler(ctx, state.profile, state.region)
        reconciler.destroy(path)
    except ContentError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json({"id": state.id, "bucket": state.bucket, "deleted": True})
    else:
        out.success(f"Deleted {len(state.files)} object(s) from s3://{state.bucket}")


@main.command()
@click.option("--type", "-t", "types", multiple=True, help="Content type EXT=TYPE")
@click.pass_context
def types(ctx: Any, types: tuple[str, ...]) -> None:
    """Show the content-type table, including overrides."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        table = build_content_types(parse_type_overrides(types))
    except ValueError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(dict(table))
        return

    rows = [{"ext": ext, "type": mime} for ext, mime in sorted(table.items())]
    out.output_table(rows, ["ext", "type"], {"ext": "Extension", "type": "Type"})


if __name__ == "__main__":
    main()
