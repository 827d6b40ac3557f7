"""Output formatting for the command line interface."""

import json
import sys
from typing import Any, Optional

import click

from .utils import format_size


class OutputFormatter:
    """Formats CLI output as styled text or JSON."""

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine readable JSON instead of text
            quiet: Suppress informational messages
        """
        self.json_output = json_output
        self.quiet = quiet

    def print(self, message: str) -> None:
        if not self.json_output:
            click.echo(message)

    def info(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            click.echo(message)

    def success(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            click.secho(f"✓ {message}", fg="green")

    def warning(self, message: str) -> None:
        if not self.json_output:
            click.secho(f"⚠ {message}", fg="yellow", err=True)

    def error(self, message: str) -> None:
        click.secho(f"✗ Error: {message}", fg="red", err=True)

    def output_json(self, data: Any) -> None:
        click.echo(json.dumps(data, indent=2, sort_keys=True))

    def output_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str],
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Print rows as a left-aligned text table.

        Args:
            rows: Row dictionaries
            columns: Keys to print, in order
            headers: Optional display names for the columns
        """
        if not rows:
            return
        headers = headers or {}
        titles = [headers.get(col, col.upper()) for col in columns]
        widths = [
            max(len(title), *(len(str(row.get(col, ""))) for row in rows))
            for col, title in zip(columns, titles)
        ]
        click.echo("  ".join(t.ljust(w) for t, w in zip(titles, widths)))
        click.echo("  ".join("-" * w for w in widths))
        for row in rows:
            click.echo(
                "  ".join(
                    str(row.get(col, "")).ljust(w) for col, w in zip(columns, widths)
                )
            )

    def format_size(self, size_bytes: int) -> str:
        return format_size(size_bytes)

    @property
    def is_interactive(self) -> bool:
        """Whether progress bars should be drawn."""
        return not self.quiet and not self.json_output and sys.stderr.isatty()
