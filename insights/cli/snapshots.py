# ==============================================================================
# Snapshot Commands
# ==============================================================================
"""
Heatmap snapshot history commands for the insights CLI.

Snapshots are written by ``insights heatmap render --save`` and kept newest
first, up to SNAPSHOT_RETENTION entries.
"""

from pathlib import Path
from typing import Annotated

import typer
from redis.exceptions import RedisError
from rich.console import Console
from rich.table import Table

from insights.cli.shared import C, I, fail, print_json
from insights.infrastructure.snapshots import get_snapshot_store
from insights.utils.config import get_settings


def _warn_if_ephemeral() -> None:
    if get_settings().snapshot.backend == "memory":
        print(
            f"  {C.DIM}Snapshot backend is 'memory'; history is not kept between runs. "
            f"Set SNAPSHOT_BACKEND=valkey to persist it.{C.RESET}"
        )


# ==============================================================================
# Commands
# ==============================================================================


def snapshots_list(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """List saved heatmap snapshots, newest first.

    Examples:
        insights snapshots list
        insights snapshots list --json
    """
    try:
        snapshots = get_snapshot_store().list()
    except RedisError as e:
        fail(f"Could not read snapshots: {e}", json_output)

    if json_output:
        print_json([s.model_dump(mode="json", exclude={"thumbnail"}) for s in snapshots])
        return

    if not snapshots:
        print(f"\n  {C.BRIGHT_YELLOW}{I.WARN} No snapshots saved yet{C.RESET}")
        _warn_if_ephemeral()
        print()
        return

    table = Table(title=f"Heatmap Snapshots ({len(snapshots)})", show_header=True, header_style="bold")
    table.add_column("ID")
    table.add_column("Captured")
    table.add_column("Mode")
    table.add_column("Device")
    table.add_column("URL")
    table.add_column("Clicks", justify="right")
    table.add_column("Scroll", justify="right")
    table.add_column("Visitors", justify="right")

    for s in snapshots:
        table.add_row(
            s.id[:8],
            s.captured_at.strftime("%Y-%m-%d %H:%M"),
            s.mode,
            s.device,
            s.url,
            f"{s.total_clicks:,}",
            f"{s.avg_scroll}%",
            f"{s.visitors:,}",
        )

    print()
    Console().print(table)
    print()


def snapshots_export(
    snapshot_id: Annotated[str, typer.Argument(help="Snapshot id (or unique prefix)")],
    out: Annotated[Path, typer.Option("--out", "-o", help="Output PNG path")],
) -> None:
    """Write a snapshot's thumbnail to a PNG file.

    Examples:
        insights snapshots export 3f2a9c1e -o snapshot.png
    """
    try:
        snapshots = get_snapshot_store().list()
    except RedisError as e:
        fail(f"Could not read snapshots: {e}")

    matches = [s for s in snapshots if s.id.startswith(snapshot_id)]
    if len(matches) != 1:
        fail(f"No unique snapshot matches '{snapshot_id}'")

    out.write_bytes(matches[0].thumbnail)
    print(f"\n  {C.BRIGHT_GREEN}{I.CHECK} Wrote {out}{C.RESET}\n")


def snapshots_delete(
    snapshot_id: Annotated[str, typer.Argument(help="Snapshot id")],
) -> None:
    """Delete one snapshot.

    Examples:
        insights snapshots delete 3f2a9c1e-8d4b-4e0f-9a55-0c7a1b2d3e4f
    """
    try:
        deleted = get_snapshot_store().delete(snapshot_id)
    except RedisError as e:
        fail(f"Could not delete snapshot: {e}")

    if not deleted:
        fail(f"Snapshot '{snapshot_id}' not found")
    print(f"\n  {C.BRIGHT_GREEN}{I.CHECK} Deleted snapshot {snapshot_id}{C.RESET}\n")


def snapshots_clear(
    confirm: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Delete every saved snapshot.

    Examples:
        insights snapshots clear       # With confirmation prompt
        insights snapshots clear -y    # Skip confirmation
    """
    if not confirm:
        typer.confirm("This will DELETE all heatmap snapshots. Are you sure?", abort=True)

    try:
        count = get_snapshot_store().delete_all()
    except RedisError as e:
        fail(f"Could not clear snapshots: {e}")

    print(f"\n  {C.BRIGHT_GREEN}{I.CHECK} Deleted {count} snapshot(s){C.RESET}\n")
