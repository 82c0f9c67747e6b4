# ==============================================================================
# Heatmap Commands
# ==============================================================================
"""
Heatmap commands for the insights CLI.

- grid:    7×24 day-of-week × hour-of-day activity grid
- summary: click, visitor, scroll and hot-zone figures for one page
- render:  export a click or scroll heatmap for one page as PNG
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

import numpy as np
import typer
from PIL import Image
from rich.console import Console
from rich.table import Table

from insights.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _kv_line,
    _section_header,
    _truncate,
    fail,
    load_events_or_exit,
    print_json,
)
from insights.core.export import ExportMetadata, compose_export, render_thumbnail, to_png_bytes
from insights.core.heatmap import (
    build_event_heatmap,
    build_session_heatmap,
    click_points,
    compute_reference_viewport,
    estimate_doc_height,
    filter_page_events,
    heatmap_summary,
    movement_trails,
    page_options,
    scroll_depth_distribution,
)
from insights.core.models import HeatmapSnapshot
from insights.core.rendering import render_density, render_trails
from insights.infrastructure.snapshots import get_snapshot_store
from insights.utils.config import get_settings

# Shade ramp for grid cells, lightest to darkest
_SHADES = ("grey23", "dark_orange3", "orange1", "red1", "bold red1")


def _shade(value: int, max_value: int) -> str:
    if value == 0 or max_value == 0:
        return "dim"
    idx = min(int(value / max_value * (len(_SHADES) - 1) + 0.5), len(_SHADES) - 1)
    return _SHADES[idx]


# ==============================================================================
# Commands
# ==============================================================================


def heatmap_grid(
    events_file: Annotated[Path, typer.Argument(help="Event export (.csv, .json, .ndjson)")],
    sessions: Annotated[
        bool, typer.Option("--sessions", help="Count distinct sessions instead of events")
    ] = False,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Show activity by day of week and hour of day.

    Examples:
        insights heatmap grid events.csv
        insights heatmap grid events.csv --sessions --json
    """
    events = load_events_or_exit(events_file, json_output)
    grid = build_session_heatmap(events) if sessions else build_event_heatmap(events)

    if json_output:
        print_json({"days": list(grid.day_labels), "cells": grid.cells, "total": grid.total})
        return

    title = "Sessions by Hour" if sessions else "Events by Hour"
    table = Table(title=title, show_header=True, header_style="bold", padding=(0, 0))
    table.add_column("", justify="right")
    for hour in range(24):
        table.add_column(f"{hour:02d}", justify="right", min_width=3)

    max_value = grid.max_value
    for day, label in enumerate(grid.day_labels):
        row = [label]
        for hour in range(24):
            value = grid.cell(day, hour)
            row.append(f"[{_shade(value, max_value)}]{value}[/]")
        table.add_row(*row)

    print()
    Console().print(table)
    print(f"  {C.BOLD}Total:{C.RESET}  {grid.total:,}")
    print()


def heatmap_summary_cmd(
    events_file: Annotated[Path, typer.Argument(help="Event export (.csv, .json, .ndjson)")],
    page: Annotated[
        Optional[str], typer.Option("--page", "-p", help="Page URL (omit to list pages)")
    ] = None,
    device: Annotated[
        Optional[str], typer.Option("--device", "-d", help="Device class, or 'all'")
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Show spatial heatmap figures for a page.

    Without --page, lists the pages with recorded activity instead.

    Examples:
        insights heatmap summary events.csv
        insights heatmap summary events.csv --page https://example.com/pricing
    """
    settings = get_settings()
    events = load_events_or_exit(events_file, json_output)

    if page is None:
        pages = page_options(events)
        if json_output:
            print_json({"pages": pages})
            return
        W = BOX_WIDTH
        print()
        print(_box_header("PAGES", W))
        print(_box_line(f"  {'URL':<40}{'Clicks':>8}{'Views':>8}{'Exits':>8}", W))
        for row in pages:
            url = _truncate(row["url"], 38)
            print(_box_line(f"  {url:<40}{row['clicks']:>8,}{row['views']:>8,}{row['exits']:>8,}", W))
        print(_box_bottom(W))
        print()
        return

    summary = heatmap_summary(
        events,
        page,
        device,
        default_viewport_width=settings.heatmap.default_viewport_width,
        default_doc_height=settings.heatmap.default_doc_height,
    )
    scroll = scroll_depth_distribution(filter_page_events(events, page, device))

    if json_output:
        print_json({"page": page, **summary, "scroll_depth": scroll})
        return

    W = BOX_WIDTH
    print()
    print(_box_header("HEATMAP", W))
    print(_box_line(f"  {_truncate(page, W - 6)}", W))
    print(_empty_line(W))
    print(_kv_line("Clicks", f"{summary['total_clicks']:,}", W))
    print(_kv_line("Unique Visitors", f"{summary['unique_visitors']:,}", W))
    print(_kv_line("Avg Scroll", f"{summary['avg_scroll']}%", W))
    print(_kv_line("Hot Zone", summary["hot_zone"], W))
    print(_kv_line("Reference Width", f"{summary['reference_viewport_width']}px", W))
    print(_kv_line("Document Height", f"{summary['doc_height']}px", W))
    print(_section_header("Scroll Reach", W))
    for row in scroll:
        bar = "█" * round(row["ratio"] * 30)
        print(_box_line(f"  {row['pct']:>3}%  {bar:<30} {row['ratio'] * 100:>5.1f}%", W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()


def heatmap_render(
    events_file: Annotated[Path, typer.Argument(help="Event export (.csv, .json, .ndjson)")],
    page: Annotated[str, typer.Option("--page", "-p", help="Page URL to render")],
    out: Annotated[Path, typer.Option("--out", "-o", help="Output PNG path")],
    mode: Annotated[str, typer.Option("--mode", "-m", help="click or scroll")] = "click",
    device: Annotated[
        Optional[str], typer.Option("--device", "-d", help="Device class, or 'all'")
    ] = None,
    trails: Annotated[
        bool, typer.Option("--trails", help="Overlay mouse-movement trails (click mode)")
    ] = False,
    scroll_offset: Annotated[
        float, typer.Option("--scroll-offset", help="Page y coordinate at the top of the canvas")
    ] = 0,
    save: Annotated[bool, typer.Option("--save", help="Also save a snapshot to history")] = False,
) -> None:
    """Render a page heatmap to a PNG file.

    The canvas size, gradient radius and intensity come from HEATMAP_*
    settings. Exports are upscaled by HEATMAP_EXPORT_SCALE and framed with
    a title banner and a statistics footer.

    Examples:
        insights heatmap render events.csv -p https://example.com/ -o home.png
        insights heatmap render events.csv -p https://example.com/ -o scroll.png --mode scroll --save
    """
    if mode not in ("click", "scroll"):
        raise typer.BadParameter(f"Invalid mode: '{mode}'. Use click or scroll")

    settings = get_settings()
    hs = settings.heatmap
    events = load_events_or_exit(events_file)

    filtered = filter_page_events(events, page, device)
    points = click_points(filtered)
    reference_width = compute_reference_viewport(points, hs.default_viewport_width)

    buffer = render_density(
        points,
        hs.canvas_width,
        hs.canvas_height,
        reference_width,
        scroll_offset=scroll_offset,
        radius=hs.radius,
        intensity=hs.intensity,
    )
    if trails and mode == "click":
        layer = render_trails(
            movement_trails(filtered), hs.canvas_width, hs.canvas_height, reference_width, scroll_offset
        )
        buffer = np.asarray(
            Image.alpha_composite(Image.fromarray(buffer), Image.fromarray(layer))
        ).copy()

    summary = heatmap_summary(
        events, page, device, hs.default_viewport_width, hs.default_doc_height
    )
    rows = scroll_depth_distribution(filtered)
    captured_at = datetime.now(timezone.utc)
    metadata = ExportMetadata(
        mode=mode,
        captured_at=captured_at,
        url=page,
        total_clicks=summary["total_clicks"],
        visitor_count=summary["unique_visitors"],
        avg_scroll=summary["avg_scroll"],
        hot_zone=summary["hot_zone"],
    )

    try:
        out.write_bytes(to_png_bytes(compose_export(buffer, metadata, hs.export_scale, rows)))
    except OSError as e:
        fail(f"Could not write {out}: {e}")

    print(f"\n  {C.BRIGHT_GREEN}{I.CHECK} Wrote {out}{C.RESET}")
    print(
        f"  {C.DIM}{len(points):,} clicks, reference width {reference_width}px, "
        f"document height {estimate_doc_height(points, hs.default_doc_height)}px{C.RESET}"
    )

    if save:
        snapshot = HeatmapSnapshot(
            url=page,
            mode=mode,
            device=device or "all",
            total_clicks=summary["total_clicks"],
            avg_scroll=summary["avg_scroll"],
            visitors=summary["unique_visitors"],
            captured_at=captured_at,
            thumbnail=to_png_bytes(render_thumbnail(buffer, mode, rows)),
        )
        get_snapshot_store(settings).save(snapshot)
        print(f"  {C.BRIGHT_GREEN}{I.CHECK} Saved snapshot {snapshot.id}{C.RESET}")
    print()
