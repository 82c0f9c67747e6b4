# ==============================================================================
# Journeys Command
# ==============================================================================
"""
User journey command for the insights CLI.

Builds page-step journeys per session and prints the journey dashboard:
headline stats, entry and exit pages, the depth funnel, per-page dwell time
and the CTA ranking.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from insights.cli.shared import (
    BOX_WIDTH,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _kv_line,
    _section_header,
    _truncate,
    load_events_or_exit,
    print_json,
)
from insights.core.journeys import (
    build_journeys,
    cta_ranking,
    depth_funnel,
    entry_pages,
    exit_pages,
    filter_journeys,
    journey_stats,
    page_time,
    source_breakdown,
)


def show_journeys(
    events_file: Annotated[Path, typer.Argument(help="Event export (.csv, .json, .ndjson)")],
    device: Annotated[
        Optional[str], typer.Option("--device", "-d", help="Device class (desktop, mobile, tablet)")
    ] = None,
    converted: Annotated[
        Optional[bool],
        typer.Option("--converted/--not-converted", help="Only converted or unconverted journeys"),
    ] = None,
    search: Annotated[
        Optional[str], typer.Option("--search", "-s", help="Visitor, city, page or CTA text")
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Show user journey statistics.

    Examples:
        insights journeys events.csv
        insights journeys events.csv --device mobile --converted
        insights journeys events.csv --search checkout --json
    """
    events = load_events_or_exit(events_file, json_output)
    journeys = filter_journeys(build_journeys(events), device, converted, search)

    stats = journey_stats(journeys)
    report = {
        "stats": stats,
        "entry_pages": entry_pages(journeys),
        "exit_pages": exit_pages(journeys),
        "depth_funnel": depth_funnel(journeys),
        "page_time": page_time(journeys),
        "cta_ranking": cta_ranking(events),
        "sources": source_breakdown(journeys),
    }

    if json_output:
        print_json(report)
        return

    W = BOX_WIDTH
    print()
    print(_box_header("USER JOURNEYS", W))
    print(_empty_line(W))
    print(_kv_line("Journeys", f"{stats['journeys']:,}", W))
    print(_kv_line("Avg Steps", f"{stats['avg_steps']:.1f}", W))
    print(_kv_line("Avg Duration", f"{stats['avg_duration_sec']}s", W))
    print(_kv_line("Converted", f"{stats['converted']:,} ({stats['conversion_rate']:.1f}%)", W))
    print(_kv_line("Revenue", f"{stats['total_revenue']:,.2f}", W))
    print(_kv_line("CTA Clicks", f"{stats['cta_clicks']:,}", W))
    print(_empty_line(W))

    print(_section_header("Entry Pages", W))
    for row in report["entry_pages"]:
        print(_box_line(f"  {_truncate(row['page'], 52):<54}{row['count']:>10,}", W))
    print(_section_header("Exit Pages", W))
    for row in report["exit_pages"]:
        print(_box_line(f"  {_truncate(row['page'], 52):<54}{row['count']:>10,}", W))

    print(_section_header("Depth Funnel", W))
    for row in report["depth_funnel"]:
        print(_box_line(f"  {row['min_steps']}+ steps{'':<45}{row['journeys']:>10,}", W))

    print(_section_header("Time on Page", W))
    for row in report["page_time"]:
        page = _truncate(row["page"], 40)
        print(_box_line(f"  {page:<42}{row['avg_time_sec']:>8}s{row['visits']:>11,}x", W))

    if report["cta_ranking"]:
        print(_section_header("Top CTAs", W))
        for idx, row in enumerate(report["cta_ranking"], start=1):
            print(_box_line(f"  #{idx:<3}{_truncate(row['cta'], 48):<50}{row['count']:>10,}", W))

    print(_section_header("Sources", W))
    for row in report["sources"]:
        print(_box_line(f"  {I.BULLET} {_truncate(row['source'], 50):<52}{row['journeys']:>10,}", W))

    print(_empty_line(W))
    print(_box_bottom(W))
    print()
