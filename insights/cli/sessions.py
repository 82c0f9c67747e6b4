# ==============================================================================
# Sessions Command
# ==============================================================================
"""
Session reconstruction command for the insights CLI.

Rebuilds sessions from an event export and shows bounce, duration and bot
figures alongside the most recent sessions.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from insights.cli.shared import (
    BOX_WIDTH,
    C,
    _box_bottom,
    _box_header,
    _empty_line,
    _kv_line,
    _truncate,
    load_events_or_exit,
    print_json,
)
from insights.core.sessions import build_sessions, session_summary
from insights.infrastructure.bots import PatternBotClassifier
from insights.utils.config import get_settings


def show_sessions(
    events_file: Annotated[Path, typer.Argument(help="Event export (.csv, .json, .ndjson)")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Sessions to list")] = 20,
    hide_bots: Annotated[
        bool, typer.Option("--hide-bots", help="Leave bot sessions out of the listing")
    ] = False,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Reconstruct sessions from an event export.

    Sessions are grouped by session id (falling back to visitor id) and
    listed most recent first. Bots are detected from the browser signature.

    Examples:
        insights sessions events.csv
        insights sessions events.ndjson --limit 50 --hide-bots
        insights sessions events.json --json
    """
    settings = get_settings()
    events = load_events_or_exit(events_file, json_output)

    sessions = build_sessions(
        events,
        classifier=PatternBotClassifier(),
        bounce_seconds=settings.session.bounce_seconds,
    )
    summary = session_summary(sessions)
    listed = [s for s in sessions if not (hide_bots and s.bot_classification.is_bot)][:limit]

    if json_output:
        print_json({"summary": summary, "sessions": [s.model_dump(mode="json") for s in listed]})
        return

    W = BOX_WIDTH
    print()
    print(_box_header("SESSIONS", W))
    print(_empty_line(W))
    print(_kv_line("Sessions", f"{summary['sessions']:,}", W))
    print(_kv_line("Bounces", f"{summary['bounces']:,} ({summary['bounce_rate']:.1f}%)", W))
    print(_kv_line("Avg Duration", f"{summary['avg_duration_sec']}s", W))
    print(_kv_line("Bot Sessions", f"{summary['bots']:,}", W))
    print(_empty_line(W))
    print(_box_bottom(W))

    if not listed:
        print(f"\n  {C.DIM}No sessions to list.{C.RESET}\n")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Started")
    table.add_column("Session")
    table.add_column("Landing")
    table.add_column("Exit")
    table.add_column("Pages", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Device")
    table.add_column("Flags")

    for s in listed:
        flags = []
        if s.is_bounce:
            flags.append("bounce")
        if s.bot_classification.is_bot:
            flags.append(f"bot:{s.bot_classification.bot_name}")
        table.add_row(
            s.started_at.strftime("%Y-%m-%d %H:%M"),
            _truncate(s.session_id, 14),
            _truncate(s.landing_page, 24),
            _truncate(s.exit_page, 24),
            str(s.pages_viewed),
            f"{s.duration_sec}s",
            s.device or "—",
            ", ".join(flags),
        )

    print()
    Console().print(table)
    print()
