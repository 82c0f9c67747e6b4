# ==============================================================================
# Goals Command
# ==============================================================================
"""
Goal progress command for the insights CLI.

Evaluates goal definitions from a JSON file against an event export.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from insights.cli.shared import C, I, load_events_or_exit, load_goals_or_exit, print_json
from insights.core.goals import GOAL_TYPES, evaluate_all, total_goal_value


def show_goals(
    events_file: Annotated[Path, typer.Argument(help="Event export (.csv, .json, .ndjson)")],
    goals_file: Annotated[Path, typer.Argument(help="JSON file with goal definitions")],
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Show progress for every configured goal.

    Progress is recomputed from the events on every run. Goals of an
    unrecognized type are listed with zero progress.

    Examples:
        insights goals events.csv goals.json
        insights goals events.csv goals.json --json
    """
    events = load_events_or_exit(events_file, json_output)
    goals = load_goals_or_exit(goals_file, json_output)

    results = evaluate_all(goals, events)
    value = total_goal_value(goals, events)

    if json_output:
        print_json(
            {
                "goals": [
                    {
                        "id": goal.id,
                        "name": goal.name,
                        "goal_type": goal.goal_type,
                        "enabled": goal.enabled,
                        "target_value": goal.target_value,
                        **progress.model_dump(),
                    }
                    for goal, progress in results
                ],
                "total_goal_value": value,
            }
        )
        return

    if not results:
        print(f"\n  {C.BRIGHT_YELLOW}{I.WARN} No goals defined in {goals_file}{C.RESET}\n")
        return

    table = Table(title="Goal Progress", show_header=True, header_style="bold")
    table.add_column("Goal")
    table.add_column("Type")
    table.add_column("Progress", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Status")

    for goal, progress in results:
        if goal.goal_type not in GOAL_TYPES:
            status = f"[yellow]{I.WARN} unknown type[/yellow]"
        elif progress.completed:
            status = f"[green]{I.CHECK} completed[/green]"
        else:
            status = "[dim]in progress[/dim]"
        if not goal.enabled:
            status += " [dim](disabled)[/dim]"
        table.add_row(
            goal.name or goal.id or "—",
            goal.goal_type,
            f"{progress.current}/{goal.target_value}",
            f"{progress.percentage}%",
            status,
        )

    print()
    Console().print(table)
    print(f"  {C.BOLD}Completed goal value:{C.RESET}  {value:,.2f}")
    print()
