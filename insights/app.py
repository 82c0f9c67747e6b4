# ==============================================================================
# Insights CLI
# ==============================================================================
"""
Command-line interface for the tracking insights engine.

Usage:
    insights --help
    insights config show
    insights sessions events.csv
    insights journeys events.csv --device mobile
    insights goals events.csv goals.json
    insights ecommerce events.csv
    insights heatmap grid events.csv --sessions
    insights heatmap summary events.csv --page https://example.com/
    insights heatmap render events.csv --page https://example.com/ --out home.png
    insights snapshots list
    insights snapshots clear -y
"""

import logging
import os

import typer

from insights.utils.config import get_settings

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="insights",
    help="Tracking event insights: sessions, journeys, goals and heatmaps",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Report commands
from insights.cli.ecommerce import show_ecommerce
from insights.cli.goals import show_goals
from insights.cli.journeys import show_journeys
from insights.cli.sessions import show_sessions

app.command("sessions")(show_sessions)
app.command("journeys")(show_journeys)
app.command("goals")(show_goals)
app.command("ecommerce")(show_ecommerce)

heatmap_app = typer.Typer(
    help="Temporal and spatial heatmaps",
    no_args_is_help=True,
)
app.add_typer(heatmap_app, name="heatmap")

from insights.cli.heatmap import heatmap_grid, heatmap_render, heatmap_summary_cmd

heatmap_app.command("grid")(heatmap_grid)
heatmap_app.command("summary")(heatmap_summary_cmd)
heatmap_app.command("render")(heatmap_render)

snapshots_app = typer.Typer(
    help="Heatmap snapshot history",
    no_args_is_help=True,
)
app.add_typer(snapshots_app, name="snapshots")

from insights.cli.snapshots import snapshots_clear, snapshots_delete, snapshots_export, snapshots_list

snapshots_app.command("list")(snapshots_list)
snapshots_app.command("export")(snapshots_export)
snapshots_app.command("delete")(snapshots_delete)
snapshots_app.command("clear")(snapshots_clear)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from insights.cli.config import config_show

config_app.command("show")(config_show)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
