# ==============================================================================
# Tests for CLI Commands
# ==============================================================================
"""
End-to-end tests for the insights CLI commands against small event files.

Commands run with --json where available so the output can be parsed. The
snapshot backend stays on the default in-memory store.
"""

import json

import pytest
from typer.testing import CliRunner

from insights.app import app

runner = CliRunner()

EVENTS = [
    {
        "session_id": "s1",
        "visitor_id": "v1",
        "event_type": "page_view",
        "created_at": "2024-03-04T10:00:00",
        "page_url": "https://example.com/",
        "device": "desktop",
    },
    {
        "session_id": "s1",
        "visitor_id": "v1",
        "event_type": "button_click",
        "created_at": "2024-03-04T10:00:05",
        "page_url": "https://example.com/",
        "cta_text": "Comprar Agora",
        "metadata": {"click_x": 300, "click_y": 400, "vp_w": 1440, "doc_h": 3000},
    },
    {
        "session_id": "s1",
        "visitor_id": "v1",
        "event_type": "purchase",
        "created_at": "2024-03-04T10:01:00",
        "page_url": "https://example.com/checkout",
        "product_price": 80,
    },
    {
        "session_id": "s2",
        "visitor_id": "v2",
        "event_type": "page_exit",
        "created_at": "2024-03-05T18:30:00",
        "page_url": "https://example.com/",
        "scroll_depth": 80,
    },
]

GOALS = [
    {
        "id": "g1",
        "name": "Buy button",
        "goal_type": "cta_click",
        "config": {"cta_text_patterns": ["Comprar"]},
        "target_value": 2,
    },
]


@pytest.fixture()
def events_file(tmp_path):
    path = tmp_path / "events.ndjson"
    path.write_text("\n".join(json.dumps(e) for e in EVENTS) + "\n")
    return path


@pytest.fixture()
def goals_file(tmp_path):
    path = tmp_path / "goals.json"
    path.write_text(json.dumps(GOALS))
    return path


def invoke_json(*args):
    result = runner.invoke(app, [*args, "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


# ==============================================================================
# Reports
# ==============================================================================


class TestReports:
    """Tests for the sessions, journeys, goals and ecommerce commands."""

    def test_sessions(self, events_file):
        data = invoke_json("sessions", str(events_file))
        assert data["summary"]["sessions"] == 2
        assert {s["session_id"] for s in data["sessions"]} == {"s1", "s2"}

    def test_journeys(self, events_file):
        data = invoke_json("journeys", str(events_file))
        assert data["stats"]["journeys"] == 2
        assert data["stats"]["converted"] == 1

    def test_goals(self, events_file, goals_file):
        data = invoke_json("goals", str(events_file), str(goals_file))
        [goal] = data["goals"]
        assert goal["current"] == 1
        assert goal["percentage"] == 50
        assert goal["completed"] is False

    def test_ecommerce(self, events_file):
        data = invoke_json("ecommerce", str(events_file))
        assert data["total_revenue"] == 80
        assert data["total_purchases"] == 1

    def test_missing_events_file(self, tmp_path):
        result = runner.invoke(app, ["sessions", str(tmp_path / "missing.csv"), "--json"])
        assert result.exit_code == 1
        assert "error" in result.stdout

    def test_tables_render(self, events_file):
        result = runner.invoke(app, ["sessions", str(events_file)])
        assert result.exit_code == 0


# ==============================================================================
# Heatmaps
# ==============================================================================


class TestHeatmapCommands:
    """Tests for the heatmap subcommands."""

    def test_grid(self, events_file):
        data = invoke_json("heatmap", "grid", str(events_file))
        assert data["days"][0] == "Mon"
        assert data["total"] == 4
        assert data["cells"][0][10] == 3

    def test_grid_sessions(self, events_file):
        data = invoke_json("heatmap", "grid", str(events_file), "--sessions")
        assert data["cells"][0][10] == 1

    def test_summary_lists_pages_without_page(self, events_file):
        data = invoke_json("heatmap", "summary", str(events_file))
        assert data["pages"][0]["url"] == "https://example.com/"

    def test_summary_for_page(self, events_file):
        data = invoke_json("heatmap", "summary", str(events_file), "--page", "https://example.com/")
        assert data["total_clicks"] == 1
        assert data["avg_scroll"] == 80
        assert data["hot_zone"] == "10–20%"

    def test_render_writes_png(self, events_file, tmp_path):
        out = tmp_path / "home.png"
        result = runner.invoke(
            app,
            ["heatmap", "render", str(events_file), "--page", "https://example.com/", "--out", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes().startswith(b"\x89PNG")

    def test_render_rejects_unknown_mode(self, events_file, tmp_path):
        result = runner.invoke(
            app,
            [
                "heatmap",
                "render",
                str(events_file),
                "--page",
                "https://example.com/",
                "--out",
                str(tmp_path / "x.png"),
                "--mode",
                "bogus",
            ],
        )
        assert result.exit_code != 0


# ==============================================================================
# Snapshots & Config
# ==============================================================================


class TestSnapshotAndConfigCommands:
    """Tests for the snapshots and config subcommands."""

    def test_snapshots_list_empty(self):
        assert invoke_json("snapshots", "list") == []

    def test_config_show(self):
        data = invoke_json("config", "show")
        assert data["heatmap"]["radius"] == 28
        assert data["heatmap"]["intensity"] == 0.65
        assert data["snapshot"]["retention"] == 30
