# ==============================================================================
# Tests for CLI Help Commands
# ==============================================================================
"""
Tests that all CLI help commands generate the expected output.

Verifies that every command and subcommand in the insights CLI:
- Exits with code 0 when invoked with --help
- Contains the expected description text
- Lists the expected subcommands or options

These tests use the real app from insights.app (not minimal Typer apps)
to ensure the full command tree is wired up correctly and that Typer can
introspect all command function signatures without errors.
"""

import pytest
from typer.testing import CliRunner

from insights.app import app

runner = CliRunner()


# ==============================================================================
# Root App
# ==============================================================================


class TestRootHelp:
    """Tests for the root `insights --help` output."""

    def test_exit_code(self):
        """Root --help exits successfully."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_description(self):
        """Root --help shows the app description."""
        result = runner.invoke(app, ["--help"])
        assert "Tracking event insights" in result.output

    def test_lists_all_subcommands(self):
        """Root --help lists every top-level command."""
        result = runner.invoke(app, ["--help"])
        expected_commands = [
            "config",
            "ecommerce",
            "goals",
            "heatmap",
            "journeys",
            "sessions",
            "snapshots",
        ]
        for cmd in expected_commands:
            assert cmd in result.output, f"Missing command: {cmd}"


# ==============================================================================
# Report Commands
# ==============================================================================


@pytest.mark.parametrize(
    "command,description,options",
    [
        ("sessions", "Reconstruct sessions", ["--limit", "--hide-bots", "--json"]),
        ("journeys", "user journey statistics", ["--device", "--converted", "--search", "--json"]),
        ("goals", "progress for every configured goal", ["--json"]),
        ("ecommerce", "e-commerce metrics", ["--json"]),
    ],
)
class TestReportHelp:
    """Tests for the top-level report commands."""

    def test_exit_code(self, command, description, options):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0

    def test_description(self, command, description, options):
        result = runner.invoke(app, [command, "--help"])
        assert description in result.output

    def test_lists_options(self, command, description, options):
        result = runner.invoke(app, [command, "--help"])
        for opt in options:
            assert opt in result.output, f"Missing option: {opt}"


# ==============================================================================
# Heatmap
# ==============================================================================


class TestHeatmapHelp:
    """Tests for `insights heatmap` help output."""

    def test_exit_code(self):
        """Heatmap --help exits successfully."""
        result = runner.invoke(app, ["heatmap", "--help"])
        assert result.exit_code == 0

    def test_description(self):
        """Heatmap --help shows its description."""
        result = runner.invoke(app, ["heatmap", "--help"])
        assert "Temporal and spatial heatmaps" in result.output

    def test_lists_subcommands(self):
        """Heatmap --help lists all subcommands."""
        result = runner.invoke(app, ["heatmap", "--help"])
        for cmd in ["grid", "summary", "render"]:
            assert cmd in result.output, f"Missing subcommand: {cmd}"


class TestHeatmapGridHelp:
    """Tests for `insights heatmap grid --help` output."""

    def test_description(self):
        """Heatmap grid --help shows its description."""
        result = runner.invoke(app, ["heatmap", "grid", "--help"])
        assert result.exit_code == 0
        assert "day of week and hour of day" in result.output

    def test_lists_options(self):
        """Heatmap grid --help lists all options."""
        result = runner.invoke(app, ["heatmap", "grid", "--help"])
        for opt in ["--sessions", "--json"]:
            assert opt in result.output, f"Missing option: {opt}"


class TestHeatmapRenderHelp:
    """Tests for `insights heatmap render --help` output."""

    def test_description(self):
        """Heatmap render --help shows its description."""
        result = runner.invoke(app, ["heatmap", "render", "--help"])
        assert result.exit_code == 0
        assert "Render a page heatmap" in result.output

    def test_lists_options(self):
        """Heatmap render --help lists all options."""
        result = runner.invoke(app, ["heatmap", "render", "--help"])
        for opt in ["--page", "--out", "--mode", "--device", "--trails", "--scroll-offset", "--save"]:
            assert opt in result.output, f"Missing option: {opt}"


# ==============================================================================
# Snapshots
# ==============================================================================


class TestSnapshotsHelp:
    """Tests for `insights snapshots` help output."""

    def test_exit_code(self):
        """Snapshots --help exits successfully."""
        result = runner.invoke(app, ["snapshots", "--help"])
        assert result.exit_code == 0

    def test_description(self):
        """Snapshots --help shows its description."""
        result = runner.invoke(app, ["snapshots", "--help"])
        assert "Heatmap snapshot history" in result.output

    def test_lists_subcommands(self):
        """Snapshots --help lists all subcommands."""
        result = runner.invoke(app, ["snapshots", "--help"])
        for cmd in ["list", "export", "delete", "clear"]:
            assert cmd in result.output, f"Missing subcommand: {cmd}"


class TestSnapshotsClearHelp:
    """Tests for `insights snapshots clear --help` output."""

    def test_description(self):
        """Snapshots clear --help shows its description."""
        result = runner.invoke(app, ["snapshots", "clear", "--help"])
        assert result.exit_code == 0
        assert "Delete every saved snapshot" in result.output
        assert "--yes" in result.output


# ==============================================================================
# Config
# ==============================================================================


class TestConfigHelp:
    """Tests for `insights config` help output."""

    def test_exit_code(self):
        """Config --help exits successfully."""
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0

    def test_description(self):
        """Config --help shows its description."""
        result = runner.invoke(app, ["config", "--help"])
        assert "Configuration management" in result.output

    def test_lists_subcommands(self):
        """Config --help lists all subcommands."""
        result = runner.invoke(app, ["config", "--help"])
        assert "show" in result.output


class TestConfigShowHelp:
    """Tests for `insights config show --help` output."""

    def test_description(self):
        """Config show --help shows its description."""
        result = runner.invoke(app, ["config", "show", "--help"])
        assert result.exit_code == 0
        assert "Display current configuration" in result.output
