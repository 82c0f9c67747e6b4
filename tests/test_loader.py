# ==============================================================================
# Tests for Event and Goal Loading
# ==============================================================================
"""
Unit tests for insights.infrastructure.loader.

Tests cover:
- CSV, JSON and NDJSON event files
- Skipping rows that fail validation
- Goal files (bare list or {"goals": [...]})
"""

import json

import pytest

from insights.core.goals import CtaClickCondition, UnknownCondition
from insights.infrastructure.loader import load_events, load_goals

CSV_EVENTS = """\
session_id,visitor_id,event_type,created_at,page_url,scroll_depth,metadata
s1,v1,page_view,2024-03-04T10:00:00,https://example.com/,,
s1,v1,page_exit,2024-03-04T10:00:30,https://example.com/,80,
s1,v1,click,2024-03-04T10:00:10,https://example.com/,,"{""click_x"": 12, ""click_y"": 40, ""vp_w"": 390}"
s2,v2,page_view,not-a-date,https://example.com/,,
"""


# ==============================================================================
# Events
# ==============================================================================


class TestLoadEvents:
    """Tests for load_events()."""

    def test_csv(self, tmp_path):
        path = tmp_path / "events.csv"
        path.write_text(CSV_EVENTS)

        events = load_events(path)

        assert [e.event_type for e in events] == ["page_view", "page_exit", "click"]
        assert events[1].scroll_depth == 80
        assert events[2].metadata.click_x == 12
        assert events[2].metadata.viewport_w == 390

    def test_invalid_rows_are_skipped(self, tmp_path, caplog):
        path = tmp_path / "events.csv"
        path.write_text(CSV_EVENTS)

        with caplog.at_level("WARNING"):
            events = load_events(path)

        assert len(events) == 3
        assert "Skipping row 3" in caplog.text

    def test_json_array_with_camelcase_fields(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "sessionId": "s1",
                        "eventType": "button_click",
                        "createdAt": "2024-03-04T10:00:00",
                        "ctaText": "Buy",
                    },
                    {
                        "sessionId": "s1",
                        "eventType": "purchase",
                        "createdAt": "2024-03-04T10:01:00",
                        "cartValue": 150.0,
                    },
                ]
            )
        )

        events = load_events(path)

        assert events[0].cta_text == "Buy"
        assert events[1].cart_value == 150

    def test_json_rows_with_different_metadata_keys(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "session_id": "s1",
                        "event_type": "heatmap_click",
                        "created_at": "2024-03-04T10:00:00",
                        "metadata": {
                            "click_x": 10,
                            "click_y": 20,
                            "move_samples": [{"x": 1, "y": 2, "t": 0}],
                        },
                    },
                    {
                        "session_id": "s1",
                        "event_type": "heatmap_click",
                        "created_at": "2024-03-04T10:00:05",
                        "metadata": {"click_x": 30, "click_y": 40},
                    },
                ]
            )
        )

        events = load_events(path)

        assert len(events) == 2
        assert len(events[0].metadata.move_samples) == 1
        assert events[1].metadata.move_samples == []
        assert events[1].metadata.click_x == 30

    def test_ndjson(self, tmp_path):
        path = tmp_path / "events.ndjson"
        rows = [
            {"session_id": "a", "event_type": "page_view", "created_at": "2024-03-04T10:00:00"},
            {"session_id": "b", "event_type": "page_view", "created_at": "2024-03-04T11:00:00"},
        ]
        path.write_text("\n".join(json.dumps(r) for r in rows) + "\n")

        assert [e.session_id for e in load_events(path)] == ["a", "b"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_events(tmp_path / "nope.csv")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "events.parquet"
        path.write_bytes(b"")
        with pytest.raises(ValueError, match="Unsupported"):
            load_events(path)


# ==============================================================================
# Goals
# ==============================================================================


class TestLoadGoals:
    """Tests for load_goals()."""

    def test_list_of_records(self, tmp_path):
        path = tmp_path / "goals.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "name": "Buy clicks",
                        "goal_type": "cta_click",
                        "config": {"cta_text_patterns": ["Buy"]},
                        "target_value": 5,
                    },
                    {"name": "Revenue", "goal_type": "page_value"},
                ]
            )
        )

        goals = load_goals(path)

        assert isinstance(goals[0].condition, CtaClickCondition)
        assert goals[0].target_value == 5
        assert isinstance(goals[1].condition, UnknownCondition)

    def test_wrapped_in_object(self, tmp_path):
        path = tmp_path / "goals.json"
        path.write_text(json.dumps({"goals": [{"goal_type": "event_count", "target_events": ["lead"]}]}))
        [goal] = load_goals(path)
        assert goal.condition.target_events == ["lead"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_goals(tmp_path / "goals.json")
