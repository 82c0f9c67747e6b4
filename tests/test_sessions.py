# ==============================================================================
# Tests for Session Reconstruction
# ==============================================================================
"""
Unit tests for insights.core.sessions.

Tests cover:
- Grouping by session id with visitor id fallback
- Duration from page_exit time_on_page vs wall clock
- Landing/exit pages with the origin stripped
- Bounce detection and its disagreement with duration
- Bot classification through an injected classifier
"""

from conftest import make_event

from insights.base.classifier import BotClassifier
from insights.core.models import BotInfo
from insights.core.sessions import (
    SessionReconstructor,
    build_sessions,
    group_events,
    session_summary,
    strip_origin,
)
from insights.infrastructure.bots import PatternBotClassifier

# ==============================================================================
# Helpers
# ==============================================================================


class TestStripOrigin:
    """Tests for strip_origin()."""

    def test_strips_scheme_and_host(self):
        assert strip_origin("https://example.com/pricing?x=1#top") == "/pricing?x=1#top"

    def test_bare_origin_is_root(self):
        assert strip_origin("https://example.com") == "/"

    def test_relative_path_unchanged(self):
        assert strip_origin("/blog/post") == "/blog/post"

    def test_missing_url_is_root(self):
        assert strip_origin(None) == "/"
        assert strip_origin("") == "/"


class TestGroupEvents:
    """Tests for group_events()."""

    def test_falls_back_to_visitor_then_unknown(self):
        events = [
            make_event(session_id="a"),
            make_event(session_id=None, visitor_id="v9"),
            make_event(session_id=None, visitor_id=None),
        ]
        assert set(group_events(events)) == {"a", "v9", "unknown"}

    def test_sorts_each_group_by_time(self):
        late = make_event(offset=30, page_url="/b")
        early = make_event(offset=0, page_url="/a")
        group = group_events([late, early])["s1"]
        assert [e.page_url for e in group] == ["/a", "/b"]


# ==============================================================================
# SessionReconstructor
# ==============================================================================


class TestSessionReconstruction:
    """Tests for build_sessions()."""

    def test_single_page_short_session_is_bounce(self):
        """Two events 4s apart on one page: a bounce of 4 seconds."""
        events = [
            make_event("page_view", 0, page_url="/a"),
            make_event("click", 4, page_url="/a"),
        ]
        [session] = build_sessions(events)

        assert session.pages_viewed == 1
        assert session.duration_sec == 4
        assert session.is_bounce is True

    def test_duration_prefers_page_exit_time_on_page(self):
        events = [
            make_event("page_view", 0, page_url="/a"),
            make_event("page_view", 10, page_url="/b"),
            make_event("page_exit", 20, page_url="/b", time_on_page=95),
        ]
        [session] = build_sessions(events)
        assert session.duration_sec == 95

    def test_duration_falls_back_to_wall_clock(self):
        events = [make_event(offset=0), make_event(offset=42.4, page_url="/x")]
        [session] = build_sessions(events)
        assert session.duration_sec == 42

    def test_landing_and_exit_pages(self):
        events = [
            make_event("page_view", 0, page_url="https://example.com/"),
            make_event("page_view", 5, page_url="https://example.com/pricing"),
            make_event("page_exit", 9, page_url="https://example.com/pricing?plan=pro"),
            make_event("click", 10, page_url="https://example.com/cart"),
        ]
        [session] = build_sessions(events)

        assert session.landing_page == "/"
        # Last page_exit wins over the last event
        assert session.exit_page == "/pricing?plan=pro"

    def test_pages_viewed_floor_is_one(self):
        [session] = build_sessions([make_event(page_url=None)])
        assert session.pages_viewed == 1
        assert session.landing_page == "/"

    def test_bounce_uses_raw_elapsed_not_reported_duration(self):
        """A single-page session 3s long with time_on_page 120 is still a bounce."""
        events = [
            make_event("page_view", 0, page_url="/a"),
            make_event("page_exit", 3, page_url="/a", time_on_page=120),
        ]
        [session] = build_sessions(events)

        assert session.is_bounce is True
        assert session.duration_sec == 120

    def test_multi_page_session_is_never_bounce(self):
        events = [make_event(offset=0, page_url="/a"), make_event(offset=1, page_url="/b")]
        [session] = build_sessions(events)
        assert session.is_bounce is False

    def test_bounce_threshold_is_configurable(self):
        events = [make_event(offset=0), make_event("click", 8)]
        [session] = SessionReconstructor(bounce_seconds=5).build(events)
        assert session.is_bounce is False

    def test_sorted_most_recent_first(self):
        events = [
            make_event(offset=0, session_id="old"),
            make_event(offset=500, session_id="new"),
        ]
        assert [s.session_id for s in build_sessions(events)] == ["new", "old"]

    def test_input_order_does_not_matter(self):
        events = [
            make_event("page_view", 0, page_url="/a"),
            make_event("page_view", 7, page_url="/b"),
            make_event("page_exit", 12, page_url="/b"),
        ]
        forward = build_sessions(events)
        backward = build_sessions(list(reversed(events)))
        assert forward == backward

    def test_empty_input(self):
        assert build_sessions([]) == []


class TestBotClassification:
    """Tests for classifier injection."""

    def test_human_without_classifier(self):
        [session] = build_sessions([make_event(browser="Googlebot/2.1")])
        assert session.bot_classification == BotInfo()

    def test_pattern_classifier_detects_crawler(self):
        [session] = build_sessions(
            [make_event(browser="Mozilla/5.0 (compatible; Googlebot/2.1)")],
            classifier=PatternBotClassifier(),
        )
        assert session.bot_classification.is_bot is True
        assert session.bot_classification.bot_name == "Googlebot"
        assert session.bot_classification.bot_category == "search"

    def test_pattern_classifier_passes_regular_browser(self):
        [session] = build_sessions([make_event(browser="Chrome")], classifier=PatternBotClassifier())
        assert session.bot_classification.is_bot is False

    def test_classifier_receives_first_event_signature(self):
        calls = []

        class Recording(BotClassifier):
            def classify(self, browser, os, device, city, referrer):
                calls.append((browser, os, device, city, referrer))
                return BotInfo(is_bot=True, bot_name="test", bot_category="test")

        events = [
            make_event(offset=0, browser="Firefox", os="Linux", device="desktop", city="Lisbon"),
            make_event(offset=1, browser="Other"),
        ]
        [session] = build_sessions(events, classifier=Recording())

        assert calls == [("Firefox", "Linux", "desktop", "Lisbon", None)]
        assert session.bot_classification.bot_name == "test"


class TestSessionSummary:
    """Tests for session_summary()."""

    def test_rates(self):
        events = [
            make_event(offset=0, session_id="a"),
            make_event(offset=0, session_id="b", page_url="/1"),
            make_event(offset=30, session_id="b", page_url="/2"),
        ]
        summary = session_summary(build_sessions(events))

        assert summary["sessions"] == 2
        assert summary["bounces"] == 1
        assert summary["bounce_rate"] == 50.0
        assert summary["avg_duration_sec"] == 15

    def test_empty(self):
        summary = session_summary([])
        assert summary["bounce_rate"] == 0.0
        assert summary["avg_duration_sec"] == 0
