# ==============================================================================
# Session Reconstructor - Pure Domain Logic
# ==============================================================================
"""
Pure session reconstruction logic with no external dependencies.

Groups a snapshot of raw events into Session records:
- Grouping by session id, falling back to visitor id
- Temporal ordering within each group
- Duration, distinct page count, landing and exit pages
- Bounce detection and bot classification

All functions are pure recomputations over an immutable event collection.
Nothing here mutates its input or keeps state between calls.
"""

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from insights.core.models import BotInfo, EventType, RawEvent, Session

if TYPE_CHECKING:
    from insights.base.classifier import BotClassifier

logger = logging.getLogger(__name__)

DEFAULT_BOUNCE_SECONDS = 10

_SCHEME_HOST = re.compile(r"^[a-z][a-z0-9+.\-]*://[^/?#]*", re.IGNORECASE)


def strip_origin(url: str | None) -> str:
    """Strip scheme and host from a URL, keeping path, query and fragment."""
    if not url:
        return "/"
    return _SCHEME_HOST.sub("", url) or "/"


def group_events(events: Iterable[RawEvent]) -> dict[str, list[RawEvent]]:
    """
    Group events by session key and sort each group by ``created_at``.

    The key is ``session_id``, then ``visitor_id``, then ``"unknown"``.
    Groups keep first-seen order; the sort inside a group is stable.

    Args:
        events: Events in any order

    Returns:
        Dict mapping group key to its time-ordered events
    """
    groups: dict[str, list[RawEvent]] = {}
    for event in events:
        groups.setdefault(event.group_key, []).append(event)
    for key in groups:
        groups[key] = sorted(groups[key], key=lambda e: e.created_at)
    return groups


class SessionReconstructor:
    """
    Builds Session records from raw events.

    The bounce test uses the raw wall-clock elapsed time between the first
    and last event, while ``duration_sec`` prefers the self-reported
    ``time_on_page`` of a ``page_exit`` event. The two can disagree for the
    same session.
    """

    def __init__(
        self,
        classifier: "BotClassifier | None" = None,
        bounce_seconds: int = DEFAULT_BOUNCE_SECONDS,
    ):
        """
        Initialize the reconstructor.

        Args:
            classifier: Bot classifier. If None, every session is classified
                        as human.
            bounce_seconds: Single-page sessions with a raw elapsed time below
                            this are bounces.
        """
        self.classifier = classifier
        self.bounce_seconds = bounce_seconds

    def build(self, events: Iterable[RawEvent]) -> list[Session]:
        """
        Reconstruct sessions from an event snapshot.

        Returns:
            Sessions sorted by ``started_at``, most recent first
        """
        groups = group_events(events)
        sessions = [self.build_one(key, group) for key, group in groups.items()]
        sessions.sort(key=lambda s: s.started_at, reverse=True)
        logger.debug("Built %d sessions", len(sessions))
        return sessions

    def build_one(self, key: str, group: list[RawEvent]) -> Session:
        """Build a single session from a time-ordered, non-empty group."""
        first = group[0]
        last = group[-1]

        exits = [e for e in group if e.event_type == EventType.PAGE_EXIT.value]
        exit_event = exits[-1] if exits else None
        reported = [e.time_on_page for e in exits if e.time_on_page is not None]

        raw_elapsed = (last.created_at - first.created_at).total_seconds()
        duration = reported[-1] if reported else raw_elapsed

        pages = {e.page_url for e in group if e.page_url}
        pages_viewed = max(len(pages), 1)

        is_bounce = pages_viewed <= 1 and raw_elapsed < self.bounce_seconds

        return Session(
            session_id=key,
            visitor_id=first.visitor_id,
            started_at=first.created_at,
            duration_sec=int(round(duration)),
            pages_viewed=pages_viewed,
            landing_page=strip_origin(first.page_url),
            exit_page=strip_origin((exit_event or last).page_url),
            event_count=len(group),
            device=first.device,
            browser=first.browser,
            os=first.os,
            city=first.city,
            is_bounce=is_bounce,
            bot_classification=self._classify(first),
        )

    def _classify(self, event: RawEvent) -> BotInfo:
        if self.classifier is None:
            return BotInfo()
        return self.classifier.classify(
            event.browser, event.os, event.device, event.city, event.referrer
        )


def build_sessions(
    events: Iterable[RawEvent],
    classifier: "BotClassifier | None" = None,
    bounce_seconds: int = DEFAULT_BOUNCE_SECONDS,
) -> list[Session]:
    """Reconstruct sessions from an event snapshot. See SessionReconstructor."""
    return SessionReconstructor(classifier, bounce_seconds).build(events)


def session_summary(sessions: list[Session]) -> dict:
    """
    Summarize a list of sessions.

    Returns:
        Dict with sessions, bounces, bounce_rate (%), avg_duration_sec and bots.
        Rates are 0 for an empty list.
    """
    total = len(sessions)
    bounces = sum(1 for s in sessions if s.is_bounce)
    bots = sum(1 for s in sessions if s.bot_classification.is_bot)
    return {
        "sessions": total,
        "bounces": bounces,
        "bounce_rate": round(bounces / total * 100, 1) if total else 0.0,
        "avg_duration_sec": round(sum(s.duration_sec for s in sessions) / total) if total else 0,
        "bots": bots,
    }
