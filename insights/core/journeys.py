# ==============================================================================
# Journey Builder - Pure Domain Logic
# ==============================================================================
"""
Converts each session's events into an ordered sequence of page steps.

A new step starts whenever the page changes. A step lasts until the next
event recorded on a different page; the last page of a session has a
duration of 0. Sessions containing a purchase, conversion, lead, signup or
form_submit event are marked converted.

Also provides the journey-level aggregates shown on the journey dashboard
(entry/exit pages, depth funnel, per-page dwell time, CTA ranking).
"""

import logging
from collections import Counter
from collections.abc import Iterable

from insights.core.models import CONVERSION_EVENT_TYPES, Journey, JourneyStep, RawEvent
from insights.core.sessions import group_events

logger = logging.getLogger(__name__)


def _page(event: RawEvent) -> str:
    return event.page_url or "/"


def _elapsed_seconds(start: RawEvent, end: RawEvent) -> int:
    # Truncated so that step durations never sum past the session span
    return max(int((end.created_at - start.created_at).total_seconds()), 0)


def build_steps(group: list[RawEvent]) -> list[JourneyStep]:
    """
    Build the step sequence for one time-ordered session group.

    Args:
        group: Non-empty list of events sorted by created_at

    Returns:
        Steps in time order; never empty for a non-empty group
    """
    steps: list[JourneyStep] = []
    current_page: str | None = None

    for idx, event in enumerate(group):
        page = _page(event)
        if idx == 0 or page != current_page:
            current_page = page
            next_page_event = next((e for e in group[idx + 1 :] if _page(e) != page), None)
            duration = _elapsed_seconds(event, next_page_event) if next_page_event else 0
            steps.append(
                JourneyStep(
                    page=page,
                    action=event.event_type,
                    duration_sec=duration,
                    scroll_depth=event.scroll_depth or 0,
                    timestamp=event.created_at,
                    cta_clicked=event.cta_text or None,
                    cta_selector=event.cta_selector or None,
                )
            )
        elif event.cta_text and steps[-1].cta_clicked is None:
            # Same-page CTA click is attributed to the current step
            steps[-1] = steps[-1].model_copy(
                update={"cta_clicked": event.cta_text, "cta_selector": event.cta_selector or None}
            )

    return steps


def build_journey(session_id: str, group: list[RawEvent]) -> Journey:
    """Build the journey for one time-ordered, non-empty session group."""
    first = group[0]
    last = group[-1]

    conversions = [e for e in group if e.event_type in CONVERSION_EVENT_TYPES]

    return Journey(
        session_id=session_id,
        visitor_id=first.visitor_id or "anonymous",
        device=first.device or "desktop",
        os=first.os or "—",
        browser=first.browser or "—",
        city=first.city or "—",
        country=first.country or "—",
        source=first.utm_source or first.referrer or "direct",
        medium=first.utm_medium or "none",
        started_at=first.created_at,
        total_duration_sec=int(round((last.created_at - first.created_at).total_seconds())),
        steps=build_steps(group),
        converted=bool(conversions),
        conversion_value=sum(e.monetary_value for e in conversions),
        conversion_page=conversions[0].page_url if conversions else None,
    )


def build_journeys(events: Iterable[RawEvent]) -> list[Journey]:
    """
    Build one journey per session group.

    Returns:
        Journeys sorted by started_at, most recent first
    """
    journeys = [build_journey(key, group) for key, group in group_events(events).items()]
    journeys.sort(key=lambda j: j.started_at, reverse=True)
    logger.debug("Built %d journeys", len(journeys))
    return journeys


# ==============================================================================
# Journey Aggregates
# ==============================================================================


def filter_journeys(
    journeys: list[Journey],
    device: str | None = None,
    converted: bool | None = None,
    search: str | None = None,
) -> list[Journey]:
    """
    Filter journeys the way the journey explorer does.

    Args:
        device: Keep only this device class (None or "all" keeps everything)
        converted: True/False keeps converted/unconverted journeys only
        search: Case-insensitive match on visitor id, city, step page or CTA text
    """
    result = journeys
    if device and device != "all":
        result = [j for j in result if j.device == device]
    if converted is not None:
        result = [j for j in result if j.converted == converted]
    if search:
        q = search.lower()
        result = [
            j
            for j in result
            if q in j.visitor_id.lower()
            or q in j.city.lower()
            or any(
                q in s.page.lower() or (s.cta_clicked and q in s.cta_clicked.lower())
                for s in j.steps
            )
        ]
    return result


def journey_stats(journeys: list[Journey]) -> dict:
    """Headline numbers for a list of journeys. All averages are 0 when empty."""
    total = len(journeys)
    converted = sum(1 for j in journeys if j.converted)
    return {
        "journeys": total,
        "avg_steps": round(sum(len(j.steps) for j in journeys) / total, 1) if total else 0.0,
        "avg_duration_sec": round(sum(j.total_duration_sec for j in journeys) / total)
        if total
        else 0,
        "converted": converted,
        "conversion_rate": round(converted / total * 100, 1) if total else 0.0,
        "total_revenue": sum(j.conversion_value for j in journeys),
        "cta_clicks": sum(1 for j in journeys for s in j.steps if s.cta_clicked),
    }


def _top(counter: Counter, limit: int, key_name: str) -> list[dict]:
    return [{key_name: k, "count": c} for k, c in counter.most_common(limit)]


def entry_pages(journeys: list[Journey], limit: int = 6) -> list[dict]:
    """Most frequent first-step pages."""
    return _top(Counter(j.steps[0].page for j in journeys if j.steps), limit, "page")


def exit_pages(journeys: list[Journey], limit: int = 6) -> list[dict]:
    """Most frequent last-step pages."""
    return _top(Counter(j.steps[-1].page for j in journeys if j.steps), limit, "page")


def depth_funnel(journeys: list[Journey], max_depth: int = 5) -> list[dict]:
    """Number of journeys with at least N steps, for N = 1..max_depth."""
    return [
        {"min_steps": n, "journeys": sum(1 for j in journeys if len(j.steps) >= n)}
        for n in range(1, max_depth + 1)
    ]


def page_time(journeys: list[Journey], limit: int = 8) -> list[dict]:
    """Average step duration per page, most visited pages first."""
    totals: dict[str, list[int]] = {}
    for journey in journeys:
        for step in journey.steps:
            entry = totals.setdefault(step.page, [0, 0])
            entry[0] += step.duration_sec
            entry[1] += 1
    rows = [
        {"page": page, "avg_time_sec": round(total / count), "visits": count}
        for page, (total, count) in totals.items()
    ]
    rows.sort(key=lambda r: r["visits"], reverse=True)
    return rows[:limit]


def cta_ranking(events: Iterable[RawEvent], limit: int = 10) -> list[dict]:
    """
    Rank CTA labels by click count, counted from raw events.

    Falls back to click-type events labelled by selector or event type when
    no event carries a CTA text.
    """
    events = list(events)
    counts = Counter(e.cta_text for e in events if e.cta_text)
    if not counts:
        counts = Counter(
            e.cta_text or e.cta_selector or e.event_type.replace("_", " ")
            for e in events
            if "click" in e.event_type and e.page_url
        )
    return _top(counts, limit, "cta")


def source_breakdown(journeys: list[Journey]) -> list[dict]:
    """Journeys per traffic source, largest first."""
    return [{"source": k, "journeys": c} for k, c in Counter(j.source for j in journeys).most_common()]
