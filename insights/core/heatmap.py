# ==============================================================================
# Heatmap Aggregator - Pure Domain Logic
# ==============================================================================
"""
Temporal and spatial heatmap aggregation.

Temporal:
- 7×24 day-of-week × hour-of-day grids, counting events or distinct sessions

Spatial (inputs to the renderer in insights.core.rendering):
- Click point extraction for a page and device
- Reference viewport width (statistical mode of observed widths)
- Estimated document height and the hot-zone decile
- Scroll-depth distribution and per-page activity

Empty inputs fall back to fixed defaults (1440px reference width, 3000px
document height) so no computation divides by zero.
"""

import logging
from collections import Counter
from collections.abc import Iterable

from insights.core.models import (
    CLICK_EVENT_TYPES,
    EventType,
    HeatmapPoint,
    MovePoint,
    RawEvent,
    TemporalGrid,
)

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT_WIDTH = 1440
DEFAULT_VIEWPORT_HEIGHT = 900
DEFAULT_DOC_HEIGHT = 3000

SCROLL_BUCKETS = tuple(range(0, 101, 10))


# ==============================================================================
# Temporal Grids
# ==============================================================================


def _grid_position(event: RawEvent) -> tuple[int, int]:
    # datetime.weekday() is already Monday=0
    return event.created_at.weekday(), event.created_at.hour


def build_event_heatmap(events: Iterable[RawEvent]) -> TemporalGrid:
    """Count events per (day-of-week, hour-of-day) cell."""
    grid = TemporalGrid()
    for event in events:
        day, hour = _grid_position(event)
        grid.cells[day][hour] += 1
    return grid


def build_session_heatmap(events: Iterable[RawEvent]) -> TemporalGrid:
    """Count distinct sessions per (day-of-week, hour-of-day) cell."""
    seen: dict[tuple[int, int], set[str]] = {}
    for event in events:
        seen.setdefault(_grid_position(event), set()).add(event.group_key)

    grid = TemporalGrid()
    for (day, hour), keys in seen.items():
        grid.cells[day][hour] = len(keys)
    return grid


# ==============================================================================
# Spatial Inputs
# ==============================================================================


def filter_page_events(
    events: Iterable[RawEvent], page_url: str | None = None, device: str | None = None
) -> list[RawEvent]:
    """
    Keep events recorded on ``page_url`` from ``device``.

    A None page keeps every page; a None or "all" device keeps every device.
    """
    result = []
    for event in events:
        if page_url is not None and event.page_url != page_url:
            continue
        if device and device != "all" and event.device != device:
            continue
        result.append(event)
    return result


def click_points(
    events: Iterable[RawEvent], page_url: str | None = None, device: str | None = None
) -> list[HeatmapPoint]:
    """Extract click positions from events carrying ``metadata.click_x``."""
    points = []
    for event in filter_page_events(events, page_url, device):
        meta = event.metadata
        if meta.click_x is None:
            continue
        points.append(
            HeatmapPoint(
                x=meta.click_x or 0,
                y=meta.click_y or 0,
                viewport_w=meta.viewport_w or DEFAULT_VIEWPORT_WIDTH,
                viewport_h=meta.viewport_h or DEFAULT_VIEWPORT_HEIGHT,
                doc_height=meta.doc_height or DEFAULT_DOC_HEIGHT,
                session_id=event.group_key,
                visitor_id=event.visitor_id,
            )
        )
    return points


def compute_reference_viewport(
    points: Iterable[HeatmapPoint], default: int = DEFAULT_VIEWPORT_WIDTH
) -> int:
    """
    Most frequently observed viewport width.

    Ties resolve to the width that was seen first. Returns ``default`` when
    there are no points.
    """
    counts = Counter(p.viewport_w for p in points)
    if not counts:
        return default
    # Counter preserves first-seen order; max() keeps the first maximum
    return max(counts, key=lambda width: counts[width])


def estimate_doc_height(
    points: Iterable[HeatmapPoint], default: int = DEFAULT_DOC_HEIGHT
) -> int:
    """Largest observed document height, never below ``default``."""
    return max([p.doc_height for p in points] + [default])


def hot_zone_index(points: Iterable[HeatmapPoint], doc_height: int) -> int | None:
    """
    Index (0-9) of the document-height decile with the most clicks.

    Ties resolve to the lowest index. None when there are no points.
    """
    buckets = [0] * 10
    any_points = False
    height = max(doc_height, 1)
    for point in points:
        any_points = True
        idx = min(int(point.y / height * 10), 9)
        buckets[max(idx, 0)] += 1
    if not any_points:
        return None
    return buckets.index(max(buckets))


def hot_zone(points: Iterable[HeatmapPoint], doc_height: int) -> str:
    """Hot-zone decile as a range string such as ``"20–30%"``; ``"—"`` when empty."""
    idx = hot_zone_index(points, doc_height)
    if idx is None:
        return "—"
    return f"{idx * 10}–{(idx + 1) * 10}%"


def scroll_depth_distribution(events: Iterable[RawEvent]) -> list[dict]:
    """
    Share of page exits that reached each 10% scroll bucket.

    Returns:
        One row per bucket (0, 10, ..., 100) with pct, count and ratio
    """
    exits = [e for e in events if e.event_type == EventType.PAGE_EXIT.value]
    total = len(exits) or 1
    rows = []
    for pct in SCROLL_BUCKETS:
        count = sum(1 for e in exits if (e.scroll_depth or 0) >= pct)
        rows.append({"pct": pct, "count": count, "ratio": count / total})
    return rows


def average_scroll(events: Iterable[RawEvent]) -> int:
    """Mean scroll depth over page exits, rounded; 0 when there are none."""
    exits = [e for e in events if e.event_type == EventType.PAGE_EXIT.value]
    if not exits:
        return 0
    return round(sum(e.scroll_depth or 0 for e in exits) / len(exits))


def page_options(events: Iterable[RawEvent]) -> list[dict]:
    """
    Pages with recorded activity, busiest first.

    Returns:
        Rows with url, clicks, exits and views, sorted by clicks + views
    """
    stats: dict[str, dict] = {}
    for event in events:
        if not event.page_url:
            continue
        entry = stats.setdefault(event.page_url, {"url": event.page_url, "clicks": 0, "exits": 0, "views": 0})
        if event.event_type in CLICK_EVENT_TYPES:
            entry["clicks"] += 1
        elif event.event_type == EventType.PAGE_EXIT.value:
            entry["exits"] += 1
        elif event.event_type == EventType.PAGE_VIEW.value:
            entry["views"] += 1
    return sorted(stats.values(), key=lambda r: r["clicks"] + r["views"], reverse=True)


def heatmap_summary(
    events: Iterable[RawEvent],
    page_url: str | None = None,
    device: str | None = None,
    default_viewport_width: int = DEFAULT_VIEWPORT_WIDTH,
    default_doc_height: int = DEFAULT_DOC_HEIGHT,
) -> dict:
    """KPIs shown next to a page's spatial heatmap."""
    filtered = filter_page_events(events, page_url, device)
    points = click_points(filtered)
    doc_height = estimate_doc_height(points, default_doc_height)
    return {
        "total_clicks": len(points),
        "unique_visitors": len({e.visitor_id for e in filtered if e.visitor_id}),
        "avg_scroll": average_scroll(filtered),
        "hot_zone": hot_zone(points, doc_height),
        "reference_viewport_width": compute_reference_viewport(points, default_viewport_width),
        "doc_height": doc_height,
    }


def movement_trails(
    events: Iterable[RawEvent], page_url: str | None = None, device: str | None = None
) -> dict[str, list[MovePoint]]:
    """
    Mouse-movement samples grouped by session, in recording order.

    Events are ordered by ``created_at`` before their samples are appended,
    so each session's list runs from oldest to most recent.
    """
    filtered = sorted(filter_page_events(events, page_url, device), key=lambda e: e.created_at)
    trails: dict[str, list[MovePoint]] = {}
    for event in filtered:
        if event.metadata.move_samples:
            trails.setdefault(event.group_key, []).extend(event.metadata.move_samples)
    return trails
