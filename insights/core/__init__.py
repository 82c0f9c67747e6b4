# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic over event snapshots.

This module contains:
- Domain models (RawEvent, Session, Journey, HeatmapPoint, ...)
- Session reconstruction and journey building
- Goal evaluation
- Temporal and spatial heatmap aggregation, rendering and export

Every aggregate is a batch recomputation over an immutable event list.
"""

from insights.core.goals import Goal, evaluate, evaluate_all, parse_goal
from insights.core.heatmap import (
    build_event_heatmap,
    build_session_heatmap,
    click_points,
    compute_reference_viewport,
    hot_zone,
)
from insights.core.journeys import build_journeys
from insights.core.models import (
    BotInfo,
    EventType,
    GoalProgress,
    HeatmapPoint,
    HeatmapSnapshot,
    Journey,
    JourneyStep,
    RawEvent,
    Session,
    TemporalGrid,
)
from insights.core.rendering import remap_colors, render_density
from insights.core.sessions import SessionReconstructor, build_sessions

__all__ = [
    "BotInfo",
    "EventType",
    "Goal",
    "GoalProgress",
    "HeatmapPoint",
    "HeatmapSnapshot",
    "Journey",
    "JourneyStep",
    "RawEvent",
    "Session",
    "SessionReconstructor",
    "TemporalGrid",
    "build_event_heatmap",
    "build_journeys",
    "build_session_heatmap",
    "build_sessions",
    "click_points",
    "compute_reference_viewport",
    "evaluate",
    "evaluate_all",
    "hot_zone",
    "parse_goal",
    "remap_colors",
    "render_density",
]
