# ==============================================================================
# Goal Evaluator - Pure Domain Logic
# ==============================================================================
"""
A small rule engine matching events against conversion goal definitions.

Goal configurations arrive as loosely-typed records (``goal_type`` plus a
``config`` dict). They are parsed into a tagged union of condition models,
one per goal type, each exposing a per-event predicate:

- cta_click:         CTA text equals/contains a pattern, or selector contains one
- page_destination:  page_view on a destination URL (distinct destinations)
- url_pattern:       link href or CTA text contains a pattern
- scroll_depth:      page_exit with scroll_depth >= threshold
- time_on_page:      page_exit with time_on_page >= minimum
- combined:          every sub-condition holds on the same single event
- pages_visited:     legacy; page_view on a target URL (distinct targets)
- event_count:       legacy; event_type is one of the target events

Unknown goal types parse into UnknownCondition and never match. All string
comparisons are case-insensitive. Progress is recomputed from scratch on
every call; nothing is cached or persisted.
"""

import logging
import math
from collections.abc import Iterable
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, Field, SerializeAsAny, TypeAdapter, field_validator, model_validator

from insights.core.models import EventType, GoalProgress, RawEvent

logger = logging.getLogger(__name__)

DEFAULT_SCROLL_THRESHOLD = 75
DEFAULT_MIN_SECONDS = 60


def normalize_url(url: str) -> str:
    """Lowercase a URL and strip one trailing slash."""
    url = url.lower()
    return url[:-1] if url.endswith("/") else url


def _contains_any(value: str | None, patterns: Iterable[str]) -> bool:
    if not value:
        return False
    value = value.lower()
    return any(p and p.lower() in value for p in patterns)


# ==============================================================================
# Conditions
# ==============================================================================


class GoalCondition(BaseModel):
    """Base class for the per-type goal conditions."""

    model_config = {"extra": "ignore", "frozen": True}

    goal_type: str

    # Conditions counting distinct destinations rather than events
    distinct: ClassVar[bool] = False

    def matches(self, event: RawEvent) -> bool:
        """Whether a single event qualifies."""
        return False

    def matched_targets(self, event: RawEvent) -> set[str]:
        """Destinations matched by a single event (distinct conditions only)."""
        return set()


class CtaClickCondition(GoalCondition):
    """Matches clicks on configured CTAs by text or CSS selector."""

    goal_type: Literal["cta_click"] = "cta_click"
    cta_selectors: list[str] = Field(default_factory=list)
    cta_text_patterns: list[str] = Field(default_factory=list)
    cta_match_mode: Literal["exact", "partial"] = "partial"
    manual_cta_label: str | None = None

    @property
    def text_patterns(self) -> list[str]:
        patterns = [p for p in self.cta_text_patterns if p]
        if self.manual_cta_label:
            patterns.append(self.manual_cta_label)
        return patterns

    def matches(self, event: RawEvent) -> bool:
        if not event.cta_text and not event.cta_selector:
            return False

        if event.cta_text:
            text = event.cta_text.lower()
            for pattern in self.text_patterns:
                pattern = pattern.lower()
                if self.cta_match_mode == "exact":
                    if text == pattern:
                        return True
                elif pattern in text:
                    return True

        return _contains_any(event.cta_selector, self.cta_selectors)


class PageDestinationCondition(GoalCondition):
    """Matches page views on configured destination URLs."""

    goal_type: Literal["page_destination"] = "page_destination"
    destination_urls: list[str] = Field(default_factory=list)
    url_match_mode: Literal["exact", "contains", "pattern"] = "contains"
    distinct: ClassVar[bool] = True

    def _url_matches(self, recorded: str, target: str) -> bool:
        if self.url_match_mode == "exact":
            return recorded == target
        if self.url_match_mode == "pattern":
            return target in recorded
        return target in recorded or recorded in target

    def matched_targets(self, event: RawEvent) -> set[str]:
        if event.event_type != EventType.PAGE_VIEW.value or not event.page_url:
            return set()
        recorded = normalize_url(event.page_url)
        targets = (normalize_url(u) for u in self.destination_urls if u)
        return {t for t in targets if self._url_matches(recorded, t)}

    def matches(self, event: RawEvent) -> bool:
        return bool(self.matched_targets(event))


class UrlPatternCondition(GoalCondition):
    """Matches link clicks by href (wa.me, tel:, ...) or link text."""

    goal_type: Literal["url_pattern"] = "url_pattern"
    link_url_patterns: list[str] = Field(default_factory=list)
    link_text_patterns: list[str] = Field(default_factory=list)

    def matches(self, event: RawEvent) -> bool:
        href = event.metadata.href
        if not event.cta_text and not href:
            return False
        return _contains_any(href, self.link_url_patterns) or _contains_any(
            event.cta_text, self.link_text_patterns
        )


class ScrollDepthCondition(GoalCondition):
    """Matches page exits that scrolled at least ``scroll_threshold`` percent."""

    goal_type: Literal["scroll_depth"] = "scroll_depth"
    scroll_threshold: float = DEFAULT_SCROLL_THRESHOLD

    def matches(self, event: RawEvent) -> bool:
        if event.event_type != EventType.PAGE_EXIT.value or event.scroll_depth is None:
            return False
        return event.scroll_depth >= self.scroll_threshold


class TimeOnPageCondition(GoalCondition):
    """Matches page exits that stayed at least ``min_seconds`` on the page."""

    goal_type: Literal["time_on_page"] = "time_on_page"
    min_seconds: float = DEFAULT_MIN_SECONDS

    def matches(self, event: RawEvent) -> bool:
        if event.event_type != EventType.PAGE_EXIT.value or event.time_on_page is None:
            return False
        return event.time_on_page >= self.min_seconds


class PagesVisitedCondition(GoalCondition):
    """Legacy: distinct target URLs reached by page views."""

    goal_type: Literal["pages_visited"] = "pages_visited"
    target_urls: list[str] = Field(default_factory=list)
    distinct: ClassVar[bool] = True

    def matched_targets(self, event: RawEvent) -> set[str]:
        if event.event_type != EventType.PAGE_VIEW.value or not event.page_url:
            return set()
        recorded = normalize_url(event.page_url)
        targets = (normalize_url(u) for u in self.target_urls if u)
        return {t for t in targets if t in recorded or recorded in t}

    def matches(self, event: RawEvent) -> bool:
        return bool(self.matched_targets(event))


class EventCountCondition(GoalCondition):
    """Legacy: events whose type is one of ``target_events``."""

    goal_type: Literal["event_count"] = "event_count"
    target_events: list[str] = Field(default_factory=list)

    def matches(self, event: RawEvent) -> bool:
        wanted = {t.lower() for t in self.target_events}
        return event.event_type.lower() in wanted


class UnknownCondition(GoalCondition):
    """Any goal type this engine does not know. Never matches."""


class CombinedCondition(GoalCondition):
    """
    All sub-conditions must hold on the same single event.

    Sub-conditions are evaluated against one event's fields, not across the
    events of a session. Nested combined conditions are not supported and
    parse as UnknownCondition, which makes the whole condition unmatchable.
    An empty condition list matches nothing.
    """

    goal_type: Literal["combined"] = "combined"
    conditions: list[SerializeAsAny[GoalCondition]] = Field(default_factory=list)

    @field_validator("conditions", mode="before")
    @classmethod
    def _parse_conditions(cls, value: Any) -> Any:
        parsed = []
        for item in value or []:
            if isinstance(item, GoalCondition):
                parsed.append(item)
                continue
            if not isinstance(item, dict):
                logger.warning("Malformed combined sub-condition %r; it will never match", item)
                parsed.append(UnknownCondition(goal_type=str(item)))
                continue
            goal_type = item.get("type") or item.get("goal_type") or ""
            if goal_type == "combined":
                logger.warning("Nested combined condition is not supported; it will never match")
                parsed.append(UnknownCondition(goal_type=goal_type))
                continue
            parsed.append(parse_condition(goal_type, item.get("config") or {}))
        return parsed

    def matches(self, event: RawEvent) -> bool:
        if not self.conditions:
            return False
        return all(c.matches(event) for c in self.conditions)


_KnownCondition = Annotated[
    Union[
        CtaClickCondition,
        PageDestinationCondition,
        UrlPatternCondition,
        ScrollDepthCondition,
        TimeOnPageCondition,
        CombinedCondition,
        PagesVisitedCondition,
        EventCountCondition,
    ],
    Field(discriminator="goal_type"),
]

_CONDITION_ADAPTER = TypeAdapter(_KnownCondition)

GOAL_TYPES = (
    "cta_click",
    "page_destination",
    "url_pattern",
    "scroll_depth",
    "time_on_page",
    "combined",
    "pages_visited",
    "event_count",
)


def parse_condition(goal_type: str, config: dict) -> GoalCondition:
    """
    Parse a goal type and its config dict into a condition.

    Unknown goal types yield an UnknownCondition instead of raising.
    """
    if goal_type not in GOAL_TYPES:
        logger.debug("Unknown goal type %r; it will never match", goal_type)
        return UnknownCondition(goal_type=goal_type or "unknown")
    return _CONDITION_ADAPTER.validate_python({**config, "goal_type": goal_type})


# ==============================================================================
# Goal
# ==============================================================================


class Goal(BaseModel):
    """
    A configured conversion goal.

    Accepts the stored record shape (``goal_type``, ``config``, legacy
    ``target_urls``/``target_events``) and parses it into ``condition``.
    ``enabled`` is carried for presentation and does not gate evaluation.
    """

    id: str | None = None
    name: str = ""
    description: str | None = None
    goal_type: str
    condition: SerializeAsAny[GoalCondition]
    target_value: int = 1
    currency_value: float = 0
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def _build_condition(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "condition" in data:
            return data
        goal_type = data.get("goal_type") or ""
        config = dict(data.get("config") or {})
        # Legacy goals keep their targets on the record itself
        for key in ("target_urls", "target_events"):
            if data.get(key) is not None:
                config.setdefault(key, data[key])
        return {**data, "goal_type": goal_type, "condition": parse_condition(goal_type, config)}


def parse_goal(record: dict) -> Goal:
    """Parse a stored goal record."""
    return Goal.model_validate(record)


# ==============================================================================
# Evaluation
# ==============================================================================


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def progress_for(current: int, target_value: int) -> GoalProgress:
    """Build a GoalProgress from a qualifying-occurrence count."""
    percentage = min(100, _round_half_up(current / max(target_value, 1) * 100))
    return GoalProgress(current=current, percentage=percentage, completed=current >= target_value)


def count_qualifying(condition: GoalCondition, events: Iterable[RawEvent]) -> int:
    """
    Count qualifying occurrences for a condition.

    Distinct conditions count the distinct destinations matched across all
    events; all others count every qualifying event.
    """
    if condition.distinct:
        matched: set[str] = set()
        for event in events:
            matched |= condition.matched_targets(event)
        return len(matched)
    return sum(1 for event in events if condition.matches(event))


def evaluate(goal: Goal, events: Iterable[RawEvent]) -> GoalProgress:
    """
    Evaluate a goal against an event snapshot.

    Returns:
        GoalProgress with current, percentage (capped at 100) and completed
    """
    current = count_qualifying(goal.condition, events)
    return progress_for(current, goal.target_value)


def evaluate_all(goals: list[Goal], events: Iterable[RawEvent]) -> list[tuple[Goal, GoalProgress]]:
    """Evaluate every goal against the same snapshot."""
    events = list(events)
    return [(goal, evaluate(goal, events)) for goal in goals]


def completed_goals(goals: list[Goal], events: Iterable[RawEvent]) -> list[Goal]:
    """Enabled goals whose target has been reached."""
    return [g for g, p in evaluate_all(goals, events) if g.enabled and p.completed]


def total_goal_value(goals: list[Goal], events: Iterable[RawEvent]) -> float:
    """Sum of currency values over enabled, completed goals."""
    return sum(g.currency_value for g in completed_goals(goals, events))
