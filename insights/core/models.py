# ==============================================================================
# Tracking Domain Models
# ==============================================================================
"""
Pydantic models for raw tracking events and the entities derived from them.

These models are used for:
- Validating events read from files or handed over by the event store
- Typing the outputs of the session, journey, goal and heatmap aggregators
- Serializing results for the CLI's JSON output

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class EventType(str, Enum):
    """Event types emitted by the tracking script.

    Events are stored with a plain string ``event_type`` so that new types
    pass through untouched; this enum only names the ones the core reads.
    """

    PAGE_VIEW = "page_view"
    PAGE_EXIT = "page_exit"
    CLICK = "click"
    BUTTON_CLICK = "button_click"
    WHATSAPP_CLICK = "whatsapp_click"
    PHONE_CLICK = "phone_click"
    EMAIL_CLICK = "email_click"
    HEATMAP_CLICK = "heatmap_click"
    FORM_SUBMIT = "form_submit"
    PRODUCT_VIEW = "product_view"
    ADD_TO_CART = "add_to_cart"
    REMOVE_FROM_CART = "remove_from_cart"
    BEGIN_CHECKOUT = "begin_checkout"
    PURCHASE = "purchase"
    SEARCH = "search"
    CONVERSION = "conversion"
    LEAD = "lead"
    SIGNUP = "signup"


# Events that mark a session as converted
CONVERSION_EVENT_TYPES = frozenset(
    {
        EventType.PURCHASE.value,
        EventType.CONVERSION.value,
        EventType.LEAD.value,
        EventType.SIGNUP.value,
        EventType.FORM_SUBMIT.value,
    }
)

# Events counted as clicks on the spatial heatmap page list
CLICK_EVENT_TYPES = frozenset(
    {
        EventType.CLICK.value,
        EventType.BUTTON_CLICK.value,
        EventType.WHATSAPP_CLICK.value,
        EventType.PHONE_CLICK.value,
        EventType.EMAIL_CLICK.value,
        EventType.HEATMAP_CLICK.value,
    }
)


class MovePoint(BaseModel):
    """A single mouse-movement sample recorded by the tracking script."""

    x: float
    y: float
    t: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_sequence(cls, data: Any) -> Any:
        # The script may send compact [x, y] or [x, y, t] samples
        if isinstance(data, (list, tuple)):
            keys = ("x", "y", "t")
            return dict(zip(keys, data))
        return data


class EventMetadata(BaseModel):
    """
    Free-form metadata attached to an event.

    Only the keys used by the heatmap and goal aggregators are modelled.
    Both the wire names (``vp_w``, ``doc_h``) and the camelCase names
    (``viewportW``, ``docHeight``) are accepted.
    """

    model_config = {"extra": "ignore", "frozen": True}

    click_x: float | None = Field(None, validation_alias=AliasChoices("click_x", "clickX"))
    click_y: float | None = Field(None, validation_alias=AliasChoices("click_y", "clickY"))
    viewport_w: int | None = Field(
        None, validation_alias=AliasChoices("viewport_w", "vp_w", "viewportW")
    )
    viewport_h: int | None = Field(
        None, validation_alias=AliasChoices("viewport_h", "vp_h", "viewportH")
    )
    doc_height: int | None = Field(
        None, validation_alias=AliasChoices("doc_height", "doc_h", "docHeight")
    )
    move_samples: list[MovePoint] = Field(
        default_factory=list, validation_alias=AliasChoices("move_samples", "moveSamples")
    )
    href: str | None = None

    @field_validator("move_samples", mode="before")
    @classmethod
    def _null_move_samples(cls, value: Any) -> Any:
        # Columnar exports fill keys missing from a row with null
        return [] if value is None else value


class RawEvent(BaseModel):
    """
    Represents a single tracking event as produced by the ingestion pipeline.

    Events are immutable. Ordering across a collection is not guaranteed;
    aggregators sort by ``created_at`` within each group.

    Attributes:
        session_id: Session identifier assigned by the tracking script
        visitor_id: Persistent visitor identifier
        event_type: Event type string (see EventType for known values)
        created_at: When the event occurred
        page_url: Full URL of the page the event was recorded on
        metadata: Click coordinates, viewport sizes, move samples and link href
    """

    model_config = {"populate_by_name": True, "frozen": True, "extra": "ignore"}

    id: str | None = None
    session_id: str | None = Field(None, alias="sessionId")
    visitor_id: str | None = Field(None, alias="visitorId")
    event_type: str = Field(..., alias="eventType")
    created_at: datetime = Field(..., alias="createdAt")
    page_url: str | None = Field(None, alias="pageUrl")

    cta_text: str | None = Field(None, alias="ctaText")
    cta_selector: str | None = Field(None, alias="ctaSelector")
    scroll_depth: float | None = Field(None, alias="scrollDepth")
    time_on_page: float | None = Field(None, alias="timeOnPage")

    product_name: str | None = Field(None, alias="productName")
    product_price: float | None = Field(None, alias="productPrice")
    cart_value: float | None = Field(None, alias="cartValue")

    device: str | None = None
    browser: str | None = None
    os: str | None = None
    city: str | None = None
    country: str | None = None
    referrer: str | None = None

    utm_source: str | None = Field(None, alias="utmSource")
    utm_medium: str | None = Field(None, alias="utmMedium")
    utm_campaign: str | None = Field(None, alias="utmCampaign")
    utm_term: str | None = Field(None, alias="utmTerm")
    utm_content: str | None = Field(None, alias="utmContent")

    metadata: EventMetadata = Field(default_factory=EventMetadata)

    @field_validator("session_id", "visitor_id", "id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _decode_metadata(cls, value: Any) -> Any:
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            return json.loads(value)
        return value

    @property
    def group_key(self) -> str:
        """Key used to group events into sessions."""
        return self.session_id or self.visitor_id or "unknown"

    @property
    def monetary_value(self) -> float:
        """Product price, falling back to cart value, 0 when neither is present."""
        if self.product_price is not None:
            return self.product_price
        if self.cart_value is not None:
            return self.cart_value
        return 0.0


class BotInfo(BaseModel):
    """Result of the bot classifier for one session."""

    is_bot: bool = False
    bot_name: str | None = None
    bot_category: str | None = None


class Session(BaseModel):
    """
    A reconstructed visitor session.

    Invariant: ``is_bounce`` implies ``pages_viewed == 1``.
    """

    session_id: str
    visitor_id: str | None = None
    started_at: datetime
    duration_sec: int
    pages_viewed: int
    landing_page: str
    exit_page: str
    event_count: int
    device: str | None = None
    browser: str | None = None
    os: str | None = None
    city: str | None = None
    is_bounce: bool
    bot_classification: BotInfo = Field(default_factory=BotInfo)


class JourneyStep(BaseModel):
    """One page visit inside a journey."""

    page: str
    action: str
    duration_sec: int
    scroll_depth: float = 0
    timestamp: datetime
    cta_clicked: str | None = None
    cta_selector: str | None = None


class Journey(BaseModel):
    """The ordered, same-page-collapsed step sequence of a session."""

    session_id: str
    visitor_id: str
    device: str
    os: str
    browser: str
    city: str
    country: str
    source: str
    medium: str
    started_at: datetime
    total_duration_sec: int
    steps: list[JourneyStep]
    converted: bool
    conversion_value: float
    conversion_page: str | None = None


class GoalProgress(BaseModel):
    """Progress of one goal against an event snapshot. Never persisted."""

    current: int = 0
    percentage: int = 0
    completed: bool = False


class HeatmapPoint(BaseModel):
    """A click position, interpreted relative to the reference viewport width."""

    x: float
    y: float
    viewport_w: int
    viewport_h: int
    doc_height: int
    session_id: str | None = None
    visitor_id: str | None = None


DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class TemporalGrid(BaseModel):
    """A 7×24 day-of-week × hour-of-day grid. Row 0 is Monday."""

    cells: list[list[int]] = Field(default_factory=lambda: [[0] * 24 for _ in range(7)])

    @property
    def day_labels(self) -> tuple[str, ...]:
        return DAY_LABELS

    @property
    def total(self) -> int:
        """Sum over all cells."""
        return sum(sum(row) for row in self.cells)

    @property
    def max_value(self) -> int:
        return max((max(row) for row in self.cells), default=0)

    def cell(self, day: int, hour: int) -> int:
        return self.cells[day][hour]


class HeatmapSnapshot(BaseModel):
    """
    A saved heatmap capture with its thumbnail.

    The PNG thumbnail is held as raw bytes and travels as base64 in JSON.
    """

    model_config = {"ser_json_bytes": "base64", "val_json_bytes": "base64"}

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    url: str
    mode: Literal["click", "scroll"] = "click"
    device: str = "all"
    total_clicks: int = 0
    avg_scroll: int = 0
    visitors: int = 0
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    thumbnail: bytes = b""
