# ==============================================================================
# Dashboard Metrics
# ==============================================================================
"""
Small zero-guarded aggregates over an event snapshot.

E-commerce revenue, funnel rates, click-through rate and per-type, per-field
and per-day breakdowns. Every rate returns 0 instead of dividing by zero.
"""

from collections import Counter
from collections.abc import Iterable

from insights.core.models import EventType, RawEvent

TRACKING = "tracking"
CONVERSIONS = "conversions"
ECOMMERCE = "ecommerce"

EVENT_CATEGORIES = {
    TRACKING: (
        EventType.PAGE_VIEW.value,
        EventType.PAGE_EXIT.value,
        EventType.BUTTON_CLICK.value,
        EventType.CLICK.value,
    ),
    CONVERSIONS: (
        EventType.WHATSAPP_CLICK.value,
        EventType.PHONE_CLICK.value,
        EventType.EMAIL_CLICK.value,
        EventType.FORM_SUBMIT.value,
    ),
    ECOMMERCE: (
        EventType.PRODUCT_VIEW.value,
        EventType.ADD_TO_CART.value,
        EventType.REMOVE_FROM_CART.value,
        EventType.BEGIN_CHECKOUT.value,
        EventType.PURCHASE.value,
        EventType.SEARCH.value,
    ),
}

UNKNOWN_LABEL = "Unknown"


def safe_rate(numerator: float, denominator: float, digits: int = 1) -> float:
    """numerator / denominator as a percentage, 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return round(numerator / denominator * 100, digits)


def category_of(event_type: str) -> str:
    """Dashboard category of an event type; anything unlisted is tracking."""
    if event_type in EVENT_CATEGORIES[ECOMMERCE]:
        return ECOMMERCE
    if event_type in EVENT_CATEGORIES[CONVERSIONS]:
        return CONVERSIONS
    return TRACKING


def ecommerce_summary(events: Iterable[RawEvent]) -> dict:
    """
    Revenue and funnel figures.

    Revenue sums ``product_price``, falling back to ``cart_value``, over
    purchase events. Average ticket is revenue per purchase.
    """
    events = list(events)
    counts = Counter(e.event_type for e in events if e.event_type in EVENT_CATEGORIES[ECOMMERCE])
    purchases = [e for e in events if e.event_type == EventType.PURCHASE.value]
    revenue = sum(e.monetary_value for e in purchases)

    add_to_cart = counts[EventType.ADD_TO_CART.value]
    checkouts = counts[EventType.BEGIN_CHECKOUT.value]
    return {
        "total_revenue": revenue,
        "total_purchases": len(purchases),
        "avg_ticket": revenue / len(purchases) if purchases else 0.0,
        "product_views": counts[EventType.PRODUCT_VIEW.value],
        "add_to_cart": add_to_cart,
        "checkouts": checkouts,
        "searches": counts[EventType.SEARCH.value],
        "cart_to_checkout": safe_rate(checkouts, add_to_cart),
        "checkout_to_purchase": safe_rate(len(purchases), checkouts),
    }


def click_through_rate(events: Iterable[RawEvent]) -> float:
    """Events carrying a CTA text per page view, as a percentage."""
    views = 0
    cta_clicks = 0
    for event in events:
        if event.event_type == EventType.PAGE_VIEW.value:
            views += 1
        if event.cta_text:
            cta_clicks += 1
    return safe_rate(cta_clicks, views)


def event_type_totals(events: Iterable[RawEvent]) -> list[dict]:
    """Event count per type, most frequent first."""
    counts = Counter(e.event_type for e in events)
    return [{"type": t, "count": c} for t, c in counts.most_common()]


def distribution_by(events: Iterable[RawEvent], field: str) -> list[dict]:
    """Event count per value of ``field``; missing values count as "Unknown"."""
    counts = Counter(str(getattr(e, field, None) or UNKNOWN_LABEL) for e in events)
    return [{"name": name, "value": value} for name, value in counts.most_common()]


def events_by_day(events: Iterable[RawEvent]) -> list[dict]:
    """Per calendar day, event counts split into tracking, conversions and e-commerce."""
    days: dict[str, dict] = {}
    for event in sorted(events, key=lambda e: e.created_at):
        day = event.created_at.date().isoformat()
        entry = days.setdefault(day, {"date": day, TRACKING: 0, CONVERSIONS: 0, ECOMMERCE: 0})
        entry[category_of(event.event_type)] += 1
    return list(days.values())
