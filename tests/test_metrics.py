# ==============================================================================
# Tests for Dashboard Metrics
# ==============================================================================
"""
Unit tests for insights.core.metrics.

Tests cover:
- E-commerce revenue and funnel rates
- Zero-guarded rates
- Per-type, per-field and per-day breakdowns
"""

from conftest import make_event

from insights.core.metrics import (
    category_of,
    click_through_rate,
    distribution_by,
    ecommerce_summary,
    event_type_totals,
    events_by_day,
    safe_rate,
)


class TestSafeRate:
    """Tests for safe_rate()."""

    def test_zero_denominator(self):
        assert safe_rate(5, 0) == 0.0

    def test_rounding(self):
        assert safe_rate(1, 3) == 33.3
        assert safe_rate(2, 3, digits=0) == 67.0


class TestEcommerceSummary:
    """Tests for ecommerce_summary()."""

    def test_revenue_and_average_ticket(self):
        events = [make_event("purchase", cart_value=150), make_event("purchase", product_price=80)]
        summary = ecommerce_summary(events)

        assert summary["total_revenue"] == 230
        assert summary["total_purchases"] == 2
        assert summary["avg_ticket"] == 115

    def test_product_price_wins_over_cart_value(self):
        summary = ecommerce_summary([make_event("purchase", product_price=10, cart_value=99)])
        assert summary["total_revenue"] == 10

    def test_funnel(self):
        events = (
            [make_event("product_view")] * 4
            + [make_event("add_to_cart")] * 4
            + [make_event("begin_checkout")] * 2
            + [make_event("purchase", product_price=5)]
            + [make_event("search")]
        )
        summary = ecommerce_summary(iter(events))

        assert summary["product_views"] == 4
        assert summary["searches"] == 1
        assert summary["cart_to_checkout"] == 50.0
        assert summary["checkout_to_purchase"] == 50.0

    def test_empty(self):
        summary = ecommerce_summary([])
        assert summary["total_revenue"] == 0
        assert summary["avg_ticket"] == 0.0
        assert summary["cart_to_checkout"] == 0.0
        assert summary["checkout_to_purchase"] == 0.0


class TestBreakdowns:
    """Tests for the per-type, per-field and per-day breakdowns."""

    def test_click_through_rate(self):
        events = [
            make_event("page_view"),
            make_event("page_view"),
            make_event("button_click", cta_text="Buy"),
        ]
        assert click_through_rate(events) == 50.0
        assert click_through_rate([]) == 0.0

    def test_event_type_totals(self):
        events = [make_event("click"), make_event("page_view"), make_event("click")]
        assert event_type_totals(events) == [
            {"type": "click", "count": 2},
            {"type": "page_view", "count": 1},
        ]

    def test_distribution_unknown_bucket(self):
        events = [make_event(device="mobile"), make_event(device=None), make_event(device="mobile")]
        assert distribution_by(events, "device") == [
            {"name": "mobile", "value": 2},
            {"name": "Unknown", "value": 1},
        ]

    def test_category_of(self):
        assert category_of("purchase") == "ecommerce"
        assert category_of("whatsapp_click") == "conversions"
        assert category_of("page_view") == "tracking"
        assert category_of("something_new") == "tracking"

    def test_events_by_day(self):
        events = [
            make_event("page_view", 86400),
            make_event("purchase", 0),
            make_event("form_submit", 60),
        ]
        assert events_by_day(events) == [
            {"date": "2024-03-04", "tracking": 0, "conversions": 1, "ecommerce": 1},
            {"date": "2024-03-05", "tracking": 1, "conversions": 0, "ecommerce": 0},
        ]
