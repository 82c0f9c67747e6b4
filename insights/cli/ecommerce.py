# ==============================================================================
# E-commerce Command
# ==============================================================================
"""
E-commerce metrics command for the insights CLI.

Displays revenue, purchases, average ticket and funnel rates.
"""

from pathlib import Path
from typing import Annotated

import typer

from insights.cli.shared import (
    BOX_WIDTH,
    _box_bottom,
    _box_header,
    _empty_line,
    _kv_line,
    _section_header,
    load_events_or_exit,
    print_json,
)
from insights.core.metrics import click_through_rate, ecommerce_summary


def show_ecommerce(
    events_file: Annotated[Path, typer.Argument(help="Event export (.csv, .json, .ndjson)")],
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Show e-commerce metrics.

    Revenue counts each purchase's product price, or its cart value when no
    product price was recorded.

    Examples:
        insights ecommerce events.csv
        insights ecommerce events.csv --json
    """
    events = load_events_or_exit(events_file, json_output)
    summary = ecommerce_summary(events)
    summary["click_through_rate"] = click_through_rate(events)

    if json_output:
        print_json(summary)
        return

    W = BOX_WIDTH
    print()
    print(_box_header("E-COMMERCE", W))
    print(_empty_line(W))
    print(_kv_line("Revenue", f"{summary['total_revenue']:,.2f}", W))
    print(_kv_line("Purchases", f"{summary['total_purchases']:,}", W))
    print(_kv_line("Avg Ticket", f"{summary['avg_ticket']:,.2f}", W))
    print(_kv_line("CTA Click-Through", f"{summary['click_through_rate']:.1f}%", W))
    print(_section_header("Funnel", W))
    print(_kv_line("Product Views", f"{summary['product_views']:,}", W))
    print(_kv_line("Add to Cart", f"{summary['add_to_cart']:,}", W))
    print(_kv_line("Checkouts", f"{summary['checkouts']:,}", W))
    print(_kv_line("Searches", f"{summary['searches']:,}", W))
    print(_kv_line("Cart -> Checkout", f"{summary['cart_to_checkout']:.1f}%", W))
    print(_kv_line("Checkout -> Purchase", f"{summary['checkout_to_purchase']:.1f}%", W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()
