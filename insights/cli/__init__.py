# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for the insights engine.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- sessions.py, journeys.py, goals.py, ecommerce.py: event-file reports
- heatmap.py: temporal grid, page summary and PNG rendering
- snapshots.py: heatmap snapshot history
- config.py: configuration display
"""

from insights.cli.shared import (
    BOX_WIDTH,
    B,
    Box,
    C,
    Colors,
    I,
    Icons,
)

__all__ = [
    "BOX_WIDTH",
    "B",
    "Box",
    "C",
    "Colors",
    "I",
    "Icons",
]
