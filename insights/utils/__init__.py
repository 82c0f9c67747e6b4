# ==============================================================================
# Insights Utilities
# ==============================================================================
"""
Configuration and retry helpers shared across the engine.
"""

from insights.utils.config import (
    HeatmapSettings,
    SessionSettings,
    Settings,
    SnapshotSettings,
    ValkeySettings,
    get_settings,
)
from insights.utils.retry import (
    RETRY_ATTEMPTS,
    RETRY_WAIT_MAX,
    RETRY_WAIT_MIN,
    VALKEY_RETRIES,
    log_retry_attempt,
)

__all__ = [
    "HeatmapSettings",
    "RETRY_ATTEMPTS",
    "RETRY_WAIT_MAX",
    "RETRY_WAIT_MIN",
    "SessionSettings",
    "Settings",
    "SnapshotSettings",
    "VALKEY_RETRIES",
    "ValkeySettings",
    "get_settings",
    "log_retry_attempt",
]
