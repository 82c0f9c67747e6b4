# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Concrete implementations of the base interfaces, plus file loading.

- bots.py - Signature-table bot classifier
- snapshots.py - In-memory and Valkey snapshot stores
- loader.py - Event and goal file loading (Polars)
"""

from insights.infrastructure.bots import PatternBotClassifier
from insights.infrastructure.loader import load_events, load_goals
from insights.infrastructure.snapshots import (
    InMemorySnapshotStore,
    ValkeySnapshotStore,
    get_snapshot_store,
)

__all__ = [
    "InMemorySnapshotStore",
    "PatternBotClassifier",
    "ValkeySnapshotStore",
    "get_snapshot_store",
    "load_events",
    "load_goals",
]
