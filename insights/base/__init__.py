# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes for the pluggable parts of the engine.

- BotClassifier: turns a client signature into a BotInfo
- SnapshotStore: bounded, newest-first heatmap snapshot history
"""

from insights.base.classifier import BotClassifier
from insights.base.snapshots import RetentionPolicy, SnapshotStore

__all__ = [
    "BotClassifier",
    "RetentionPolicy",
    "SnapshotStore",
]
