# ==============================================================================
# Snapshot Store Abstract Base Class
# ==============================================================================
"""
Abstract interface for heatmap snapshot history.

Snapshots are kept newest first. Each store applies a RetentionPolicy on
save, evicting the oldest entries once the history exceeds ``max_items``.

Implementations: InMemorySnapshotStore, ValkeySnapshotStore
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from insights.core.models import HeatmapSnapshot

DEFAULT_MAX_SNAPSHOTS = 30


@dataclass(frozen=True)
class RetentionPolicy:
    """How many snapshots a store keeps."""

    max_items: int = DEFAULT_MAX_SNAPSHOTS

    def apply(self, snapshots: list[HeatmapSnapshot]) -> list[HeatmapSnapshot]:
        """Trim a newest-first list to the retained prefix."""
        return snapshots[: max(self.max_items, 0)]


class SnapshotStore(ABC):
    """Persistent, size-bounded history of heatmap snapshots."""

    def __init__(self, policy: RetentionPolicy | None = None):
        self.policy = policy or RetentionPolicy()

    @abstractmethod
    def list(self) -> list[HeatmapSnapshot]:
        """
        Get all retained snapshots.

        Returns:
            Snapshots, newest first
        """
        ...

    @abstractmethod
    def save(self, snapshot: HeatmapSnapshot) -> None:
        """
        Prepend a snapshot and apply the retention policy.

        Args:
            snapshot: Snapshot to store
        """
        ...

    @abstractmethod
    def delete(self, snapshot_id: str) -> bool:
        """
        Delete one snapshot.

        Returns:
            True if a snapshot was removed, False if the id was not found
        """
        ...

    @abstractmethod
    def delete_all(self) -> int:
        """
        Delete every snapshot.

        Returns:
            Count of snapshots deleted
        """
        ...
