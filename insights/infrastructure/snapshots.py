# ==============================================================================
# Snapshot Store Implementations
# ==============================================================================
"""
In-memory and Valkey/Redis implementations of the SnapshotStore interface.

The Valkey store keeps the whole history in one Redis list, newest at the
head. Saving is an LPUSH followed by an LTRIM to the retention limit inside a
single transaction, so the list never grows past the limit.
"""

import logging

import redis
from pydantic import ValidationError
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from insights.base.snapshots import RetentionPolicy, SnapshotStore
from insights.core.models import HeatmapSnapshot
from insights.utils.config import Settings, get_settings
from insights.utils.retry import (
    RETRY_ATTEMPTS,
    RETRY_WAIT_MAX,
    RETRY_WAIT_MIN,
    VALKEY_RETRIES,
    log_retry_attempt,
)

logger = logging.getLogger(__name__)

_valkey_retry = retry(
    stop=stop_after_attempt(RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX),
    retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
    before_sleep=log_retry_attempt(logger),
    reraise=True,
)


def get_valkey_client() -> redis.Redis:
    """
    Get a Valkey/Redis client connection.

    Configured with:
    - 10 second socket timeouts for fast failure detection
    - Automatic retries with exponential backoff for transient failures
    - Health check interval to keep connections alive

    Returns:
        redis.Redis client instance
    """
    settings = get_settings()
    retry_strategy = Retry(ExponentialBackoff(cap=32, base=1), retries=VALKEY_RETRIES)

    return redis.from_url(
        settings.valkey.url,
        decode_responses=True,
        socket_timeout=10,
        socket_connect_timeout=10,
        retry=retry_strategy,
        retry_on_error=[RedisTimeoutError, RedisConnectionError],
        health_check_interval=30,
    )


class InMemorySnapshotStore(SnapshotStore):
    """Process-local snapshot history. Used by default and in tests."""

    def __init__(self, policy: RetentionPolicy | None = None):
        super().__init__(policy)
        self._snapshots: list[HeatmapSnapshot] = []

    def list(self) -> list[HeatmapSnapshot]:
        return list(self._snapshots)

    def save(self, snapshot: HeatmapSnapshot) -> None:
        self._snapshots = self.policy.apply([snapshot, *self._snapshots])

    def delete(self, snapshot_id: str) -> bool:
        before = len(self._snapshots)
        self._snapshots = [s for s in self._snapshots if s.id != snapshot_id]
        return len(self._snapshots) < before

    def delete_all(self) -> int:
        count = len(self._snapshots)
        self._snapshots = []
        return count


class ValkeySnapshotStore(SnapshotStore):
    """
    Valkey/Redis implementation of SnapshotStore.

    Snapshots are stored as JSON strings (thumbnail base64-encoded) in the
    list at ``key``. Entries that fail to decode are skipped with a warning.
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        key: str | None = None,
        policy: RetentionPolicy | None = None,
    ):
        """
        Initialize the snapshot store.

        Args:
            client: Redis client instance. If None, creates a new connection.
            key: List key holding the history. If None, uses settings.
            policy: Retention policy. If None, keeps the default 30 snapshots.
        """
        super().__init__(policy)
        self._client = client or get_valkey_client()
        self._key = key or get_settings().snapshot.key

    @property
    def client(self) -> redis.Redis:
        """Get the underlying Redis client."""
        return self._client

    @_valkey_retry
    def list(self) -> list[HeatmapSnapshot]:
        snapshots = []
        for raw in self._client.lrange(self._key, 0, -1):
            try:
                snapshots.append(HeatmapSnapshot.model_validate_json(raw))
            except ValidationError:
                logger.warning("Skipping undecodable snapshot in %s", self._key)
        return snapshots

    @_valkey_retry
    def save(self, snapshot: HeatmapSnapshot) -> None:
        pipe = self._client.pipeline()
        pipe.lpush(self._key, snapshot.model_dump_json())
        pipe.ltrim(self._key, 0, self.policy.max_items - 1)
        pipe.execute()
        logger.debug("Saved snapshot %s to %s", snapshot.id, self._key)

    @_valkey_retry
    def delete(self, snapshot_id: str) -> bool:
        for raw in self._client.lrange(self._key, 0, -1):
            try:
                snapshot = HeatmapSnapshot.model_validate_json(raw)
            except ValidationError:
                continue
            if snapshot.id == snapshot_id:
                return self._client.lrem(self._key, 1, raw) > 0
        return False

    @_valkey_retry
    def delete_all(self) -> int:
        pipe = self._client.pipeline()
        pipe.llen(self._key)
        pipe.delete(self._key)
        count, _ = pipe.execute()
        return count


def get_snapshot_store(settings: Settings | None = None) -> SnapshotStore:
    """
    Create the snapshot store selected by ``SNAPSHOT_BACKEND``.

    Args:
        settings: Settings to use. If None, uses the cached settings.

    Returns:
        InMemorySnapshotStore or ValkeySnapshotStore
    """
    settings = settings or get_settings()
    policy = RetentionPolicy(max_items=settings.snapshot.retention)
    if settings.snapshot.backend == "valkey":
        return ValkeySnapshotStore(key=settings.snapshot.key, policy=policy)
    return InMemorySnapshotStore(policy=policy)
