"""Session-scoped state shared by the stream client and the poller."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from replica_dashboard.core.logger import get_logger
from replica_dashboard.domain.aggregates import AdminResource
from replica_dashboard.domain.messages import DeltaMessage, SnapshotMessage
from replica_dashboard.infrastructure.metrics import (
    HISTORY_SAMPLES,
    REGISTRY_SIZE,
    STREAM_MESSAGES_TOTAL,
)
from replica_dashboard.realtime.aggregates import AggregateStats
from replica_dashboard.realtime.history import MAX_SAMPLES, HistoryStore
from replica_dashboard.realtime.registry import LiveRegistry, Registry

logger = get_logger("replica_dashboard.session")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashboardSession:
    """Owns the registry, the history store and the aggregate stats.

    The stream client feeds ``handle_message`` and the poller feeds
    ``update_aggregate``; nothing else writes to the state held here. Once
    closed, both entry points ignore their input.
    """

    def __init__(
        self,
        history_max_samples: int = MAX_SAMPLES,
        sample_snapshots: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._clock = clock
        self.registry = LiveRegistry()
        self.history = HistoryStore(history_max_samples, clock=clock)
        self.aggregates = AggregateStats(clock=clock)
        self.sample_snapshots = sample_snapshots
        self.started_at = clock()
        self.last_message_at: Optional[datetime] = None
        self.ready_event = asyncio.Event()
        self._closed = False

    @classmethod
    def from_settings(cls, settings) -> "DashboardSession":
        return cls(
            history_max_samples=settings.history_max_samples,
            sample_snapshots=settings.history_sample_snapshots,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def handle_message(self, message: SnapshotMessage | DeltaMessage) -> Registry:
        """Fold one stream message into the registry and record history.

        Runs to completion without awaiting, so no other callback can see a
        half-merged registry.
        """
        if self._closed:
            logger.debug("message_after_close_ignored", extra={"kind": message.kind})
            return ()
        touched = self.registry.apply(message)
        if isinstance(message, DeltaMessage) or self.sample_snapshots:
            for record in touched:
                self.history.append(
                    record.id, record.ema_latency_ms, record.error_rate, record.alive
                )
        self.last_message_at = self._clock()
        STREAM_MESSAGES_TOTAL.labels(kind=message.kind).inc()
        REGISTRY_SIZE.set(len(self.registry))
        HISTORY_SAMPLES.set(self.history.total_samples())
        if not self.ready_event.is_set():
            logger.info(
                "first_stream_message_applied",
                extra={"kind": message.kind, "replicas": len(self.registry)},
            )
            self.ready_event.set()
        return touched

    def update_aggregate(self, resource: AdminResource, value) -> bool:
        if self._closed:
            return False
        self.aggregates.replace(resource, value)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info(
            "dashboard_session_closed",
            extra={
                "replicas": len(self.registry),
                "history_replicas": len(self.history),
            },
        )
