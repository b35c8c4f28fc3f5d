"""Live replica registry and the reducer that folds stream messages into it."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from replica_dashboard.domain.messages import DeltaMessage, SnapshotMessage
from replica_dashboard.domain.models import ReplicaRecord

Registry = Tuple[ReplicaRecord, ...]


def _dedupe(records: Registry) -> Registry:
    """Keep the first position of each id, with its last occurrence's fields."""
    latest: Dict[int, ReplicaRecord] = {}
    for record in records:
        latest[record.id] = record
    if len(latest) == len(records):
        return records
    return tuple(latest.values())


def apply(
    registry: Registry, message: SnapshotMessage | DeltaMessage
) -> Registry:
    """Return the registry that results from applying ``message``.

    A snapshot replaces everything, in the server's order. A delta replaces
    the record with the same id where it stands, or appends it if the id is
    new.
    """
    if isinstance(message, SnapshotMessage):
        return _dedupe(tuple(message.records))
    record = message.record
    for index, existing in enumerate(registry):
        if existing.id == record.id:
            return registry[:index] + (record,) + registry[index + 1 :]
    return registry + (record,)


class LiveRegistry:
    """Single-writer holder of the current replica order and state."""

    def __init__(self, records: Registry = ()):
        self._records: Registry = _dedupe(tuple(records))

    def apply(self, message: SnapshotMessage | DeltaMessage) -> Registry:
        """Merge ``message`` and return the records it touched."""
        self._records = apply(self._records, message)
        if isinstance(message, SnapshotMessage):
            return self._records
        return (message.record,)

    def records(self) -> Registry:
        return self._records

    def ids(self) -> Tuple[int, ...]:
        return tuple(r.id for r in self._records)

    def get(self, replica_id: int) -> Optional[ReplicaRecord]:
        for record in self._records:
            if record.id == replica_id:
                return record
        return None

    def __len__(self) -> int:
        return len(self._records)
