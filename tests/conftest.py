from datetime import datetime, timedelta, timezone

import pytest

from replica_dashboard.session import DashboardSession


def wire_record(replica_id: int, **overrides) -> dict:
    """A replica record as the balancer puts it on the wire."""
    record = {
        "id": replica_id,
        "url": f"http://localhost:{9000 + replica_id}",
        "ema_ms": 12.5,
        "error_rate": 0.0,
        "alive": True,
        "last_checked": "2025-01-01T00:00:00Z",
    }
    record.update(overrides)
    return record


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None, step_s: float = 1.0):
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.step = timedelta(seconds=step_s)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def session(clock):
    return DashboardSession(clock=clock)


@pytest.fixture
def make_record():
    return wire_record
