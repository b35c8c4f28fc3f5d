from .aggregates import (
    AdminResource,
    CircuitBreakerMap,
    CircuitBreakerStatus,
    CircuitState,
    LoadBalancerSummary,
    RateLimitStatus,
)
from .errors import (
    AdminApiError,
    AdminResponseInvalid,
    MessageDecodeError,
    ReplicaDashboardError,
)
from .messages import DeltaMessage, SnapshotMessage, StreamMessage
from .models import MetricSample, ReplicaRecord

__all__ = [
    "AdminApiError",
    "AdminResponseInvalid",
    "AdminResource",
    "CircuitBreakerMap",
    "CircuitBreakerStatus",
    "CircuitState",
    "DeltaMessage",
    "LoadBalancerSummary",
    "MessageDecodeError",
    "MetricSample",
    "RateLimitStatus",
    "ReplicaDashboardError",
    "ReplicaRecord",
    "SnapshotMessage",
    "StreamMessage",
]
