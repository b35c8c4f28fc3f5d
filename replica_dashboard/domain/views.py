"""Read-only projections handed to the presentation layer."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from replica_dashboard.metrics.formatting import (
    BreakerBucket,
    HealthBucket,
    LatencyBucket,
)

from .models import MetricSample


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReplicaCard(_View):
    id: int
    url: str
    ema_ms: float
    latency: str
    latency_bucket: LatencyBucket
    error_rate: float
    error_rate_display: str
    alive: bool
    health: HealthBucket
    last_checked: Optional[datetime] = None


class ReplicaHistory(_View):
    replica_id: int
    max_samples: int
    samples: List[MetricSample]


class RateLimitPanel(_View):
    enabled: bool
    type: str
    global_limit: float
    per_ip_limit: float
    active_ips: int
    global_tokens: Optional[float] = None
    updated_at: datetime


class CircuitBreakerRow(_View):
    backend: str
    label: str
    state: str
    state_bucket: BreakerBucket
    failure_count: int
    error_rate: float
    error_rate_display: str
    last_failure_time: Optional[datetime] = None
    next_attempt: Optional[datetime] = None


class CircuitBreakerPanel(_View):
    breakers: List[CircuitBreakerRow]
    updated_at: datetime


class LoadBalancerPanel(_View):
    algorithm: Optional[str] = None
    total_requests: Optional[str] = None
    active_backends: Optional[int] = None
    avg_response_time: Optional[str] = None
    requests_per_minute: Optional[float] = None
    updated_at: datetime


class AggregatesView(_View):
    rate_limit: Optional[RateLimitPanel] = None
    circuit_breakers: Optional[CircuitBreakerPanel] = None
    load_balancer: Optional[LoadBalancerPanel] = None


class DashboardView(_View):
    replicas: List[ReplicaCard]
    aggregates: AggregatesView
    last_message_at: Optional[datetime] = None
    generated_at: datetime
