from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from replica_dashboard.domain.aggregates import (
    AdminResource,
    CircuitBreakerMap,
    LoadBalancerSummary,
    RateLimitStatus,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AggregateStats:
    """Last good value of each polled admin resource.

    Values are replaced wholesale; a failed poll simply never calls
    ``replace`` so the previous value stays available.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self.rate_limit: Optional[RateLimitStatus] = None
        self.circuit_breakers: Optional[CircuitBreakerMap] = None
        self.load_balancer: Optional[LoadBalancerSummary] = None
        self.updated_at: Dict[AdminResource, datetime] = {}

    def replace(self, resource: AdminResource, value) -> None:
        if resource is AdminResource.RATE_LIMIT:
            self.rate_limit = value
        elif resource is AdminResource.CIRCUIT_BREAKER:
            self.circuit_breakers = dict(value)
        elif resource is AdminResource.LOAD_BALANCER:
            self.load_balancer = value
        else:  # pragma: no cover - enum is exhaustive
            raise ValueError(f"unknown resource {resource}")
        self.updated_at[resource] = self._clock()

    def get(self, resource: AdminResource):
        return {
            AdminResource.RATE_LIMIT: self.rate_limit,
            AdminResource.CIRCUIT_BREAKER: self.circuit_breakers,
            AdminResource.LOAD_BALANCER: self.load_balancer,
        }[resource]
