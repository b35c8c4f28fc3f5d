from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from replica_dashboard.domain.aggregates import AdminResource
from replica_dashboard.domain.models import ReplicaRecord
from replica_dashboard.domain.views import (
    AggregatesView,
    CircuitBreakerPanel,
    CircuitBreakerRow,
    DashboardView,
    LoadBalancerPanel,
    RateLimitPanel,
    ReplicaCard,
    ReplicaHistory,
)
from replica_dashboard.metrics import formatting as fmt
from replica_dashboard.session import DashboardSession


def replica_card(record: ReplicaRecord) -> ReplicaCard:
    return ReplicaCard(
        id=record.id,
        url=record.url,
        ema_ms=record.ema_latency_ms,
        latency=fmt.format_latency(record.ema_latency_ms),
        latency_bucket=fmt.latency_bucket(record.ema_latency_ms),
        error_rate=record.error_rate,
        error_rate_display=fmt.format_error_rate(record.error_rate),
        alive=record.alive,
        health=fmt.health_bucket(record.alive),
        last_checked=record.last_checked,
    )


class DashboardService:
    """Projects session state into view models.

    Reads only; every returned object is a fresh frozen model so callers
    cannot reach back into the session.
    """

    def __init__(self, session: DashboardSession):
        self.session = session

    def replicas(self) -> List[ReplicaCard]:
        return [replica_card(r) for r in self.session.registry.records()]

    def replica(self, replica_id: int) -> Optional[ReplicaCard]:
        record = self.session.registry.get(replica_id)
        return replica_card(record) if record is not None else None

    def history(self, replica_id: int) -> ReplicaHistory:
        return ReplicaHistory(
            replica_id=replica_id,
            max_samples=self.session.history.max_samples,
            samples=list(self.session.history.query(replica_id)),
        )

    def aggregates(self) -> AggregatesView:
        stats = self.session.aggregates
        updated = stats.updated_at

        rate_limit = None
        if stats.rate_limit is not None:
            rate_limit = RateLimitPanel(
                **stats.rate_limit.model_dump(),
                updated_at=updated[AdminResource.RATE_LIMIT],
            )

        breakers = None
        if stats.circuit_breakers is not None:
            breakers = CircuitBreakerPanel(
                breakers=[
                    CircuitBreakerRow(
                        backend=backend,
                        label=fmt.backend_label(backend),
                        state=status.state.value,
                        state_bucket=fmt.breaker_state_bucket(status.state.value),
                        failure_count=status.failure_count,
                        error_rate=status.error_rate,
                        error_rate_display=fmt.format_breaker_error_rate(
                            status.error_rate
                        ),
                        last_failure_time=status.last_failure_time,
                        next_attempt=status.next_attempt,
                    )
                    for backend, status in stats.circuit_breakers.items()
                ],
                updated_at=updated[AdminResource.CIRCUIT_BREAKER],
            )

        load_balancer = None
        lb = stats.load_balancer
        if lb is not None:
            load_balancer = LoadBalancerPanel(
                algorithm=fmt.format_algorithm(lb.algorithm) if lb.algorithm else None,
                total_requests=(
                    fmt.format_count(lb.total_requests)
                    if lb.total_requests is not None
                    else None
                ),
                active_backends=lb.active_backends,
                avg_response_time=(
                    fmt.format_response_time(lb.avg_response_time)
                    if lb.avg_response_time is not None
                    else None
                ),
                requests_per_minute=lb.requests_per_minute,
                updated_at=updated[AdminResource.LOAD_BALANCER],
            )

        return AggregatesView(
            rate_limit=rate_limit,
            circuit_breakers=breakers,
            load_balancer=load_balancer,
        )

    def dashboard(self) -> DashboardView:
        return DashboardView(
            replicas=self.replicas(),
            aggregates=self.aggregates(),
            last_message_at=self.session.last_message_at,
            generated_at=datetime.now(timezone.utc),
        )
