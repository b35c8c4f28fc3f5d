import asyncio
import logging

import pytest

from replica_dashboard.domain.aggregates import (
    AdminResource,
    CircuitBreakerStatus,
    LoadBalancerSummary,
    RateLimitStatus,
)
from replica_dashboard.domain.errors import AdminApiError, AdminResponseInvalid
from replica_dashboard.infrastructure.admin.poller import PollingAggregator


def rate_limit(active_ips: int) -> RateLimitStatus:
    return RateLimitStatus(
        enabled=True,
        type="token_bucket",
        global_limit=100,
        per_ip_limit=10,
        active_ips=active_ips,
    )


def breakers(failures: int) -> dict:
    return {
        "http://localhost:9001": CircuitBreakerStatus(
            state="closed", failure_count=failures, error_rate=0.0
        )
    }


def summary(total: int) -> LoadBalancerSummary:
    return LoadBalancerSummary(algorithm="round_robin", total_requests=total)


class FakeAdminApi:
    """Serves queued results per resource; exceptions are raised."""

    def __init__(self, **results):
        self.results = {AdminResource(k): v for k, v in results.items()}
        self.calls = []
        self.gate: asyncio.Event | None = None

    async def fetch(self, resource: AdminResource):
        self.calls.append(resource)
        if self.gate is not None:
            await self.gate.wait()
        result = self.results[resource]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.mark.asyncio
async def test_cycle_updates_all_three_snapshots(session):
    api = FakeAdminApi(
        rate_limit=rate_limit(1),
        circuit_breaker=breakers(0),
        load_balancer=summary(10),
    )
    poller = PollingAggregator(session, api)

    outcome = await poller.poll_once()

    assert all(outcome.values())
    assert session.aggregates.rate_limit.active_ips == 1
    breaker = session.aggregates.circuit_breakers["http://localhost:9001"]
    assert breaker.failure_count == 0
    assert session.aggregates.load_balancer.total_requests == 10
    assert set(session.aggregates.updated_at) == set(AdminResource)


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_value(session, caplog):
    api = FakeAdminApi(
        rate_limit=rate_limit(1),
        circuit_breaker=breakers(0),
        load_balancer=summary(10),
    )
    poller = PollingAggregator(session, api)
    await poller.poll_once()

    api.results[AdminResource.RATE_LIMIT] = AdminApiError(
        "rate_limit", "http status 500"
    )
    api.results[AdminResource.CIRCUIT_BREAKER] = breakers(3)
    api.results[AdminResource.LOAD_BALANCER] = summary(25)

    with caplog.at_level(logging.WARNING, logger="replica_dashboard.poller"):
        outcome = await poller.poll_once()

    assert outcome[AdminResource.RATE_LIMIT] is False
    assert session.aggregates.rate_limit.active_ips == 1
    breaker = session.aggregates.circuit_breakers["http://localhost:9001"]
    assert breaker.failure_count == 3
    assert session.aggregates.load_balancer.total_requests == 25
    assert any(r.getMessage() == "admin_fetch_failed" for r in caplog.records)


@pytest.mark.asyncio
async def test_invalid_response_is_logged_and_ignored(session, caplog):
    api = FakeAdminApi(
        rate_limit=AdminResponseInvalid("rate_limit", "missing data envelope"),
        circuit_breaker=breakers(0),
        load_balancer=summary(1),
    )
    poller = PollingAggregator(session, api)

    with caplog.at_level(logging.WARNING, logger="replica_dashboard.poller"):
        await poller.poll_once()

    assert session.aggregates.rate_limit is None
    record = next(
        r for r in caplog.records if r.getMessage() == "admin_response_invalid"
    )
    assert record.resource == "rate_limit"


@pytest.mark.asyncio
async def test_result_arriving_after_stop_is_discarded(session):
    api = FakeAdminApi(
        rate_limit=rate_limit(1),
        circuit_breaker=breakers(0),
        load_balancer=summary(10),
    )
    api.gate = asyncio.Event()
    poller = PollingAggregator(session, api, interval_ms=60_000)

    await poller.start()
    while len(api.calls) < 3:
        await asyncio.sleep(0)
    inflight = poller.inflight
    assert inflight

    await poller.stop()
    assert not poller.running
    api.gate.set()
    await asyncio.gather(*inflight)

    assert session.aggregates.rate_limit is None
    assert session.aggregates.circuit_breakers is None
    assert session.aggregates.load_balancer is None


@pytest.mark.asyncio
async def test_closed_session_drops_results(session):
    api = FakeAdminApi(
        rate_limit=rate_limit(1),
        circuit_breaker=breakers(0),
        load_balancer=summary(10),
    )
    session.close()

    outcome = await PollingAggregator(session, api).poll_once()

    assert not any(outcome.values())
    assert session.aggregates.load_balancer is None


@pytest.mark.asyncio
async def test_schedule_polls_repeatedly(session):
    api = FakeAdminApi(
        rate_limit=rate_limit(1),
        circuit_breaker=breakers(0),
        load_balancer=summary(10),
    )
    async with PollingAggregator(session, api, interval_ms=10) as poller:
        await asyncio.sleep(0.1)
        assert poller.running

    assert api.calls.count(AdminResource.LOAD_BALANCER) >= 3
    assert not poller.running


@pytest.mark.asyncio
async def test_start_twice_is_rejected(session):
    api = FakeAdminApi(
        rate_limit=rate_limit(1),
        circuit_breaker=breakers(0),
        load_balancer=summary(10),
    )
    poller = PollingAggregator(session, api, interval_ms=60_000)
    await poller.start()
    try:
        with pytest.raises(RuntimeError):
            await poller.start()
    finally:
        await poller.stop()


@pytest.mark.asyncio
async def test_each_cycle_fetches_every_resource_once(session, mock_admin_api):
    mock_admin_api.fetch.side_effect = lambda resource: {
        AdminResource.RATE_LIMIT: rate_limit(2),
        AdminResource.CIRCUIT_BREAKER: breakers(1),
        AdminResource.LOAD_BALANCER: summary(5),
    }[resource]

    await PollingAggregator(session, mock_admin_api).poll_once()

    assert mock_admin_api.fetch.await_count == 3
    awaited = {c.args[0] for c in mock_admin_api.fetch.await_args_list}
    assert awaited == set(AdminResource)
    assert session.aggregates.rate_limit.active_ips == 2


@pytest.mark.asyncio
async def test_unexpected_error_is_logged_and_isolated(session, caplog):
    api = FakeAdminApi(
        rate_limit=rate_limit(1),
        circuit_breaker=RuntimeError("decoder blew up"),
        load_balancer=summary(10),
    )

    with caplog.at_level(logging.WARNING, logger="replica_dashboard.poller"):
        outcome = await PollingAggregator(session, api).poll_once()

    assert outcome[AdminResource.CIRCUIT_BREAKER] is False
    assert outcome[AdminResource.RATE_LIMIT] is True
    assert session.aggregates.circuit_breakers is None
    assert session.aggregates.load_balancer.total_requests == 10
    record = next(r for r in caplog.records if r.getMessage() == "admin_fetch_failed")
    assert record.resource == "circuit_breaker"
    assert record.exc_info is not None


@pytest.mark.asyncio
async def test_scheduled_cycle_survives_unexpected_error(session):
    api = FakeAdminApi(
        rate_limit=RuntimeError("boom"),
        circuit_breaker=breakers(0),
        load_balancer=summary(10),
    )
    poller = PollingAggregator(session, api, interval_ms=60_000)

    await poller.start()
    while len(api.calls) < 3:
        await asyncio.sleep(0)
    inflight = poller.inflight
    results = await asyncio.gather(*inflight)
    await poller.stop()

    assert all(isinstance(r, dict) for r in results)
    assert session.aggregates.load_balancer.total_requests == 10
