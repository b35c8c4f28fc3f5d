import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from replica_dashboard.domain.aggregates import AdminResource, CircuitState
from replica_dashboard.domain.errors import AdminApiError, AdminResponseInvalid
from replica_dashboard.infrastructure.admin.client import AdminApiClient

RATE_LIMIT = {
    "enabled": True,
    "type": "token_bucket",
    "global_limit": 100,
    "per_ip_limit": 10,
    "active_ips": 2,
    "global_tokens": 87.5,
}


def _admin_app(routes: dict) -> web.Application:
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(path, handler)
    return app


def _json(body, status=200):
    async def handler(request):
        return web.json_response(body, status=status)

    return handler


@pytest.mark.asyncio
async def test_fetches_each_resource_from_data_envelope():
    routes = {
        "/api/rate-limit": _json({"status": "success", "data": RATE_LIMIT}),
        "/api/circuit-breaker": _json(
            {
                "success": True,
                "data": {
                    "http://localhost:9001": {
                        "state": "OPEN",
                        "failure_count": 5,
                        "error_rate": 1.0,
                    }
                },
            }
        ),
        "/api/config": _json(
            {"success": True, "data": {"algorithm": "round_robin", "alive_backends": 1}}
        ),
    }
    async with TestServer(_admin_app(routes)) as server:
        async with aiohttp.ClientSession() as http:
            api = AdminApiClient(http, str(server.make_url("/")))
            rate_limit = await api.fetch_rate_limit()
            breakers = await api.fetch_circuit_breakers()
            summary = await api.fetch_load_balancer()

    assert rate_limit.global_tokens == 87.5
    assert breakers["http://localhost:9001"].state is CircuitState.OPEN
    assert summary.algorithm == "round_robin"
    assert summary.active_backends == 1


@pytest.mark.asyncio
async def test_custom_paths_are_used():
    routes = {"/stats/lb": _json({"data": {"total_requests": 10}})}
    async with TestServer(_admin_app(routes)) as server:
        async with aiohttp.ClientSession() as http:
            api = AdminApiClient(
                http,
                str(server.make_url("/")),
                paths={
                    "rate_limit": "/x",
                    "circuit_breaker": "/y",
                    "load_balancer": "/stats/lb",
                },
            )
            summary = await api.fetch(AdminResource.LOAD_BALANCER)
    assert summary.total_requests == 10


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler,error",
    [
        (_json({"data": RATE_LIMIT}, status=500), AdminApiError),
        (_json({"success": False, "error": "nope", "data": None}), AdminApiError),
        (_json({"rate": "no envelope"}), AdminResponseInvalid),
        (_json({"data": {**RATE_LIMIT, "active_ips": "2"}}), AdminResponseInvalid),
        (_json([1, 2, 3]), AdminResponseInvalid),
    ],
)
async def test_failures_raise_admin_errors(handler, error):
    async with TestServer(_admin_app({"/api/rate-limit": handler})) as server:
        async with aiohttp.ClientSession() as http:
            api = AdminApiClient(http, str(server.make_url("/")))
            with pytest.raises(error) as exc_info:
                await api.fetch_rate_limit()
    assert exc_info.value.resource == "rate_limit"


@pytest.mark.asyncio
async def test_invalid_json_body():
    async def handler(request):
        return web.Response(text="{oops", content_type="application/json")

    async with TestServer(_admin_app({"/api/rate-limit": handler})) as server:
        async with aiohttp.ClientSession() as http:
            api = AdminApiClient(http, str(server.make_url("/")))
            with pytest.raises(AdminResponseInvalid):
                await api.fetch_rate_limit()


@pytest.mark.asyncio
async def test_transport_error():
    from aiohttp.test_utils import unused_port

    async with aiohttp.ClientSession() as http:
        api = AdminApiClient(http, f"http://127.0.0.1:{unused_port()}")
        with pytest.raises(AdminApiError) as exc_info:
            await api.fetch_load_balancer()
    assert "transport error" in exc_info.value.reason


def test_unknown_breaker_state_keeps_the_other_rows():
    breakers = AdminApiClient.decode(
        AdminResource.CIRCUIT_BREAKER,
        {
            "success": True,
            "data": {
                "http://localhost:9001": {
                    "state": "CLOSED",
                    "failure_count": 0,
                    "error_rate": 0.0,
                },
                "http://localhost:9002": {
                    "state": "UNKNOWN",
                    "failure_count": 1,
                    "error_rate": 0.5,
                },
            },
        },
    )

    assert breakers["http://localhost:9001"].state is CircuitState.CLOSED
    assert breakers["http://localhost:9002"].state is CircuitState.UNKNOWN
