from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Mapping, Optional

import aiohttp
from pydantic import ValidationError

from replica_dashboard.domain.aggregates import (
    AdminResource,
    CircuitBreakerMap,
    LoadBalancerSummary,
    RateLimitStatus,
    circuit_breaker_map_adapter,
)
from replica_dashboard.domain.errors import AdminApiError, AdminResponseInvalid
from shared.constants import Endpoints

_PARSERS: Dict[AdminResource, Callable[[Any], Any]] = {
    AdminResource.RATE_LIMIT: RateLimitStatus.model_validate,
    AdminResource.CIRCUIT_BREAKER: circuit_breaker_map_adapter.validate_python,
    AdminResource.LOAD_BALANCER: LoadBalancerSummary.model_validate,
}


class AdminApiClient:
    """Fetches the balancer's aggregate admin resources.

    Every response is a JSON document whose payload sits under ``data``.
    Any failure surfaces as AdminApiError naming the resource.
    """

    def __init__(
        self,
        http: aiohttp.ClientSession,
        base_url: str,
        paths: Optional[Mapping[str, str]] = None,
        timeout_s: float = 4.0,
    ):
        self._http = http
        self.base_url = base_url.rstrip("/")
        self.paths = dict(paths or Endpoints.admin_resources())
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)

    def url_for(self, resource: AdminResource) -> str:
        return f"{self.base_url}{self.paths[resource.value]}"

    async def fetch(self, resource: AdminResource):
        url = self.url_for(resource)
        try:
            async with self._http.get(url, timeout=self.timeout) as resp:
                if not 200 <= resp.status < 300:
                    raise AdminApiError(resource.value, f"http status {resp.status}")
                body = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise AdminApiError(resource.value, f"transport error: {e!r}") from e
        except ValueError as e:
            raise AdminResponseInvalid(resource.value, "invalid json") from e
        return self.decode(resource, body)

    @staticmethod
    def decode(resource: AdminResource, body: Any):
        if not isinstance(body, dict) or "data" not in body:
            raise AdminResponseInvalid(resource.value, "missing data envelope")
        if body.get("success") is False:
            raise AdminApiError(
                resource.value, str(body.get("error") or "request unsuccessful")
            )
        try:
            return _PARSERS[resource](body["data"])
        except ValidationError as e:
            raise AdminResponseInvalid(
                resource.value, f"{e.error_count()} validation error(s)"
            ) from e

    async def fetch_rate_limit(self) -> RateLimitStatus:
        return await self.fetch(AdminResource.RATE_LIMIT)

    async def fetch_circuit_breakers(self) -> CircuitBreakerMap:
        return await self.fetch(AdminResource.CIRCUIT_BREAKER)

    async def fetch_load_balancer(self) -> LoadBalancerSummary:
        return await self.fetch(AdminResource.LOAD_BALANCER)
