"""Fixed-cadence polling of the admin API's aggregate resources."""

from __future__ import annotations

import asyncio
from typing import Dict, Optional, Set

from replica_dashboard.core.logger import get_logger
from replica_dashboard.domain.aggregates import AdminResource
from replica_dashboard.domain.errors import AdminApiError, AdminResponseInvalid
from replica_dashboard.infrastructure.metrics import (
    POLL_DISCARDED_TOTAL,
    POLL_FAILURES_TOTAL,
    POLL_SUCCESS_TOTAL,
)
from replica_dashboard.session import DashboardSession

from .client import AdminApiClient

logger = get_logger("replica_dashboard.poller")


class PollingAggregator:
    """Refreshes the three aggregate snapshots every ``interval_ms``.

    A cycle starts immediately on ``start()`` and then on a fixed schedule,
    whether or not the previous cycle has finished. The three fetches of a
    cycle run concurrently and fail independently; a failed fetch leaves the
    previous value in place.

    ``stop()`` cancels the schedule but not fetches already in flight. Each
    cycle remembers the generation it started in, and results arriving after
    the generation moved on are dropped.
    """

    def __init__(
        self,
        session: DashboardSession,
        api: AdminApiClient,
        interval_ms: int = 5000,
    ):
        self.session = session
        self.api = api
        self.interval = interval_ms / 1000
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def inflight(self) -> Set[asyncio.Task]:
        return set(self._inflight)

    async def start(self) -> None:
        if self.running:
            raise RuntimeError("poller already running")
        self._generation += 1
        self._task = asyncio.create_task(
            self._schedule(self._generation), name="admin-poller"
        )
        logger.info(
            "admin_poller_started",
            extra={"interval_s": self.interval, "generation": self._generation},
        )

    async def stop(self) -> None:
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.debug("admin_poller_cancelled")
            self._task = None
        logger.info("admin_poller_stopped", extra={"inflight": len(self._inflight)})

    async def __aenter__(self) -> "PollingAggregator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def poll_once(self) -> Dict[AdminResource, bool]:
        """Run one cycle in the current generation and wait for it."""
        return await self._cycle(self._generation)

    async def _schedule(self, generation: int) -> None:
        while True:
            task = asyncio.create_task(self._cycle(generation))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            await asyncio.sleep(self.interval)

    async def _cycle(self, generation: int) -> Dict[AdminResource, bool]:
        resources = list(AdminResource)
        results = await asyncio.gather(
            *(self._refresh(resource, generation) for resource in resources)
        )
        return dict(zip(resources, results))

    async def _refresh(self, resource: AdminResource, generation: int) -> bool:
        try:
            value = await self.api.fetch(resource)
        except AdminResponseInvalid as e:
            POLL_FAILURES_TOTAL.labels(resource=resource.value).inc()
            logger.warning(
                "admin_response_invalid",
                extra={"resource": resource.value, "reason": e.reason},
            )
            return False
        except AdminApiError as e:
            POLL_FAILURES_TOTAL.labels(resource=resource.value).inc()
            logger.warning(
                "admin_fetch_failed",
                extra={"resource": resource.value, "reason": e.reason},
            )
            return False
        except Exception as e:
            POLL_FAILURES_TOTAL.labels(resource=resource.value).inc()
            logger.exception(
                "admin_fetch_failed",
                extra={"resource": resource.value, "reason": repr(e)},
            )
            return False

        if generation != self._generation or not self.session.update_aggregate(
            resource, value
        ):
            POLL_DISCARDED_TOTAL.labels(resource=resource.value).inc()
            logger.debug(
                "admin_result_discarded",
                extra={"resource": resource.value, "generation": generation},
            )
            return False
        POLL_SUCCESS_TOTAL.labels(resource=resource.value).inc()
        return True
