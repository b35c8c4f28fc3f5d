"""Websocket client feeding the balancer's replica stream into a session."""

from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp
from aiohttp import WSMsgType

from replica_dashboard.core.logger import get_logger
from replica_dashboard.infrastructure.metrics import (
    STREAM_CONNECTS_TOTAL,
    STREAM_DECODE_FAILURES_TOTAL,
    STREAM_DISCONNECTS_TOTAL,
)
from replica_dashboard.session import DashboardSession
from shared.utils.retry import backoff_delays, retry_async

from .message_parser import parse_frame

logger = get_logger("replica_dashboard.stream")

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


class StreamIngestionClient:
    """Owns the one websocket connection of a dashboard session.

    Frames are decoded and handed to ``session.handle_message`` in arrival
    order. Malformed frames are logged and dropped without touching the
    connection. By default a lost connection is not re-established; set
    ``reconnect=True`` to retry with exponential backoff.

    Use as ``async with StreamIngestionClient(...)`` or pair ``start()`` with
    ``close()``. Once ``close()`` returns no further message reaches the
    session.
    """

    def __init__(
        self,
        session: DashboardSession,
        url: str,
        http: Optional[aiohttp.ClientSession] = None,
        heartbeat: Optional[float] = None,
        connect_retries: int = 1,
        reconnect: bool = False,
        reconnect_base_delay: float = 1.0,
        reconnect_max_delay: float = 30.0,
        reconnect_max_attempts: int = 0,
    ):
        self.session = session
        self.url = url
        self.heartbeat = heartbeat
        self.connect_retries = connect_retries
        self.reconnect = reconnect
        self.reconnect_base_delay = reconnect_base_delay
        self.reconnect_max_delay = reconnect_max_delay
        self.reconnect_max_attempts = reconnect_max_attempts
        self.messages_received = 0
        self.connected = False
        self._http = http
        self._owns_http = http is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._task: Optional[asyncio.Task] = None
        self._closing = False

    @classmethod
    def from_settings(
        cls,
        session: DashboardSession,
        settings,
        http: Optional[aiohttp.ClientSession] = None,
    ) -> "StreamIngestionClient":
        return cls(
            session,
            settings.stream_url,
            http=http,
            heartbeat=settings.stream_heartbeat_s,
            connect_retries=settings.stream_connect_retries,
            reconnect=settings.stream_reconnect_enabled,
            reconnect_base_delay=settings.stream_reconnect_base_delay_s,
            reconnect_max_delay=settings.stream_reconnect_max_delay_s,
            reconnect_max_attempts=settings.stream_reconnect_max_attempts,
        )

    async def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("stream client already started")
        if self._http is None:
            self._http = aiohttp.ClientSession()
        self._task = asyncio.create_task(self._run(), name="replica-stream")

    async def close(self) -> None:
        self._closing = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.debug("stream_task_cancelled")
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._owns_http and self._http is not None:
            await self._http.close()
        self.connected = False

    async def wait_closed(self) -> None:
        """Wait until the stream ends on its own (no reconnect left)."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def __aenter__(self) -> "StreamIngestionClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _connect(self) -> aiohttp.ClientWebSocketResponse:
        assert self._http is not None
        return await self._http.ws_connect(self.url, heartbeat=self.heartbeat)

    async def _on_connect_retry(
        self, attempt: int, exc: BaseException, sleep_for: float
    ):
        logger.warning(
            "stream_connect_retry",
            extra={
                "url": self.url,
                "attempt": attempt,
                "error": str(exc),
                "sleep_for": round(sleep_for, 2),
            },
        )

    async def _run(self) -> None:
        delays = self._new_backoff()
        failures = 0
        while not self._closing:
            try:
                self._ws = await retry_async(
                    self._connect,
                    retries=self.connect_retries,
                    base_delay=self.reconnect_base_delay,
                    max_delay=self.reconnect_max_delay,
                    retry_on=TRANSPORT_ERRORS,
                    on_retry=self._on_connect_retry,
                )
            except TRANSPORT_ERRORS as e:
                failures += 1
                logger.error(
                    "stream_connect_failed", extra={"url": self.url, "error": str(e)}
                )
            else:
                failures = 0
                delays = self._new_backoff()
                await self._consume(self._ws)

            if not self.reconnect or self._closing:
                break
            if self.reconnect_max_attempts and failures >= self.reconnect_max_attempts:
                logger.error(
                    "stream_reconnect_exhausted", extra={"attempts": failures}
                )
                break
            delay = next(delays)
            logger.info(
                "stream_reconnect_scheduled", extra={"delay_s": round(delay, 2)}
            )
            await asyncio.sleep(delay)
        logger.info(
            "stream_client_stopped", extra={"messages": self.messages_received}
        )

    def _new_backoff(self):
        return backoff_delays(self.reconnect_base_delay, self.reconnect_max_delay)

    async def _consume(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        STREAM_CONNECTS_TOTAL.inc()
        self.connected = True
        logger.info("stream_connected", extra={"url": self.url})
        try:
            async for msg in ws:
                if msg.type == WSMsgType.TEXT:
                    self._dispatch(msg.data)
                elif msg.type == WSMsgType.BINARY:
                    try:
                        text = msg.data.decode("utf-8")
                    except UnicodeDecodeError as e:
                        STREAM_DECODE_FAILURES_TOTAL.inc()
                        logger.warning(
                            "stream_message_decode_failed", extra={"error": str(e)}
                        )
                        continue
                    self._dispatch(text)
                elif msg.type == WSMsgType.ERROR:
                    logger.error(
                        "stream_transport_error", extra={"error": str(ws.exception())}
                    )
                    break
                if self._closing:
                    break
        except TRANSPORT_ERRORS as e:
            logger.error("stream_transport_error", extra={"error": str(e)})
        finally:
            self.connected = False
            STREAM_DISCONNECTS_TOTAL.inc()
            if not ws.closed:
                await ws.close()
            logger.warning("stream_disconnected", extra={"close_code": ws.close_code})

    def _dispatch(self, text: str) -> None:
        for message in parse_frame(text):
            if self._closing:
                return
            self.session.handle_message(message)
            self.messages_received += 1
