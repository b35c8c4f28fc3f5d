from contextlib import asynccontextmanager

import aiohttp
import uvicorn
from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from replica_dashboard.api.router import api_router
from replica_dashboard.core.config import settings
from replica_dashboard.core.logger import configure_logging, get_logger
from replica_dashboard.infrastructure.admin.client import AdminApiClient
from replica_dashboard.infrastructure.admin.poller import PollingAggregator
from replica_dashboard.infrastructure.stream.client import StreamIngestionClient
from replica_dashboard.session import DashboardSession

# Configure logging once and get service logger
configure_logging()
logger = get_logger("replica_dashboard.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "replica_dashboard_starting",
        extra={
            "stream_url": settings.stream_url,
            "admin_url": settings.balancer_http_url,
        },
    )
    session = DashboardSession.from_settings(settings)
    http = aiohttp.ClientSession()
    stream = StreamIngestionClient.from_settings(session, settings, http=http)
    poller = PollingAggregator(
        session,
        AdminApiClient(
            http,
            settings.balancer_http_url,
            settings.admin_paths,
            timeout_s=settings.poll_request_timeout_s,
        ),
        interval_ms=settings.poll_interval_ms,
    )
    app.state.session = session
    app.state.stream = stream
    app.state.poller = poller
    await stream.start()
    await poller.start()
    try:
        yield
    finally:
        logger.info("replica_dashboard_stopping")
        await poller.stop()
        await stream.close()
        session.close()
        await http.close()


app = FastAPI(title="Replica Dashboard", version="0.1.0", lifespan=lifespan)
app.include_router(api_router)


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def run() -> None:
    uvicorn.run(
        "replica_dashboard.main:app",
        host=settings.dashboard_host,
        port=settings.dashboard_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
