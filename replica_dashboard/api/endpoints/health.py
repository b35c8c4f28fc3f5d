from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response

from replica_dashboard.api.dependencies import get_session
from replica_dashboard.session import DashboardSession

router = APIRouter()


@router.get("/health")
async def health(
    request: Request, session: DashboardSession = Depends(get_session)
):
    stream = getattr(request.app.state, "stream", None)
    uptime = datetime.now(timezone.utc) - session.started_at
    return {
        "status": "ok",
        "uptime_s": uptime.total_seconds(),
        "stream_connected": bool(stream is not None and stream.connected),
    }


@router.get("/ready")
async def ready(session: DashboardSession = Depends(get_session)):
    if session.ready_event.is_set():
        return {"status": "ready", "replicas": len(session.registry)}
    return Response(status_code=503, content="not ready")
