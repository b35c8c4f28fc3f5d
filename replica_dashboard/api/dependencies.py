from fastapi import Depends, Request

from replica_dashboard.services.dashboard_service import DashboardService
from replica_dashboard.session import DashboardSession


def get_session(request: Request) -> DashboardSession:
    return request.app.state.session  # type: ignore[return-value]


def get_dashboard_service(
    session: DashboardSession = Depends(get_session),
) -> DashboardService:
    return DashboardService(session)
