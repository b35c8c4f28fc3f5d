from fastapi import APIRouter, Depends, HTTPException

from replica_dashboard.api.dependencies import get_dashboard_service
from replica_dashboard.domain.views import (
    AggregatesView,
    DashboardView,
    ReplicaCard,
    ReplicaHistory,
)
from replica_dashboard.services.dashboard_service import DashboardService

router = APIRouter(prefix="/v1")


@router.get("/replicas", response_model=list[ReplicaCard])
async def replicas(svc: DashboardService = Depends(get_dashboard_service)):
    return svc.replicas()


@router.get("/replicas/{replica_id}", response_model=ReplicaCard)
async def replica(
    replica_id: int, svc: DashboardService = Depends(get_dashboard_service)
):
    card = svc.replica(replica_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Unknown replica")
    return card


@router.get("/replicas/{replica_id}/history", response_model=ReplicaHistory)
async def replica_history(
    replica_id: int, svc: DashboardService = Depends(get_dashboard_service)
):
    return svc.history(replica_id)


@router.get(
    "/aggregates", response_model=AggregatesView, response_model_exclude_none=True
)
async def aggregates(svc: DashboardService = Depends(get_dashboard_service)):
    return svc.aggregates()


@router.get(
    "/dashboard", response_model=DashboardView, response_model_exclude_none=True
)
async def dashboard(svc: DashboardService = Depends(get_dashboard_service)):
    return svc.dashboard()
