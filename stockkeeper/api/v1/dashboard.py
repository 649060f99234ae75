from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockkeeper.core.deps import get_db, require_admin, require_user
from stockkeeper.schemas.dashboard import DashboardSummary, StatisticsResponse
from stockkeeper.services import dashboard_service


router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/summary", response_model=DashboardSummary, dependencies=[Depends(require_admin)])
def summary(db: Session = Depends(get_db)):
    return dashboard_service.get_summary(db)


@router.get("/statistics", response_model=StatisticsResponse, dependencies=[Depends(require_user)])
def statistics(db: Session = Depends(get_db)):
    return dashboard_service.get_statistics(db)
