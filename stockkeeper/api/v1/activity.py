from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from stockkeeper.core.deps import get_db, require_admin
from stockkeeper.schemas.activity import ActivityLogOut
from stockkeeper.services import audit_service


router = APIRouter(prefix="/activity-log", tags=["activity-log"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[ActivityLogOut])
def list_activity(db: Session = Depends(get_db)):
    return audit_service.list_activity(db)


@router.get("/export")
def export_activity(db: Session = Depends(get_db)):
    content, filename = audit_service.export_activity_csv(audit_service.list_activity(db))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
