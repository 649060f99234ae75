from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from stockkeeper.core.constants import DEFECT_REASON_SUGGESTIONS
from stockkeeper.core.deps import get_db, require_user
from stockkeeper.models.user import User
from stockkeeper.schemas.defect import DefectDeleted, DefectLogCreate, DefectLogOut, DefectStatusUpdate
from stockkeeper.services import defect_service


router = APIRouter(prefix="/defects", tags=["defects"], dependencies=[Depends(require_user)])


@router.get("", response_model=list[DefectLogOut])
def list_defects(db: Session = Depends(get_db)):
    return defect_service.list_defects(db)


@router.get("/reasons", response_model=list[str])
def list_reasons():
    return list(DEFECT_REASON_SUGGESTIONS)


@router.post("", response_model=DefectLogOut, status_code=status.HTTP_201_CREATED)
def create_defect(payload: DefectLogCreate, db: Session = Depends(get_db), user: User = Depends(require_user)):
    return defect_service.create_defect(db, user, payload)


@router.patch("/{log_id}/status", response_model=DefectLogOut)
def update_status(
    log_id: int,
    payload: DefectStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    return defect_service.update_status(db, user, log_id, payload)


@router.delete("/{log_id}", response_model=DefectDeleted)
def delete_defect(log_id: int, db: Session = Depends(get_db), user: User = Depends(require_user)):
    defect_service.delete_defect(db, user, log_id)
    return DefectDeleted()
