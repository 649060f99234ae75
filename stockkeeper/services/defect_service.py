from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockkeeper.core.errors import DatabaseError, NotFoundError, translate_db_error
from stockkeeper.models.defect import DefectiveItemLog
from stockkeeper.models.inventory import InventoryItem
from stockkeeper.models.user import User
from stockkeeper.schemas.defect import DefectLogCreate, DefectStatusUpdate
from stockkeeper.services.audit_service import record_activity


logger = logging.getLogger(__name__)

DEFECT_NOT_FOUND = "The defective item log was not found."
ITEM_MISSING = "The inventory item for this defect report was not found."


def list_defects(db: Session) -> list[DefectiveItemLog]:
    try:
        return (
            db.query(DefectiveItemLog)
            .order_by(DefectiveItemLog.logged_at.desc(), DefectiveItemLog.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch defective item logs")
        raise DatabaseError(
            "Failed to load defective item logs. Make sure the defective_items_log table exists."
        ) from exc


def create_defect(db: Session, actor: User, payload: DefectLogCreate) -> DefectiveItemLog:
    item = db.get(InventoryItem, payload.inventory_item_id)
    if not item:
        raise NotFoundError(ITEM_MISSING)

    log = DefectiveItemLog(
        inventory_item_id=item.id,
        item_name_at_log_time=item.name,
        quantity_defective=payload.quantity_defective,
        reason=payload.reason.strip(),
        status=payload.status,
        notes=(payload.notes or "").strip() or None,
    )
    try:
        db.add(log)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(
            exc,
            action="log the defective item",
            foreign_key_message=ITEM_MISSING,
        ) from exc
    db.refresh(log)

    record_activity(
        db,
        actor,
        "Logged defective item",
        f"Item: '{log.item_name_at_log_time}' (ID: {log.inventory_item_id}), "
        f"Qty: {log.quantity_defective}, Reason: '{log.reason}'",
    )
    return log


def update_status(db: Session, actor: User, log_id: int, payload: DefectStatusUpdate) -> DefectiveItemLog:
    log = db.get(DefectiveItemLog, log_id)
    if not log:
        raise NotFoundError(DEFECT_NOT_FOUND)
    previous_status = log.status

    values = {DefectiveItemLog.status: payload.status, DefectiveItemLog.updated_at: func.now()}
    if "notes" in payload.model_fields_set:
        values[DefectiveItemLog.notes] = (payload.notes or "").strip() or None

    try:
        updated = (
            db.query(DefectiveItemLog)
            .filter(DefectiveItemLog.id == log_id)
            .update(values, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise NotFoundError("Failed to update the defect status: log not found.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="update the defect status") from exc

    db.refresh(log)
    record_activity(
        db,
        actor,
        "Updated defective item log status",
        f"Log ID: {log.id}, Item: '{log.item_name_at_log_time}', "
        f"Status changed from '{previous_status.value}' to '{log.status.value}'",
    )
    return log


def delete_defect(db: Session, actor: User, log_id: int) -> None:
    log = db.get(DefectiveItemLog, log_id)
    if not log:
        raise NotFoundError(DEFECT_NOT_FOUND)
    details = f"Log ID: {log.id}, Item: '{log.item_name_at_log_time}', Qty: {log.quantity_defective}"

    try:
        deleted = (
            db.query(DefectiveItemLog)
            .filter(DefectiveItemLog.id == log_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            db.rollback()
            raise NotFoundError("Failed to delete the defect log: log not found.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="delete the defect log") from exc

    db.expunge(log)
    record_activity(db, actor, "Deleted defective item log", details)
