from __future__ import annotations

import logging

from sqlalchemy import exists, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockkeeper.core.errors import ConflictError, DatabaseError, NotFoundError, translate_db_error
from stockkeeper.models.defect import DefectiveItemLog
from stockkeeper.models.inventory import InventoryItem
from stockkeeper.models.user import User
from stockkeeper.schemas.item import ItemCreate, ItemUpdate
from stockkeeper.services.audit_service import record_activity


logger = logging.getLogger(__name__)

ITEM_NOT_FOUND = "The inventory item was not found."
ITEM_HAS_DEFECTS = "This item has related defect records and cannot be deleted. Remove its defect logs first."

UPDATABLE_FIELDS = ("name", "quantity", "category", "location")


def list_items(db: Session) -> list[InventoryItem]:
    try:
        return db.query(InventoryItem).order_by(InventoryItem.name).all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch inventory items")
        raise DatabaseError(
            "Failed to load inventory items from the database. Make sure the inventory_items table exists."
        ) from exc


def get_item(db: Session, item_id: int) -> InventoryItem:
    item = db.get(InventoryItem, item_id)
    if not item:
        raise NotFoundError(ITEM_NOT_FOUND)
    return item


def create_item(db: Session, actor: User, payload: ItemCreate) -> InventoryItem:
    item = InventoryItem(**payload.model_dump())
    try:
        db.add(item)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="add the item") from exc
    db.refresh(item)

    record_activity(
        db,
        actor,
        "Created inventory item",
        f"ID: {item.id}, Name: '{item.name}', Qty: {item.quantity}, Category: '{item.category}'",
    )
    return item


def update_quantity(db: Session, actor: User, item_id: int, quantity: int) -> InventoryItem:
    item = db.get(InventoryItem, item_id)
    if not item:
        raise NotFoundError("The item to update was not found.")
    previous_quantity = item.quantity

    try:
        updated = (
            db.query(InventoryItem)
            .filter(InventoryItem.id == item_id)
            .update(
                {InventoryItem.quantity: quantity, InventoryItem.updated_at: func.now()},
                synchronize_session=False,
            )
        )
        if not updated:
            db.rollback()
            raise NotFoundError("Failed to update the item quantity: item not found or nothing changed.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="update the item quantity") from exc

    db.refresh(item)
    record_activity(
        db,
        actor,
        "Updated inventory item quantity",
        f"Item: '{item.name}' (ID: {item.id}), Qty changed from {previous_quantity} to {item.quantity}",
    )
    return item


def update_item(db: Session, actor: User, item_id: int, payload: ItemUpdate) -> InventoryItem:
    item = db.get(InventoryItem, item_id)
    if not item:
        raise NotFoundError("The item to update was not found.")

    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    if data.get("category") is None:
        data.pop("category", None)
    if data.get("quantity") is None:
        data.pop("quantity", None)

    changes: list[str] = []
    values: dict = {}
    for key in UPDATABLE_FIELDS:
        if key not in data:
            continue
        before = getattr(item, key)
        after = data[key]
        if before == after:
            continue
        values[getattr(InventoryItem, key)] = after
        changes.append(f"{key} '{before}' -> '{after}'")

    if not values:
        return item

    values[InventoryItem.updated_at] = func.now()
    try:
        updated = (
            db.query(InventoryItem)
            .filter(InventoryItem.id == item_id)
            .update(values, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise NotFoundError("Failed to update the item: item not found or nothing changed.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="update the item") from exc

    db.refresh(item)
    record_activity(
        db,
        actor,
        "Updated inventory item",
        f"Item: '{item.name}' (ID: {item.id}), " + ", ".join(changes),
    )
    return item


def delete_item(db: Session, actor: User, item_id: int) -> None:
    item = db.get(InventoryItem, item_id)
    item_label = f"'{item.name}' (ID: {item_id})" if item else f"ID: {item_id}"

    has_defects = db.query(exists().where(DefectiveItemLog.inventory_item_id == item_id)).scalar()
    if has_defects:
        raise ConflictError(ITEM_HAS_DEFECTS)

    try:
        deleted = (
            db.query(InventoryItem)
            .filter(InventoryItem.id == item_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            db.rollback()
            raise NotFoundError("Failed to delete the item: item not found.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="delete the item", foreign_key_message=ITEM_HAS_DEFECTS) from exc

    if item is not None:
        db.expunge(item)
    record_activity(db, actor, "Deleted inventory item", f"Item: {item_label}")
