from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from stockkeeper.core.deps import get_db, require_user
from stockkeeper.models.user import User
from stockkeeper.schemas.item import ItemCreate, ItemDeleted, ItemOut, ItemUpdate, QuantityAdjust
from stockkeeper.services import item_service


router = APIRouter(prefix="/items", tags=["items"], dependencies=[Depends(require_user)])


@router.get("", response_model=list[ItemOut])
def list_items(db: Session = Depends(get_db)):
    return item_service.list_items(db)


@router.get("/{item_id}", response_model=ItemOut)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return item_service.get_item(db, item_id)


@router.post("", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
def create_item(payload: ItemCreate, db: Session = Depends(get_db), user: User = Depends(require_user)):
    return item_service.create_item(db, user, payload)


@router.patch("/{item_id}/quantity", response_model=ItemOut)
def update_quantity(
    item_id: int,
    payload: QuantityAdjust,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    return item_service.update_quantity(db, user, item_id, payload.quantity)


@router.put("/{item_id}", response_model=ItemOut)
def update_item(
    item_id: int,
    payload: ItemUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    return item_service.update_item(db, user, item_id, payload)


@router.delete("/{item_id}", response_model=ItemDeleted)
def delete_item(item_id: int, db: Session = Depends(get_db), user: User = Depends(require_user)):
    item_service.delete_item(db, user, item_id)
    return ItemDeleted()
