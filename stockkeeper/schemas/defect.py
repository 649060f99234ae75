from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stockkeeper.models.defect import DefectStatus


class DefectLogCreate(BaseModel):
    inventory_item_id: int = Field(gt=0)
    quantity_defective: int = Field(ge=1)
    reason: str = Field(min_length=1, max_length=255)
    status: DefectStatus = DefectStatus.PENDING_REVIEW
    notes: Optional[str] = Field(default=None, max_length=500)


class DefectStatusUpdate(BaseModel):
    status: DefectStatus
    notes: Optional[str] = Field(default=None, max_length=500)


class DefectLogOut(BaseModel):
    id: int
    inventory_item_id: Optional[int]
    item_name_at_log_time: str
    inventory_item_name: str
    quantity_defective: int
    reason: str
    status: DefectStatus
    notes: Optional[str] = None
    logged_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DefectDeleted(BaseModel):
    success: bool = True
