from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ActivityLogOut(BaseModel):
    id: int
    user_id: Optional[int]
    username_at_log_time: str
    action: str
    details: Optional[str] = None
    logged_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
