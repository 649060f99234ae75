from stockkeeper.models.activity import ActivityLogEntry
from stockkeeper.models.defect import DefectiveItemLog, DefectStatus
from stockkeeper.models.inventory import InventoryItem
from stockkeeper.models.user import User, UserRole, UserStatus

__all__ = [
    "ActivityLogEntry",
    "DefectiveItemLog",
    "DefectStatus",
    "InventoryItem",
    "User",
    "UserRole",
    "UserStatus",
]
