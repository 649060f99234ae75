from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import TIMESTAMP, CheckConstraint, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockkeeper.db.base import Base


class DefectStatus(str, enum.Enum):
    PENDING_REVIEW = "Pending Review"
    RETURNED_TO_SUPPLIER = "Returned to Supplier"
    DISPOSED = "Disposed"
    REPAIRED = "Repaired"
    AWAITING_PARTS = "Awaiting Parts"


class DefectiveItemLog(Base):
    __tablename__ = "defective_items_log"
    __table_args__ = (
        CheckConstraint("quantity_defective > 0", name="ck_defective_items_log_quantity"),
        Index("idx_defective_items_log_inventory_item_id", "inventory_item_id"),
        Index("idx_defective_items_log_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inventory_item_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("inventory_items.id", ondelete="RESTRICT"),
        nullable=True,
    )
    # Snapshot of the item's name when the defect was recorded.
    item_name_at_log_time: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity_defective: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[DefectStatus] = mapped_column(
        Enum(
            DefectStatus,
            name="defect_status_enum",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=DefectStatus.PENDING_REVIEW,
        server_default=DefectStatus.PENDING_REVIEW.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    logged_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    inventory_item = relationship("stockkeeper.models.inventory.InventoryItem", lazy="joined")

    @property
    def inventory_item_name(self) -> str:
        if self.inventory_item is not None and self.inventory_item.name:
            return self.inventory_item.name
        return self.item_name_at_log_time
