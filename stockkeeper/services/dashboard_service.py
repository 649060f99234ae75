from __future__ import annotations

import logging

from sqlalchemy import func, literal_column
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockkeeper.core.constants import UNSPECIFIED_LOCATION
from stockkeeper.core.errors import DatabaseError
from stockkeeper.models.defect import DefectiveItemLog
from stockkeeper.models.inventory import InventoryItem
from stockkeeper.models.user import User, UserStatus
from stockkeeper.schemas.dashboard import (
    CategoryBreakdown,
    DashboardSummary,
    LocationBreakdown,
    ReasonCount,
    StatisticsResponse,
    StatusCount,
)


logger = logging.getLogger(__name__)


def _inventory_totals(db: Session) -> tuple[int, int]:
    unique_names, total_quantity = db.query(
        func.count(func.distinct(InventoryItem.name)),
        func.coalesce(func.sum(InventoryItem.quantity), 0),
    ).one()
    return int(unique_names or 0), int(total_quantity or 0)


def _total_defective_units(db: Session) -> int:
    total = db.query(func.coalesce(func.sum(DefectiveItemLog.quantity_defective), 0)).scalar()
    return int(total or 0)


def get_summary(db: Session) -> DashboardSummary:
    try:
        unique_names, total_quantity = _inventory_totals(db)
        defective_units = _total_defective_units(db)
        active_users = (
            db.query(func.count(User.id)).filter(User.status == UserStatus.ACTIVE).scalar() or 0
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to build dashboard summary")
        raise DatabaseError("Failed to load the dashboard summary.") from exc

    return DashboardSummary(
        total_unique_item_types=unique_names,
        total_stock_quantity=total_quantity,
        total_defective_units=defective_units,
        total_active_users=int(active_users),
    )


def get_statistics(db: Session) -> StatisticsResponse:
    """Inventory and defect aggregates shown on the statistics page."""

    try:
        unique_names, total_quantity = _inventory_totals(db)
        defective_units = _total_defective_units(db)

        per_category = (
            db.query(
                InventoryItem.category,
                func.count(func.distinct(InventoryItem.name)),
                func.coalesce(func.sum(InventoryItem.quantity), 0),
            )
            .group_by(InventoryItem.category)
            .order_by(InventoryItem.category)
            .all()
        )

        # Inlined so GROUP BY and the select list render the same expression.
        location = func.coalesce(InventoryItem.location, literal_column(f"'{UNSPECIFIED_LOCATION}'"))
        per_location = (
            db.query(
                location,
                func.count(func.distinct(InventoryItem.name)),
                func.coalesce(func.sum(InventoryItem.quantity), 0),
            )
            .group_by(location)
            .order_by(location)
            .all()
        )

        by_reason = (
            db.query(DefectiveItemLog.reason, func.sum(DefectiveItemLog.quantity_defective))
            .group_by(DefectiveItemLog.reason)
            .order_by(func.sum(DefectiveItemLog.quantity_defective).desc(), DefectiveItemLog.reason)
            .all()
        )
        by_status = (
            db.query(DefectiveItemLog.status, func.sum(DefectiveItemLog.quantity_defective))
            .group_by(DefectiveItemLog.status)
            .order_by(DefectiveItemLog.status)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to build inventory statistics")
        raise DatabaseError("Failed to load inventory statistics.") from exc

    average = round(total_quantity / unique_names, 2) if unique_names else 0.0

    return StatisticsResponse(
        total_unique_item_types=unique_names,
        total_stock_quantity=total_quantity,
        average_quantity_per_item_type=average,
        total_defective_items=defective_units,
        items_per_category=[
            CategoryBreakdown(category=category, unique_item_count=int(count), total_quantity=int(quantity))
            for category, count, quantity in per_category
        ],
        items_per_location=[
            LocationBreakdown(location=loc, unique_item_count=int(count), total_quantity=int(quantity))
            for loc, count, quantity in per_location
        ],
        defective_items_by_reason=[
            ReasonCount(reason=reason, count=int(count or 0)) for reason, count in by_reason
        ],
        defective_items_by_status=[
            StatusCount(status=status.value if hasattr(status, "value") else str(status), count=int(count or 0))
            for status, count in by_status
        ],
    )
