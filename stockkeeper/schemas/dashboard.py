from __future__ import annotations

from pydantic import BaseModel


class DashboardSummary(BaseModel):
    total_unique_item_types: int
    total_stock_quantity: int
    total_defective_units: int
    total_active_users: int


class CategoryBreakdown(BaseModel):
    category: str
    unique_item_count: int
    total_quantity: int


class LocationBreakdown(BaseModel):
    location: str
    unique_item_count: int
    total_quantity: int


class ReasonCount(BaseModel):
    reason: str
    count: int


class StatusCount(BaseModel):
    status: str
    count: int


class StatisticsResponse(BaseModel):
    total_unique_item_types: int
    total_stock_quantity: int
    average_quantity_per_item_type: float
    total_defective_items: int
    items_per_category: list[CategoryBreakdown]
    items_per_location: list[LocationBreakdown]
    defective_items_by_reason: list[ReasonCount]
    defective_items_by_status: list[StatusCount]
