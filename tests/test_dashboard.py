"""
Dashboard summary and statistics aggregates.
"""

import pytest

from stockkeeper.models import DefectiveItemLog, DefectStatus, InventoryItem


@pytest.fixture
def stocked(db_session, employee):
    items = [
        InventoryItem(name="Hammer", quantity=10, category="Tools", location="Shelf A"),
        InventoryItem(name="Hammer", quantity=5, category="Tools", location="Shelf B"),
        InventoryItem(name="Saw", quantity=3, category="Tools", location=None),
        InventoryItem(name="Glue", quantity=12, category="Supplies", location="Shelf A"),
    ]
    db_session.add_all(items)
    db_session.commit()
    db_session.add_all(
        [
            DefectiveItemLog(
                inventory_item_id=items[0].id,
                item_name_at_log_time="Hammer",
                quantity_defective=2,
                reason="Expired",
                status=DefectStatus.PENDING_REVIEW,
            ),
            DefectiveItemLog(
                inventory_item_id=items[3].id,
                item_name_at_log_time="Glue",
                quantity_defective=4,
                reason="Expired",
                status=DefectStatus.DISPOSED,
            ),
            DefectiveItemLog(
                inventory_item_id=items[2].id,
                item_name_at_log_time="Saw",
                quantity_defective=1,
                reason="Manufacturing fault",
                status=DefectStatus.DISPOSED,
            ),
        ]
    )
    db_session.commit()
    return items


class TestSummary:
    def test_summary_counts(self, admin_client, stocked):
        response = admin_client.get("/api/v1/dashboard/summary")

        assert response.status_code == 200
        assert response.json() == {
            "total_unique_item_types": 3,
            "total_stock_quantity": 30,
            "total_defective_units": 7,
            "total_active_users": 2,
        }

    def test_summary_on_empty_store(self, admin_client):
        body = admin_client.get("/api/v1/dashboard/summary").json()

        assert body["total_unique_item_types"] == 0
        assert body["total_stock_quantity"] == 0
        assert body["total_defective_units"] == 0
        assert body["total_active_users"] == 1

    def test_summary_is_admin_only(self, employee_client):
        assert employee_client.get("/api/v1/dashboard/summary").status_code == 403


class TestStatistics:
    def test_breakdowns(self, employee_client, stocked):
        response = employee_client.get("/api/v1/statistics")

        assert response.status_code == 200
        body = response.json()
        assert body["total_unique_item_types"] == 3
        assert body["total_stock_quantity"] == 30
        assert body["average_quantity_per_item_type"] == 10.0
        assert body["total_defective_items"] == 7

        categories = {row["category"]: row for row in body["items_per_category"]}
        assert categories["Tools"] == {"category": "Tools", "unique_item_count": 2, "total_quantity": 18}
        assert categories["Supplies"]["total_quantity"] == 12

        locations = {row["location"]: row for row in body["items_per_location"]}
        assert locations["Unspecified"]["total_quantity"] == 3
        assert locations["Shelf A"] == {"location": "Shelf A", "unique_item_count": 2, "total_quantity": 22}

        reasons = {row["reason"]: row["count"] for row in body["defective_items_by_reason"]}
        assert reasons == {"Expired": 6, "Manufacturing fault": 1}
        statuses = {row["status"]: row["count"] for row in body["defective_items_by_status"]}
        assert statuses == {"Pending Review": 2, "Disposed": 5}

    def test_statistics_on_empty_store(self, employee_client):
        body = employee_client.get("/api/v1/statistics").json()

        assert body["average_quantity_per_item_type"] == 0.0
        assert body["items_per_category"] == []
        assert body["defective_items_by_status"] == []

    def test_statistics_require_session(self, client):
        assert client.get("/api/v1/statistics").status_code == 401
