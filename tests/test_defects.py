"""
Defective item logs.
"""

import pytest

from stockkeeper.core.constants import DEFECT_REASON_SUGGESTIONS
from stockkeeper.models import ActivityLogEntry, DefectiveItemLog, DefectStatus, InventoryItem


@pytest.fixture
def item(db_session):
    item = InventoryItem(name="Kettle", quantity=20, category="Appliances")
    db_session.add(item)
    db_session.commit()
    db_session.refresh(item)
    return item


def _log(client, item_id, **overrides):
    payload = {"inventory_item_id": item_id, "quantity_defective": 2, "reason": "Manufacturing fault"}
    payload.update(overrides)
    return client.post("/api/v1/defects", json=payload)


class TestCreateDefect:
    def test_log_defect_snapshots_item_name(self, employee_client, item):
        response = _log(employee_client, item.id, notes="Lid cracked")

        assert response.status_code == 201
        body = response.json()
        assert body["item_name_at_log_time"] == "Kettle"
        assert body["inventory_item_name"] == "Kettle"
        assert body["status"] == "Pending Review"
        assert body["notes"] == "Lid cracked"

    def test_zero_quantity_is_rejected_before_store(self, employee_client, item, db_session):
        response = _log(employee_client, item.id, quantity_defective=0)

        assert response.status_code == 422
        assert "error" in response.json()
        assert db_session.query(DefectiveItemLog).count() == 0
        assert db_session.query(ActivityLogEntry).filter(ActivityLogEntry.action == "Logged defective item").count() == 0

    def test_unknown_item_is_not_found(self, employee_client):
        response = _log(employee_client, 4040)

        assert response.status_code == 404

    def test_listing_shows_current_item_name(self, employee_client, item, db_session):
        _log(employee_client, item.id)
        employee_client.put(f"/api/v1/items/{item.id}", json={"name": "Electric Kettle"})

        rows = employee_client.get("/api/v1/defects").json()

        assert len(rows) == 1
        assert rows[0]["item_name_at_log_time"] == "Kettle"
        assert rows[0]["inventory_item_name"] == "Electric Kettle"

    def test_reason_suggestions(self, employee_client):
        response = employee_client.get("/api/v1/defects/reasons")

        assert response.status_code == 200
        assert response.json() == list(DEFECT_REASON_SUGGESTIONS)


class TestDefectStatus:
    @pytest.mark.parametrize(
        "sequence",
        [
            [DefectStatus.DISPOSED, DefectStatus.PENDING_REVIEW],
            [DefectStatus.REPAIRED, DefectStatus.AWAITING_PARTS, DefectStatus.RETURNED_TO_SUPPLIER],
        ],
    )
    def test_any_transition_is_allowed(self, employee_client, item, sequence):
        log_id = _log(employee_client, item.id).json()["id"]

        for new_status in sequence:
            response = employee_client.patch(f"/api/v1/defects/{log_id}/status", json={"status": new_status.value})
            assert response.status_code == 200
            assert response.json()["status"] == new_status.value

    def test_unknown_status_is_rejected(self, employee_client, item):
        log_id = _log(employee_client, item.id).json()["id"]

        response = employee_client.patch(f"/api/v1/defects/{log_id}/status", json={"status": "Lost"})

        assert response.status_code == 422

    def test_status_change_is_audited(self, employee_client, item, db_session):
        log_id = _log(employee_client, item.id).json()["id"]
        employee_client.patch(f"/api/v1/defects/{log_id}/status", json={"status": "Disposed"})

        entry = db_session.query(ActivityLogEntry).order_by(ActivityLogEntry.id.desc()).first()
        assert entry.action == "Updated defective item log status"
        assert "from 'Pending Review' to 'Disposed'" in entry.details

    def test_missing_log_is_not_found(self, employee_client):
        response = employee_client.patch("/api/v1/defects/77/status", json={"status": "Disposed"})

        assert response.status_code == 404


class TestDeleteDefect:
    def test_delete_then_item_can_be_deleted(self, employee_client, item):
        log_id = _log(employee_client, item.id).json()["id"]

        assert employee_client.delete(f"/api/v1/defects/{log_id}").json() == {"success": True}
        assert employee_client.delete(f"/api/v1/items/{item.id}").status_code == 200

    def test_delete_missing_log(self, employee_client):
        assert employee_client.delete("/api/v1/defects/5").status_code == 404
