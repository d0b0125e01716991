"""Integration tests for Inventory API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from inventory.api import inventory_router, register_exception_handlers
from inventory.stock.stock import InventoryItem
from protean import current_domain


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(inventory_router)
    register_exception_handlers(app)
    return TestClient(app)


def _track(client, **overrides):
    """Helper: POST /inventory and return the inventory_item_id."""
    defaults = {
        "product_id": "prod-001",
        "product_name": "Espresso Beans 1kg",
        "sku": "BEAN-ESP-1K",
        "initial_stock": 5,
        "min_stock_threshold": 10,
        "reorder_quantity": 40,
    }
    defaults.update(overrides)
    response = client.post("/inventory", json=defaults)
    assert response.status_code == 201
    return response.json()["inventory_item_id"]


def _adjust(client, item_id, **overrides):
    body = {"adjustment_type": "add", "amount": 20, "transaction_type": "restock", "actor": "admin@example.com"}
    body.update(overrides)
    return client.put(f"/inventory/{item_id}/adjust", json=body)


class TestTrackItemEndpoint:
    def test_track_item(self, client):
        item_id = _track(client)
        assert item_id == "prod-001"
        assert current_domain.repository_for(InventoryItem).get(item_id).current_stock == 5

    def test_duplicate_is_unprocessable(self, client):
        _track(client)
        response = client.post("/inventory", json={"product_id": "prod-001", "product_name": "Again"})
        assert response.status_code == 422
        assert response.json()["error"] == "This product is already tracked in inventory"

    def test_negative_opening_stock_fails_schema_validation(self, client):
        response = client.post("/inventory", json={"product_id": "p", "product_name": "n", "initial_stock": -1})
        assert response.status_code == 422


class TestListItemsEndpoint:
    def test_lists_items_with_status(self, client):
        _track(client, product_id="p1", product_name="Beans", initial_stock=50)
        _track(client, product_id="p2", product_name="Cups", initial_stock=0)

        response = client.get("/inventory")
        assert response.status_code == 200
        assert [(i["product_id"], i["status"]) for i in response.json()] == [("p1", "in-stock"), ("p2", "out-of-stock")]

    def test_filter_by_status(self, client):
        _track(client, product_id="p1", product_name="Beans", initial_stock=50)
        _track(client, product_id="p2", product_name="Cups", initial_stock=0)
        response = client.get("/inventory", params={"status": "out-of-stock"})
        assert [i["product_id"] for i in response.json()] == ["p2"]


class TestGetItemEndpoint:
    def test_returns_one_item(self, client):
        item_id = _track(client, initial_stock=5)
        _adjust(client, item_id, amount=20)

        response = client.get(f"/inventory/{item_id}")
        assert response.status_code == 200
        body = response.json()
        assert (body["inventory_item_id"], body["current_stock"], body["status"]) == ("prod-001", 25, "in-stock")
        assert body["last_restocked"] is not None

    def test_unknown_item_is_404(self, client):
        assert client.get("/inventory/ghost").status_code == 404


class TestAdjustEndpoint:
    def test_adjust_returns_transaction(self, client):
        item_id = _track(client)
        response = _adjust(client, item_id, notes="Supplier delivery")

        assert response.status_code == 200
        data = response.json()
        assert data["previous_stock"] == 5
        assert data["new_stock"] == 25
        assert data["quantity"] == 20
        assert data["transaction_type"] == "restock"
        assert data["created_by"] == "admin@example.com"

    def test_unknown_item_is_404(self, client):
        response = _adjust(client, "missing")
        assert response.status_code == 404
        assert response.json()["error"] == "Inventory item not found"

    def test_no_op_is_422(self, client):
        item_id = _track(client)
        response = _adjust(client, item_id, amount=0)
        assert response.status_code == 422
        assert response.json()["error"] == "The adjustment does not change the stock level"

    def test_invalid_amount_is_422(self, client):
        item_id = _track(client)
        response = _adjust(client, item_id, amount=-3)
        assert response.status_code == 422
        assert response.json()["error"] == "The adjustment request is invalid"

    def test_stale_expected_stock_is_409_with_retry_hint(self, client):
        item_id = _track(client)
        _adjust(client, item_id, amount=1)

        response = _adjust(client, item_id, expected_stock=5)
        assert response.status_code == 409
        assert response.json()["retry"] is True
        assert "retry" in response.json()["error"].lower()

    def test_store_failure_is_503(self, client, monkeypatch):
        item_id = _track(client)

        def broken(self, *args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(InventoryItem, "adjust", broken)
        response = _adjust(client, item_id)
        assert response.status_code == 503
        assert response.json()["error"] == "The inventory store is unavailable. No changes were saved."


class TestRestockEndpoint:
    def test_defaults_to_reorder_quantity(self, client):
        item_id = _track(client, initial_stock=2, reorder_quantity=40)
        response = client.put(f"/inventory/{item_id}/restock", json={"actor": "admin@example.com"})
        assert response.status_code == 200
        assert response.json()["new_stock"] == 42
        assert response.json()["notes"] == "Manual restock by admin@example.com"


class TestThresholdEndpoint:
    def test_change_threshold(self, client):
        item_id = _track(client, initial_stock=15)
        response = client.put(f"/inventory/{item_id}/threshold", json={"min_stock_threshold": 20})
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

        listing = client.get("/inventory").json()
        assert listing[0]["status"] == "low-stock"


class TestTransactionsEndpoint:
    def test_filter_and_sort(self, client):
        item_id = _track(client)
        _adjust(client, item_id, amount=20)
        _adjust(client, item_id, amount=3, adjustment_type="subtract", transaction_type="sale")
        _adjust(client, item_id, amount=50)

        response = client.get(
            "/inventory/transactions",
            params={"type": "restock", "date_range": "last_7_days", "sort": "quantity", "direction": "desc"},
        )
        assert response.status_code == 200
        assert [t["quantity"] for t in response.json()] == [50, 20]

    def test_bad_sort_is_422(self, client):
        response = client.get("/inventory/transactions", params={"sort": "price"})
        assert response.status_code == 422

    def test_bad_date_range_is_422(self, client):
        response = client.get("/inventory/transactions", params={"date_range": "fortnight"})
        assert response.status_code == 422

    def test_unknown_type_is_422(self, client):
        response = client.get("/inventory/transactions", params={"type": "theft"})
        assert response.status_code == 422
        assert "transaction_type" in response.json()["detail"]


class TestExportEndpoint:
    def test_csv_attachment(self, client):
        item_id = _track(client)
        _adjust(client, item_id, notes='Box "A", shelf 2')

        response = client.get("/inventory/transactions/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="inventory-transactions-' in response.headers["content-disposition"]

        lines = response.text.splitlines()
        assert lines[0] == "Date,Product ID,Type,Quantity,Previous Stock,New Stock,Notes"
        assert lines[1].endswith(',prod-001,Restock,20,5,25,"Box ""A"", shelf 2"')

    def test_empty_export_is_404(self, client):
        response = client.get("/inventory/transactions/export")
        assert response.status_code == 404
        assert response.json()["error"] == "No transactions to export"


class TestLowStockEndpoint:
    def test_ranked_alerts(self, client):
        _track(client, product_id="p1", product_name="Beans", initial_stock=8)
        _track(client, product_id="p2", product_name="Cups", initial_stock=1)
        _track(client, product_id="p3", product_name="Lids", initial_stock=30)

        response = client.get("/inventory/alerts/low-stock", params={"threshold": 10, "limit": 5})
        assert response.status_code == 200
        assert response.json() == [
            {"item_id": "p2", "product_name": "Cups", "current_stock": 1},
            {"item_id": "p1", "product_name": "Beans", "current_stock": 8},
        ]
