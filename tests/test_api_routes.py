import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from uuid import uuid4

from app.main import app


@pytest_asyncio.fixture
async def client(registry, ledger):
    app.state.tables = registry
    app.state.ledger = ledger
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _seat(client, table_id, *menu_items):
    body = {"table_id": str(table_id), "items": [{"menu_item_id": str(m.id), "quantity": 1} for m in menu_items]}
    response = await client.post("/api/v1/orders/", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestTableRoutes:

    @pytest.mark.asyncio
    async def test_create_and_list_tables(self, client):
        response = await client.post("/api/v1/tables/", json={"number": 5, "seats": 4})
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "available"

        listing = await client.get("/api/v1/tables/", params={"status": "available"})
        assert [t["number"] for t in listing.json()["data"]] == [5]

    @pytest.mark.asyncio
    async def test_duplicate_number_is_conflict(self, client, table5):
        response = await client.post("/api/v1/tables/", json={"number": 5, "seats": 2})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "table_number_taken"

    @pytest.mark.asyncio
    async def test_invalid_seats_is_validation_error(self, client):
        response = await client.post("/api/v1/tables/", json={"number": 3, "seats": 0})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_reserved_table_cannot_be_deleted(self, client, table5):
        reserve = await client.post(f"/api/v1/tables/{table5.id}/reservation", json={"name": "Rossi", "time": "20:30"})
        assert reserve.json()["data"]["status"] == "reserved"

        response = await client.delete(f"/api/v1/tables/{table5.id}")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "table_in_use"

        cancel = await client.delete(f"/api/v1/tables/{table5.id}/reservation")
        assert cancel.json()["data"]["status"] == "available"
        assert (await client.delete(f"/api/v1/tables/{table5.id}")).status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_table_is_404(self, client):
        response = await client.get(f"/api/v1/tables/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"


class TestOrderRoutes:

    @pytest.mark.asyncio
    async def test_full_service_flow(self, client, table5, menu):
        """Seat, serve, amend and pay through the API"""
        order = await _seat(client, table5.id, menu.pasta)
        assert order["status"] == "pending"
        assert order["drink_status"] == "served"

        item_id = order["items"][0]["id"]
        served = await client.patch(f"/api/v1/orders/{order['id']}/items/{item_id}/status", json={"status": "served"})
        assert served.json()["data"]["status"] == "served"
        table = await client.get(f"/api/v1/tables/{table5.id}")
        assert table.json()["data"]["status"] == "readyToPay"

        added = await client.post(f"/api/v1/orders/{order['id']}/items", json={"menu_item_id": str(menu.wine.id)})
        assert added.json()["data"]["drink_status"] == "pending"

        bar = await client.get("/api/v1/orders/", params={"department": "drink"})
        assert [o["id"] for o in bar.json()["data"]] == [order["id"]]

        paid = await client.post(f"/api/v1/orders/{order['id']}/payment", json={"payment_method": "card"})
        assert paid.status_code == 200
        assert paid.json()["data"]["status"] == "paid"
        table = await client.get(f"/api/v1/tables/{table5.id}")
        assert table.json()["data"]["status"] == "available"

        frozen = await client.post(f"/api/v1/orders/{order['id']}/items", json={"menu_item_id": str(menu.water.id)})
        assert frozen.status_code == 409
        assert frozen.json()["error"]["code"] == "order_paid"

    @pytest.mark.asyncio
    async def test_create_order_empty_items(self, client, table5):
        """Test validation for empty items"""
        response = await client.post("/api/v1/orders/", json={"table_id": str(table5.id), "items": []})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_second_order_on_table_is_conflict(self, client, table5, menu):
        await _seat(client, table5.id, menu.pasta)

        body = {"table_id": str(table5.id), "items": [{"menu_item_id": str(menu.wine.id), "quantity": 1}]}
        response = await client.post("/api/v1/orders/", json=body)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "table_has_active_order"

    @pytest.mark.asyncio
    async def test_department_bulk_update(self, client, table5, menu):
        order = await _seat(client, table5.id, menu.pasta, menu.tiramisu)

        response = await client.patch(f"/api/v1/orders/{order['id']}/departments/food/status", json={"status": "served"})

        assert response.json()["data"]["status"] == "served"
        kitchen = await client.get("/api/v1/orders/", params={"department": "food"})
        assert kitchen.json()["data"] == []

    @pytest.mark.asyncio
    async def test_generic_status_rejects_derived_statuses(self, client, table5, menu):
        order = await _seat(client, table5.id, menu.pasta)

        refused = await client.patch(f"/api/v1/orders/{order['id']}/status", json={"status": "served"})
        missing_method = await client.patch(f"/api/v1/orders/{order['id']}/status", json={"status": "paid"})

        assert refused.status_code == 400
        assert refused.json()["error"]["code"] == "invalid_transition"
        assert missing_method.status_code == 400

    @pytest.mark.asyncio
    async def test_active_order_for_table(self, client, table5, menu):
        order = await _seat(client, table5.id, menu.pasta)

        response = await client.get("/api/v1/orders/", params={"table_id": str(table5.id), "active": "true"})

        assert [o["id"] for o in response.json()["data"]] == [order["id"]]

    @pytest.mark.asyncio
    async def test_delete_order_frees_table(self, client, table5, menu):
        order = await _seat(client, table5.id, menu.pasta)

        response = await client.delete(f"/api/v1/orders/{order['id']}")

        assert response.status_code == 200
        table = await client.get(f"/api/v1/tables/{table5.id}")
        assert table.json()["data"]["status"] == "available"
        assert (await client.get(f"/api/v1/orders/{order['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_reprint_is_accepted(self, client, table5, menu):
        order = await _seat(client, table5.id, menu.pasta)
        response = await client.post(f"/api/v1/orders/{order['id']}/print")
        assert response.status_code == 202

    @pytest.mark.asyncio
    async def test_unknown_order_is_404(self, client):
        response = await client.get(f"/api/v1/orders/{uuid4()}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_combined_filters_are_rejected(self, client, table5, menu):
        await _seat(client, table5.id, menu.pasta)

        combined = await client.get("/api/v1/orders/", params={"department": "food", "table_id": str(table5.id)})
        active_alone = await client.get("/api/v1/orders/", params={"active": "true"})

        assert combined.status_code == 400
        assert "department, table_id" in combined.json()["error"]["message"]
        assert active_alone.status_code == 400


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
