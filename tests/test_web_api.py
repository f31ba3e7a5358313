"""
Tests for the HTTP API

Tests covering:
1. Health endpoints
2. Order placement (201 / 422 with error list)
3. Advance (404 unknown, 409 complete)
4. Admin status / report upload (404 / 409 / 422)
5. Report JSON and PDF download
6. Pricing, notifications, users and dashboard endpoints
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from core.orders.events import EventBus, ImmediateTransport
from core.orders.service import build_default_service
from reporting.report_pdf import EvaluationReportGenerator
from utils.config import Config
from web.app import create_app
from web.dependencies import get_report_generator, get_service


LANDLORD = {"name": "Jane Landlord", "phone": "604-555-0101", "email": "jane@example.com"}


def order_body(user_id: str = "USR-1", count: int = 1, **overrides) -> dict:
    body = {
        "user_id": user_id,
        "properties": [
            {
                "address": f"{100 + i} Main Street, Vancouver",
                "city": "vancouver",
                "proximity_zone": "B",
                "landlord_info": LANDLORD,
            }
            for i in range(count)
        ],
    }
    body.update(overrides)
    return body


@pytest.fixture
def service(tmp_path, clock):
    config = Config(simulated_latency_ms=0, orders_persist_path=None, reports_dir=str(tmp_path))
    return build_default_service(config, bus=EventBus(ImmediateTransport()), clock=clock)


@pytest.fixture
def client(service, tmp_path):
    app = create_app(Config(reports_dir=str(tmp_path)))
    app.dependency_overrides[get_service] = lambda: service
    app.dependency_overrides[get_report_generator] = lambda: EvaluationReportGenerator(tmp_path / "pdf")
    return TestClient(app)


@pytest.fixture
def order_id(client):
    response = client.post("/api/orders", json=order_body())
    assert response.status_code == 201
    return response.json()["id"]


# =============================================================================
# Health
# =============================================================================


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json() == {"status": "ok"}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/api/health").json()["status"] == "healthy"


# =============================================================================
# Orders
# =============================================================================


class TestOrders:
    """Tests for /api/orders."""

    def test_create_order(self, client):
        response = client.post("/api/orders", json=order_body(count=4, surge_active=True))

        assert response.status_code == 201
        data = response.json()
        # 4 x (28 + 3) = 124, -12.40 bulk, +5 surge
        assert data["total_price"] == 116.6
        assert data["discount"] == 12.4
        assert data["status"] == "Pending"
        assert data["current_step"] == "PENDING_MATCH"
        assert data["step_message"] == "Finding an evaluator near you..."

    def test_missing_phone_is_422(self, client):
        body = order_body()
        body["properties"][0]["landlord_info"] = {"name": "Jane", "email": "jane@example.com"}

        response = client.post("/api/orders", json=body)

        assert response.status_code == 422
        assert any("phone" in e for e in response.json()["detail"]["errors"])
        assert client.get("/api/orders").json()["count"] == 0

    def test_unknown_zone_is_422(self, client):
        body = order_body()
        body["properties"][0]["proximity_zone"] = "Z"

        assert client.post("/api/orders", json=body).status_code == 422

    def test_list_and_get(self, client, order_id):
        client.post("/api/orders", json=order_body(user_id="USR-2"))

        assert client.get("/api/orders").json()["count"] == 2
        mine = client.get("/api/orders", params={"user_id": "USR-1"}).json()
        assert [o["id"] for o in mine["orders"]] == [order_id]
        assert client.get(f"/api/orders/{order_id}").json()["id"] == order_id

    def test_get_unknown_is_404(self, client):
        assert client.get("/api/orders/ORD-MISSING").status_code == 404

    def test_advance(self, client, order_id):
        response = client.post(f"/api/orders/{order_id}/advance")

        assert response.status_code == 200
        assert response.json()["status"] == "Evaluator Assigned"
        assert response.json()["evaluator"] is not None

    def test_advance_unknown_is_404(self, client):
        assert client.post("/api/orders/ORD-MISSING/advance").status_code == 404

    def test_advance_complete_is_409(self, client, order_id):
        for _ in range(8):
            assert client.post(f"/api/orders/{order_id}/advance").status_code == 200

        response = client.post(f"/api/orders/{order_id}/advance")

        assert response.status_code == 409
        assert "already complete" in response.json()["detail"]


# =============================================================================
# Admin Orders and Reports
# =============================================================================


class TestAdminOrders:
    """Tests for admin status and report endpoints."""

    def test_status_update(self, client, order_id):
        response = client.post(f"/api/admin/orders/{order_id}/status", json={"status": "In Progress"})

        assert response.status_code == 200
        assert response.json()["current_step"] == "EN_ROUTE"

    def test_status_regression_is_409(self, client, order_id):
        client.post(f"/api/admin/orders/{order_id}/status", json={"status": "In Progress"})

        response = client.post(f"/api/admin/orders/{order_id}/status", json={"status": "Pending"})

        assert response.status_code == 409

    def test_invalid_status_is_422(self, client, order_id):
        response = client.post(f"/api/admin/orders/{order_id}/status", json={"status": "Paused"})

        assert response.status_code == 422

    def test_status_unknown_order_is_404(self, client):
        response = client.post("/api/admin/orders/ORD-MISSING/status", json={"status": "In Progress"})

        assert response.status_code == 404

    def test_report_upload_and_download(self, client, order_id):
        assert client.get(f"/api/orders/{order_id}/report").status_code == 404
        assert client.get(f"/api/orders/{order_id}/report.pdf").status_code == 404

        response = client.post(
            f"/api/admin/orders/{order_id}/report",
            json={"comments": "Great light. Minor <scuffs> in hallway.", "image_url": "https://img.example.com/1.jpg"},
        )

        assert response.status_code == 201
        assert client.get(f"/api/orders/{order_id}").json()["status"] == "Report Ready"
        assert client.get(f"/api/orders/{order_id}/report").json()["comments"].startswith("Great light")

        pdf = client.get(f"/api/orders/{order_id}/report.pdf")
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"
        assert pdf.content.startswith(b"%PDF")

    def test_report_empty_comments_is_422(self, client, order_id):
        response = client.post(f"/api/admin/orders/{order_id}/report", json={"comments": ""})

        assert response.status_code == 422

    def test_report_unknown_order_is_404(self, client):
        response = client.post("/api/admin/orders/ORD-MISSING/report", json={"comments": "Fine"})

        assert response.status_code == 404


# =============================================================================
# Pricing
# =============================================================================


class TestPricing:
    def test_price_property(self, client):
        response = client.post(
            "/api/pricing/property",
            json={"city": "toronto", "proximity_zone": "C", "rush_booking": True},
        )

        assert response.json() == {"base_price": 30, "proximity_fee": 6, "rush_fee": 7, "total": 43}

    def test_price_order(self, client):
        response = client.post(
            "/api/pricing/order",
            json={"properties": [{"city": "toronto", "proximity_zone": "A"}] * 5},
        )

        data = response.json()
        assert data["subtotal"] == 150
        assert data["discount"] == 15
        assert data["total"] == 135
        assert data["bulk_discount_applied"] is True

    def test_bad_zone_is_422(self, client):
        response = client.post("/api/pricing/property", json={"proximity_zone": "Q"})

        assert response.status_code == 422


# =============================================================================
# Notifications
# =============================================================================


class TestNotifications:
    def test_list_mark_and_clear(self, client, order_id):
        client.post(f"/api/orders/{order_id}/advance")

        listing = client.get("/api/notifications/USR-1").json()
        assert listing["unread_count"] == 3

        first_id = listing["notifications"][0]["id"]
        marked = client.post(f"/api/notifications/USR-1/{first_id}/read").json()
        assert marked == {"found": True, "unread_count": 2}

        assert client.post("/api/notifications/USR-1/NTF-NOPE/read").json()["found"] is False
        assert client.post("/api/notifications/USR-1/read-all").json()["unread_count"] == 0
        assert client.delete("/api/notifications/USR-1").json() == {"removed": 3}


# =============================================================================
# Admin Dashboard and Users
# =============================================================================


class TestAdminDashboard:
    def test_metrics_sales_transactions_evaluators(self, client, order_id):
        metrics = client.get("/api/admin/metrics").json()
        assert metrics["order_count"] == 1
        assert metrics["pending_order_count"] == 1

        series = client.get("/api/admin/sales").json()["series"]
        assert len(series) == 7
        assert sum(row["revenue"] for row in series) == 31

        transactions = client.get("/api/admin/transactions").json()["transactions"]
        assert transactions[0]["id"] == order_id

        assert len(client.get("/api/admin/evaluators").json()["evaluators"]) == 5


class TestAdminUsers:
    def test_user_crud(self, client):
        created = client.post("/api/admin/users", json={"name": "Ana", "email": "ana@example.com"})
        assert created.status_code == 201
        user_id = created.json()["id"]

        duplicate = client.post("/api/admin/users", json={"name": "Ana 2", "email": "ANA@example.com"})
        assert duplicate.status_code == 409

        updated = client.patch(f"/api/admin/users/{user_id}", json={"role": "admin"})
        assert updated.json()["role"] == "admin"

        client.post("/api/orders", json=order_body(user_id=user_id))
        deleted = client.delete(f"/api/admin/users/{user_id}")
        assert deleted.json() == {"deleted": True, "deleted_orders": 1}

        assert client.get(f"/api/admin/users/{user_id}").status_code == 404

    def test_demo_users_listed(self, client):
        emails = {u["email"] for u in client.get("/api/admin/users").json()["users"]}

        assert {"tenant@example.com", "admin@example.com"} <= emails

    def test_unknown_user_is_404(self, client):
        assert client.patch("/api/admin/users/USR-MISSING", json={"name": "x"}).status_code == 404
        assert client.delete("/api/admin/users/USR-MISSING").status_code == 404

    def test_invalid_role_is_422(self, client):
        response = client.post("/api/admin/users", json={"name": "Eve", "email": "eve@example.com", "role": "root"})

        assert response.status_code == 422
