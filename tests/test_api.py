"""HTTP tests for the rental service routers."""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from rental_service.app.main import app
from shared.core.auth import validate_current_token
from shared.core.database import get_rental_db


@pytest.fixture
def api(session_factory):
    """Test client; assign api.user to switch the caller."""

    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    class Caller:
        user = None

    app.dependency_overrides[get_rental_db] = override_db
    app.dependency_overrides[validate_current_token] = lambda: Caller.user
    Caller.client = TestClient(app)
    yield Caller
    app.dependency_overrides.clear()


def _rent_body(prop):
    return {
        "property_id": str(prop.id),
        "start_date": "2024-01-15",
        "end_date": "",
        "monthly_rent": "10000.00",
        "security_deposit": "20000",
    }


class TestBookingEndpoints:
    """Tests for /api/bookings."""

    def test_create_and_approve(self, api, rent_property, tenant, owner) -> None:
        """A tenant request approved by the owner becomes ACTIVE."""
        api.user = tenant
        resp = api.client.post("/api/bookings/rent", json=_rent_body(rent_property))
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "Success"
        assert body["data"]["status"] == "PENDING_APPROVAL"
        assert body["data"]["end_date"] is None
        booking_id = body["data"]["id"]

        api.user = owner
        pending = api.client.get("/api/bookings/pending-approvals").json()["data"]
        assert pending["total_pending"] == 1

        resp = api.client.post(f"/api/bookings/{booking_id}/approve")
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "ACTIVE"

    def test_tenant_cannot_approve(self, api, pending_booking, tenant) -> None:
        """Forbidden errors come back wrapped with 403."""
        api.user = tenant
        resp = api.client.post(f"/api/bookings/{pending_booking.id}/approve")
        assert resp.status_code == 403
        assert resp.json()["status"] == "Failure"
        assert resp.json()["status_code"] == "105"

    def test_invalid_state_reports_status(self, api, active_booking, owner) -> None:
        """Rejecting an active booking returns 409 with the current status."""
        api.user = owner
        resp = api.client.post(f"/api/bookings/{active_booking.id}/reject", json={"reason": "no"})
        assert resp.status_code == 409
        assert resp.json()["data"] == {"current_status": "ACTIVE"}

    def test_negative_rent(self, api, rent_property, tenant) -> None:
        """Malformed amounts are rejected with 400."""
        api.user = tenant
        body = dict(_rent_body(rent_property), monthly_rent="-5")
        resp = api.client.post("/api/bookings/rent", json=body)
        assert resp.status_code == 400
        assert resp.json()["status_code"] == "102"

    def test_unknown_booking(self, api, tenant) -> None:
        """Unknown ids return 404."""
        api.user = tenant
        resp = api.client.get("/api/bookings/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404


class TestPaymentEndpoints:
    """Tests for /api/payments and /api/wallet."""

    def test_top_up_and_pay(self, api, first_payment, tenant) -> None:
        """Funding the wallet then paying settles the payment."""
        api.user = tenant
        resp = api.client.post("/api/wallet/add", json={"amount": "12000"})
        assert resp.status_code == 200
        assert Decimal(resp.json()["data"]["new_balance"]) == Decimal("12000")

        resp = api.client.post(f"/api/payments/{first_payment.id}/pay", json={})
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "PAID"

        wallet = api.client.get("/api/wallet").json()["data"]
        assert Decimal(wallet["balance"]) == Decimal("2000")
        my = api.client.get("/api/payments/my").json()["data"]
        assert my["total"] == 2

    def test_insufficient_funds(self, api, first_payment, tenant) -> None:
        """A shortfall returns 402 carrying the total due."""
        api.user = tenant
        resp = api.client.post(f"/api/payments/{first_payment.id}/pay", json={"paid_amount": "500"})
        assert resp.status_code == 402
        assert resp.json()["data"]["total_due"] == "10000.00"

    def test_non_positive_paid_amount(self, api, first_payment, tenant) -> None:
        """Request validation failures return 422."""
        api.user = tenant
        resp = api.client.post(f"/api/payments/{first_payment.id}/pay", json={"paid_amount": "0"})
        assert resp.status_code == 422

    def test_outstanding(self, api, first_payment, tenant) -> None:
        """Outstanding reports unpaid principal and fees."""
        api.user = tenant
        data = api.client.get("/api/payments/outstanding").json()["data"]
        assert Decimal(data["outstanding_amount"]) == Decimal("10000")
        assert data["unpaid_payments"] == 1


class TestSchedulerEndpoints:
    """Tests for the admin-only scheduler triggers."""

    def test_requires_admin(self, api, tenant) -> None:
        """Non-admins are refused."""
        api.user = tenant
        resp = api.client.post("/api/scheduler/accrual", json={"as_of": "2024-01-18"})
        assert resp.status_code == 403

    def test_run_accrual(self, api, first_payment, admin, tenant) -> None:
        """An on-demand accrual applies the fee and notifies the tenant."""
        api.user = admin
        resp = api.client.post("/api/scheduler/accrual", json={"as_of": "2024-01-18"})
        assert resp.status_code == 200
        summary = resp.json()["data"]
        assert summary["fees_applied"] == 1
        assert summary["as_of"] == date(2024, 1, 18).isoformat()

        api.user = tenant
        assert api.client.get("/api/notifications/unread-count").json()["data"] == {"unread": 2}
        overdue = api.client.get("/api/payments/overdue").json()["data"]
        assert overdue["payments"][0]["late_fee"] == "233.33"
