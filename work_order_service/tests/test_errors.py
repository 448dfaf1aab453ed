"""
Tests for error handling and failure modes in the work order service.
"""
from fastapi.testclient import TestClient

from work_order_service.app.exceptions import (
    NotFoundError,
    SchemaError,
    ValidationFailedError,
    create_error_response,
)
from work_order_service.app.main import app
from work_order_service.app.services.odoo_client import get_odoo_client
from work_order_service.tests import factories
from work_order_service.tests.factories import FakeOdooClient

client = TestClient(app, raise_server_exceptions=False)


class ExplodingOdooClient(FakeOdooClient):
    async def search_read(self, model, domain=None, fields=None):
        raise RuntimeError("connection reset by peer")


def teardown_function(function):
    app.dependency_overrides.clear()


def test_create_error_response_structure():
    body = create_error_response("Something broke", {"request_id": "abc", "path": "/x"})

    assert body == {"error": "Something broke", "request_id": "abc", "path": "/x"}


def test_create_error_response_with_reason_and_details():
    body = create_error_response("Missing", details=[{"loc": ["body"]}], key="reason")

    assert body == {"reason": "Missing", "details": [{"loc": ["body"]}]}


def test_domain_error_status_codes():
    assert ValidationFailedError().status_code == 400
    assert NotFoundError().status_code == 404
    assert SchemaError().status_code == 500
    assert NotFoundError("gone").code == "NOT_FOUND"


def test_unexpected_error_returns_500_with_message():
    app.dependency_overrides[get_odoo_client] = lambda: ExplodingOdooClient()

    response = client.get("/workOrders/contactCode/P158769", headers={"X-Request-ID": "req-1"})

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "connection reset by peer"
    assert data["request_id"] == "req-1"
    assert data["path"] == "/workOrders/contactCode/P158769"
    assert response.headers["x-request-id"] == "req-1"


def test_unexpected_upstream_record_returns_500():
    fake = FakeOdooClient(
        search_read_results={"maintenance.request": [factories.odoo_work_order(stage_id=False)]}
    )
    app.dependency_overrides[get_odoo_client] = lambda: fake

    response = client.get("/workOrders/contactCode/P158769")

    assert response.status_code == 500
    assert response.json()["error"] == "Unexpected data from upstream system"


def test_unknown_route_returns_404_body():
    response = client.get("/no/such/route")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Not Found"
    assert "request_id" in data
