from __future__ import annotations

import pathlib
import sys
from typing import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from unipay.config import settings
from unipay.main import app
from unipay.providers.xendit import XenditProvider
from unipay.routes.payments import get_payments_service
from unipay.services.payments_service import PaymentsService


def fake_xendit(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/v2/invoices":
        return httpx.Response(
            200,
            json={"id": "invoice-1", "status": "PENDING", "invoice_url": "https://pay/invoice-1"},
        )
    if request.url.path == "/payment_requests":
        return httpx.Response(
            201,
            json={
                "id": "pr-1",
                "reference_id": "order1",
                "status": "PENDING",
                "amount": 1000,
                "currency": "IDR",
                "payment_method": {
                    "type": "VIRTUAL_ACCOUNT",
                    "virtual_account": {"channel_properties": {"virtual_account_number": "8808"}},
                },
            },
        )
    return httpx.Response(404, json={"error_code": "DATA_NOT_FOUND", "message": "not found"})


@pytest.fixture
def client() -> Iterator[TestClient]:
    service = PaymentsService()
    service.set_provider(
        XenditProvider(
            {"secret_key": "xnd_development_1", "is_production": False},
            transport=httpx.MockTransport(fake_xendit),
        )
    )
    app.dependency_overrides[get_payments_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


HEADERS = {"Authorization": f"Bearer {settings.api_bearer_token}"}


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert "midtrans" in body["registered_providers"]


def test_requires_bearer_token(client: TestClient) -> None:
    response = client.post("/api/payments", json={"order_id": "order1", "amount": 1000})
    assert response.status_code == 401


def test_create_payment(client: TestClient) -> None:
    response = client.post("/api/payments", json={"order_id": "order1", "amount": 1000}, headers=HEADERS)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "pending"
    assert body["order_id"] == "order1"
    assert body["metadata"]["redirect_url"] == "https://pay/invoice-1"


def test_create_virtual_account(client: TestClient) -> None:
    payload = {"order_id": "order1", "amount": 1000, "bank_code": "BCA"}
    response = client.post("/api/payments/virtual-accounts", json=payload, headers=HEADERS)
    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "charge"
    assert body["metadata"]["va_numbers"] == ["8808"]


def test_status_not_found_is_bad_gateway(client: TestClient) -> None:
    response = client.get("/api/payments/unknown", headers=HEADERS)
    assert response.status_code == 502
    assert "Provider error in get_payment_status" in response.json()["detail"]


def test_cancel_unsupported(client: TestClient) -> None:
    response = client.post("/api/payments/pr-1/cancel", headers=HEADERS)
    assert response.status_code == 501
    assert "does not support payment cancellation" in response.json()["detail"]


def test_service_without_provider_is_unavailable(client: TestClient) -> None:
    app.dependency_overrides[get_payments_service] = lambda: PaymentsService()
    response = client.get("/api/payments/pr-1", headers=HEADERS)
    assert response.status_code == 503
