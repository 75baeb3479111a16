from __future__ import annotations

import base64
import json
import pathlib
import sys
from decimal import Decimal
from typing import Any

import httpx
import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from unipay.domain.statuses import PaymentStatus, TransactionType
from unipay.errors import MissingConfigError, ProviderError, UnsupportedOperationError
from unipay.providers.xendit import XenditAPIError, XenditClient, XenditProvider

CONFIG = {"secret_key": "xnd_development_abc", "is_production": False}

PAYMENT_REQUEST = {
    "id": "pr-123",
    "reference_id": "order-123",
    "status": "PENDING",
    "amount": 10000,
    "currency": "IDR",
    "created": "2023-01-01T00:00:00Z",
    "updated": "2023-01-01T01:00:00Z",
    "description": "Test payment",
    "payment_method": {
        "type": "VIRTUAL_ACCOUNT",
        "reusability": "ONE_TIME_USE",
        "virtual_account": {
            "channel_code": "BCA",
            "channel_properties": {
                "customer_name": "Test User",
                "virtual_account_number": "1234567890",
                "expires_at": "2023-01-02T00:00:00Z",
            },
        },
    },
    "customer": {"email": "test@example.com", "individual_detail": {"given_names": "Test User"}},
}


class Recorder:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/v2/invoices":
            return httpx.Response(
                200,
                json={
                    "id": "invoice-123",
                    "external_id": "order-123",
                    "status": "PENDING",
                    "invoice_url": "https://checkout-staging.xendit.co/web/invoice-123",
                    "created": "2023-01-01T00:00:00Z",
                    "expiry_date": "2023-01-02T00:00:00Z",
                },
            )
        if request.url.path == "/payment_requests" and request.method == "POST":
            return httpx.Response(201, json=PAYMENT_REQUEST)
        if request.url.path == "/payment_requests/pr-123":
            return httpx.Response(200, json={**PAYMENT_REQUEST, "status": "SUCCEEDED"})
        return httpx.Response(
            404,
            json={"error_code": "DATA_NOT_FOUND", "message": "Payment request not found"},
        )

    def body(self, index: int = -1) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def provider(recorder: Recorder) -> XenditProvider:
    return XenditProvider(CONFIG, transport=httpx.MockTransport(recorder.handler))


def test_requires_is_production() -> None:
    with pytest.raises(MissingConfigError, match="^Missing required config fields: is_production$"):
        XenditProvider({"secret_key": "xnd_development_abc"})


@pytest.mark.asyncio
async def test_get_client(provider: XenditProvider) -> None:
    client = await provider.get_client()
    assert isinstance(client, XenditClient)
    assert client.base_url == "https://api.xendit.co"
    assert client.timeout == 30.0
    assert await provider.get_client() is client


@pytest.mark.asyncio
async def test_create_payment_minimal(provider: XenditProvider, recorder: Recorder) -> None:
    result = await provider.create_payment({"order_id": "order-123", "amount": 10000})
    request = recorder.requests[-1]
    assert request.method == "POST"
    token = base64.b64encode(b"xnd_development_abc:").decode()
    assert request.headers["Authorization"] == f"Basic {token}"
    assert recorder.body() == {
        "external_id": "order-123",
        "amount": 10000,
        "currency": "IDR",
        "description": "Xendit Snap Payment",
    }
    assert result.provider == "xendit"
    assert result.order_id == "order-123"
    assert result.amount == Decimal("10000")
    assert result.currency == "IDR"
    assert result.status is PaymentStatus.PENDING
    assert result.description == "Xendit Snap Payment"
    assert result.expires_at == "2023-01-02T00:00:00Z"
    assert result.metadata == {
        "token": "invoice-123",
        "redirect_url": "https://checkout-staging.xendit.co/web/invoice-123",
    }


@pytest.mark.asyncio
async def test_create_payment_full(provider: XenditProvider, recorder: Recorder) -> None:
    result = await provider.create_payment(
        {
            "order_id": "order-123",
            "amount": 10000,
            "currency": "USD",
            "description": "Test payment",
            "customer_email": "test@example.com",
            "customer_name": "Test User",
            "expired": 3600,
        }
    )
    body = recorder.body()
    assert body["payer_email"] == "test@example.com"
    assert body["customer"] == {"given_names": "Test User", "email": "test@example.com"}
    assert body["invoice_duration"] == 3600
    assert result.currency == "USD"
    assert result.description == "Test payment"
    assert result.customer_email == "test@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("reusable, expected", [(False, "ONE_TIME_USE"), (True, "MULTIPLE_USE")])
async def test_create_virtual_account(
    provider: XenditProvider, recorder: Recorder, reusable: bool, expected: str
) -> None:
    result = await provider.create_virtual_account(
        {
            "order_id": "order-123",
            "amount": 10000,
            "bank_code": "bca",
            "customer_name": "Test User",
            "is_reusable": reusable,
            "is_fixed_amount": True,
        }
    )
    method = recorder.body()["payment_method"]
    assert method["type"] == "VIRTUAL_ACCOUNT"
    assert method["reusability"] == expected
    assert method["virtual_account"]["channel_code"] == "BCA"
    assert method["virtual_account"]["amount"] == 10000
    assert result.id == "pr-123"
    assert result.provider == "xendit"
    assert result.payment_id == "order-123"
    assert result.type is TransactionType.CHARGE
    assert result.status is PaymentStatus.PENDING
    assert result.currency == "IDR"
    assert result.raw_response == PAYMENT_REQUEST
    assert result.metadata == {"va_numbers": ["1234567890"], "payment_type": "VIRTUAL_ACCOUNT"}


@pytest.mark.asyncio
async def test_open_amount_virtual_account(provider: XenditProvider, recorder: Recorder) -> None:
    await provider.create_virtual_account(
        {"order_id": "order-9", "amount": 0, "bank_code": "BNI", "is_fixed_amount": False}
    )
    assert "amount" not in recorder.body()["payment_method"]["virtual_account"]


@pytest.mark.asyncio
async def test_get_payment_status(provider: XenditProvider) -> None:
    result = await provider.get_payment_status("pr-123")
    assert result.provider == "xendit"
    assert result.order_id == "order-123"
    assert result.status is PaymentStatus.PAID
    assert result.method == "VIRTUAL_ACCOUNT"
    assert result.customer_email == "test@example.com"
    assert result.customer_name == "Test User"
    assert result.created_at == "2023-01-01T00:00:00Z"
    assert result.updated_at == "2023-01-01T01:00:00Z"
    assert result.expires_at == "2023-01-02T00:00:00Z"
    assert result.metadata["va_numbers"] == ["1234567890"]


@pytest.mark.asyncio
async def test_get_payment_status_not_found(provider: XenditProvider) -> None:
    with pytest.raises(ProviderError, match="Provider error in get_payment_status: Payment request not found") as exc_info:
        await provider.get_payment_status("does-not-exist")
    cause = exc_info.value.__cause__
    assert isinstance(cause, XenditAPIError)
    assert cause.error_code == "DATA_NOT_FOUND"
    assert cause.status_code == 404


@pytest.mark.asyncio
async def test_get_payment_status_requires_reference(provider: XenditProvider, recorder: Recorder) -> None:
    with pytest.raises(ValueError):
        await provider.get_payment_status("  ")
    assert recorder.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("reference_id", ["pr-123", "anyid", ""])
async def test_cancel_payment_is_unsupported(provider: XenditProvider, reference_id: str) -> None:
    with pytest.raises(
        UnsupportedOperationError,
        match="xendit does not support payment cancellation; recreate a new payment for this order",
    ):
        await provider.cancel_payment(reference_id)


@pytest.mark.asyncio
async def test_transport_errors_propagate_unchanged() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = XenditProvider(CONFIG, transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.ConnectError):
        await provider.create_payment({"order_id": "order-1", "amount": 1000})
