from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

import httpx

from unipay.domain.dtos import PaymentData, ProviderConfig, VirtualAccountData
from unipay.domain.models import DEFAULT_CURRENCY, BasePayment, Transaction
from unipay.domain.statuses import PaymentStatus, TransactionType
from unipay.errors import UnsupportedOperationError

from .base import BaseProvider

logger = logging.getLogger(__name__)

XENDIT_API_BASE = "https://api.xendit.co"
CANCELLATION_UNSUPPORTED = (
    "xendit does not support payment cancellation; recreate a new payment for this order"
)


class XenditAPIError(Exception):
    """Error response returned by the Xendit API."""

    def __init__(self, message: str, *, error_code: str | None = None, status_code: int | None = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(f"{error_code}: {message}" if error_code else message)


class XenditClient:
    """Minimal Xendit REST client.

    Test and live mode are selected by the secret key itself; the API host is
    the same for both.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        base_url: str = XENDIT_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def request(self, method: str, path: str, json: Dict[str, Any] | None = None) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.secret_key, ""),
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            resp = await client.request(method, path, json=json)
        data: Dict[str, Any] | None = None
        try:
            data = resp.json()
        except ValueError:
            if resp.text:
                data = {"raw": resp.text[:512]}
        if resp.is_error:
            body = data or {}
            raise XenditAPIError(
                str(body.get("message") or f"Xendit request failed ({resp.status_code})"),
                error_code=body.get("error_code"),
                status_code=resp.status_code,
            )
        return data or {}

    async def create_invoice(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", "/v2/invoices", json=payload)

    async def create_payment_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", "/payment_requests", json=payload)

    async def get_payment_request(self, payment_request_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/payment_requests/{payment_request_id}")


class XenditProvider(BaseProvider):
    """Xendit implementation.

    - create_payment(): hosted invoice, metadata carries invoice id + URL
    - create_virtual_account(): payment request with a VIRTUAL_ACCOUNT method
    - get_payment_status(): payment request lookup
    - cancel_payment(): not offered by Xendit, always raises
    """

    name = "xendit"
    vendor_errors = (XenditAPIError,)
    status_aliases = {
        "settled": PaymentStatus.PAID,
        "succeeded": PaymentStatus.PAID,
        "requires_action": PaymentStatus.PENDING,
        "voided": PaymentStatus.CANCELLED,
    }

    def __init__(
        self,
        config: ProviderConfig | Mapping[str, Any],
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self.validate_config(["secret_key", "is_production"])
        self._transport = transport

    async def initialize_client(self) -> XenditClient:
        return XenditClient(
            str(self.config.secret_key),
            base_url=self.config.get("api_base_url", XENDIT_API_BASE),
            timeout=float(self.config.get("timeout", 30.0)),
            transport=self._transport,
        )

    async def create_payment(self, data: PaymentData | Mapping[str, Any]) -> BasePayment:
        data = PaymentData.model_validate(data)
        currency = data.currency or DEFAULT_CURRENCY
        description = data.description or "Xendit Snap Payment"
        try:
            client = await self.get_client()
            payload: Dict[str, Any] = {
                "external_id": data.order_id,
                "amount": self.wire_amount(data.amount),
                "currency": currency,
                "description": description,
            }
            if data.customer_email:
                payload["payer_email"] = data.customer_email
            if data.customer_email or data.customer_name:
                customer: Dict[str, Any] = {}
                if data.customer_name:
                    customer["given_names"] = data.customer_name
                if data.customer_email:
                    customer["email"] = data.customer_email
                payload["customer"] = customer
            if data.expired:
                payload["invoice_duration"] = data.expired

            self.log("creating invoice", {"order_id": data.order_id})
            invoice = await client.create_invoice(payload)
        except Exception as exc:  # noqa: BLE001
            self.handle_error(exc, "create_payment")

        logger.info(
            "xendit invoice created",
            extra={"provider": self.name, "order_id": data.order_id, "reference_id": invoice.get("id")},
        )
        return self.standardize_payment_response(
            self.name,
            {
                "order_id": data.order_id,
                "amount": data.amount,
                "currency": currency,
                "status": invoice.get("status"),
                "method": invoice.get("payment_method") or "other",
                "description": description,
                "customer_email": data.customer_email,
                "customer_name": data.customer_name,
                "created_at": invoice.get("created"),
                "expires_at": invoice.get("expiry_date"),
            },
            {
                "token": invoice.get("id"),
                "redirect_url": invoice.get("invoice_url"),
            },
        )

    async def create_virtual_account(
        self, data: VirtualAccountData | Mapping[str, Any]
    ) -> Transaction:
        data = VirtualAccountData.model_validate(data)
        currency = data.currency or DEFAULT_CURRENCY
        try:
            client = await self.get_client()
            channel_properties: Dict[str, Any] = {
                "customer_name": data.customer_name or data.order_id,
            }
            virtual_account: Dict[str, Any] = {
                "channel_code": data.bank_code.upper(),
                "channel_properties": channel_properties,
            }
            if data.is_fixed_amount:
                virtual_account["amount"] = self.wire_amount(data.amount)
            payload: Dict[str, Any] = {
                "reference_id": data.order_id,
                "amount": self.wire_amount(data.amount),
                "currency": currency,
                "payment_method": {
                    "type": "VIRTUAL_ACCOUNT",
                    "reusability": "MULTIPLE_USE" if data.is_reusable else "ONE_TIME_USE",
                    "reference_id": data.order_id,
                    "virtual_account": virtual_account,
                },
            }
            if data.description:
                payload["description"] = data.description

            self.log("creating virtual account", {"order_id": data.order_id, "bank": data.bank_code})
            result = await client.create_payment_request(payload)
        except Exception as exc:  # noqa: BLE001
            self.handle_error(exc, "create_virtual_account")

        payment_method = result.get("payment_method") or {}
        va_number = self._va_number(payment_method)
        return self.standardize_transaction_response(
            self.name,
            {
                "id": result.get("id"),
                "payment_id": result.get("reference_id") or result.get("id"),
                "status": result.get("status"),
                "amount": result.get("amount"),
                "currency": result.get("currency"),
                "created_at": result.get("created"),
            },
            TransactionType.CHARGE,
            {
                "va_numbers": [va_number] if va_number else [],
                "payment_type": payment_method.get("type"),
            },
            raw_response=result,
        )

    async def get_payment_status(self, reference_id: str) -> BasePayment:
        reference_id = self.require_reference(reference_id)
        try:
            client = await self.get_client()
            result = await client.get_payment_request(reference_id)
        except Exception as exc:  # noqa: BLE001
            self.handle_error(exc, "get_payment_status")

        payment_method = result.get("payment_method") or {}
        channel_properties = (payment_method.get("virtual_account") or {}).get("channel_properties") or {}
        customer = result.get("customer") or {}
        individual = customer.get("individual_detail") or {}
        va_number = self._va_number(payment_method)
        return self.standardize_payment_response(
            self.name,
            {
                "order_id": result.get("reference_id") or result.get("id"),
                "amount": result.get("amount"),
                "currency": result.get("currency"),
                "status": result.get("status"),
                "method": payment_method.get("type"),
                "description": result.get("description"),
                "customer_email": customer.get("email"),
                "customer_name": individual.get("given_names") or customer.get("name"),
                "created_at": result.get("created"),
                "updated_at": result.get("updated"),
                "expires_at": channel_properties.get("expires_at"),
            },
            {
                "payment_request_id": result.get("id"),
                "payment_type": payment_method.get("type"),
                "va_numbers": [va_number] if va_number else [],
                "failure_code": result.get("failure_code"),
            },
        )

    async def cancel_payment(self, reference_id: str) -> BasePayment:
        raise UnsupportedOperationError(CANCELLATION_UNSUPPORTED)

    @staticmethod
    def _va_number(payment_method: Mapping[str, Any]) -> str | None:
        virtual_account = payment_method.get("virtual_account") or {}
        channel_properties = virtual_account.get("channel_properties") or {}
        return channel_properties.get("virtual_account_number")
