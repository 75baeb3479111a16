from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping

import midtransclient  # type: ignore[import-untyped]
from midtransclient.error_midtrans import MidtransAPIError  # type: ignore[import-untyped]

from unipay.domain.dtos import PaymentData, ProviderConfig, VirtualAccountData
from unipay.domain.models import BasePayment, Transaction
from unipay.domain.statuses import TransactionType

from .base import BaseProvider

logger = logging.getLogger(__name__)


@dataclass
class MidtransClients:
    """Snap (checkout) and Core API clients built from one config."""

    snap: Any
    core: Any


class MidtransProvider(BaseProvider):
    """Midtrans implementation on top of the official ``midtransclient`` SDK.

    - create_payment(): Snap transaction, returns token + redirect URL in metadata
    - create_virtual_account(): Core API ``bank_transfer`` charge
    - get_payment_status() / cancel_payment(): Core API transaction endpoints

    The SDK is synchronous, calls run in a worker thread.
    """

    name = "midtrans"
    vendor_errors = (MidtransAPIError,)

    def __init__(self, config: ProviderConfig | Mapping[str, Any]):
        super().__init__(config)
        self.validate_config(["client_id", "secret_key"])

    async def initialize_client(self) -> MidtransClients:
        options = {
            "is_production": bool(self.config.is_production),
            "server_key": self.config.secret_key,
            "client_key": self.config.public_key or "",
        }
        return MidtransClients(
            snap=midtransclient.Snap(**options),
            core=midtransclient.CoreApi(**options),
        )

    async def get_client(self) -> Any:
        clients = await super().get_client()
        return clients.snap

    async def get_core_client(self) -> Any:
        clients = await super().get_client()
        return clients.core

    async def snap(self) -> Any:
        """Legacy accessor kept for callers of the old API; use get_client()."""
        return await self.get_client()

    async def create_payment(self, data: PaymentData | Mapping[str, Any]) -> BasePayment:
        data = PaymentData.model_validate(data)
        try:
            snap = await self.get_client()
            transaction_details: Dict[str, Any] = {
                "order_id": data.order_id,
                "gross_amount": self.wire_amount(data.amount),
            }
            if data.description:
                transaction_details["description"] = data.description
            payload: Dict[str, Any] = {"transaction_details": transaction_details}
            customer = self._customer_details(data)
            if customer:
                payload["customer_details"] = customer
            if data.expired:
                payload["expiry"] = {"duration": data.expired, "unit": "second"}

            self.log("creating snap transaction", {"order_id": data.order_id})
            result = await asyncio.to_thread(snap.create_transaction, payload)
        except Exception as exc:  # noqa: BLE001
            self.handle_error(exc, "create_payment")

        logger.info(
            "midtrans snap transaction created",
            extra={"provider": self.name, "order_id": data.order_id},
        )
        return self.standardize_payment_response(
            self.name,
            {
                "order_id": data.order_id,
                "amount": data.amount,
                "currency": data.currency,
                "status": "pending",
                "method": "other",
                "description": data.description or "Midtrans Snap Payment",
                "customer_email": data.customer_email,
                "customer_name": data.customer_name,
            },
            {
                "token": result.get("token"),
                "redirect_url": result.get("redirect_url"),
            },
        )

    async def create_virtual_account(
        self, data: VirtualAccountData | Mapping[str, Any]
    ) -> Transaction:
        data = VirtualAccountData.model_validate(data)
        try:
            core = await self.get_core_client()
            payload: Dict[str, Any] = {
                "payment_type": "bank_transfer",
                "transaction_details": {
                    "order_id": data.order_id,
                    "gross_amount": self.wire_amount(data.amount),
                },
                "bank_transfer": {"bank": data.bank_code.lower()},
            }
            customer = self._customer_details(data)
            if customer:
                payload["customer_details"] = customer

            self.log("creating bank transfer charge", {"order_id": data.order_id, "bank": data.bank_code})
            result = await asyncio.to_thread(core.charge, payload)
        except Exception as exc:  # noqa: BLE001
            self.handle_error(exc, "create_virtual_account")

        return self.standardize_transaction_response(
            self.name,
            result,
            TransactionType.CHARGE,
            {
                "va_numbers": result.get("va_numbers"),
                "payment_type": result.get("payment_type"),
                "permata_va_number": result.get("permata_va_number"),
                "bill_key": result.get("bill_key"),
                "biller_code": result.get("biller_code"),
            },
        )

    async def get_payment_status(self, reference_id: str) -> BasePayment:
        reference_id = self.require_reference(reference_id)
        try:
            core = await self.get_core_client()
            result = await asyncio.to_thread(core.transactions.status, reference_id)
        except Exception as exc:  # noqa: BLE001
            self.handle_error(exc, "get_payment_status")

        customer = result.get("customer_details") or {}
        return self.standardize_payment_response(
            self.name,
            {
                **result,
                "description": result.get("transaction_status"),
                "customer_email": customer.get("email"),
                "customer_name": customer.get("first_name") or customer.get("name"),
            },
            {
                "transaction_id": result.get("transaction_id"),
                "fraud_status": result.get("fraud_status"),
                "approval_code": result.get("approval_code"),
                "payment_type": result.get("payment_type"),
                "transaction_time": result.get("transaction_time"),
                "gross_amount": result.get("gross_amount"),
                "va_numbers": result.get("va_numbers"),
                "permata_va_number": result.get("permata_va_number"),
                "bill_key": result.get("bill_key"),
                "biller_code": result.get("biller_code"),
            },
        )

    async def cancel_payment(self, reference_id: str) -> BasePayment:
        reference_id = self.require_reference(reference_id)
        try:
            core = await self.get_core_client()
            result = await asyncio.to_thread(core.transactions.cancel, reference_id)
        except Exception as exc:  # noqa: BLE001
            self.handle_error(exc, "cancel_payment")

        logger.info(
            "midtrans transaction cancelled",
            extra={"provider": self.name, "reference_id": reference_id},
        )
        customer = result.get("customer_details") or {}
        return self.standardize_payment_response(
            self.name,
            {
                **result,
                "transaction_status": result.get("transaction_status") or "cancelled",
                "description": "Payment cancelled",
                "customer_email": customer.get("email"),
                "customer_name": customer.get("first_name") or customer.get("name"),
            },
            {
                "transaction_id": result.get("transaction_id"),
                "status_message": result.get("status_message"),
                "cancellation_reason": result.get("cancellation_reason"),
            },
        )

    @staticmethod
    def _customer_details(data: PaymentData) -> Dict[str, Any]:
        details: Dict[str, Any] = {}
        if data.customer_email:
            details["email"] = data.customer_email
        if data.customer_name:
            details["first_name"] = data.customer_name
        return details
