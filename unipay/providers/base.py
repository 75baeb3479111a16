from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Iterable, Mapping, NoReturn

from unipay.domain.dtos import PaymentData, ProviderConfig, VirtualAccountData
from unipay.domain.models import DEFAULT_CURRENCY, BasePayment, Transaction
from unipay.domain.statuses import PROVIDER_STATUS_MAP, PaymentStatus, TransactionType
from unipay.errors import MissingConfigError, ProviderError, ProviderNotImplementedError

logger = logging.getLogger(__name__)


# Canonical field -> accepted keys, in order of preference
_PAYMENT_FIELDS: dict[str, tuple[str, ...]] = {
    "order_id": ("order_id", "orderId"),
    "amount": ("amount", "gross_amount"),
    "currency": ("currency",),
    "status": ("status", "transaction_status"),
    "method": ("method", "payment_type"),
    "description": ("description",),
    "customer_email": ("customer_email", "customerEmail"),
    "customer_name": ("customer_name", "customerName"),
    "created_at": ("created_at", "createdAt", "transaction_time"),
    "updated_at": ("updated_at", "updatedAt"),
    "expires_at": ("expires_at", "expiresAt", "expiry_time"),
}

_TRANSACTION_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "transaction_id"),
    "payment_id": ("payment_id", "paymentId", "order_id"),
    "amount": ("amount", "gross_amount"),
    "currency": ("currency",),
    "status": ("status", "transaction_status"),
    "created_at": ("created_at", "createdAt", "transaction_time"),
}


def _pick(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _to_amount(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount {value!r}") from exc
    if amount < 0:
        raise ValueError(f"Amount must not be negative, got {value!r}")
    return amount


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class PaymentProvider(ABC):
    """Capabilities every payment gateway adapter exposes.

    ``get_payment_status`` and ``cancel_payment`` are optional: callers must
    check for them before use.
    """

    @abstractmethod
    async def get_client(self) -> Any:
        """Return the (lazily created) vendor client."""

    @abstractmethod
    async def create_payment(self, data: PaymentData | Mapping[str, Any]) -> BasePayment:
        """Create a checkout, invoice or QR payment."""

    @abstractmethod
    async def create_virtual_account(
        self, data: VirtualAccountData | Mapping[str, Any]
    ) -> Transaction:
        """Create a virtual account (or equivalent bank transfer) charge."""


class BaseProvider(PaymentProvider):
    """Shared behaviour for adapters: lazy client, config checks, normalization.

    Subclasses override ``initialize_client`` and must implement the
    abstract payment operations.
    ``vendor_errors`` lists the exception types that ``handle_error`` wraps
    into :class:`ProviderError`.
    """

    name: ClassVar[str] = "base"
    vendor_errors: ClassVar[tuple[type[BaseException], ...]] = ()
    # Vendor words outside the shared table, checked first
    status_aliases: ClassVar[Mapping[str, PaymentStatus]] = {}

    def __init__(self, config: ProviderConfig | Mapping[str, Any]):
        self.config = ProviderConfig.coerce(config)
        self._client: Any = None
        self._client_lock = asyncio.Lock()

    async def initialize_client(self) -> Any:
        raise ProviderNotImplementedError()

    async def get_client(self) -> Any:
        if self._client is not None:
            return self._client
        async with self._client_lock:
            if self._client is None:
                self.log("initializing client")
                self._client = await self.initialize_client()
        return self._client

    # Helpers
    def validate_config(self, required_fields: Iterable[str]) -> None:
        supplied = self.config.as_dict()
        missing = [f for f in required_fields if supplied.get(f) is None]
        if missing:
            raise MissingConfigError(missing)

    def generate_signature(self, data: Mapping[str, Any]) -> str:
        """Signature hook for request or webhook validation.

        The default is the canonical JSON payload; adapters plug in the
        vendor's real scheme by overriding this method.
        """
        return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)

    def log(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        if not (self.config.debug or self.config.enable_logging):
            return
        logger.info(
            "[%s] %s",
            type(self).__name__,
            message,
            extra={"provider": self.name, "context": dict(context or {})},
        )

    def map_status(self, provider_status: str | None) -> PaymentStatus:
        if provider_status is None:
            return PaymentStatus.PENDING
        if isinstance(provider_status, PaymentStatus):
            return provider_status
        key = str(provider_status).strip().lower()
        if key in self.status_aliases:
            return self.status_aliases[key]
        return PROVIDER_STATUS_MAP.get(key, PaymentStatus.PENDING)

    def handle_error(self, error: BaseException, operation: str) -> NoReturn:
        logger.error(
            "provider operation failed",
            extra={"provider": self.name, "operation": operation, "event": str(error)},
        )
        if self.vendor_errors and isinstance(error, self.vendor_errors):
            message = getattr(error, "message", None) or str(error)
            raise ProviderError(str(message), provider=self.name, operation=operation) from error
        raise error

    def standardize_payment_response(
        self,
        provider: str,
        raw: Mapping[str, Any],
        metadata: Mapping[str, Any] | None = None,
    ) -> BasePayment:
        values = {name: _pick(raw, keys) for name, keys in _PAYMENT_FIELDS.items()}
        return BasePayment(
            provider=provider,
            order_id=str(values["order_id"] or ""),
            amount=_to_amount(values["amount"]),
            currency=values["currency"] or DEFAULT_CURRENCY,
            status=self.map_status(values["status"]),
            method=values["method"],
            description=values["description"],
            customer_email=values["customer_email"],
            customer_name=values["customer_name"],
            created_at=values["created_at"] or _utcnow_iso(),
            updated_at=values["updated_at"],
            expires_at=values["expires_at"],
            metadata=dict(metadata or {}),
        )

    def standardize_transaction_response(
        self,
        provider: str,
        raw: Mapping[str, Any],
        type: TransactionType | str,
        metadata: Mapping[str, Any] | None = None,
        raw_response: Any = None,
    ) -> Transaction:
        """Build a :class:`Transaction`.

        ``raw_response`` defaults to ``raw``; pass the untouched vendor payload
        when ``raw`` is a pre-shaped mapping.
        """
        values = {name: _pick(raw, keys) for name, keys in _TRANSACTION_FIELDS.items()}
        return Transaction(
            id=str(values["id"] or ""),
            provider=provider,
            payment_id=str(values["payment_id"] or ""),
            type=TransactionType(type),
            status=self.map_status(values["status"]),
            amount=_to_amount(values["amount"]),
            currency=values["currency"] or DEFAULT_CURRENCY,
            created_at=values["created_at"] or _utcnow_iso(),
            raw_response=raw if raw_response is None else raw_response,
            metadata=dict(metadata or {}),
        )

    @staticmethod
    def wire_amount(amount: Decimal) -> int | float:
        """Amount as a JSON number (IDR amounts are integral)."""
        if amount == amount.to_integral_value():
            return int(amount)
        return float(amount)

    @staticmethod
    def require_reference(reference_id: str) -> str:
        if not reference_id or not str(reference_id).strip():
            raise ValueError("reference_id is required")
        return str(reference_id).strip()
