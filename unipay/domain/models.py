from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .statuses import PaymentStatus, TransactionType

DEFAULT_CURRENCY = "IDR"


@dataclass
class BasePayment:
    """Vendor-agnostic representation of a payment."""

    provider: str
    order_id: str
    amount: Decimal
    status: PaymentStatus
    currency: str = DEFAULT_CURRENCY
    method: str | None = None
    description: str | None = None
    customer_email: str | None = None
    customer_name: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    expires_at: str | None = None
    # Provider extras: tokens, redirect URLs, VA numbers
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Transaction:
    """Ledger entry for a state-changing provider operation."""

    id: str
    provider: str
    payment_id: str
    type: TransactionType
    status: PaymentStatus
    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    created_at: str | None = None
    raw_response: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)
