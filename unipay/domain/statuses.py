from __future__ import annotations

from enum import Enum


class PaymentStatus(str, Enum):
    """Unified payment state shared by every provider."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    EXPIRED = "expired"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class TransactionType(str, Enum):
    """Kind of state-changing operation recorded as a transaction."""

    CHARGE = "charge"
    REFUND = "refund"
    DISBURSEMENT = "disbursement"
    SETTLEMENT = "settlement"
    REVERSAL = "reversal"


# Raw vendor vocabulary (lowercased) -> unified status
PROVIDER_STATUS_MAP: dict[str, PaymentStatus] = {
    "settlement": PaymentStatus.PAID,
    "capture": PaymentStatus.PAID,
    "success": PaymentStatus.PAID,
    "paid": PaymentStatus.PAID,
    "pending": PaymentStatus.PENDING,
    "authorize": PaymentStatus.PENDING,
    "deny": PaymentStatus.FAILED,
    "failed": PaymentStatus.FAILED,
    "error": PaymentStatus.FAILED,
    "expire": PaymentStatus.EXPIRED,
    "expired": PaymentStatus.EXPIRED,
    "refund": PaymentStatus.REFUNDED,
    "partial_refund": PaymentStatus.REFUNDED,
    "cancel": PaymentStatus.CANCELLED,
    "cancelled": PaymentStatus.CANCELLED,
}
