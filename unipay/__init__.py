"""Unified payment gateway layer for Midtrans, Xendit and friends."""
from __future__ import annotations

from unipay.domain.dtos import PaymentData, ProviderConfig, VirtualAccountData
from unipay.domain.models import BasePayment, Transaction
from unipay.domain.statuses import PaymentStatus, TransactionType
from unipay.errors import (
    MissingConfigError,
    NoProviderConfiguredError,
    ProviderError,
    ProviderNotImplementedError,
    UnipayError,
    UnknownProviderError,
    UnsupportedOperationError,
)
from unipay.providers.base import BaseProvider, PaymentProvider
from unipay.providers.factory import ProviderRegistry, build_default_registry, default_registry
from unipay.providers.midtrans import MidtransProvider
from unipay.providers.xendit import XenditProvider
from unipay.services.payments_service import PaymentsService

__all__ = [
    "BasePayment",
    "BaseProvider",
    "MidtransProvider",
    "MissingConfigError",
    "NoProviderConfiguredError",
    "PaymentData",
    "PaymentProvider",
    "PaymentStatus",
    "PaymentsService",
    "ProviderConfig",
    "ProviderError",
    "ProviderNotImplementedError",
    "ProviderRegistry",
    "Transaction",
    "TransactionType",
    "UnipayError",
    "UnknownProviderError",
    "UnsupportedOperationError",
    "VirtualAccountData",
    "XenditProvider",
    "build_default_registry",
    "default_registry",
]
