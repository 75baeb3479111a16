from __future__ import annotations

import logging
import warnings
from typing import Any, Mapping

from unipay.domain.dtos import PaymentData, VirtualAccountData
from unipay.domain.models import BasePayment, Transaction
from unipay.errors import NoProviderConfiguredError, UnsupportedOperationError
from unipay.providers.base import PaymentProvider


class PaymentsService:
    """Single entry point for payments; forwards to the active provider."""

    def __init__(self, options: Mapping[str, Any] | None = None):
        # Runtime options reserved for payment-log integrations
        self.options = dict(options or {})
        self.provider: PaymentProvider | None = None
        self.logger = logging.getLogger(__name__)

    def set_provider(self, provider: PaymentProvider) -> None:
        self.provider = provider
        self.logger.info(
            "payment provider set",
            extra={"provider": getattr(provider, "name", type(provider).__name__)},
        )

    def get_provider(self) -> PaymentProvider | None:
        return self.provider

    def _require_provider(self) -> PaymentProvider:
        if self.provider is None:
            raise NoProviderConfiguredError()
        return self.provider

    def _require_capability(self, operation: str) -> Any:
        provider = self._require_provider()
        method = getattr(provider, operation, None)
        if not callable(method):
            name = getattr(provider, "name", type(provider).__name__)
            raise UnsupportedOperationError(f"Provider '{name}' does not support {operation}")
        return method

    async def get_client(self) -> Any:
        return await self._require_provider().get_client()

    async def snap(self) -> Any:
        """Deprecated: use get_client()."""
        warnings.warn(
            "PaymentsService.snap() is deprecated, use get_client()",
            DeprecationWarning,
            stacklevel=2,
        )
        provider = self._require_provider()
        legacy = getattr(provider, "snap", None)
        if callable(legacy):
            return await legacy()
        return await provider.get_client()

    async def create_payment(self, data: PaymentData | Mapping[str, Any]) -> BasePayment:
        return await self._require_provider().create_payment(data)

    async def create_virtual_account(
        self, data: VirtualAccountData | Mapping[str, Any]
    ) -> Transaction:
        return await self._require_provider().create_virtual_account(data)

    async def get_payment_status(self, reference_id: str) -> BasePayment:
        get_status = self._require_capability("get_payment_status")
        return await get_status(reference_id)

    async def cancel_payment(self, reference_id: str) -> BasePayment:
        cancel = self._require_capability("cancel_payment")
        return await cancel(reference_id)
