from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from unipay.config import settings
from unipay.domain.dtos import PaymentData, VirtualAccountData
from unipay.domain.models import BasePayment, Transaction
from unipay.errors import (
    MissingConfigError,
    NoProviderConfiguredError,
    ProviderError,
    UnknownProviderError,
    UnsupportedOperationError,
)
from unipay.providers.factory import get_provider
from unipay.services.payments_service import PaymentsService
from unipay.utils.security import verify_bearer_token

router = APIRouter(prefix="/api/payments", dependencies=[Depends(verify_bearer_token)])
logger = logging.getLogger(__name__)

_service: PaymentsService | None = None


def get_payments_service() -> PaymentsService:
    """Service bound to the provider selected in settings, built on first use."""
    global _service
    if _service is None:
        service = PaymentsService()
        try:
            service.set_provider(get_provider(settings))
        except (MissingConfigError, UnknownProviderError) as exc:
            logger.error(
                "payment provider misconfigured",
                extra={"provider": settings.provider, "event": str(exc)},
            )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
            ) from exc
        _service = service
    return _service


def _raise_http(exc: Exception, endpoint: str) -> NoReturn:
    if isinstance(exc, NoProviderConfiguredError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, UnsupportedOperationError):
        code = status.HTTP_501_NOT_IMPLEMENTED
    elif isinstance(exc, ProviderError):
        code = status.HTTP_502_BAD_GATEWAY
    elif isinstance(exc, ValueError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        raise exc
    logger.info("payment request rejected", extra={"endpoint": endpoint, "event": str(exc)})
    raise HTTPException(status_code=code, detail=str(exc)) from exc


@router.post("", response_model=BasePayment)
async def create_payment(
    data: PaymentData, service: PaymentsService = Depends(get_payments_service)
) -> BasePayment:
    try:
        return await service.create_payment(data)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "/api/payments")


@router.post("/virtual-accounts", response_model=Transaction)
async def create_virtual_account(
    data: VirtualAccountData, service: PaymentsService = Depends(get_payments_service)
) -> Transaction:
    try:
        return await service.create_virtual_account(data)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "/api/payments/virtual-accounts")


@router.get("/{reference_id}", response_model=BasePayment)
async def get_payment_status(
    reference_id: str, service: PaymentsService = Depends(get_payments_service)
) -> BasePayment:
    try:
        return await service.get_payment_status(reference_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "/api/payments/{reference_id}")


@router.post("/{reference_id}/cancel", response_model=BasePayment)
async def cancel_payment(
    reference_id: str, service: PaymentsService = Depends(get_payments_service)
) -> BasePayment:
    try:
        return await service.cancel_payment(reference_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "/api/payments/{reference_id}/cancel")
