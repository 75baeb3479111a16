from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field


class ProviderConfig(BaseModel):
    """Credentials and flags handed to a provider at construction.

    Required keys differ per provider, so every named field is optional and
    validated by the provider itself. Unknown keys are kept as extras.
    Numeric ids and keys are accepted and stored as strings.
    """

    model_config = ConfigDict(extra="allow", frozen=True, coerce_numbers_to_str=True)

    client_id: str | None = None
    secret_key: str | None = None
    public_key: str | None = None
    is_production: bool | None = None
    debug: bool = False
    enable_logging: bool = False

    @classmethod
    def coerce(cls, config: ProviderConfig | Mapping[str, Any]) -> ProviderConfig:
        if isinstance(config, cls):
            return config
        return cls.model_validate(dict(config))

    def get(self, key: str, default: Any = None) -> Any:
        value = self.model_dump().get(key)
        return default if value is None else value

    def as_dict(self) -> dict[str, Any]:
        """Return only the keys that were supplied."""
        supplied = set(self.model_fields_set) | set(self.model_extra or {})
        return {key: value for key, value in self.model_dump().items() if key in supplied}


class PaymentData(BaseModel):
    """Input for creating a checkout/invoice style payment."""

    model_config = ConfigDict(extra="allow")

    order_id: str = Field(..., min_length=1, description="Caller reference / idempotency key")
    amount: Decimal = Field(..., ge=0)
    currency: str | None = None
    description: str | None = None
    customer_email: str | None = None
    customer_name: str | None = None
    expired: int | None = Field(
        default=None, gt=0, description="Lifetime of the payment page in seconds"
    )


class VirtualAccountData(PaymentData):
    """Input for creating a bank virtual account."""

    bank_code: str = Field(..., min_length=1, description="Bank / channel code, e.g. BCA or bca")
    is_reusable: bool = False
    is_fixed_amount: bool = True
