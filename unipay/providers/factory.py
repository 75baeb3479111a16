from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping

from unipay.config import Settings
from unipay.domain.dtos import ProviderConfig
from unipay.errors import UnknownProviderError

from .base import PaymentProvider
from .midtrans import MidtransProvider
from .xendit import XenditProvider

ProviderConstructor = Callable[[Dict[str, Any]], PaymentProvider]


@dataclass
class ProviderRegistration:
    constructor: ProviderConstructor
    default_config: Dict[str, Any] = field(default_factory=dict)


class ProviderRegistry:
    """Maps a provider type to a constructor and its default config.

    Registration order is preserved and drives ``get_registered_providers``.
    """

    def __init__(self) -> None:
        self._providers: Dict[str, ProviderRegistration] = {}

    def register(
        self,
        provider_type: str,
        constructor: ProviderConstructor,
        default_config: Mapping[str, Any] | None = None,
    ) -> None:
        """Register a provider type, replacing any previous registration."""
        self._providers[provider_type] = ProviderRegistration(
            constructor=constructor,
            default_config=dict(default_config or {}),
        )

    def create(
        self, provider_type: str, config: ProviderConfig | Mapping[str, Any]
    ) -> PaymentProvider:
        """Build a provider; keys the caller supplied win over the registered defaults."""
        registration = self._providers.get(provider_type)
        if registration is None:
            raise UnknownProviderError(provider_type, self._providers.keys())
        if isinstance(config, ProviderConfig):
            supplied = config.as_dict()
        else:
            supplied = dict(config)
        final_config = {**registration.default_config, **supplied}
        return registration.constructor(final_config)

    def get_registered_providers(self) -> list[str]:
        return list(self._providers)

    def is_registered(self, provider_type: str) -> bool:
        return provider_type in self._providers

    def unregister(self, provider_type: str) -> bool:
        return self._providers.pop(provider_type, None) is not None


def build_default_registry() -> ProviderRegistry:
    """Registry with the built-in providers."""
    registry = ProviderRegistry()
    registry.register("midtrans", MidtransProvider, {"is_production": False})
    registry.register("xendit", XenditProvider, {"is_production": False})
    return registry


default_registry = build_default_registry()


def get_provider(settings: Settings, registry: ProviderRegistry | None = None) -> PaymentProvider:
    """Return the payment provider selected by configuration."""
    registry = registry or default_registry
    name = settings.provider.lower()
    return registry.create(name, settings.provider_config(name))
