from __future__ import annotations

from typing import Iterable


class UnipayError(Exception):
    """Base class for every error raised by the unified payment layer."""


class MissingConfigError(UnipayError, ValueError):
    """One or more required provider config fields are absent."""

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required config fields: {', '.join(self.fields)}")


class ProviderNotImplementedError(UnipayError, NotImplementedError):
    def __init__(self, message: str = "initialize_client() must be implemented by provider"):
        super().__init__(message)


class ProviderError(UnipayError):
    """Vendor call failed with a vendor-specific error.

    The original exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, *, provider: str, operation: str):
        self.provider = provider
        self.operation = operation
        super().__init__(f"Provider error in {operation}: {message}")


class UnknownProviderError(UnipayError, ValueError):
    def __init__(self, provider_type: str, available: Iterable[str]):
        self.provider_type = provider_type
        self.available = list(available)
        super().__init__(
            f"Provider type '{provider_type}' is not registered. "
            f"Available providers: {', '.join(self.available)}"
        )


class NoProviderConfiguredError(UnipayError, RuntimeError):
    def __init__(self, message: str = "Please set a provider before using this method"):
        super().__init__(message)


class UnsupportedOperationError(UnipayError, NotImplementedError):
    """Capability missing on the active provider or structurally absent at the vendor."""
