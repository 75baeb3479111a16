from __future__ import annotations

from typing import Any, Dict

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration read from environment variables."""

    # General
    api_bearer_token: str = "testtoken"
    provider: str = "midtrans"
    debug: bool = False

    # Midtrans config
    midtrans_client_id: str | None = None
    midtrans_server_key: str | None = None
    midtrans_client_key: str = ""
    midtrans_is_production: bool = False

    # Xendit config
    xendit_secret_key: str | None = None
    xendit_is_production: bool = False
    xendit_base_url: str = "https://api.xendit.co"
    xendit_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def provider_config(self, name: str) -> Dict[str, Any]:
        """Provider config mapping built from the matching settings."""
        if name == "midtrans":
            config: Dict[str, Any] = {
                "client_id": self.midtrans_client_id,
                "secret_key": self.midtrans_server_key,
                "public_key": self.midtrans_client_key,
                "is_production": self.midtrans_is_production,
            }
        elif name == "xendit":
            config = {
                "secret_key": self.xendit_secret_key,
                "is_production": self.xendit_is_production,
                "api_base_url": self.xendit_base_url,
                "timeout": self.xendit_timeout,
            }
        else:
            config = {}
        config["debug"] = self.debug
        return config


settings = Settings()
