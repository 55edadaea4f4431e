"""
Application configuration

Settings are read once at process start. Carrier credentials and the
deployment mode are frozen into a QuoteEngineConfig that is passed
explicitly to the aggregator, token providers and endpoint resolver.

SECURITY: Defaults are fail-safe for production.
- DEBUG defaults to False
- Missing carrier credentials switch the quote endpoint to demo mode
- Runtime validation catches insecure configurations
"""
import json
import os
import logging
from dataclasses import dataclass
from typing import List, Union
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shipping_quotes.core.endpoints import DeploymentMode
from shipping_quotes.models.carrier import CarrierCredentials

logger = logging.getLogger(__name__)

# Default CORS origins (keep '*' while the frontend is being wired up)
DEFAULT_CORS_ORIGINS = ["*"]

# Outbound carrier calls: total and connect timeouts, in seconds
DEFAULT_CARRIER_TIMEOUT_SECONDS = 15.0
CARRIER_CONNECT_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class QuoteEngineConfig:
    """Process-wide, read-only configuration for the quote engine."""
    mode: DeploymentMode
    ups: CarrierCredentials
    fedex: CarrierCredentials
    timeout_seconds: float = DEFAULT_CARRIER_TIMEOUT_SECONDS
    ups_customer_context: str = "Shipping Quote"

    @property
    def has_all_credentials(self) -> bool:
        return self.ups.is_configured and self.fedex.is_configured


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App - defaults are PRODUCTION safe
    APP_NAME: str = "Shipping Quotes API"
    DEBUG: bool = False  # SECURE DEFAULT: off in production
    ENVIRONMENT: str = "production"  # Explicit env marker
    LOG_LEVEL: str = "INFO"

    # Server bind (scripts/start_api.py)
    HOST: str = "0.0.0.0"
    PORT: int = Field(3000, ge=1, le=65535)

    # CORS - accepts JSON array or comma-separated string
    CORS_ORIGINS: Union[str, List[str]] = DEFAULT_CORS_ORIGINS

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            if not v or v.strip() == "":
                return DEFAULT_CORS_ORIGINS
            # Try JSON first
            if v.startswith("["):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Fallback to comma-separated
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Carrier deployment mode: "production" or "sandbox"
    SHIPPING_ENV: str = "production"
    SHIPPING_DEMO_MODE: bool = False

    # UPS
    UPS_CLIENT_ID: str = ""
    UPS_CLIENT_SECRET: str = ""
    UPS_ACCOUNT_NUMBER: str = ""
    UPS_CUSTOMER_CONTEXT: str = "Shipping Quote"

    # FedEx
    FEDEX_CLIENT_ID: str = ""
    FEDEX_CLIENT_SECRET: str = ""
    FEDEX_ACCOUNT_NUMBER: str = ""

    # Outbound HTTP
    CARRIER_HTTP_TIMEOUT_SECONDS: float = DEFAULT_CARRIER_TIMEOUT_SECONDS

    @field_validator("CARRIER_HTTP_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("CARRIER_HTTP_TIMEOUT_SECONDS must be positive")
        return v

    @model_validator(mode="after")
    def validate_production_config(self):
        """Runtime validation to catch insecure production configurations."""
        if self.ENVIRONMENT == "production" and self.DEBUG:
            raise ValueError(
                "PRODUCTION SECURITY VIOLATIONS:\n"
                "  - DEBUG=True is forbidden in production. "
                "Set DEBUG=false or ENVIRONMENT=development"
            )
        return self

    @property
    def deployment_mode(self) -> DeploymentMode:
        return DeploymentMode.parse(self.SHIPPING_ENV)

    @property
    def demo_mode_enabled(self) -> bool:
        """Demo quotes are served when forced or when any client credential is missing."""
        return self.SHIPPING_DEMO_MODE or not all([
            self.UPS_CLIENT_ID,
            self.UPS_CLIENT_SECRET,
            self.FEDEX_CLIENT_ID,
            self.FEDEX_CLIENT_SECRET,
        ])

    def quote_engine_config(self) -> QuoteEngineConfig:
        return QuoteEngineConfig(
            mode=self.deployment_mode,
            ups=CarrierCredentials(
                client_id=self.UPS_CLIENT_ID,
                client_secret=self.UPS_CLIENT_SECRET,
                account_number=self.UPS_ACCOUNT_NUMBER,
            ),
            fedex=CarrierCredentials(
                client_id=self.FEDEX_CLIENT_ID,
                client_secret=self.FEDEX_CLIENT_SECRET,
                account_number=self.FEDEX_ACCOUNT_NUMBER,
            ),
            timeout_seconds=self.CARRIER_HTTP_TIMEOUT_SECONDS,
            ups_customer_context=self.UPS_CUSTOMER_CONTEXT,
        )


# Try to load settings, provide helpful error on failure
try:
    settings = Settings()
except Exception:
    # In development, allow fallback defaults
    if os.getenv("ENVIRONMENT", "development") == "development":
        logger.warning(
            "Settings validation failed, using development defaults. "
            "Check CARRIER_HTTP_TIMEOUT_SECONDS and CORS_ORIGINS in .env file."
        )
        settings = Settings(_env_file=None, ENVIRONMENT="development")
    else:
        raise
