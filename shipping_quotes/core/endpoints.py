"""
Carrier endpoint resolution

Maps the deployment mode to the UPS and FedEx hosts. Pure lookup, no
network access. UPS issues tokens and rates from different production
hosts; FedEx serves both from one host.
"""
import enum
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# OAuth endpoints
UPS_OAUTH_TOKEN_PATH = "/security/v1/oauth/token"
FEDEX_OAUTH_TOKEN_PATH = "/oauth/token"

# Rating endpoints
UPS_RATING_PATH = "/api/rating/v2403/Rate"  # v2403 is current version
FEDEX_RATING_PATH = "/rate/v1/rates/quotes"


class DeploymentMode(str, enum.Enum):
    """Carrier environment the service talks to."""
    PRODUCTION = "production"
    SANDBOX = "sandbox"

    @classmethod
    def parse(cls, value) -> "DeploymentMode":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        if normalized in ("sandbox", "test", "cie"):
            return cls.SANDBOX
        if normalized not in ("", "production", "prod"):
            logger.warning(f"Unknown deployment mode {value!r}, using production")
        return cls.PRODUCTION


@dataclass(frozen=True)
class CarrierEndpoints:
    """Hostnames for one deployment mode."""
    ups_auth_host: str
    ups_rate_host: str
    fedex_host: str

    @property
    def ups_token_url(self) -> str:
        return f"{self.ups_auth_host}{UPS_OAUTH_TOKEN_PATH}"

    @property
    def ups_rate_url(self) -> str:
        return f"{self.ups_rate_host}{UPS_RATING_PATH}"

    @property
    def fedex_token_url(self) -> str:
        return f"{self.fedex_host}{FEDEX_OAUTH_TOKEN_PATH}"

    @property
    def fedex_rate_url(self) -> str:
        return f"{self.fedex_host}{FEDEX_RATING_PATH}"


_ENDPOINTS = {
    DeploymentMode.PRODUCTION: CarrierEndpoints(
        ups_auth_host="https://www.ups.com",
        ups_rate_host="https://onlinetools.ups.com",
        fedex_host="https://apis.fedex.com",
    ),
    DeploymentMode.SANDBOX: CarrierEndpoints(
        ups_auth_host="https://wwwcie.ups.com",
        ups_rate_host="https://wwwcie.ups.com",
        fedex_host="https://apis-sandbox.fedex.com",
    ),
}


def resolve_endpoints(mode=DeploymentMode.PRODUCTION) -> CarrierEndpoints:
    """Return the carrier hosts for a deployment mode (default production)."""
    return _ENDPOINTS[DeploymentMode.parse(mode)]
