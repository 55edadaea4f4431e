"""
Pytest configuration and fixtures for shipping quote tests.
"""
import os

import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"

from carrier_stubs import CarrierStub  # noqa: E402
from shipping_quotes.core.config import QuoteEngineConfig  # noqa: E402
from shipping_quotes.core.endpoints import DeploymentMode  # noqa: E402
from shipping_quotes.models.carrier import CarrierCredentials  # noqa: E402
from shipping_quotes.schemas.shipping import ShipmentSpec  # noqa: E402


@pytest.fixture
def engine_config() -> QuoteEngineConfig:
    """Production-mode config with both carriers fully configured."""
    return QuoteEngineConfig(
        mode=DeploymentMode.PRODUCTION,
        ups=CarrierCredentials("ups-id", "ups-secret", "A1B2C3"),
        fedex=CarrierCredentials("fedex-id", "fedex-secret", "510087000"),
        timeout_seconds=15.0,
    )


@pytest.fixture
def shipment() -> ShipmentSpec:
    return ShipmentSpec(origin_zip="10001", dest_zip="94105", weight_lb=5)


@pytest.fixture
def carrier_stub() -> CarrierStub:
    return CarrierStub()


@pytest.fixture
def anyio_backend() -> str:
    """The app is asyncio-based (asyncio.gather); run anyio tests on asyncio only."""
    return "asyncio"
