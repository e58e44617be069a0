"""
Shared pytest fixtures for billing tests.

Provides fixtures for:
- Resolved tariffs built from raw rows
- In-memory tariff repository
- Billing service
- API client (httpx)
"""
import os

import pytest
import pytest_asyncio

# Test environment configuration
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.pop("TARIFFS_FILE", None)

from factories import TariffRowFactory  # noqa: E402
from water_billing.config import BillingSettings  # noqa: E402
from water_billing.application.services.billing_service import BillingService  # noqa: E402
from water_billing.domain.services.billing_calculator import BillingCalculator  # noqa: E402
from water_billing.infrastructure.tariffs import (  # noqa: E402
    InMemoryTariffRepository,
    tariff_from_row,
)

RENTAL_DOMESTIC_TIERS = [
    {"rate": 2, "limit": 5},
    {"rate": 4, "limit": 10},
    {"rate": 6, "limit": 20},
    {"rate": 9, "limit": "Infinity"},
]

RENTAL_NON_DOMESTIC_TIERS = [
    {"rate": 6, "limit": 5},
    {"rate": 12, "limit": "Infinity"},
]


# ============================================================================
# Tariff Fixtures
# ============================================================================

@pytest.fixture
def domestic_row():
    """Raw Domestic tariff row for 2024."""
    return TariffRowFactory()


@pytest.fixture
def domestic_tariff(domestic_row):
    """Resolved Domestic tariff for 2024."""
    return tariff_from_row(domestic_row)


@pytest.fixture
def non_domestic_tariff():
    """Resolved Non-domestic tariff for 2024."""
    return tariff_from_row(TariffRowFactory(non_domestic=True))


@pytest.fixture
def rental_domestic_tariff():
    """Resolved rental domestic tariff with four tiers."""
    return tariff_from_row(TariffRowFactory(
        customer_type="rental domestic",
        tiers=RENTAL_DOMESTIC_TIERS,
    ))


@pytest.fixture
def rental_non_domestic_tariff():
    """Resolved rental non-domestic tariff with two tiers."""
    return tariff_from_row(TariffRowFactory(
        customer_type="rental Non domestic",
        tiers=RENTAL_NON_DOMESTIC_TIERS,
    ))


@pytest.fixture
def tariff_rows():
    """Raw rows for every customer type in 2024."""
    return [
        TariffRowFactory(),
        TariffRowFactory(non_domestic=True),
        TariffRowFactory(customer_type="rental domestic", tiers=RENTAL_DOMESTIC_TIERS),
        TariffRowFactory(customer_type="rental Non domestic", tiers=RENTAL_NON_DOMESTIC_TIERS),
    ]


@pytest.fixture
def tariff_repository(tariff_rows):
    """In-memory repository seeded with the 2024 tariffs."""
    return InMemoryTariffRepository.from_rows(tariff_rows)


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def billing_settings():
    """Billing settings with defaults."""
    return BillingSettings()


@pytest.fixture
def calculator():
    """Billing calculator with the default meter rent lookup."""
    return BillingCalculator()


@pytest.fixture
def billing_service(tariff_repository, calculator, billing_settings):
    """Billing service backed by the in-memory repository."""
    return BillingService(
        tariff_repository=tariff_repository,
        calculator=calculator,
        settings=billing_settings,
    )


# ============================================================================
# API Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def api_client(tariff_repository):
    """
    Test API client.

    Uses httpx AsyncClient against the ASGI app with the tariff
    repository overridden.
    """
    import httpx

    from water_billing.main import app
    from water_billing.api.dependencies import get_tariff_repository

    app.dependency_overrides[get_tariff_repository] = lambda: tariff_repository

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
