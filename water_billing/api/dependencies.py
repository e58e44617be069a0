"""
FastAPI dependencies for the billing API.
"""
import logging
from functools import lru_cache

from fastapi import Depends

from ..application.interfaces.repositories import TariffRepository
from ..application.services.billing_service import BillingService
from ..config import get_settings
from ..domain.services.billing_calculator import BillingCalculator
from ..infrastructure.tariffs import InMemoryTariffRepository

logger = logging.getLogger(__name__)


@lru_cache()
def get_tariff_repository() -> TariffRepository:
    """
    Get the tariff store.

    Seeded from the configured tariff file; empty when none is set.
    """
    settings = get_settings()
    if settings.tariffs_file:
        return InMemoryTariffRepository.from_json_file(
            settings.tariffs_file,
            default_vat_threshold=settings.billing.default_domestic_vat_threshold_m3,
        )
    logger.warning("No tariffs file configured; every bill will be zero")
    return InMemoryTariffRepository()


@lru_cache()
def get_billing_calculator() -> BillingCalculator:
    """Get the shared billing calculator."""
    return BillingCalculator()


def get_billing_service(
    tariff_repository: TariffRepository = Depends(get_tariff_repository),
    calculator: BillingCalculator = Depends(get_billing_calculator),
) -> BillingService:
    """Get billing service instance."""
    return BillingService(
        tariff_repository=tariff_repository,
        calculator=calculator,
        settings=get_settings().billing,
    )
