"""
Test data factories for the billing service.

Provides factory classes for generating raw tariff rows and bulk meter
readings.
"""
from .tariff_factory import TariffTierFactory, TariffRowFactory
from .bulk_meter_factory import BulkMeterReadingFactory

__all__ = [
    "TariffTierFactory",
    "TariffRowFactory",
    "BulkMeterReadingFactory",
]
