# Domain Entities
from .billing import (
    CustomerType,
    SewerageConnection,
    PaymentStatus,
    TariffTier,
    SewerageTier,
    TariffInfo,
    TierBreakdownLine,
    BillCalculationResult,
    BulkMeterBill,
    sort_tiers,
)

__all__ = [
    'CustomerType',
    'SewerageConnection',
    'PaymentStatus',
    'TariffTier',
    'SewerageTier',
    'TariffInfo',
    'TierBreakdownLine',
    'BillCalculationResult',
    'BulkMeterBill',
    'sort_tiers',
]
