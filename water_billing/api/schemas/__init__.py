# API Schemas
from .billing_schemas import (
    TariffTierSchema,
    TariffResponse,
    TariffListResponse,
    TierBreakdownSchema,
    BillSchema,
    CalculateBillRequest,
    BillDiagnosticSchema,
    CalculateBillResponse,
    BulkMeterBillRequestSchema,
    BulkMeterBillResponse,
)

__all__ = [
    'TariffTierSchema',
    'TariffResponse',
    'TariffListResponse',
    'TierBreakdownSchema',
    'BillSchema',
    'CalculateBillRequest',
    'BillDiagnosticSchema',
    'CalculateBillResponse',
    'BulkMeterBillRequestSchema',
    'BulkMeterBillResponse',
]
