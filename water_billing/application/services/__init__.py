# Application Services
from .billing_service import (
    BillingService,
    BillDiagnostic,
    BulkMeterBillRequest,
    parse_billing_year,
)

__all__ = [
    'BillingService',
    'BillDiagnostic',
    'BulkMeterBillRequest',
    'parse_billing_year',
]
