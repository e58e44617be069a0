"""
Billing API endpoints.

Provides bill calculation, bulk meter difference billing and tariff lookup.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_billing_service
from ..schemas.billing_schemas import (
    BillDiagnosticSchema,
    BillSchema,
    BulkMeterBillRequestSchema,
    BulkMeterBillResponse,
    CalculateBillRequest,
    CalculateBillResponse,
    TariffListResponse,
    TariffResponse,
)
from ...application.services.billing_service import BillingService, BulkMeterBillRequest
from ...domain.entities.billing import BillCalculationResult, CustomerType, TariffInfo

router = APIRouter(prefix="/billing", tags=["Billing"])


# =========================================================================
# Bill Calculation Endpoints
# =========================================================================

@router.post(
    "/calculate",
    response_model=CalculateBillResponse,
    summary="Calculate a bill",
)
async def calculate_bill(
    request: CalculateBillRequest,
    billing_service: BillingService = Depends(get_billing_service),
):
    """
    Calculate an itemized water and sewerage bill.

    The tariff is taken from the year of the billing month. If no tariff
    exists for that year, every amount is zero and the diagnostic reports
    `tariff_found: false`.
    """
    bill, diagnostic = await billing_service.calculate_bill_with_diagnostics(
        usage_m3=request.usage_m3,
        customer_type=request.customer_type,
        sewerage_connection=request.sewerage_connection,
        meter_size=request.meter_size,
        billing_month=request.billing_month,
        sewerage_usage_m3=request.sewerage_usage_m3,
        include_breakdown=request.include_breakdown,
    )

    return CalculateBillResponse(
        success=diagnostic.tariff_found,
        bill=_bill_to_schema(bill),
        diagnostic=BillDiagnosticSchema(
            year=diagnostic.year,
            tariff_found=diagnostic.tariff_found,
            meter_rent_prices=diagnostic.meter_rent_prices,
            matched_key=diagnostic.matched_key,
            matched_value=float(diagnostic.matched_value) if diagnostic.matched_value is not None else None,
            matched_strategy=diagnostic.matched_strategy,
        ),
    )


@router.post(
    "/bulk-meters/difference",
    response_model=BulkMeterBillResponse,
    summary="Calculate a bulk meter difference bill",
)
async def calculate_bulk_meter_bill(
    request: BulkMeterBillRequestSchema,
    billing_service: BillingService = Depends(get_billing_service),
):
    """
    Bill a bulk meter for usage not covered by its individual meters.

    Differences of 0, 1 or 2 m³ are billed as the minimum difference.
    """
    result = await billing_service.calculate_bulk_meter_bill(
        BulkMeterBillRequest(
            previous_reading=request.bulk_previous_reading,
            current_reading=request.bulk_current_reading,
            meter_size=request.meter_size,
            billing_month=request.billing_month,
            individual_usages=list(request.individual_usages),
            customer_type=request.customer_type,
            sewerage_connection=request.sewerage_connection,
            outstanding_bill=request.outstanding_bill,
        )
    )

    return BulkMeterBillResponse(
        bulk_usage=float(result.bulk_usage),
        total_individual_usage=float(result.total_individual_usage),
        difference_usage=float(result.difference_usage),
        bulk_bill=_bill_to_schema(result.bulk_bill),
        difference_bill=_bill_to_schema(result.difference_bill),
        outstanding_bill=float(result.outstanding_bill),
        total_payable=float(result.total_payable),
        payment_status=result.payment_status,
    )


# =========================================================================
# Tariff Endpoints
# =========================================================================

@router.get(
    "/tariffs",
    response_model=TariffListResponse,
    summary="List tariffs",
)
async def list_tariffs(
    customer_type: Optional[CustomerType] = Query(None, description="Filter by customer type"),
    year: Optional[int] = Query(None, description="Filter by year"),
    billing_service: BillingService = Depends(get_billing_service),
):
    """List configured tariffs, ordered by year and customer type."""
    tariffs = await billing_service.list_tariffs(customer_type=customer_type, year=year)

    return TariffListResponse(
        tariffs=[_tariff_to_response(t) for t in tariffs],
        total=len(tariffs),
    )


@router.get(
    "/tariffs/{customer_type}/{year}",
    response_model=TariffResponse,
    summary="Get tariff for a customer type and year",
)
async def get_tariff(
    customer_type: CustomerType,
    year: int,
    billing_service: BillingService = Depends(get_billing_service),
):
    """Get the tariff in force for a customer type and year."""
    tariff = await billing_service.require_tariff(customer_type, year)
    return _tariff_to_response(tariff)


# =========================================================================
# Helper Functions
# =========================================================================

def _bill_to_schema(bill: BillCalculationResult) -> BillSchema:
    """Convert a bill result to its response schema."""
    return BillSchema.model_validate(bill.to_dict())


def _tariff_to_response(tariff: TariffInfo) -> TariffResponse:
    """Convert tariff domain entity to response schema."""
    return TariffResponse(**tariff.to_dict())
