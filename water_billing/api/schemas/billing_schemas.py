"""
Pydantic schemas for billing endpoints.
"""
from decimal import Decimal
from typing import Optional, List, Dict, Any, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...domain.entities.billing import CustomerType, PaymentStatus, SewerageConnection

BILLING_MONTH_REGEX = r'^\d{4}-\d{2}$'


# =========================================================================
# Tariff Schemas
# =========================================================================

class TariffTierSchema(BaseModel):
    """Tariff tier definition."""
    rate: float = Field(..., description="Rate per m³")
    limit: Union[float, str] = Field(..., description="Upper usage bound in m³, or 'Infinity'")


class TariffResponse(BaseModel):
    """Tariff configuration for one customer type and year."""
    customer_type: CustomerType
    year: int
    tiers: List[TariffTierSchema]
    sewerage_tiers: List[TariffTierSchema]
    maintenance_percentage: float
    sanitation_percentage: float
    vat_rate: float
    domestic_vat_threshold_m3: float
    meter_rent_prices: Dict[str, Any]


class TariffListResponse(BaseModel):
    """List of tariffs."""
    tariffs: List[TariffResponse]
    total: int


# =========================================================================
# Bill Calculation Schemas
# =========================================================================

class TierBreakdownSchema(BaseModel):
    """Usage and charge for a single tier."""
    start: float
    end: Union[float, str]
    usage: float
    rate: float
    charge: float


class BillSchema(BaseModel):
    """Itemized bill, serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_bill: float
    base_water_charge: float
    maintenance_fee: float
    sanitation_fee: float
    vat_amount: float
    meter_rent: float
    sewerage_charge: float
    water_tier_breakdown: Optional[List[TierBreakdownSchema]] = None
    sewerage_tier_breakdown: Optional[List[TierBreakdownSchema]] = None


class CalculateBillRequest(BaseModel):
    """Request to calculate a bill."""
    usage_m3: Decimal = Field(..., ge=0, description="Metered usage in m³")
    customer_type: CustomerType = Field(..., description="Customer class")
    sewerage_connection: SewerageConnection = Field(..., description="Sewerage connection")
    meter_size: Decimal = Field(..., ge=0, description="Meter size in inches")
    billing_month: str = Field(..., pattern=BILLING_MONTH_REGEX, description="Billing month (YYYY-MM)")
    sewerage_usage_m3: Optional[Decimal] = Field(None, ge=0, description="Sewerage volume if different")
    include_breakdown: bool = Field(default=False, description="Include per-tier breakdown")


class BillDiagnosticSchema(BaseModel):
    """How the bill was resolved."""
    year: Optional[int]
    tariff_found: bool
    meter_rent_prices: Dict[str, Any] = Field(default_factory=dict)
    matched_key: Optional[str] = None
    matched_value: Optional[float] = None
    matched_strategy: Optional[str] = None


class CalculateBillResponse(BaseModel):
    """Calculated bill with diagnostics."""
    success: bool = True
    bill: BillSchema
    diagnostic: BillDiagnosticSchema


# =========================================================================
# Bulk Meter Schemas
# =========================================================================

class BulkMeterBillRequestSchema(BaseModel):
    """Request to bill a bulk meter's difference usage."""
    bulk_previous_reading: Decimal = Field(..., ge=0, description="Previous bulk meter reading")
    bulk_current_reading: Decimal = Field(..., ge=0, description="Current bulk meter reading")
    individual_usages: List[Decimal] = Field(default_factory=list, description="Usage of each assigned customer")
    customer_type: Optional[CustomerType] = Field(None, description="Charge group; defaults to Non-domestic")
    sewerage_connection: Optional[SewerageConnection] = Field(None, description="Defaults to No")
    meter_size: Decimal = Field(..., ge=0, description="Bulk meter size in inches")
    billing_month: str = Field(..., pattern=BILLING_MONTH_REGEX, description="Billing month (YYYY-MM)")
    outstanding_bill: Decimal = Field(default=Decimal("0"), description="Balance carried forward")


class BulkMeterBillResponse(BaseModel):
    """Bulk meter difference bill."""
    bulk_usage: float
    total_individual_usage: float
    difference_usage: float
    bulk_bill: BillSchema
    difference_bill: BillSchema
    outstanding_bill: float
    total_payable: float
    payment_status: PaymentStatus
