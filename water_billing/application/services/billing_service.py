"""
Billing Application Service.

Orchestrates bill calculation: resolves the tariff for a billing month,
checks that one exists, and hands it to the pure calculator. Also builds
bulk-meter difference bills.
"""
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from ...config import BillingSettings, get_settings
from ...domain.entities.billing import (
    BillCalculationResult,
    BulkMeterBill,
    CustomerType,
    SewerageConnection,
    TariffInfo,
)
from ...domain.exceptions import TariffNotFoundException
from ...domain.services.billing_calculator import BillingCalculator
from ...domain.value_objects import ZERO, to_decimal
from ..interfaces.repositories import TariffRepository

logger = logging.getLogger(__name__)

BILLING_MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')

Number = Union[int, float, Decimal]


def parse_billing_year(billing_month: Any) -> Optional[int]:
    """
    Extract the tariff year from a "YYYY-MM" billing month.

    Returns None if the month is malformed.
    """
    if not isinstance(billing_month, str):
        return None
    match = BILLING_MONTH_PATTERN.match(billing_month)
    if not match or not 1 <= int(match.group(2)) <= 12:
        return None
    return int(match.group(1))


@dataclass
class BillDiagnostic:
    """What the service resolved while calculating a bill."""
    year: Optional[int]
    tariff_found: bool
    meter_rent_prices: Dict[str, Any] = field(default_factory=dict)
    matched_key: Optional[str] = None
    matched_value: Optional[Decimal] = None
    matched_strategy: Optional[str] = None


@dataclass
class BulkMeterBillRequest:
    """Readings needed to bill a bulk meter for one cycle."""
    previous_reading: Decimal
    current_reading: Decimal
    meter_size: Decimal
    billing_month: str
    individual_usages: List[Decimal] = field(default_factory=list)
    customer_type: Optional[CustomerType] = None
    sewerage_connection: Optional[SewerageConnection] = None
    outstanding_bill: Decimal = ZERO


class BillingService:
    """
    Application service for billing operations.

    Coordinates between the tariff repository and the billing calculator.
    Mirrors the calculator's failure semantics: invalid input or a missing
    tariff is logged and produces an all-zero bill.
    """

    def __init__(
        self,
        tariff_repository: TariffRepository,
        calculator: Optional[BillingCalculator] = None,
        settings: Optional[BillingSettings] = None,
    ):
        self._tariff_repo = tariff_repository
        self._calculator = calculator or BillingCalculator()
        self._settings = settings or get_settings().billing

    # =========================================================================
    # Tariff Lookup
    # =========================================================================

    async def require_tariff(self, customer_type: CustomerType, year: int) -> TariffInfo:
        """
        Get the tariff for a customer type and year.

        Raises:
            TariffNotFoundException: If no tariff exists
        """
        tariff = await self._tariff_repo.get_tariff(customer_type, year)
        if tariff is None:
            raise TariffNotFoundException(CustomerType(customer_type).value, year)
        return tariff

    async def list_tariffs(
        self,
        customer_type: Optional[CustomerType] = None,
        year: Optional[int] = None,
    ) -> List[TariffInfo]:
        """List tariffs with optional filters."""
        return await self._tariff_repo.list_tariffs(customer_type=customer_type, year=year)

    # =========================================================================
    # Bill Calculation
    # =========================================================================

    async def calculate_bill(
        self,
        usage_m3: Number,
        customer_type: CustomerType,
        sewerage_connection: SewerageConnection,
        meter_size: Number,
        billing_month: str,
        sewerage_usage_m3: Optional[Number] = None,
        base_water_charge_usage_m3: Optional[Number] = None,
        include_breakdown: bool = False,
    ) -> BillCalculationResult:
        """
        Calculate a bill using the tariff in force for the billing month.

        Args:
            usage_m3: Metered usage
            customer_type: Customer class
            sewerage_connection: Sewerage connection flag
            meter_size: Meter diameter in inches
            billing_month: Billing month as "YYYY-MM"
            sewerage_usage_m3: Sewerage volume, if different from usage
            base_water_charge_usage_m3: Base-charge volume, if different
            include_breakdown: Populate per-tier breakdown lines

        Returns:
            BillCalculationResult; all zeros if the input is invalid or
            no tariff exists for the year
        """
        bill, _ = await self.calculate_bill_with_diagnostics(
            usage_m3=usage_m3,
            customer_type=customer_type,
            sewerage_connection=sewerage_connection,
            meter_size=meter_size,
            billing_month=billing_month,
            sewerage_usage_m3=sewerage_usage_m3,
            base_water_charge_usage_m3=base_water_charge_usage_m3,
            include_breakdown=include_breakdown,
        )
        return bill

    async def calculate_bill_with_diagnostics(
        self,
        usage_m3: Number,
        customer_type: CustomerType,
        sewerage_connection: SewerageConnection,
        meter_size: Number,
        billing_month: str,
        sewerage_usage_m3: Optional[Number] = None,
        base_water_charge_usage_m3: Optional[Number] = None,
        include_breakdown: bool = False,
    ) -> Tuple[BillCalculationResult, BillDiagnostic]:
        """
        Calculate a bill and report how it was resolved.

        Convenience method that returns both the bill and the tariff year,
        whether a tariff was found, and which meter rent key matched.
        """
        year = parse_billing_year(billing_month)
        usage = to_decimal(usage_m3, default=None)
        try:
            resolved_type = CustomerType(customer_type)
        except ValueError:
            resolved_type = None

        if usage is None or usage < 0 or resolved_type is None or year is None:
            logger.error(
                "Invalid input for bill calculation. Usage: %s, Type: %s, Month: %s",
                usage_m3, customer_type, billing_month,
            )
            return BillCalculationResult.zero(), BillDiagnostic(year=year, tariff_found=False)

        tariff = await self._tariff_repo.get_tariff(resolved_type, year)
        if tariff is None:
            logger.warning(
                "Tariff information for customer type \"%s\" for year %s not found. Bill will be 0.",
                resolved_type.value, year,
            )
            return BillCalculationResult.zero(), BillDiagnostic(year=year, tariff_found=False)

        bill = self._calculator.calculate_bill(
            tariff,
            usage,
            meter_size,
            sewerage_connection,
            sewerage_usage_m3=sewerage_usage_m3,
            base_water_charge_usage_m3=base_water_charge_usage_m3,
            include_breakdown=include_breakdown,
        )

        rent_match = self._calculator.meter_rent_lookup.match(tariff.meter_rent_prices, meter_size)
        diagnostic = BillDiagnostic(
            year=year,
            tariff_found=True,
            meter_rent_prices=dict(tariff.meter_rent_prices),
            matched_key=rent_match.key if rent_match else None,
            matched_value=rent_match.amount if rent_match else None,
            matched_strategy=rent_match.strategy if rent_match else None,
        )
        return bill, diagnostic

    # =========================================================================
    # Bulk Meter Billing
    # =========================================================================

    def adjust_difference_usage(self, difference_usage: Decimal) -> Decimal:
        """
        Apply the minimum-charge rule to a difference volume.

        Whole-number differences below the minimum (0, 1 or 2 m³ with the
        default minimum of 3) are raised to the minimum.
        """
        minimum = self._settings.minimum_difference_usage_m3
        if ZERO <= difference_usage < minimum and difference_usage == difference_usage.to_integral_value():
            return minimum
        return difference_usage

    async def calculate_bulk_meter_bill(self, request: BulkMeterBillRequest) -> BulkMeterBill:
        """
        Bill a bulk meter for the usage its individual meters do not cover.

        Args:
            request: Bulk meter readings and assigned customers' usages

        Returns:
            BulkMeterBill with the full bulk bill, the difference bill and
            the amount payable
        """
        customer_type = request.customer_type or CustomerType(self._settings.default_bulk_customer_type)
        sewerage_connection = request.sewerage_connection or SewerageConnection.NO

        bulk_usage = to_decimal(request.current_reading) - to_decimal(request.previous_reading)
        total_individual_usage = sum((to_decimal(u) for u in request.individual_usages), ZERO)
        difference_usage = self.adjust_difference_usage(bulk_usage - total_individual_usage)

        logger.debug(
            "Bulk meter usage %s, individual usage %s, difference %s",
            bulk_usage, total_individual_usage, difference_usage,
        )

        bulk_bill = await self.calculate_bill(
            usage_m3=bulk_usage,
            customer_type=customer_type,
            sewerage_connection=sewerage_connection,
            meter_size=request.meter_size,
            billing_month=request.billing_month,
        )
        difference_bill = await self.calculate_bill(
            usage_m3=difference_usage,
            customer_type=customer_type,
            sewerage_connection=sewerage_connection,
            meter_size=request.meter_size,
            billing_month=request.billing_month,
        )

        result = BulkMeterBill(
            bulk_usage=bulk_usage,
            total_individual_usage=total_individual_usage,
            difference_usage=difference_usage,
            bulk_bill=bulk_bill,
            difference_bill=difference_bill,
            outstanding_bill=to_decimal(request.outstanding_bill),
        )
        result.calculate_totals(paid_tolerance=self._settings.paid_tolerance)
        return result
