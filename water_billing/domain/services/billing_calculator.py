"""
Billing Calculator Domain Service.

Calculates water and sewerage bills from a tariff configuration.
Supports progressive, single-tier and flat rental tiering, selected by
customer class.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple, Union

from ..entities.billing import (
    BillCalculationResult,
    CustomerType,
    SewerageConnection,
    TariffInfo,
    TariffTier,
    TierBreakdownLine,
    sort_tiers,
)
from ..value_objects import ZERO, round_money, to_decimal
from .meter_rent import MeterRentLookup, SizeInput

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]


class BillingCalculator:
    """
    Pure domain service for calculating water bills.

    Implements the utility's billing rules:
    - Progressive tiers for Domestic customers
    - Single-tier lookup on the whole volume for Non-domestic customers
    - Flat rental billing at the fourth tier's rate
    - Maintenance and sanitation fees as fractions of the base charge
    - VAT above a usage threshold for domestic classes, always otherwise
    - Meter rent by meter size
    - Sewerage charges for connected customers

    Never raises for malformed business input: anything that cannot be
    billed comes back as an all-zero result.
    """

    # Rental classes are billed entirely at the fourth tier's rate
    RENTAL_TIER_INDEX = 3

    def __init__(self, meter_rent_lookup: Optional[MeterRentLookup] = None):
        self._meter_rent = meter_rent_lookup or MeterRentLookup()

    @property
    def meter_rent_lookup(self) -> MeterRentLookup:
        return self._meter_rent

    def calculate_bill(
        self,
        tariff: TariffInfo,
        usage_m3: Number,
        meter_size: SizeInput,
        sewerage_connection: Union[SewerageConnection, str],
        sewerage_usage_m3: Optional[Number] = None,
        base_water_charge_usage_m3: Optional[Number] = None,
        include_breakdown: bool = False,
    ) -> BillCalculationResult:
        """
        Calculate an itemized bill.

        Args:
            tariff: Rate configuration for the customer's class and year
            usage_m3: Metered usage; drives VAT eligibility and the
                default sewerage volume
            meter_size: Meter diameter in inches, used for rent lookup
            sewerage_connection: "Yes" if connected to sewerage
            sewerage_usage_m3: Volume for the sewerage charge, if it
                differs from usage_m3
            base_water_charge_usage_m3: Volume for the base water charge,
                if it differs from usage_m3 (e.g. a difference volume)
            include_breakdown: Populate per-tier breakdown lines

        Returns:
            BillCalculationResult with every component rounded to 2 places
        """
        usage = to_decimal(usage_m3)
        base_usage = usage if base_water_charge_usage_m3 is None else to_decimal(base_water_charge_usage_m3)

        if base_usage < 0:
            logger.debug("Negative base usage %s; returning zero bill", base_usage)
            return BillCalculationResult.zero()

        tiers = sort_tiers(tariff.tiers)
        if not tiers:
            logger.debug("Tariff %s/%s has no tiers; returning zero bill", tariff.customer_type.value, tariff.year)
            return BillCalculationResult.zero()

        customer_type = tariff.customer_type

        # Step 1: Base water charge
        base_water_charge, water_lines = self._calculate_base_charge(customer_type, tiers, base_usage)

        # Step 2: Fees on the base charge
        maintenance_fee = tariff.maintenance_percentage * base_water_charge
        sanitation_fee = tariff.sanitation_percentage * base_water_charge

        # Step 3: VAT
        vat_amount = ZERO
        if self._vat_applies(tariff, usage):
            vat_amount = base_water_charge * tariff.vat_rate

        # Step 4: Meter rent
        meter_rent = self._meter_rent.lookup(tariff.meter_rent_prices, meter_size)

        # Step 5: Sewerage
        sewerage_charge = ZERO
        sewerage_lines: List[TierBreakdownLine] = []
        if sewerage_connection == SewerageConnection.YES and tariff.sewerage_tiers:
            sewerage_usage = usage if sewerage_usage_m3 is None else to_decimal(sewerage_usage_m3)
            if sewerage_usage > 0:
                sewerage_charge, sewerage_lines = self._calculate_sewerage_charge(
                    customer_type, sort_tiers(tariff.sewerage_tiers), sewerage_usage
                )

        # Step 6: Total from unrounded components, rounded once
        total_bill = (
            base_water_charge +
            maintenance_fee +
            sanitation_fee +
            vat_amount +
            meter_rent +
            sewerage_charge
        )

        return BillCalculationResult(
            total_bill=round_money(total_bill),
            base_water_charge=round_money(base_water_charge),
            maintenance_fee=round_money(maintenance_fee),
            sanitation_fee=round_money(sanitation_fee),
            vat_amount=round_money(vat_amount),
            meter_rent=round_money(meter_rent),
            sewerage_charge=round_money(sewerage_charge),
            water_tier_breakdown=tuple(water_lines) if include_breakdown else None,
            sewerage_tier_breakdown=tuple(sewerage_lines) if include_breakdown else None,
        )

    def _calculate_base_charge(
        self,
        customer_type: CustomerType,
        tiers: Sequence[TariffTier],
        usage: Decimal,
    ) -> Tuple[Decimal, List[TierBreakdownLine]]:
        """Base water charge using the algorithm for the customer class."""
        if customer_type == CustomerType.DOMESTIC:
            return self._progressive_charge(tiers, usage)
        if customer_type.is_rental:
            return self._rental_flat_charge(tiers, usage)
        return self._single_tier_charge(tiers, usage)

    def _calculate_sewerage_charge(
        self,
        customer_type: CustomerType,
        tiers: Sequence[TariffTier],
        usage: Decimal,
    ) -> Tuple[Decimal, List[TierBreakdownLine]]:
        """Sewerage charge; progressive for domestic classes only."""
        if customer_type.is_domestic_class:
            return self._progressive_charge(tiers, usage)
        return self._single_tier_charge(tiers, usage)

    def _progressive_charge(
        self,
        tiers: Sequence[TariffTier],
        usage: Decimal,
    ) -> Tuple[Decimal, List[TierBreakdownLine]]:
        """
        Split usage across tiers, charging each slice at its own rate.

        Tiers must be sorted by ascending limit. Each tier covers the band
        from the previous tier's limit up to its own.
        """
        total_charge = ZERO
        lines: List[TierBreakdownLine] = []
        remaining = usage
        last_limit = ZERO

        for tier in tiers:
            if remaining <= 0:
                break

            block_size = tier.limit.block_size(last_limit)
            units = remaining if block_size is None else min(remaining, block_size)

            if units > 0:
                charge = tier.charge(units)
                total_charge += charge
                lines.append(TierBreakdownLine(
                    start=last_limit,
                    end=tier.limit.value,
                    usage=units,
                    rate=tier.rate,
                    charge=charge,
                ))
                remaining -= units

            if tier.limit.is_unbounded:
                break
            last_limit = tier.limit.value

        return total_charge, lines

    def _single_tier_charge(
        self,
        tiers: Sequence[TariffTier],
        usage: Decimal,
    ) -> Tuple[Decimal, List[TierBreakdownLine]]:
        """
        Charge the whole volume at the rate of the first tier covering it.

        Past every limit, the last tier's rate applies.
        """
        selected = tiers[-1]
        for tier in tiers:
            if tier.limit.covers(usage):
                selected = tier
                break
        return self._flat_charge(selected, usage)

    def _rental_flat_charge(
        self,
        tiers: Sequence[TariffTier],
        usage: Decimal,
    ) -> Tuple[Decimal, List[TierBreakdownLine]]:
        """
        Charge the whole volume at the fourth tier's rate.

        Schedules with fewer than four tiers use the highest tier.
        """
        if len(tiers) > self.RENTAL_TIER_INDEX:
            selected = tiers[self.RENTAL_TIER_INDEX]
        else:
            selected = tiers[-1]
        return self._flat_charge(selected, usage)

    def _flat_charge(
        self,
        tier: TariffTier,
        usage: Decimal,
    ) -> Tuple[Decimal, List[TierBreakdownLine]]:
        charge = tier.charge(usage)
        lines = []
        if usage > 0:
            lines.append(TierBreakdownLine(
                start=ZERO,
                end=tier.limit.value,
                usage=usage,
                rate=tier.rate,
                charge=charge,
            ))
        return charge, lines

    def _vat_applies(self, tariff: TariffInfo, usage: Decimal) -> bool:
        """
        Check VAT eligibility.

        Domestic classes pay VAT only above the threshold; non-domestic
        classes always pay it.
        """
        if tariff.customer_type.is_domestic_class:
            return usage > tariff.domestic_vat_threshold_m3
        return True


_default_calculator = BillingCalculator()


def calculate_bill(
    tariff: TariffInfo,
    usage_m3: Number,
    meter_size: SizeInput,
    sewerage_connection: Union[SewerageConnection, str],
    sewerage_usage_m3: Optional[Number] = None,
    base_water_charge_usage_m3: Optional[Number] = None,
    include_breakdown: bool = False,
) -> BillCalculationResult:
    """Calculate a bill with the shared default calculator."""
    return _default_calculator.calculate_bill(
        tariff,
        usage_m3,
        meter_size,
        sewerage_connection,
        sewerage_usage_m3=sewerage_usage_m3,
        base_water_charge_usage_m3=base_water_charge_usage_m3,
        include_breakdown=include_breakdown,
    )
