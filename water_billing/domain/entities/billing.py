"""
Billing domain entities.

Tariff configurations and bill results for water and sewerage billing.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Optional, Dict, Any, List, Mapping, Tuple

from ..value_objects import TierLimit, ZERO, round_money, to_decimal

DEFAULT_VAT_THRESHOLD_M3 = Decimal("15")


class CustomerType(str, Enum):
    """Customer classes; each selects a tariff-application algorithm."""
    DOMESTIC = "Domestic"
    NON_DOMESTIC = "Non-domestic"
    RENTAL_NON_DOMESTIC = "rental Non domestic"
    RENTAL_DOMESTIC = "rental domestic"

    @property
    def is_domestic_class(self) -> bool:
        """Domestic classes use progressive sewerage and the VAT threshold."""
        return self in (CustomerType.DOMESTIC, CustomerType.RENTAL_DOMESTIC)

    @property
    def is_rental(self) -> bool:
        return self in (CustomerType.RENTAL_DOMESTIC, CustomerType.RENTAL_NON_DOMESTIC)


class SewerageConnection(str, Enum):
    """Whether the customer is connected to the sewerage network."""
    YES = "Yes"
    NO = "No"


class PaymentStatus(str, Enum):
    """Payment state of a bill."""
    PAID = "Paid"
    UNPAID = "Unpaid"
    PENDING = "Pending"


@dataclass(frozen=True)
class TariffTier:
    """
    One band of a water or sewerage rate schedule.

    ``limit`` is the upper bound of cumulative usage (m³) to which
    ``rate`` applies.
    """
    rate: Decimal
    limit: TierLimit

    def __post_init__(self) -> None:
        """Accept plain numbers and the "Infinity" sentinel."""
        object.__setattr__(self, 'rate', to_decimal(self.rate))
        object.__setattr__(self, 'limit', TierLimit.parse(self.limit))

    def charge(self, units: Decimal) -> Decimal:
        """Charge for units billed at this tier's rate."""
        return units * self.rate


# Sewerage schedules share the tier shape
SewerageTier = TariffTier


def sort_tiers(tiers) -> List[TariffTier]:
    """Return tiers in ascending limit order, open-ended tier last."""
    return sorted(tiers, key=lambda t: t.limit.sort_key)


def _as_tiers(tiers) -> Tuple[TariffTier, ...]:
    """Accept TariffTier objects or raw {rate, limit} mappings."""
    return tuple(
        t if isinstance(t, TariffTier) else TariffTier(rate=t.get('rate'), limit=t.get('limit'))
        for t in tiers
    )


@dataclass(frozen=True)
class TariffInfo:
    """
    Full rate configuration for one customer type and year.

    Immutable input to the calculator; created and versioned by the tariff
    store, never mutated during a calculation.
    """
    customer_type: CustomerType
    year: int
    tiers: Tuple[TariffTier, ...] = ()
    sewerage_tiers: Tuple[TariffTier, ...] = ()
    maintenance_percentage: Decimal = ZERO
    sanitation_percentage: Decimal = ZERO
    vat_rate: Decimal = ZERO
    domestic_vat_threshold_m3: Decimal = DEFAULT_VAT_THRESHOLD_M3
    meter_rent_prices: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalize numeric fields and freeze collections."""
        object.__setattr__(self, 'customer_type', CustomerType(self.customer_type))
        object.__setattr__(self, 'maintenance_percentage', to_decimal(self.maintenance_percentage))
        object.__setattr__(self, 'sanitation_percentage', to_decimal(self.sanitation_percentage))
        object.__setattr__(self, 'vat_rate', to_decimal(self.vat_rate))
        object.__setattr__(
            self, 'domestic_vat_threshold_m3',
            to_decimal(self.domestic_vat_threshold_m3, default=DEFAULT_VAT_THRESHOLD_M3),
        )
        object.__setattr__(self, 'tiers', _as_tiers(self.tiers))
        object.__setattr__(self, 'sewerage_tiers', _as_tiers(self.sewerage_tiers))
        object.__setattr__(self, 'meter_rent_prices', MappingProxyType(dict(self.meter_rent_prices)))

    @property
    def has_tiers(self) -> bool:
        return len(self.tiers) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the tariff-row shape."""
        return {
            'customer_type': self.customer_type.value,
            'year': self.year,
            'tiers': [{'rate': float(t.rate), 'limit': t.limit.to_raw()} for t in self.tiers],
            'sewerage_tiers': [{'rate': float(t.rate), 'limit': t.limit.to_raw()} for t in self.sewerage_tiers],
            'maintenance_percentage': float(self.maintenance_percentage),
            'sanitation_percentage': float(self.sanitation_percentage),
            'vat_rate': float(self.vat_rate),
            'domestic_vat_threshold_m3': float(self.domestic_vat_threshold_m3),
            'meter_rent_prices': dict(self.meter_rent_prices),
        }


@dataclass(frozen=True)
class TierBreakdownLine:
    """Usage and charge attributed to a single tier."""
    start: Decimal
    end: Optional[Decimal]  # None = unbounded
    usage: Decimal
    rate: Decimal
    charge: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start': float(self.start),
            'end': float(self.end) if self.end is not None else "Infinity",
            'usage': float(self.usage),
            'rate': float(self.rate),
            'charge': float(round_money(self.charge)),
        }


@dataclass(frozen=True)
class BillCalculationResult:
    """Itemized bill; every monetary field is rounded to 2 decimal places."""
    total_bill: Decimal = ZERO
    base_water_charge: Decimal = ZERO
    maintenance_fee: Decimal = ZERO
    sanitation_fee: Decimal = ZERO
    vat_amount: Decimal = ZERO
    meter_rent: Decimal = ZERO
    sewerage_charge: Decimal = ZERO
    water_tier_breakdown: Optional[Tuple[TierBreakdownLine, ...]] = None
    sewerage_tier_breakdown: Optional[Tuple[TierBreakdownLine, ...]] = None

    @classmethod
    def zero(cls) -> 'BillCalculationResult':
        """The "cannot bill" result."""
        return cls(
            total_bill=round_money(ZERO),
            base_water_charge=round_money(ZERO),
            maintenance_fee=round_money(ZERO),
            sanitation_fee=round_money(ZERO),
            vat_amount=round_money(ZERO),
            meter_rent=round_money(ZERO),
            sewerage_charge=round_money(ZERO),
        )

    @property
    def is_zero(self) -> bool:
        return self.total_bill == ZERO

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase output contract."""
        data: Dict[str, Any] = {
            'totalBill': float(self.total_bill),
            'baseWaterCharge': float(self.base_water_charge),
            'maintenanceFee': float(self.maintenance_fee),
            'sanitationFee': float(self.sanitation_fee),
            'vatAmount': float(self.vat_amount),
            'meterRent': float(self.meter_rent),
            'sewerageCharge': float(self.sewerage_charge),
        }
        if self.water_tier_breakdown is not None:
            data['waterTierBreakdown'] = [line.to_dict() for line in self.water_tier_breakdown]
        if self.sewerage_tier_breakdown is not None:
            data['sewerageTierBreakdown'] = [line.to_dict() for line in self.sewerage_tier_breakdown]
        return data


@dataclass
class BulkMeterBill:
    """
    Difference bill for a bulk meter.

    A bulk meter feeds several individually metered customers; the bulk
    meter owner is billed for the volume the individual meters do not
    account for.
    """
    bulk_usage: Decimal
    total_individual_usage: Decimal
    difference_usage: Decimal
    bulk_bill: BillCalculationResult
    difference_bill: BillCalculationResult
    outstanding_bill: Decimal = ZERO
    total_payable: Decimal = ZERO
    payment_status: PaymentStatus = PaymentStatus.UNPAID

    def calculate_totals(self, paid_tolerance: Decimal = Decimal("0.01")) -> None:
        """Calculate amount payable and payment status."""
        self.total_payable = round_money(self.difference_bill.total_bill + self.outstanding_bill)
        if self.total_payable > paid_tolerance:
            self.payment_status = PaymentStatus.UNPAID
        else:
            self.payment_status = PaymentStatus.PAID
