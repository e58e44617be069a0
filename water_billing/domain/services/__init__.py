# Domain Services - Business logic that doesn't belong to a single entity

from .billing_calculator import BillingCalculator, calculate_bill
from .meter_rent import (
    MeterRentLookup,
    MeterRentMatch,
    MeterRentStrategy,
    ExactKeyStrategy,
    NumericKeyStrategy,
    FractionLabelStrategy,
    FRACTION_LABELS,
    format_meter_size,
    parse_size_label,
)

__all__ = [
    'BillingCalculator',
    'calculate_bill',
    'MeterRentLookup',
    'MeterRentMatch',
    'MeterRentStrategy',
    'ExactKeyStrategy',
    'NumericKeyStrategy',
    'FractionLabelStrategy',
    'FRACTION_LABELS',
    'format_meter_size',
    'parse_size_label',
]
