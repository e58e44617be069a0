"""
Meter rent lookup.

Rent tables are keyed by free-form size labels typed in by administrators
("0.75", "1", "3/4", '3/4"', "1 1/4"). A meter's numeric size is resolved
against such a table by trying an ordered list of strategies; the first
strategy that finds a key wins.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence, Union

from ..value_objects import ZERO, to_decimal

SizeInput = Union[int, float, Decimal, str]

# Common inch sizes and the labels administrators use for them
FRACTION_LABELS: Mapping[Decimal, str] = {
    Decimal("0.5"): "1/2",
    Decimal("0.75"): "3/4",
    Decimal("1.25"): "1 1/4",
    Decimal("1.5"): "1 1/2",
    Decimal("2.5"): "2 1/2",
}

NUMERIC_MATCH_TOLERANCE = Decimal("0.000001")

_MIXED_FRACTION = re.compile(r'^\s*(\d+)\s+(\d+)\s*/\s*(\d+)')
_SIMPLE_FRACTION = re.compile(r'^(\d+)/(\d+)$')
_NON_NUMERIC = re.compile(r'[^0-9./-]')


def format_meter_size(meter_size: SizeInput) -> str:
    """
    Render a meter size the way rent-table keys are written.

    Integral sizes drop the fractional part (1.0 -> "1"), others drop
    trailing zeros (0.50 -> "0.5").
    """
    size = to_decimal(meter_size, default=None)
    if size is None:
        return str(meter_size)
    if size == size.to_integral_value():
        return str(int(size))
    return format(size.normalize(), 'f')


def parse_size_label(label: str) -> Optional[Decimal]:
    """
    Parse a rent-table key into a numeric size.

    Handles mixed fractions ("1 1/4"), simple fractions ("3/4") and
    decimals with stray unit marks ('0.75"', "1 inch").
    Returns None if the key holds no number.
    """
    if not label:
        return None

    mixed = _MIXED_FRACTION.match(label)
    if mixed:
        whole, numerator, denominator = (int(g) for g in mixed.groups())
        if denominator:
            return Decimal(whole) + Decimal(numerator) / Decimal(denominator)

    cleaned = _NON_NUMERIC.sub('', label).strip()
    if not cleaned:
        return None

    simple = _SIMPLE_FRACTION.match(cleaned)
    if simple:
        numerator, denominator = (int(g) for g in simple.groups())
        if denominator:
            return Decimal(numerator) / Decimal(denominator)
        return None

    return to_decimal(cleaned, default=None)


@dataclass(frozen=True)
class MeterRentMatch:
    """Key of the rent table that matched a meter size, and its amount."""
    key: str
    amount: Decimal
    strategy: str


class MeterRentStrategy(ABC):
    """One way of finding a meter size in a rent table."""

    name: str = "strategy"

    @abstractmethod
    def find_key(self, prices: Mapping[str, Any], meter_size: SizeInput) -> Optional[str]:
        """Return the matching key, or None."""
        pass


class ExactKeyStrategy(MeterRentStrategy):
    """Exact string match on the formatted size."""

    name = "exact"

    def find_key(self, prices: Mapping[str, Any], meter_size: SizeInput) -> Optional[str]:
        key = format_meter_size(meter_size)
        return key if key in prices else None


class NumericKeyStrategy(MeterRentStrategy):
    """
    First key whose parsed numeric value equals the size.

    Only equal keys match. A size missing from the table has no rent, even
    when other keys parse to a number.
    """

    name = "numeric"

    def find_key(self, prices: Mapping[str, Any], meter_size: SizeInput) -> Optional[str]:
        target = to_decimal(meter_size, default=None)
        if target is None:
            return None
        for key in prices:
            value = parse_size_label(str(key))
            if value is not None and abs(value - target) < NUMERIC_MATCH_TOLERANCE:
                return key
        return None


class FractionLabelStrategy(MeterRentStrategy):
    """
    Look the size up in the fixed table of fraction labels.

    Every default label also parses numerically, so in the default chain
    NumericKeyStrategy matches first. This strategy covers custom strategy
    lists without the numeric step and custom label tables.
    """

    name = "fraction_label"

    def __init__(self, labels: Mapping[Decimal, str] = FRACTION_LABELS):
        self._labels = labels

    def find_key(self, prices: Mapping[str, Any], meter_size: SizeInput) -> Optional[str]:
        target = to_decimal(meter_size, default=None)
        if target is None:
            return None
        label = self._labels.get(target)
        if label is not None and label in prices:
            return label
        return None


class MeterRentLookup:
    """
    Resolves monthly meter rent from a tariff's rent table.

    Strategies are tried in order: exact key, numeric key, fraction label.
    No match means no rent.
    """

    def __init__(self, strategies: Optional[Sequence[MeterRentStrategy]] = None):
        self._strategies = tuple(strategies) if strategies is not None else (
            ExactKeyStrategy(),
            NumericKeyStrategy(),
            FractionLabelStrategy(),
        )

    @property
    def strategies(self) -> Sequence[MeterRentStrategy]:
        return self._strategies

    def match(self, prices: Mapping[str, Any], meter_size: SizeInput) -> Optional[MeterRentMatch]:
        """Find the rent-table entry for a meter size."""
        if not prices:
            return None
        for strategy in self._strategies:
            key = strategy.find_key(prices, meter_size)
            if key is not None:
                return MeterRentMatch(
                    key=key,
                    amount=to_decimal(prices[key]),
                    strategy=strategy.name,
                )
        return None

    def lookup(self, prices: Mapping[str, Any], meter_size: SizeInput) -> Decimal:
        """Monthly rent for a meter size; zero when nothing matches."""
        found = self.match(prices, meter_size)
        return found.amount if found else ZERO
