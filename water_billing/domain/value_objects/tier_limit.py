"""
Tier limit value object.

Tariff rows store a tier's upper bound either as a number or as the
string sentinel ``"Infinity"``. The sentinel is converted here, at the
data-model boundary, so the calculator only ever compares Decimals.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Tuple, Union

from ..exceptions import ValidationException
from .money import to_decimal

UNBOUNDED_LABELS = frozenset({"infinity", "inf", "+infinity", "+inf"})


@dataclass(frozen=True)
class TierLimit:
    """
    Upper bound of cumulative usage (m³) for a tier.

    Either ``Bounded(value)`` or ``Unbounded``; an unbounded limit has
    ``value`` set to None and always sorts last.
    """
    value: Optional[Decimal] = None

    @classmethod
    def bounded(cls, value: Union[int, float, str, Decimal]) -> 'TierLimit':
        """Create a finite limit."""
        return cls(value=to_decimal(value))

    @classmethod
    def unbounded(cls) -> 'TierLimit':
        """Create the open-ended limit of the last tier."""
        return cls(value=None)

    @classmethod
    def parse(cls, raw: Any) -> 'TierLimit':
        """
        Convert a raw limit from a tariff row.

        Accepts numbers, numeric strings, ``"Infinity"``, ``float("inf")``
        and None (treated as open-ended).

        Raises:
            ValidationException: If the value is not a number or sentinel
        """
        if isinstance(raw, TierLimit):
            return raw
        if raw is None:
            return cls.unbounded()
        if isinstance(raw, str) and raw.strip().lower() in UNBOUNDED_LABELS:
            return cls.unbounded()
        if isinstance(raw, (int, float, Decimal, str)) and not isinstance(raw, bool):
            try:
                number = Decimal(str(raw).strip())
            except ArithmeticError:
                number = None
            if number is not None and number.is_finite():
                return cls(value=number)
            if number is not None and number.is_infinite() and number > 0:
                return cls.unbounded()
        raise ValidationException(
            message="Invalid tier limit",
            errors={'limit': [f"Tier limit must be a number or 'Infinity', got {raw!r}"]}
        )

    @property
    def is_unbounded(self) -> bool:
        return self.value is None

    @property
    def sort_key(self) -> Tuple[int, Decimal]:
        """Ascending order with the unbounded limit last."""
        if self.value is None:
            return (1, Decimal("0"))
        return (0, self.value)

    def covers(self, usage: Decimal) -> bool:
        """Check if usage falls at or below this limit."""
        return self.value is None or usage <= self.value

    def block_size(self, last_limit: Decimal) -> Optional[Decimal]:
        """Width of the band starting at ``last_limit``; None when open-ended."""
        if self.value is None:
            return None
        return self.value - last_limit

    def to_raw(self) -> Union[float, str]:
        """Serialize back to the tariff-row representation."""
        if self.value is None:
            return "Infinity"
        return float(self.value)

    def __str__(self) -> str:
        return "Infinity" if self.value is None else str(self.value)


UNBOUNDED = TierLimit.unbounded()
