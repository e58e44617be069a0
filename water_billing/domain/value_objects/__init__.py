# Domain Value Objects - Immutable objects defined by their attributes

from .money import ZERO, MONEY_PLACES, to_decimal, round_money
from .tier_limit import TierLimit, UNBOUNDED

__all__ = [
    # Money
    'ZERO',
    'MONEY_PLACES',
    'to_decimal',
    'round_money',
    # Tiers
    'TierLimit',
    'UNBOUNDED',
]
