# Tariff store adapters
from .in_memory_repository import InMemoryTariffRepository
from .tariff_mapper import (
    safe_parse_json_field,
    parse_tiers,
    parse_vat_threshold,
    tariff_from_row,
)

__all__ = [
    'InMemoryTariffRepository',
    'safe_parse_json_field',
    'parse_tiers',
    'parse_vat_threshold',
    'tariff_from_row',
]
