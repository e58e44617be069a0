"""
Tariff row mapper.

Converts raw tariff rows, as returned by the tariff store, into TariffInfo
domain objects. JSON columns may arrive as decoded objects, as JSON strings
or as null; anything unusable falls back to an empty value and is logged.
"""
import json
import logging
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from ...config import get_settings
from ...domain.entities.billing import CustomerType, TariffInfo, TariffTier
from ...domain.exceptions import ValidationException
from ...domain.value_objects import TierLimit, to_decimal

logger = logging.getLogger(__name__)

ARRAY = 'array'
OBJECT = 'object'


def safe_parse_json_field(field: Any, field_name: str, expected_type: str) -> Any:
    """
    Parse a JSON column into a list or dict.

    Args:
        field: Raw column value (list, dict, JSON string or None)
        field_name: Column name, for log messages
        expected_type: 'array' or 'object'

    Returns:
        The parsed value, or an empty list/dict if it is missing or malformed
    """
    fallback: Any = [] if expected_type == ARRAY else {}

    if field is None:
        logger.warning("Tariff field '%s' is null or undefined. Using fallback.", field_name)
        return fallback

    if isinstance(field, (list, tuple)):
        if expected_type == ARRAY:
            return list(field)
        logger.error("Tariff field '%s' was expected to be an object but is an array.", field_name)
        return fallback

    if isinstance(field, Mapping):
        if expected_type == OBJECT:
            return dict(field)
        logger.error("Tariff field '%s' was expected to be an array but is an object.", field_name)
        return fallback

    if isinstance(field, (str, bytes)):
        try:
            parsed = json.loads(field)
        except ValueError as e:
            logger.error("Failed to parse JSON for %s: %s", field_name, e)
            return fallback
        if expected_type == ARRAY and isinstance(parsed, list):
            return parsed
        if expected_type == OBJECT and isinstance(parsed, dict):
            return parsed
        logger.error("Tariff field '%s' JSON string parsed to the wrong type.", field_name)
        return fallback

    logger.error("Tariff field '%s' has an unexpected type: %s", field_name, type(field).__name__)
    return fallback


def parse_tiers(raw: Any, field_name: str) -> List[TariffTier]:
    """Parse a tier list, skipping entries without a usable rate or limit."""
    tiers = []
    for index, entry in enumerate(safe_parse_json_field(raw, field_name, ARRAY)):
        if not isinstance(entry, Mapping):
            logger.warning("Skipping %s[%d]: not an object", field_name, index)
            continue

        rate = to_decimal(entry.get('rate'), default=None)
        if rate is None:
            logger.warning("Skipping %s[%d]: invalid rate %r", field_name, index, entry.get('rate'))
            continue

        try:
            limit = TierLimit.parse(entry.get('limit'))
        except ValidationException as e:
            logger.warning("Skipping %s[%d]: %s", field_name, index, e.errors.get('limit', [e.message])[0])
            continue

        tiers.append(TariffTier(rate=rate, limit=limit))
    return tiers


def parse_vat_threshold(raw: Any, default: Decimal) -> Decimal:
    """VAT threshold in m³; missing, non-numeric or negative values use the default."""
    threshold = to_decimal(raw, default=None)
    if threshold is None or threshold < 0:
        return default
    return threshold


def parse_customer_type(raw: Any) -> CustomerType:
    """
    Resolve a customer type label.

    Raises:
        ValidationException: If the label is not a known customer type
    """
    try:
        return CustomerType(raw)
    except ValueError:
        raise ValidationException(
            message="Invalid customer type",
            errors={'customer_type': [f"Unknown customer type {raw!r}"]}
        )


def parse_year(raw: Any) -> int:
    """
    Resolve a tariff year.

    Raises:
        ValidationException: If the year is not an integer
    """
    year = to_decimal(raw, default=None)
    if year is None or year != year.to_integral_value():
        raise ValidationException(
            message="Invalid tariff year",
            errors={'year': [f"Year must be an integer, got {raw!r}"]}
        )
    return int(year)


def tariff_from_row(
    row: Mapping[str, Any],
    default_vat_threshold: Optional[Decimal] = None,
) -> TariffInfo:
    """
    Build a TariffInfo from a raw tariff row.

    Args:
        row: Raw tariff row
        default_vat_threshold: VAT threshold for rows without one;
            defaults to the configured value

    Returns:
        TariffInfo

    Raises:
        ValidationException: If the customer type or year is invalid
    """
    if default_vat_threshold is None:
        default_vat_threshold = get_settings().billing.default_domestic_vat_threshold_m3

    customer_type = parse_customer_type(row.get('customer_type'))
    year = parse_year(row.get('year'))

    tiers = parse_tiers(row.get('tiers'), 'tiers')
    if not tiers:
        logger.error("Tariff for %s/%s has no valid tiers defined.", customer_type.value, year)

    return TariffInfo(
        customer_type=customer_type,
        year=year,
        tiers=tuple(tiers),
        sewerage_tiers=tuple(parse_tiers(row.get('sewerage_tiers'), 'sewerage_tiers')),
        maintenance_percentage=to_decimal(row.get('maintenance_percentage')),
        sanitation_percentage=to_decimal(row.get('sanitation_percentage')),
        vat_rate=to_decimal(row.get('vat_rate')),
        domestic_vat_threshold_m3=parse_vat_threshold(
            row.get('domestic_vat_threshold_m3'), default_vat_threshold
        ),
        meter_rent_prices=safe_parse_json_field(row.get('meter_rent_prices'), 'meter_rent_prices', OBJECT),
    )

