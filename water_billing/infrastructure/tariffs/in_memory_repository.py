"""
In-memory tariff repository.

Holds resolved tariffs keyed by (customer type, year). Seeded from raw
tariff rows, either passed in directly or read from a JSON file.
"""
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ...application.interfaces.repositories import TariffRepository
from ...domain.entities.billing import CustomerType, TariffInfo
from ...domain.exceptions import ValidationException
from .tariff_mapper import tariff_from_row

logger = logging.getLogger(__name__)


class InMemoryTariffRepository(TariffRepository):
    """Read-only tariff store backed by a dict."""

    def __init__(self, tariffs: Iterable[TariffInfo] = ()):
        self._tariffs: Dict[Tuple[CustomerType, int], TariffInfo] = {}
        for tariff in tariffs:
            key = (tariff.customer_type, tariff.year)
            if key in self._tariffs:
                logger.warning(
                    "Duplicate tariff for %s/%s; keeping the last one",
                    tariff.customer_type.value, tariff.year,
                )
            self._tariffs[key] = tariff

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        default_vat_threshold: Optional[Decimal] = None,
    ) -> 'InMemoryTariffRepository':
        """
        Build a repository from raw tariff rows.

        Rows with an unknown customer type or invalid year cannot be keyed
        and are skipped with an error log.
        """
        tariffs = []
        for index, row in enumerate(rows):
            try:
                tariffs.append(tariff_from_row(row, default_vat_threshold))
            except ValidationException as e:
                logger.error("Skipping tariff row %d: %s %s", index, e.message, e.errors)
        return cls(tariffs)

    @classmethod
    def from_json_file(
        cls,
        path: Union[str, Path],
        default_vat_threshold: Optional[Decimal] = None,
    ) -> 'InMemoryTariffRepository':
        """
        Build a repository from a JSON file holding a list of tariff rows.

        Raises:
            ValidationException: If the file does not hold a JSON list
        """
        with open(path, encoding='utf-8') as f:
            rows = json.load(f)
        if not isinstance(rows, list):
            raise ValidationException(
                message="Invalid tariff file",
                errors={'tariffs_file': [f"{path} must contain a JSON list of tariff rows"]}
            )
        repository = cls.from_rows(rows, default_vat_threshold)
        logger.info("Loaded %d tariffs from %s", len(repository), path)
        return repository

    async def get_tariff(self, customer_type: CustomerType, year: int) -> Optional[TariffInfo]:
        tariff = self._tariffs.get((CustomerType(customer_type), year))
        if tariff is None:
            logger.warning(
                "No tariff found for customer type \"%s\" and year \"%s\"",
                CustomerType(customer_type).value, year,
            )
        return tariff

    async def list_tariffs(
        self,
        customer_type: Optional[CustomerType] = None,
        year: Optional[int] = None,
    ) -> List[TariffInfo]:
        tariffs = [
            t for t in self._tariffs.values()
            if (customer_type is None or t.customer_type == customer_type)
            and (year is None or t.year == year)
        ]
        return sorted(tariffs, key=lambda t: (t.year, t.customer_type.value))

    def __len__(self) -> int:
        return len(self._tariffs)
