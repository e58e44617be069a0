"""
Repository interfaces (ports) for billing data.

These interfaces define the contract for tariff lookups without
specifying how tariffs are persisted, edited or versioned.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ...domain.entities.billing import CustomerType, TariffInfo


class TariffRepository(ABC):
    """
    Read-only tariff store.

    Supplies one TariffInfo per (customer type, year).
    """

    @abstractmethod
    async def get_tariff(self, customer_type: CustomerType, year: int) -> Optional[TariffInfo]:
        """
        Get the tariff for a customer type and year.

        Args:
            customer_type: Customer class
            year: Calendar year the tariff applies to

        Returns:
            TariffInfo if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_tariffs(
        self,
        customer_type: Optional[CustomerType] = None,
        year: Optional[int] = None,
    ) -> List[TariffInfo]:
        """
        List tariffs with optional filters.

        Args:
            customer_type: Filter by customer class
            year: Filter by year

        Returns:
            Matching tariffs ordered by year, then customer type
        """
        pass
