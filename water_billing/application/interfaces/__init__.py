# Application interfaces (ports)
from .repositories import TariffRepository

__all__ = [
    'TariffRepository',
]
