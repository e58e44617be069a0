# Domain Exceptions
from .domain_exceptions import (
    DomainException,
    EntityNotFoundException,
    TariffNotFoundException,
    ValidationException,
)

__all__ = [
    'DomainException',
    'EntityNotFoundException',
    'TariffNotFoundException',
    'ValidationException',
]
