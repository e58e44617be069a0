"""
Domain Exceptions - Custom exceptions for billing domain errors.

The bill calculator itself never raises; these exceptions are used at the
orchestration and API edges where "no tariff" must be told apart from a
genuine zero bill.
"""
from typing import Any, Dict, Optional


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    All domain exceptions should inherit from this class to allow
    for consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details
        }


class EntityNotFoundException(DomainException):
    """Raised when a requested entity cannot be found."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} not found"
        if entity_id and not message:
            msg = f"{entity_type} '{entity_id}' not found"
        super().__init__(
            message=msg,
            code='ENTITY_NOT_FOUND',
            details={'entity_type': entity_type, 'entity_id': entity_id}
        )


class TariffNotFoundException(EntityNotFoundException):
    """Raised when no tariff exists for a customer type and year."""

    def __init__(self, customer_type: str, year: int):
        self.customer_type = customer_type
        self.year = year
        super().__init__(
            entity_type='Tariff',
            entity_id=f"{customer_type}/{year}",
            message=f"Tariff for customer type '{customer_type}' and year {year} not found",
        )
        self.details.update({'customer_type': customer_type, 'year': year})


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Can contain multiple validation errors for different fields.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, list]] = None
    ):
        self.errors = errors or {}
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            details={'validation_errors': self.errors}
        )
