"""
Configuration management for the water billing service.

Uses Pydantic settings for validation and environment variable support.
"""
from decimal import Decimal
from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BillingSettings(BaseSettings):
    """Billing rule defaults."""

    model_config = SettingsConfigDict(
        env_prefix='BILLING_',
        env_file='.env',
        extra='ignore'
    )

    default_domestic_vat_threshold_m3: Decimal = Field(
        default=Decimal('15'),
        ge=0,
        description='VAT threshold used when a tariff row has none'
    )
    minimum_difference_usage_m3: Decimal = Field(
        default=Decimal('3'),
        ge=0,
        description='Bulk-meter difference usage of 0, 1 or 2 m³ is raised to this'
    )
    paid_tolerance: Decimal = Field(
        default=Decimal('0.01'),
        description='Amounts payable at or below this count as paid'
    )
    default_bulk_customer_type: str = Field(
        default='Non-domestic',
        description='Charge group for bulk meters without one'
    )


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # Application
    app_name: str = Field(default='Water Billing Service')
    app_version: str = Field(default='1.0.0')
    debug: bool = Field(default=False)
    environment: str = Field(default='development')  # development, staging, production

    # Server
    host: str = Field(default='0.0.0.0')
    port: int = Field(default=8000)
    workers: int = Field(default=1)
    reload: bool = Field(default=False)

    # API
    api_prefix: str = Field(default='/api')
    api_version: str = Field(default='v1')

    # Logging
    log_level: str = Field(default='INFO')
    log_format: str = Field(default='text')  # json or text

    # Tariff seed data (JSON list of raw tariff rows)
    tariffs_file: Optional[str] = Field(default=None)

    # Sub-settings
    billing: BillingSettings = Field(default_factory=BillingSettings)

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return AppSettings()
