"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class BankSettings(BaseSettings):
    """Bank ledger configuration"""

    bank_name: str = "OOP National Bank"

    # Account defaults
    default_savings_rate: Decimal = Decimal("0.06")     # Annual, 6%
    default_overdraft_limit: Decimal = Decimal("10000")

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Storage configuration
    storage_backend: str = "memory"  # memory or sqlite
    sqlite_path: str = "bank_ledger.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090
    seed_demo_data: bool = True

    @field_validator("default_savings_rate", "default_overdraft_limit")
    @classmethod
    def _non_negative(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @field_validator("storage_backend")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in ("memory", "sqlite"):
            raise ValueError("must be 'memory' or 'sqlite'")
        return value

    class Config:
        env_prefix = "BANK_LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
settings = BankSettings()


def get_settings() -> BankSettings:
    """Get global configuration instance"""
    return settings


def reload_settings() -> BankSettings:
    """Reload configuration from environment"""
    global settings
    settings = BankSettings()
    return settings
