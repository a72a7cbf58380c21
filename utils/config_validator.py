"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Args:
        value: The config value to check
        name: Name of the config variable
        example: Optional example value to show in error message

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value:
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_positive(value: float, name: str, allow_zero: bool = False) -> None:
    """
    Validate that a numeric config value is positive.

    Raises:
        ConfigValidationError: If value is negative (or zero when not allowed)
    """
    if value < 0 or (value == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "> 0"
        raise ConfigValidationError(f"{name} must be {bound} (got: {value})")


def validate_db_url(db_url: Optional[str]) -> None:
    """
    Validate the backend database URL uses an async driver.

    Raises:
        ConfigValidationError: If the URL is missing or uses a sync driver
    """
    validate_required_config(db_url, 'DB_URL', 'sqlite+aiosqlite:///data/monetizepro.db')
    scheme = db_url.split("://", 1)[0]
    if "+" not in scheme:
        raise ConfigValidationError(
            f"DB_URL must name an async driver (got scheme: {scheme})\n"
            "Examples: sqlite+aiosqlite, postgresql+asyncpg"
        )


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Args:
        config_module: The config module to validate

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_db_url(getattr(config_module, 'DB_URL', None))
    validate_positive(config_module.SESSION_TTL_MINUTES, 'SESSION_TTL_MINUTES')
    validate_positive(config_module.PASSWORD_MIN_LENGTH, 'PASSWORD_MIN_LENGTH')
    validate_positive(config_module.PASSWORD_HASH_ITERATIONS, 'PASSWORD_HASH_ITERATIONS')
    validate_positive(config_module.CATALOG_FETCH_RETRIES, 'CATALOG_FETCH_RETRIES', allow_zero=True)
    validate_positive(config_module.CATALOG_RETRY_DELAY_SECONDS, 'CATALOG_RETRY_DELAY_SECONDS', allow_zero=True)
    validate_positive(config_module.WEBAPP_MAX_SHELLS, 'WEBAPP_MAX_SHELLS')
    validate_positive(config_module.WEBAPP_SHELL_IDLE_MINUTES, 'WEBAPP_SHELL_IDLE_MINUTES')


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.

    Args:
        config_module: The config module to validate
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
