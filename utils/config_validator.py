"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional

from enums.runtime_environment import RuntimeEnvironment


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_session_secret(secret: Optional[str]) -> None:
    """
    Validate the HMAC secret used to sign session tokens.

    Args:
        secret: SESSION_SECRET value

    Raises:
        ConfigValidationError: If secret is missing or too weak
    """
    if not secret or len(secret.strip()) == 0:
        raise ConfigValidationError(
            "SESSION_SECRET is required and must not be empty!\n"
            "Generate a secure secret with: openssl rand -hex 32\n"
            "Add to .env: SESSION_SECRET=<your-generated-secret>"
        )

    if len(secret) < 32:
        raise ConfigValidationError(
            f"SESSION_SECRET is too weak (length: {len(secret)}, minimum: 32)!\n"
            "Generate a secure secret with: openssl rand -hex 32"
        )


def validate_stripe_webhook_secret(webhook_secret: Optional[str]) -> None:
    """
    Validate Stripe webhook signing secret.

    Args:
        webhook_secret: STRIPE_WEBHOOK_SECRET value

    Raises:
        ConfigValidationError: If secret is missing or malformed
    """
    if not webhook_secret or len(webhook_secret.strip()) == 0:
        raise ConfigValidationError(
            "STRIPE_WEBHOOK_SECRET is required in production!\n"
            "Get it from: Stripe Dashboard -> Developers -> Webhooks\n"
            "Add to .env: STRIPE_WEBHOOK_SECRET=whsec_..."
        )

    if not webhook_secret.startswith("whsec_"):
        raise ConfigValidationError(
            "STRIPE_WEBHOOK_SECRET does not look like a Stripe signing secret (expected prefix 'whsec_')"
        )


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


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Production requires payment and session secrets. DEV and TEST run with
    whatever is configured; missing webhook secrets are handled per request.

    Args:
        config_module: The config module to validate

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_required_config(getattr(config_module, 'DB_URL', None), 'DB_URL',
                             'sqlite+aiosqlite:///data/storefront.db')

    if getattr(config_module, 'LISTING_RATE_LIMIT_MAX_REQUESTS', 0) <= 0:
        raise ConfigValidationError("LISTING_RATE_LIMIT_MAX_REQUESTS must be positive")
    if getattr(config_module, 'LISTING_RATE_LIMIT_WINDOW_SECONDS', 0) <= 0:
        raise ConfigValidationError("LISTING_RATE_LIMIT_WINDOW_SECONDS must be positive")

    if getattr(config_module, 'RUNTIME_ENVIRONMENT', None) != RuntimeEnvironment.PROD:
        return

    validate_required_config(getattr(config_module, 'STRIPE_SECRET_KEY', None), 'STRIPE_SECRET_KEY', 'sk_live_...')
    validate_stripe_webhook_secret(getattr(config_module, 'STRIPE_WEBHOOK_SECRET', None))
    validate_session_secret(getattr(config_module, 'SESSION_SECRET', None))


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
