import os
import sys
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

from enums.rate_limit_backend import RateLimitBackend
from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 8000
SITE_URL = os.environ.get("SITE_URL", "http://localhost:3000")

# Database
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")

# Stripe
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET", "")
CURRENCY = os.environ.get("CURRENCY", "usd").lower()
PAYMENT_DESCRIPTION_PREFIX = os.environ.get("PAYMENT_DESCRIPTION_PREFIX", "Kollect-It Order")
ORDER_NUMBER_PREFIX = os.environ.get("ORDER_NUMBER_PREFIX", "KI")

# Email delivery (Resend HTTP API)
RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.environ.get("EMAIL_FROM", "Kollect-It <noreply@kollect-it.com>")
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@kollect-it.com")
EMAIL_TIMEOUT_SECONDS = float(os.environ.get("EMAIL_TIMEOUT_SECONDS", "10"))

# Sessions
SESSION_SECRET = os.environ.get("SESSION_SECRET", "")
SESSION_MAX_AGE_SECONDS = int(os.environ.get("SESSION_MAX_AGE_SECONDS", str(7 * 24 * 3600)))  # Default: 7 days
SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "session")

# Pricing policy
try:
    TAX_RATE = Decimal(os.environ.get("TAX_RATE", "0.08"))
    FLAT_SHIPPING = Decimal(os.environ.get("FLAT_SHIPPING", "0.00"))
    if TAX_RATE < 0 or FLAT_SHIPPING < 0:
        raise ValueError("TAX_RATE and FLAT_SHIPPING must not be negative")
except (InvalidOperation, ValueError) as e:
    print(f"\n ERROR: Invalid pricing configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected: Decimal values (e.g., TAX_RATE=0.08, FLAT_SHIPPING=0.00)\n", file=sys.stderr)
    sys.exit(1)
MIN_LINE_QUANTITY = 1
MAX_LINE_QUANTITY = int(os.environ.get("MAX_LINE_QUANTITY", "99"))

# Rate Limiting Configuration (public product listing)
LISTING_RATE_LIMIT_MAX_REQUESTS = int(os.environ.get("LISTING_RATE_LIMIT_MAX_REQUESTS", "60"))
LISTING_RATE_LIMIT_WINDOW_SECONDS = int(os.environ.get("LISTING_RATE_LIMIT_WINDOW_SECONDS", "60"))
try:
    RATE_LIMIT_BACKEND = RateLimitBackend(os.environ.get("RATE_LIMIT_BACKEND", "memory"))
except ValueError as e:
    print(f"\n ERROR: Invalid RATE_LIMIT_BACKEND configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(b.value for b in RateLimitBackend)}\n", file=sys.stderr)
    sys.exit(1)
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
# Only enable behind a reverse proxy that overwrites X-Forwarded-For / X-Real-IP
TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "false") == "true"

# Notification queue
NOTIFICATION_MAX_ATTEMPTS = int(os.environ.get("NOTIFICATION_MAX_ATTEMPTS", "3"))
NOTIFICATION_RETRY_BASE_SECONDS = float(os.environ.get("NOTIFICATION_RETRY_BASE_SECONDS", "1.0"))
NOTIFICATION_QUEUE_SIZE = int(os.environ.get("NOTIFICATION_QUEUE_SIZE", "1000"))

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs
LOG_DIR = os.environ.get("LOG_DIR", "logs")

# Log Retention: Environment-specific defaults
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))

# HTTP Security Configuration
SECURITY_HEADERS_ENABLED = os.environ.get("SECURITY_HEADERS_ENABLED", "true") == "true"
HSTS_ENABLED = os.environ.get("HSTS_ENABLED", "false") == "true"  # Only behind HTTPS
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "").split(",") if os.environ.get("CORS_ORIGINS") else []

# Required for /api/health reporting (presence only, never values)
HEALTH_REQUIRED_ENV_VARS = [
    "DB_URL",
    "SESSION_SECRET",
    "SITE_URL",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "RESEND_API_KEY",
]
