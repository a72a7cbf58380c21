import os
import sys

from dotenv import load_dotenv

from enums.currency import Currency
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

WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "127.0.0.1")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 8000

# Browser-facing API hardening
WEBAPP_SECURITY_HEADERS_ENABLED = os.environ.get("WEBAPP_SECURITY_HEADERS_ENABLED", "true") == "true"
WEBAPP_HSTS_ENABLED = os.environ.get("WEBAPP_HSTS_ENABLED", "false") == "true"
_cors_origins = os.environ.get("WEBAPP_CORS_ALLOWED_ORIGINS", "")
WEBAPP_CORS_ALLOWED_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]

# Open client shells: least recently used beyond the cap, and idle ones, are unmounted
WEBAPP_MAX_SHELLS = int(os.environ.get("WEBAPP_MAX_SHELLS", "1000"))
WEBAPP_SHELL_IDLE_MINUTES = int(os.environ.get("WEBAPP_SHELL_IDLE_MINUTES", "30"))

# Backend storage (stands in for the hosted Postgres tables)
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/monetizepro.db")

LANGUAGE = os.environ.get("LANGUAGE", "en")  # Default to English

# Parse CURRENCY with error handling
try:
    CURRENCY = Currency(os.environ.get("CURRENCY", "USD"))
except ValueError as e:
    valid_currencies = [c.value for c in Currency]
    print(f"\n ERROR: Invalid CURRENCY configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_currencies)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('CURRENCY', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

# Identity provider
SESSION_TTL_MINUTES = int(os.environ.get("SESSION_TTL_MINUTES", "60"))
PASSWORD_MIN_LENGTH = int(os.environ.get("PASSWORD_MIN_LENGTH", "6"))
PASSWORD_HASH_ITERATIONS = int(os.environ.get("PASSWORD_HASH_ITERATIONS", "120000"))

# Catalog fetch retry (exponential backoff: delay * 2^attempt)
CATALOG_FETCH_RETRIES = int(os.environ.get("CATALOG_FETCH_RETRIES", "2"))
CATALOG_RETRY_DELAY_SECONDS = float(os.environ.get("CATALOG_RETRY_DELAY_SECONDS", "0.2"))

# Logging Configuration
# Environment-specific defaults: DEV keeps logs shorter, PROD keeps them longer
_default_log_retention = "3" if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV else "14"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", _default_log_retention))
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"
