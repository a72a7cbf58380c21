import os

"""Test configuration to set environment variables for the pytest suite.
This ensures required settings are present before importing modules
that depend on them."""

# Flag application is running in test mode
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")

# Module-level engine in db.py must never touch a real file during tests
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

os.environ.setdefault("CURRENCY", "USD")
os.environ.setdefault("LANGUAGE", "en")

# Cheap hashing and no backoff sleeps keep the suite fast
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("CATALOG_RETRY_DELAY_SECONDS", "0")
os.environ.setdefault("CATALOG_FETCH_RETRIES", "2")

os.environ.setdefault("LOG_MASK_SECRETS", "true")
