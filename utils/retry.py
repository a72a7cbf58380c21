import asyncio
import logging
from functools import wraps
from typing import Optional

from sqlalchemy.exc import OperationalError, DBAPIError

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRIES = 3
RETRY_DELAY_BASE = 0.1  # Base delay in seconds

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (OperationalError, DBAPIError, ConnectionError, TimeoutError)


def with_retry(max_retries: Optional[int] = None, delay_base: Optional[float] = None,
               retry_on: tuple[type[BaseException], ...] = TRANSIENT_ERRORS):
    """
    Decorator for automatic retry of backend calls with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = single attempt)
        delay_base: Base delay for exponential backoff
        retry_on: Exception types considered transient
    """
    max_retries = MAX_RETRIES if max_retries is None else max_retries
    delay_base = RETRY_DELAY_BASE if delay_base is None else delay_base

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    last_exception = e

                    if attempt == max_retries:
                        logger.error(f"Function {func.__name__} failed after {max_retries} retries: {str(e)}")
                        break

                    # Exponential backoff with jitter
                    delay = delay_base * (2 ** attempt) + (delay_base * 0.1 * attempt)
                    logger.warning(f"Attempt {attempt + 1} failed for {func.__name__}, retrying in {delay:.2f}s: {str(e)}")
                    await asyncio.sleep(delay)

            raise last_exception

        return wrapper
    return decorator
