"""
Bounded timeout and retry with exponential backoff for catalog store calls.
Use as a decorator on async, read-only (idempotent) functions.
"""
import asyncio
import functools
import logging

from sqlalchemy.exc import SQLAlchemyError

from storefront.config import Config
from storefront.errors import ErrorType
from storefront.exceptions import AppException

logger = logging.getLogger(__name__)

# Failures worth another attempt; AppException is never retried
RETRYABLE = (SQLAlchemyError, OSError, asyncio.TimeoutError)
BACKOFF = 2.0


def store_call(action: str):
    """
    Decorator for store reads.
    - each attempt is bounded by Config.STORE_TIMEOUT_SECONDS
    - up to Config.STORE_RETRIES attempts, delay doubling from Config.STORE_RETRY_DELAY
    - raises AppException(STORE_UNAVAILABLE) once attempts are exhausted
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            tries = max(1, Config.STORE_RETRIES)
            delay = Config.STORE_RETRY_DELAY
            last_exc = None
            for attempt in range(1, tries + 1):
                try:
                    return await asyncio.wait_for(
                        func(*args, **kwargs),
                        timeout=Config.STORE_TIMEOUT_SECONDS
                    )
                except RETRYABLE as e:
                    last_exc = e
                    if attempt == tries:
                        break
                    logger.warning(
                        f"{action} failed ({type(e).__name__}: {e}), "
                        f"retry {attempt}/{tries - 1} in {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
                    delay *= BACKOFF
            logger.error(f"{action} failed after {tries} attempts: {last_exc}")
            raise AppException(
                ErrorType.STORE_UNAVAILABLE,
                f"Catalog store unavailable: could not {action}"
            ) from last_exc
        return wrapper
    return decorator
