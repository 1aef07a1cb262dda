"""
Consistent retry behavior for external workflows.
Bounded retries, exponential backoff.
"""
import asyncio
import functools
from typing import Callable, Optional

from adcraft.errors import RetryExhaustedError
from adcraft.config import config
from adcraft.logger import logger


def async_retry(
    max_retries: Optional[int] = None,
    backoff_factor: Optional[float] = None,
    exceptions: tuple = (Exception,)
):
    """
    Retry decorator for async functions.

    Args:
        max_retries: Maximum retry attempts (default from config)
        backoff_factor: Exponential backoff factor (default from config)
        exceptions: Exceptions to catch and retry
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            max_tries = config.MAX_RETRIES if max_retries is None else max_retries
            backoff = config.RETRY_BACKOFF if backoff_factor is None else backoff_factor

            for attempt in range(max_tries + 1):
                try:
                    if attempt > 0:
                        logger.info(
                            f"Retry attempt {attempt}/{max_tries} for {func.__name__}"
                        )

                    return await func(*args, **kwargs)

                except exceptions as e:
                    if attempt == max_tries:
                        logger.error(
                            f"Max retries ({max_tries}) exhausted for {func.__name__}: {e}"
                        )
                        raise RetryExhaustedError(
                            f"Service {func.__name__} failed after {max_tries} retries: {str(e)}"
                        ) from e

                    # Calculate exponential backoff
                    delay = backoff ** attempt
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_tries + 1} failed for {func.__name__}. "
                        f"Retrying in {delay:.2f}s. Error: {e}"
                    )

                    await asyncio.sleep(delay)

        return wrapper
    return decorator
