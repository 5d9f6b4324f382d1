"""
Retry policy for read-only contract calls

Transient failures (transport hiccups, rate limiting) are retried after a
fixed delay. Reverts and missing methods are permanent and re-raised as is.
"""
import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from web3helper.config import settings
from web3helper.core.exceptions import RetriesExhaustedError, UnknownMethodError, Web3HelperError
from web3helper.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Fallback for providers that do not raise structured errors.
# Maintenance hazard: anything missing here is retried as transient.
PERMANENT_ERROR_MARKERS: tuple[str, ...] = (
    "revert",
    "not a function",
    "does not exist",
    "method not found",
)


def is_permanent_error(error: BaseException) -> bool:
    """Classify an error raised by a read-only call"""
    if isinstance(error, (ContractLogicError, BadFunctionCallOutput, Web3HelperError)):
        return True

    text = str(error).lower()
    return any(marker in text for marker in PERMANENT_ERROR_MARKERS)


async def retry_call(
    func: Callable[..., Awaitable[T]],
    *params: Any,
    delay: Optional[float] = None,
    max_attempts: Optional[int] = None,
) -> T:
    """
    Keep trying the call until it succeeds or fails permanently

    Args:
        func: Async callable performing the read
        params: Positional arguments for func
        delay: Seconds between attempts (defaults to RETRY_DELAY_SECONDS)
        max_attempts: Attempt limit, None to retry without limit
            (defaults to RETRY_MAX_ATTEMPTS)

    Raises:
        UnknownMethodError: func is not callable
        RetriesExhaustedError: max_attempts transient failures in a row
    """
    if not callable(func):
        raise UnknownMethodError("Contract method does not exist")

    if delay is None:
        delay = settings.RETRY_DELAY_SECONDS
    if max_attempts is None:
        max_attempts = settings.RETRY_MAX_ATTEMPTS

    attempt = 0
    while True:
        attempt += 1
        try:
            return await func(*params)
        except Exception as e:
            if is_permanent_error(e):
                raise

            if max_attempts is not None and attempt >= max_attempts:
                raise RetriesExhaustedError(attempt, e) from e

            logger.warning(
                f"Transient failure in {getattr(func, '__name__', func)!s} "
                f"(attempt {attempt}), retrying in {delay}s: {e}"
            )
            await asyncio.sleep(delay)
