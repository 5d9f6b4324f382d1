"""
Global settings for the web3 helper library
Values can be overridden through environment variables or a .env file.
Malformed or out-of-range values raise ValueError on import.
"""
import os
from typing import Final, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_number(name: str, default, minimum, cast):
    """Read a numeric setting, rejecting malformed and out-of-range values"""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None

    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    return _env_number(name, default, minimum, int)


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    return _env_number(name, default, minimum, float)


# Number of calls packed into a single aggregate() request
DEFAULT_BATCH_SIZE: Final[int] = _env_int("WEB3HELPER_BATCH_SIZE", 50, minimum=1)

# Delay between retries of a transient failure, in seconds
RETRY_DELAY_SECONDS: Final[float] = _env_float("WEB3HELPER_RETRY_DELAY", 1.0, minimum=0.0)

# Maximum attempts per retried call (None = keep retrying until success or a permanent error)
RETRY_MAX_ATTEMPTS: Final[Optional[int]] = _env_int("WEB3HELPER_RETRY_MAX_ATTEMPTS", 0, minimum=0) or None

# Concurrent individual calls when no multicall contract is available
FALLBACK_CONCURRENCY: Final[int] = _env_int("WEB3HELPER_FALLBACK_CONCURRENCY", 25, minimum=1)

# Request timeout in seconds
REQUEST_TIMEOUT: Final[float] = _env_float("WEB3HELPER_REQUEST_TIMEOUT", 15.0, minimum=0.001)

# Logging level
LOG_LEVEL: Final[str] = os.getenv("WEB3HELPER_LOG_LEVEL", "INFO").upper()

# type(uint256).max, used for unlimited token approvals
MAX_APPROVAL: Final[int] = 2**256 - 1

NULL_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"
