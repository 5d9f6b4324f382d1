"""
Logging utilities

Library modules log through get_logger(__name__), under the "web3helper"
logger. Nothing is printed until the application calls setup_logging().
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from web3helper.config.settings import LOG_LEVEL

LIBRARY_LOGGER = "web3helper"

# Global console for rich output
console = Console(stderr=True)

# Reduce noise from external libraries
NOISY_LOGGERS = ("web3", "urllib3", "aiohttp", "asyncio")

logging.getLogger(LIBRARY_LOGGER).addHandler(logging.NullHandler())


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """
    Attach a rich handler to the library logger

    Safe to call more than once: the level is updated and the handler is
    only added the first time. The root logger is left alone.
    """
    logger = logging.getLogger(LIBRARY_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            # error text from RPC nodes may contain [brackets]
            markup=False
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance, under the library logger for library modules"""
    if name != LIBRARY_LOGGER and not name.startswith(LIBRARY_LOGGER + "."):
        name = f"{LIBRARY_LOGGER}.{name}"
    return logging.getLogger(name)
