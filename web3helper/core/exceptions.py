"""
Exceptions raised by the web3 helper library
"""


class Web3HelperError(Exception):
    """Base class for all library errors"""


class UnknownMethodError(Web3HelperError):
    """The method is missing from the contract's read-only method table"""


class UnknownAggregatorError(Web3HelperError):
    """No multicall contract address is known for the active chain"""


class NoEndpointError(Web3HelperError):
    """A chain has no configured RPC endpoint"""


class EmptyCallChainError(Web3HelperError):
    """exec() was called on a call chain with no queued calls"""


class EncodingError(Web3HelperError, ValueError):
    """Parameters do not match the declared input types"""


class DecodingError(Web3HelperError, ValueError):
    """Return data does not match the declared output types"""


class RetriesExhaustedError(Web3HelperError):
    """A bounded retry gave up on a transient failure"""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
