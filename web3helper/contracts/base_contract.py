"""
Base class for the per-standard contract wrappers
"""
import asyncio
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Sequence

from web3 import AsyncWeb3

from web3helper.config import settings
from web3helper.core.contract import Contract, ContractCall

if TYPE_CHECKING:
    from web3helper.core.network.multicall import MulticallProvider


class BaseContract:
    """
    Thin wrapper around a Contract that adds typed read helpers

    Subclasses set ABI so that instances can be created with at().
    """

    ABI: ClassVar[list[dict]] = []

    def __init__(self, contract: Contract):
        self._contract = contract

    @classmethod
    def at(
        cls,
        address: str,
        web3: Optional[AsyncWeb3] = None,
        multicall: Optional["MulticallProvider"] = None
    ):
        """Wrap the contract deployed at address using the class ABI"""
        return cls(Contract(address, cls.ABI, web3, multicall))

    @property
    def contract(self) -> Contract:
        return self._contract

    @property
    def address(self) -> str:
        return self._contract.address

    def call(self, name: str, *params: Any) -> ContractCall:
        """ContractCall for use with a multicall provider"""
        return self._contract.call_method(name, *params)

    def connect(self, web3: AsyncWeb3, multicall: Optional["MulticallProvider"] = None):
        """Rebind this wrapper to a different provider"""
        self._contract = self._contract.connect(web3, multicall)
        return self

    async def _read_many(self, name: str, param_sets: Sequence[Sequence[Any]]) -> list:
        """
        Run the same read-only method once per parameter set

        Batched through the multicall provider when one is attached, otherwise
        issued as concurrent individual calls. Results keep the input order
        either way.
        """
        if self._contract.multicall is not None:
            calls = [self.call(name, *params) for params in param_sets]
            return await self._contract.multicall.aggregate(calls)

        concurrency = settings.FALLBACK_CONCURRENCY
        if concurrency < 1:
            raise ValueError(f"FALLBACK_CONCURRENCY must be at least 1, got {concurrency}")

        semaphore = asyncio.Semaphore(concurrency)

        async def read_one(params: Sequence[Any]) -> Any:
            async with semaphore:
                return await self._contract.read(name, *params)

        return list(await asyncio.gather(*(read_one(params) for params in param_sets)))
