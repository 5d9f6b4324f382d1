"""
Multicall provider
Batches many read-only contract calls into aggregate() requests against the
multicall contract deployed on the active chain
"""
import warnings
from typing import Any, Optional, Sequence

from web3 import AsyncWeb3

from web3helper.config import settings
from web3helper.config.multicall_addresses import MulticallRegistry, multicall_registry
from web3helper.contracts.multicall import MultiCall
from web3helper.core.contract import Contract, ContractCall
from web3helper.core.exceptions import DecodingError, UnknownAggregatorError
from web3helper.utils.logger import get_logger

logger = get_logger(__name__)


class MulticallProvider:
    """
    Multicall capable wrapper around an AsyncWeb3 connection

    Build one per (provider, chain) with create() and reuse it.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        chain_id: int,
        multicall_address: Optional[str] = None,
        registry: Optional[MulticallRegistry] = None
    ):
        if registry is None:
            registry = multicall_registry

        if not multicall_address:
            multicall_address = registry.get(chain_id)
            if not multicall_address:
                raise UnknownAggregatorError(f"Unknown multicall address for chain {chain_id}")

        self.web3 = web3
        self.chain_id = int(chain_id)
        self.multicall_address = multicall_address.lower()
        self._multicall = MultiCall.at(self.multicall_address, web3)

    def __repr__(self) -> str:
        return f"MulticallProvider(chain_id={self.chain_id}, address={self.multicall_address})"

    @classmethod
    async def create(
        cls,
        web3: Optional[AsyncWeb3],
        chain_id: Optional[int] = None,
        multicall_address: Optional[str] = None,
        registry: Optional[MulticallRegistry] = None
    ) -> "MulticallProvider":
        """
        Create a provider, asking the node for the chain ID when not given

        Raises:
            UnknownAggregatorError: no address given and none registered for the chain
        """
        if chain_id is None:
            if web3 is None:
                raise UnknownAggregatorError("Cannot determine chain ID for multicall provider")
            chain_id = await web3.eth.chain_id

        return cls(web3, chain_id, multicall_address, registry)

    @staticmethod
    def register_multicall_address(
        chain_id: int,
        multicall_address: str,
        registry: Optional[MulticallRegistry] = None
    ):
        """Register the multicall address for the specified chain ID"""
        if registry is None:
            registry = multicall_registry
        registry.register(chain_id, multicall_address)

    @property
    def contract(self) -> Contract:
        return self._multicall.contract

    async def aggregate(
        self,
        calls: Sequence[ContractCall],
        batch_size: Optional[int] = None
    ) -> list[Any]:
        """
        Execute the calls through the multicall contract

        Calls are sent in consecutive batches of at most batch_size, one batch
        at a time. result[i] belongs to calls[i]; calls with one output give a
        bare value, calls with several give a tuple.
        """
        if batch_size is None:
            batch_size = settings.DEFAULT_BATCH_SIZE
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        calls = list(calls)
        results: list[Any] = []

        for start in range(0, len(calls), batch_size):
            batch = calls[start:start + batch_size]
            requests = [(call.target, call.encode()) for call in batch]

            logger.debug(
                f"Multicall batch {start // batch_size + 1}: {len(batch)} calls "
                f"on chain {self.chain_id}"
            )

            response = await self._multicall.aggregate(requests)

            if len(response.return_data) != len(batch):
                raise DecodingError(
                    f"Multicall returned {len(response.return_data)} results for {len(batch)} calls"
                )

            for call, data in zip(batch, response.return_data):
                results.append(call.decode_result(data))

        return results

    async def multicall(
        self,
        calls: Sequence[ContractCall],
        batch_size: Optional[int] = None
    ) -> list[Any]:
        """Deprecated alias of aggregate()"""
        warnings.warn(
            "MulticallProvider.multicall() is deprecated, use aggregate()",
            DeprecationWarning,
            stacklevel=2
        )
        return await self.aggregate(calls, batch_size)

    async def get_block_hash(self, block_number: int) -> bytes:
        return await self._multicall.get_block_hash(block_number)

    async def get_current_block_coinbase(self) -> str:
        return await self._multicall.get_current_block_coinbase()

    async def get_current_block_difficulty(self) -> int:
        return await self._multicall.get_current_block_difficulty()

    async def get_current_block_gas_limit(self) -> int:
        return await self._multicall.get_current_block_gas_limit()

    async def get_current_block_timestamp(self) -> int:
        return await self._multicall.get_current_block_timestamp()

    async def get_eth_balance(self, account: str) -> int:
        return await self._multicall.get_eth_balance(account)

    async def get_last_block_hash(self) -> bytes:
        return await self._multicall.get_last_block_hash()
