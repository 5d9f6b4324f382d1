"""
Wrapper for a standard Multicall contract
"""
from typing import NamedTuple, Sequence

from web3helper.config.multicall_addresses import MULTICALL_ABI
from web3helper.contracts.base_contract import BaseContract


class AggregateResponse(NamedTuple):
    """Result of Multicall.aggregate: one return blob per request, in request order"""
    block_number: int
    return_data: list[bytes]


class MultiCall(BaseContract):
    """
    Basic representation of a standard Multicall compatible contract.
    If additional functionality is required, this contract can be
    extended via inheritance
    """

    ABI = MULTICALL_ABI

    async def aggregate(self, requests: Sequence[tuple[str, bytes]]) -> AggregateResponse:
        """
        Execute the encoded calls in one eth_call

        Args:
            requests: (target, call_data) pairs
        """
        block_number, return_data = await self.contract.read("aggregate", list(requests))
        return AggregateResponse(block_number, list(return_data))

    async def get_eth_balance(self, address: str) -> int:
        return await self.contract.read("getEthBalance", address)

    async def get_block_hash(self, block_number: int) -> bytes:
        return await self.contract.read("getBlockHash", block_number)

    async def get_last_block_hash(self) -> bytes:
        return await self.contract.read("getLastBlockHash")

    async def get_current_block_timestamp(self) -> int:
        return await self.contract.read("getCurrentBlockTimestamp")

    async def get_current_block_difficulty(self) -> int:
        return await self.contract.read("getCurrentBlockDifficulty")

    async def get_current_block_gas_limit(self) -> int:
        return await self.contract.read("getCurrentBlockGasLimit")

    async def get_current_block_coinbase(self) -> str:
        return await self.contract.read("getCurrentBlockCoinbase")
