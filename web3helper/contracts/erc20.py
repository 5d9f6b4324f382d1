"""
ERC20 token wrapper
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from web3 import Web3

from web3helper.config.settings import MAX_APPROVAL
from web3helper.contracts.abis import ERC20_ABI
from web3helper.contracts.base_contract import BaseContract


@dataclass
class OwnerBalance:
    """Balance held by one account"""
    owner: str
    balance: int


@dataclass
class TokenMetadata:
    """Static metadata of an ERC20 token"""
    address: str
    symbol: str
    name: str
    decimals: int
    total_supply: int


class ERC20(BaseContract):
    """
    Basic representation of an ERC20 compatible contract.
    If additional functionality is required, this contract can be
    extended via inheritance
    """

    ABI = ERC20_ABI

    async def name(self) -> str:
        return await self.contract.read("name")

    async def symbol(self) -> str:
        return await self.contract.read("symbol")

    async def decimals(self) -> int:
        return await self.contract.read("decimals")

    async def total_supply(self) -> int:
        return await self.contract.read("totalSupply")

    async def balance_of(self, owner: str) -> int:
        return await self.contract.read("balanceOf", owner)

    async def allowance(self, owner: str, spender: str) -> int:
        """Amount spender is still allowed to withdraw from owner"""
        return await self.contract.read("allowance", owner, spender)

    async def balance_of_batch(self, owners: Sequence[str]) -> list[OwnerBalance]:
        """Balances for each of the provided accounts, in the given order"""
        balances = await self._read_many("balanceOf", [(owner,) for owner in owners])
        return [OwnerBalance(owner, balance) for owner, balance in zip(owners, balances)]

    async def token_metadata(self) -> TokenMetadata:
        if self.contract.multicall is not None:
            symbol, name, decimals, total_supply = await (
                self.contract.call("symbol")
                .call("name")
                .call("decimals")
                .call("totalSupply")
                .exec()
            )
        else:
            symbol, name, decimals, total_supply = await asyncio.gather(
                self.symbol(), self.name(), self.decimals(), self.total_supply()
            )

        return TokenMetadata(
            address=self.address,
            symbol=symbol,
            name=name,
            decimals=decimals,
            total_supply=total_supply,
        )

    async def approve(
        self,
        spender: str,
        value: int = MAX_APPROVAL,
        tx_params: Optional[dict[str, Any]] = None
    ):
        """Allow spender to withdraw up to value; returns the transaction hash"""
        return await self.contract.functions.approve(
            Web3.to_checksum_address(spender), value
        ).transact(tx_params or {})

    async def transfer(self, to: str, value: int, tx_params: Optional[dict[str, Any]] = None):
        return await self.contract.functions.transfer(
            Web3.to_checksum_address(to), value
        ).transact(tx_params or {})

    async def transfer_from(
        self,
        sender: str,
        to: str,
        value: int,
        tx_params: Optional[dict[str, Any]] = None
    ):
        return await self.contract.functions.transferFrom(
            Web3.to_checksum_address(sender), Web3.to_checksum_address(to), value
        ).transact(tx_params or {})
