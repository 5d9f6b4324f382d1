"""
ERC721 token wrapper
"""
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from web3 import Web3

from web3helper.contracts.abis import ERC721_ABI
from web3helper.contracts.base_contract import BaseContract
from web3helper.contracts.erc20 import OwnerBalance


@dataclass
class RoyaltyInfo:
    """ERC2981 royalty owed on a sale, in the sale's unit of exchange"""
    receiver: str
    royalty_amount: int


class ERC721(BaseContract):
    """
    Basic representation of an ERC721 compatible contract.
    If additional functionality is required, this contract can be
    extended via inheritance

    Token ids are not assumed to be contiguous, batched helpers take the
    ids to look up.
    """

    ABI = ERC721_ABI

    async def supports_interface(self, interface_id: bytes) -> bool:
        """ERC165 check, e.g. 0x80ac58cd for ERC721 itself"""
        return await self.contract.read("supportsInterface", interface_id)

    async def name(self) -> str:
        return await self.contract.read("name")

    async def symbol(self) -> str:
        return await self.contract.read("symbol")

    async def total_supply(self) -> int:
        return await self.contract.read("totalSupply")

    async def balance_of(self, owner: str) -> int:
        """Count all NFTs assigned to an owner"""
        return await self.contract.read("balanceOf", owner)

    async def owner_of(self, token_id: int) -> str:
        return await self.contract.read("ownerOf", token_id)

    async def token_uri(self, token_id: int) -> str:
        return await self.contract.read("tokenURI", token_id)

    async def get_approved(self, token_id: int) -> str:
        return await self.contract.read("getApproved", token_id)

    async def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return await self.contract.read("isApprovedForAll", owner, operator)

    async def token_of_owner_by_index(self, owner: str, index: int) -> int:
        return await self.contract.read("tokenOfOwnerByIndex", owner, index)

    async def token_by_index(self, index: int) -> int:
        return await self.contract.read("tokenByIndex", index)

    async def royalty_info(self, token_id: int, sale_price: int) -> RoyaltyInfo:
        receiver, royalty_amount = await self.contract.read("royaltyInfo", token_id, sale_price)
        return RoyaltyInfo(receiver, royalty_amount)

    async def balance_of_batch(self, owners: Sequence[str]) -> list[OwnerBalance]:
        balances = await self._read_many("balanceOf", [(owner,) for owner in owners])
        return [OwnerBalance(owner, balance) for owner, balance in zip(owners, balances)]

    async def owners_of(self, token_ids: Sequence[int]) -> list[str]:
        """Owner of each token id, in the given order"""
        return await self._read_many("ownerOf", [(token_id,) for token_id in token_ids])

    async def owned_token_ids(self, owner: str) -> list[int]:
        """
        All token ids held by owner, via the ERC721Enumerable index

        One balanceOf read, then one tokenOfOwnerByIndex per token, batched
        when a multicall provider is attached.
        """
        count = await self.balance_of(owner)
        return await self._read_many("tokenOfOwnerByIndex", [(owner, index) for index in range(count)])

    async def holders(self, token_ids: Sequence[int]) -> dict[str, list[int]]:
        """Group the given token ids by their current owner"""
        results: dict[str, list[int]] = {}
        owners = await self.owners_of(token_ids)

        for owner, token_id in zip(owners, token_ids):
            results.setdefault(owner, []).append(token_id)

        return results

    async def approve(self, approved: str, token_id: int, tx_params: Optional[dict[str, Any]] = None):
        return await self.contract.functions.approve(
            Web3.to_checksum_address(approved), token_id
        ).transact(tx_params or {})

    async def set_approval_for_all(
        self,
        operator: str,
        approved: bool,
        tx_params: Optional[dict[str, Any]] = None
    ):
        return await self.contract.functions.setApprovalForAll(
            Web3.to_checksum_address(operator), approved
        ).transact(tx_params or {})

    async def transfer_from(
        self,
        sender: str,
        to: str,
        token_id: int,
        tx_params: Optional[dict[str, Any]] = None
    ):
        return await self.contract.functions.transferFrom(
            Web3.to_checksum_address(sender), Web3.to_checksum_address(to), token_id
        ).transact(tx_params or {})
