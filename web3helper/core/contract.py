"""
Contract handle that exposes its read-only methods as ContractCalls so they
can be batched through a multicall contract

    chain = token.call("symbol").call("name").call("decimals")
    symbol, name, decimals = await chain.exec()
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from web3 import AsyncWeb3, Web3

from web3helper.core import abi
from web3helper.core.abi import TypeSpec, types_from_abi
from web3helper.core.exceptions import (
    EmptyCallChainError,
    EncodingError,
    UnknownMethodError,
    Web3HelperError,
)
from web3helper.core.retry import retry_call

if TYPE_CHECKING:
    from web3helper.core.network.multicall import MulticallProvider

READ_ONLY_MUTABILITY = ("pure", "view")


@dataclass(frozen=True)
class ReadOnlyMethod:
    """Entry of a contract's read-only method table"""
    name: str
    inputs: tuple[TypeSpec, ...]
    outputs: tuple[TypeSpec, ...]


@dataclass(frozen=True)
class ContractCall:
    """A single read-only call that can be encoded into a multicall batch"""
    target: str
    name: str
    inputs: tuple[TypeSpec, ...]
    outputs: tuple[TypeSpec, ...]
    params: tuple = ()

    def __post_init__(self):
        if len(self.params) != len(self.inputs):
            raise EncodingError(
                f"{self.name}() takes {len(self.inputs)} parameters, got {len(self.params)}"
            )

    @property
    def signature(self) -> str:
        return abi.function_signature(self.name, self.inputs)

    def encode(self) -> bytes:
        """Selector + ABI-encoded parameters"""
        return abi.encode(self.name, self.inputs, self.params)

    def decode_result(self, data: bytes) -> Any:
        """Decode return data; a single output is returned bare, not as a 1-tuple"""
        values = abi.decode(self.outputs, data)
        if len(self.outputs) == 1:
            return values[0]
        return values


def _is_read_only(fragment: dict) -> bool:
    mutability = fragment.get("stateMutability")
    if mutability is None:
        return bool(fragment.get("constant"))
    return mutability in READ_ONLY_MUTABILITY


class Contract:
    """
    A contract address plus its ABI

    The read-only method table is indexed once here and cannot be extended
    afterwards. Reads go through eth_call with the retry policy, writes use
    the web3 contract functions.
    """

    def __init__(
        self,
        address: str,
        contract_abi: Sequence[dict],
        web3: Optional[AsyncWeb3] = None,
        multicall: Optional["MulticallProvider"] = None
    ):
        if not isinstance(address, str) or not Web3.is_address(address.lower()):
            raise ValueError(f"Invalid contract address: {address}")

        self.address = address.lower()
        self.abi = list(contract_abi)
        self.web3 = web3
        self.multicall = multicall
        self._web3_contract = None

        methods: dict[str, ReadOnlyMethod] = {}
        for fragment in self.abi:
            if fragment.get("type", "function") != "function" or not _is_read_only(fragment):
                continue

            methods[fragment["name"]] = ReadOnlyMethod(
                name=fragment["name"],
                inputs=types_from_abi(fragment.get("inputs") or ()),
                outputs=types_from_abi(fragment.get("outputs") or ()),
            )

        self._methods: Mapping[str, ReadOnlyMethod] = MappingProxyType(methods)

    def __repr__(self) -> str:
        return f"Contract({self.address})"

    @property
    def checksum_address(self) -> str:
        return Web3.to_checksum_address(self.address)

    @property
    def methods(self) -> Mapping[str, ReadOnlyMethod]:
        """Read-only view of the callable method table"""
        return self._methods

    @property
    def functions(self):
        """web3 contract functions, used for state-changing transactions"""
        if self.web3 is None:
            raise Web3HelperError(f"{self} is not connected to a provider")
        if self._web3_contract is None:
            self._web3_contract = self.web3.eth.contract(address=self.checksum_address, abi=self.abi)
        return self._web3_contract.functions

    def connect(
        self,
        web3: AsyncWeb3,
        multicall: Optional["MulticallProvider"] = None
    ) -> "Contract":
        """Same contract bound to a different provider"""
        return Contract(self.address, self.abi, web3, multicall)

    def call_method(self, name: str, *params: Any) -> ContractCall:
        """
        Build a ContractCall for a read-only method. No network I/O.

        Raises:
            UnknownMethodError: name is not a pure/view method of this contract
        """
        method = self._methods.get(name)
        if method is None:
            raise UnknownMethodError(f"Contract method not callable: {name}")

        return ContractCall(
            target=self.address,
            name=method.name,
            inputs=method.inputs,
            outputs=method.outputs,
            params=tuple(params),
        )

    def chain(self) -> "CallChain":
        """Empty call chain bound to this contract"""
        return CallChain(self)

    def call(self, name: str, *params: Any) -> "CallChain":
        """Start a chainable list of contract calls"""
        return self.chain().call(name, *params)

    async def read(self, name: str, *params: Any) -> Any:
        """Execute a single read-only call with the retry policy"""
        call = self.call_method(name, *params)
        return await retry_call(self._eth_call, call)

    async def _eth_call(self, call: ContractCall) -> Any:
        if self.web3 is None:
            raise Web3HelperError(f"{self} is not connected to a provider")

        raw = await self.web3.eth.call({
            "to": Web3.to_checksum_address(call.target),
            "data": call.encode(),
        })
        return call.decode_result(raw)


@dataclass(frozen=True, eq=False)
class CallChain:
    """
    Immutable sequence of calls against one contract. call() returns a new
    chain, so chains forked from the same base never interfere.
    """
    contract: Contract
    calls: tuple[ContractCall, ...] = ()

    def __len__(self) -> int:
        return len(self.calls)

    def call(self, name: str, *params: Any) -> "CallChain":
        return CallChain(self.contract, self.calls + (self.contract.call_method(name, *params),))

    async def exec(
        self,
        provider: Optional["MulticallProvider"] = None,
        batch_size: Optional[int] = None
    ) -> list:
        """
        Execute the queued calls through a multicall provider

        Uses the given provider, else the contract's, else one created from
        the contract's web3 connection.
        """
        if not self.calls:
            raise EmptyCallChainError("No call chain available")

        provider = provider or self.contract.multicall

        if provider is None:
            from web3helper.core.network.multicall import MulticallProvider
            provider = await MulticallProvider.create(self.contract.web3)

        return await provider.aggregate(self.calls, batch_size)
