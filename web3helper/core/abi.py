"""
ABI encoder/decoder used to turn contract calls into multicall byteform

Types are described with TypeSpec, built from the standard JSON ABI
entries ({"name": ..., "type": ..., "components": [...]}).
"""
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence, Union

from eth_abi import decode as abi_decode, encode as abi_encode
from eth_abi import exceptions as abi_exceptions
from web3 import Web3

from web3helper.core.exceptions import DecodingError, EncodingError

_SIZELESS_ALIASES = re.compile(r"^(uint|int|fixed|ufixed|byte)(?=$|\[)")
_ARRAY_SUFFIX = re.compile(r"\[\d*\]$")
_ALIAS_SIZES = {
    "uint": "uint256",
    "int": "int256",
    "fixed": "fixed128x18",
    "ufixed": "ufixed128x18",
    "byte": "bytes1",
}

_ENCODE_ERRORS = (
    abi_exceptions.EncodingError,
    abi_exceptions.ABITypeError,
    abi_exceptions.ParseError,
    TypeError,
    ValueError,
)
_DECODE_ERRORS = (
    abi_exceptions.DecodingError,
    abi_exceptions.ABITypeError,
    abi_exceptions.ParseError,
    TypeError,
    ValueError,
)


def _normalize_type(type_str: str) -> str:
    return _SIZELESS_ALIASES.sub(lambda m: _ALIAS_SIZES[m.group(1)], type_str)


@dataclass(frozen=True)
class TypeSpec:
    """Declared shape of a function parameter or return value"""
    type: str
    components: tuple["TypeSpec", ...] = field(default=())
    name: str = ""

    @classmethod
    def from_abi(cls, entry: Union["TypeSpec", dict, str]) -> "TypeSpec":
        """Build a TypeSpec from a JSON ABI parameter entry or a bare type string"""
        if isinstance(entry, TypeSpec):
            return entry
        if isinstance(entry, str):
            return cls(type=_normalize_type(entry))

        return cls(
            type=_normalize_type(entry["type"]),
            components=tuple(cls.from_abi(c) for c in entry.get("components") or ()),
            name=entry.get("name") or "",
        )

    @property
    def is_tuple(self) -> bool:
        return self.type.startswith("tuple")

    @property
    def canonical(self) -> str:
        """
        Signature form of the type: tuples are expanded recursively into
        (component,...) with any array suffix kept, e.g. (address,bytes)[]
        """
        if self.is_tuple:
            inner = ",".join(component.canonical for component in self.components)
            return f"({inner}){self.type[len('tuple'):]}"
        return self.type


def _normalize_value(type_str: str, components: Sequence["TypeSpec"], value: Any) -> Any:
    """Lower-case every address in a decoded value, walking arrays and tuples"""
    array = _ARRAY_SUFFIX.search(type_str)
    if array:
        element_type = type_str[:array.start()]
        return tuple(_normalize_value(element_type, components, item) for item in value)
    if type_str == "tuple":
        return tuple(_normalize_value(c.type, c.components, v) for c, v in zip(components, value))
    if type_str == "address":
        return value.lower()
    return value


def types_from_abi(entries: Iterable[Union[TypeSpec, dict, str]]) -> tuple[TypeSpec, ...]:
    """Convert a list of ABI parameter entries to TypeSpecs"""
    return tuple(TypeSpec.from_abi(entry) for entry in entries)


def function_signature(name: str, inputs: Sequence[TypeSpec]) -> str:
    """Canonical function signature, e.g. transfer(address,uint256)"""
    return f"{name}({','.join(t.canonical for t in inputs)})"


def function_selector(name: str, inputs: Sequence[TypeSpec]) -> bytes:
    """First 4 bytes of the keccak256 hash of the function signature"""
    return bytes(Web3.keccak(text=function_signature(name, inputs))[:4])


def encode_args(types: Sequence[TypeSpec], values: Sequence[Any]) -> bytes:
    """ABI-encode values against the given types (no selector)"""
    if len(types) != len(values):
        raise EncodingError(f"Expected {len(types)} values, got {len(values)}")

    try:
        return abi_encode([t.canonical for t in types], list(values))
    except _ENCODE_ERRORS as e:
        raise EncodingError(str(e)) from e


def encode(name: str, inputs: Sequence[TypeSpec], params: Sequence[Any]) -> bytes:
    """Encode a function call as selector + ABI-encoded arguments"""
    return function_selector(name, inputs) + encode_args(inputs, params)


def decode(outputs: Sequence[TypeSpec], data: bytes) -> tuple:
    """
    Decode ABI-encoded return data

    The data must be exactly as long as the canonical encoding of the
    decoded values; truncated or trailing bytes raise DecodingError.
    Addresses come back lower-cased.
    """
    type_strs = [t.canonical for t in outputs]
    data = bytes(data)

    try:
        values = abi_decode(type_strs, data)
    except _DECODE_ERRORS as e:
        raise DecodingError(f"Cannot decode {len(data)} bytes as ({','.join(type_strs)}): {e}") from e

    try:
        expected = len(abi_encode(type_strs, list(values)))
    except _ENCODE_ERRORS as e:
        raise DecodingError(f"Decoded values do not re-encode as ({','.join(type_strs)}): {e}") from e

    if expected != len(data):
        raise DecodingError(
            f"Expected {expected} bytes for ({','.join(type_strs)}), got {len(data)}"
        )

    return tuple(_normalize_value(t.type, t.components, v) for t, v in zip(outputs, values))
