"""
Known multicall contract deployments indexed by chain ID, plus the
standard multicall ABI
"""
import threading
from typing import Optional

from web3 import Web3

from web3helper.config.settings import NULL_ADDRESS


class MulticallRegistry:
    """
    Mapping of chain ID -> multicall contract address
    Addresses are stored lower-cased
    """

    def __init__(self, addresses: Optional[dict[int, str]] = None):
        self._addresses: dict[int, str] = {}
        self._lock = threading.Lock()

        for chain_id, address in (addresses or {}).items():
            self.register(chain_id, address)

    def register(self, chain_id: int, address: str):
        """Register (or override) the multicall address for a chain"""
        if not isinstance(address, str) or not Web3.is_address(address.lower()) or address.lower() == NULL_ADDRESS:
            raise ValueError(f"Invalid multicall address for chain {chain_id}: {address}")

        with self._lock:
            self._addresses[int(chain_id)] = address.lower()

    def get(self, chain_id: int) -> Optional[str]:
        """Get the multicall address for a chain, None if unknown"""
        return self._addresses.get(int(chain_id))

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)

    def copy(self) -> "MulticallRegistry":
        with self._lock:
            return MulticallRegistry(dict(self._addresses))


KNOWN_MULTICALL_ADDRESSES: dict[int, str] = {
    1: "0xeefba1e63905ef1d7acba5a8513c70307c1ce441",
    3: "0xF24b01476a55d635118ca848fbc7Dab69d403be3",
    4: "0x42ad527de7d4e9d9d011ac45b31d8551f8fe9821",
    5: "0x77dca2c955b15e9de4dbbcf1246b4b85b651e50e",
    42: "0x2cc8688c5f75e365aaeeb4ea8d6a480405a48d2a",
    56: "0x1Ee38d535d541c55C9dae27B12edf090C608E6Fb",
    66: "0x94fEadE0D3D832E4A05d459eBeA9350c6cDd3bCa",
    97: "0x3A09ad1B8535F25b48e6Fa0CFd07dB6B017b31B2",
    100: "0xb5b692a88bdfc81ca69dcb1d924f59f0413a602a",
    128: "0x2C55D51804CF5b436BA5AF37bD7b8E5DB70EBf29",
    137: "0x11ce4B23bD875D7F5C6a31084f55fDe1e9A87507",
    250: "0x0118EF741097D0d3cc88e46233Da1e407d9ac139",
    1337: "0x77dca2c955b15e9de4dbbcf1246b4b85b651e50e",
    4002: "0xd84a88b4011d006aD3bff1F3246AbCf4565b912B",
    42161: "0x813715eF627B01f4931d8C6F8D2459F26E19137E",
    43114: "0x7f3aC7C283d7E6662D886F494f7bc6F1993cDacf",
    80001: "0x08411ADd0b5AA8ee47563b146743C13b3556c9Cc",
}

# Process-wide default registry
multicall_registry = MulticallRegistry(KNOWN_MULTICALL_ADDRESSES)


MULTICALL_ABI = [
    {
        "constant": True,
        "inputs": [
            {
                "components": [
                    {"internalType": "address", "name": "target", "type": "address"},
                    {"internalType": "bytes", "name": "callData", "type": "bytes"}
                ],
                "internalType": "struct Multicall.Call[]",
                "name": "calls",
                "type": "tuple[]"
            }
        ],
        "name": "aggregate",
        "outputs": [
            {"internalType": "uint256", "name": "blockNumber", "type": "uint256"},
            {"internalType": "bytes[]", "name": "returnData", "type": "bytes[]"}
        ],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [{"internalType": "uint256", "name": "blockNumber", "type": "uint256"}],
        "name": "getBlockHash",
        "outputs": [{"internalType": "bytes32", "name": "blockHash", "type": "bytes32"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "getCurrentBlockCoinbase",
        "outputs": [{"internalType": "address", "name": "coinbase", "type": "address"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "getCurrentBlockDifficulty",
        "outputs": [{"internalType": "uint256", "name": "difficulty", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "getCurrentBlockGasLimit",
        "outputs": [{"internalType": "uint256", "name": "gaslimit", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "getCurrentBlockTimestamp",
        "outputs": [{"internalType": "uint256", "name": "timestamp", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [{"internalType": "address", "name": "addr", "type": "address"}],
        "name": "getEthBalance",
        "outputs": [{"internalType": "uint256", "name": "balance", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "getLastBlockHash",
        "outputs": [{"internalType": "bytes32", "name": "blockHash", "type": "bytes32"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function"
    }
]
