import pytest
from web3.exceptions import ContractLogicError

from web3helper.config.multicall_addresses import KNOWN_MULTICALL_ADDRESSES, MULTICALL_ABI
from web3helper.contracts.abis import ERC20_ABI, ERC721_ABI
from web3helper.core.abi import decode, encode_args, function_selector, types_from_abi

MULTICALL_ADDRESS = KNOWN_MULTICALL_ADDRESSES[1]
TOKEN_ADDRESS = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
NFT_ADDRESS = "0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d"
PAIR_ADDRESS = "0xb4e16d0168e52d35cacd2c6185b44281ec28c9dc"

ERC721_INTERFACES = (bytes.fromhex("01ffc9a7"), bytes.fromhex("80ac58cd"), bytes.fromhex("780e9d63"))

PAIR_ABI = [
    {
        "inputs": [],
        "name": "getReserves",
        "outputs": [
            {"name": "_reserve0", "type": "uint112"},
            {"name": "_reserve1", "type": "uint112"},
            {"name": "_blockTimestampLast", "type": "uint32"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "id", "type": "uint256"}],
        "name": "position",
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {"name": "owner", "type": "address"},
                    {"name": "liquidity", "type": "uint128"}
                ]
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "sync",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]


def make_address(i: int) -> str:
    return "0x" + f"{i + 1:040x}"


class FakeContract:
    """Answers eth_calls for the ABI functions that have a handler"""

    def __init__(self, contract_abi, handlers):
        self.methods = {}
        for fragment in contract_abi:
            if fragment.get("type") != "function" or fragment["name"] not in handlers:
                continue
            inputs = types_from_abi(fragment["inputs"])
            outputs = types_from_abi(fragment["outputs"])
            selector = function_selector(fragment["name"], inputs)
            self.methods[selector] = (inputs, outputs, handlers[fragment["name"]])

    def execute(self, data: bytes) -> bytes:
        selector = bytes(data[:4])
        if selector not in self.methods:
            raise ContractLogicError("execution reverted")

        inputs, outputs, handler = self.methods[selector]
        result = handler(*decode(inputs, bytes(data[4:])))
        if len(outputs) == 1:
            result = (result,)
        return encode_args(outputs, result)


class FakeChain:
    """In-memory chain: contracts keyed by address plus a call log"""

    def __init__(self, chain_id: int = 1, block_number: int = 17_000_000):
        self.chain_id = chain_id
        self.block_number = block_number
        self.contracts: dict[str, FakeContract] = {}
        self.eth_calls: list[dict] = []
        self.aggregate_batches: list[int] = []
        self.chain_id_requests = 0
        self.failures: list[Exception] = []

    def deploy(self, address: str, contract_abi, handlers):
        self.contracts[address.lower()] = FakeContract(contract_abi, handlers)

    def deploy_multicall(self, address: str = MULTICALL_ADDRESS):
        def aggregate(calls):
            self.aggregate_batches.append(len(calls))
            return self.block_number, [self.execute(target, data) for target, data in calls]

        self.deploy(address, MULTICALL_ABI, {
            "aggregate": aggregate,
            "getEthBalance": lambda addr: 10**18,
            "getCurrentBlockTimestamp": lambda: 1_700_000_000,
            "getBlockHash": lambda number: number.to_bytes(32, "big"),
        })

    def execute(self, target: str, data: bytes) -> bytes:
        contract = self.contracts.get(target.lower())
        if contract is None:
            return b""
        return contract.execute(data)

    def calls_to(self, address: str) -> int:
        return len([tx for tx in self.eth_calls if tx["to"].lower() == address.lower()])


class FakeEth:
    def __init__(self, chain: FakeChain):
        self._chain = chain

    @property
    def chain_id(self):
        return self._get_chain_id()

    async def _get_chain_id(self):
        self._chain.chain_id_requests += 1
        return self._chain.chain_id

    async def call(self, transaction, block_identifier=None):
        self._chain.eth_calls.append(transaction)
        if self._chain.failures:
            raise self._chain.failures.pop(0)

        data = transaction["data"]
        if isinstance(data, str):
            data = bytes.fromhex(data.removeprefix("0x"))
        return self._chain.execute(transaction["to"], bytes(data))


class FakeWeb3:
    def __init__(self, chain: FakeChain):
        self.eth = FakeEth(chain)


def deploy_token(chain: FakeChain, balances: dict[str, int], address: str = TOKEN_ADDRESS):
    chain.deploy(address, ERC20_ABI, {
        "name": lambda: "Wrapped Ether",
        "symbol": lambda: "WETH",
        "decimals": lambda: 18,
        "totalSupply": lambda: sum(balances.values()),
        "balanceOf": lambda owner: balances.get(owner.lower(), 0),
        "allowance": lambda owner, spender: 0,
    })


def deploy_nft(chain: FakeChain, owners: dict[int, str], address: str = NFT_ADDRESS):
    def balance_of(owner):
        return len([o for o in owners.values() if o.lower() == owner.lower()])

    def token_of_owner_by_index(owner, index):
        return [t for t, o in owners.items() if o.lower() == owner.lower()][index]

    chain.deploy(address, ERC721_ABI, {
        "name": lambda: "Bored Ape Yacht Club",
        "symbol": lambda: "BAYC",
        "totalSupply": lambda: len(owners),
        "balanceOf": balance_of,
        "ownerOf": lambda token_id: owners[token_id],
        "tokenURI": lambda token_id: f"ipfs://QmHash/{token_id}",
        "supportsInterface": lambda interface_id: interface_id in ERC721_INTERFACES,
        "tokenOfOwnerByIndex": token_of_owner_by_index,
        "tokenByIndex": lambda index: list(owners)[index],
        "royaltyInfo": lambda token_id, sale_price: (owners[token_id], sale_price * 5 // 100),
    })


def deploy_pair(chain: FakeChain, address: str = PAIR_ADDRESS):
    chain.deploy(address, PAIR_ABI, {
        "getReserves": lambda: (1_000, 2_000, 1_700_000_000),
        "position": lambda position_id: (make_address(position_id), position_id * 100),
    })


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def web3(chain):
    return FakeWeb3(chain)


@pytest.fixture
def no_retry_delay(monkeypatch):
    monkeypatch.setattr("web3helper.config.settings.RETRY_DELAY_SECONDS", 0)
    monkeypatch.setattr("web3helper.config.settings.RETRY_MAX_ATTEMPTS", 5)
