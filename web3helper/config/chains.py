"""
Chain configurations with RPC endpoints
Covers the main networks that have a known multicall deployment
"""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

from web3helper.core.exceptions import NoEndpointError

load_dotenv()

INFURA_KEY = os.getenv("INFURA_API_KEY")


class ChainId(Enum):
    """Blockchain chain IDs"""
    ETHEREUM = 1
    BSC = 56
    GNOSIS = 100
    POLYGON = 137
    FANTOM = 250
    ARBITRUM = 42161
    AVALANCHE = 43114


@dataclass
class ChainConfig:
    """Configuration for a blockchain"""
    chain_id: ChainId
    name: str
    native_token: str
    native_decimals: int
    rpc_endpoints: list[Optional[str]]
    explorer_url: str

    @property
    def valid_rpcs(self) -> list[str]:
        """RPC endpoints with unconfigured (None) entries filtered out"""
        return [r for r in self.rpc_endpoints if r is not None]

    def get_rpc(self, index: int = 0) -> str:
        """
        Get RPC endpoint with rotation support

        Raises:
            NoEndpointError: every endpoint is unconfigured, e.g. Infura-only without a key
        """
        valid_rpcs = self.valid_rpcs
        if not valid_rpcs:
            raise NoEndpointError(f"No RPC endpoint configured for {self.name}")
        return valid_rpcs[index % len(valid_rpcs)]


CHAINS: dict[ChainId, ChainConfig] = {
    ChainId.ETHEREUM: ChainConfig(
        chain_id=ChainId.ETHEREUM,
        name="Ethereum",
        native_token="ETH",
        native_decimals=18,
        rpc_endpoints=[
            f"https://mainnet.infura.io/v3/{INFURA_KEY}" if INFURA_KEY else None,
            "https://cloudflare-eth.com",
            "https://eth.llamarpc.com",
            "https://ethereum.publicnode.com",
            "https://1rpc.io/eth",
        ],
        explorer_url="https://etherscan.io",
    ),

    ChainId.BSC: ChainConfig(
        chain_id=ChainId.BSC,
        name="BSC",
        native_token="BNB",
        native_decimals=18,
        rpc_endpoints=[
            "https://bsc-dataseed.binance.org",
            "https://bsc.publicnode.com",
            "https://bsc-dataseed1.defibit.io",
        ],
        explorer_url="https://bscscan.com",
    ),

    ChainId.GNOSIS: ChainConfig(
        chain_id=ChainId.GNOSIS,
        name="Gnosis",
        native_token="xDAI",
        native_decimals=18,
        rpc_endpoints=[
            "https://rpc.gnosischain.com",
            "https://gnosis.publicnode.com",
        ],
        explorer_url="https://gnosisscan.io",
    ),

    ChainId.POLYGON: ChainConfig(
        chain_id=ChainId.POLYGON,
        name="Polygon",
        native_token="MATIC",
        native_decimals=18,
        rpc_endpoints=[
            f"https://polygon-mainnet.infura.io/v3/{INFURA_KEY}" if INFURA_KEY else None,
            "https://polygon-rpc.com",
            "https://polygon.publicnode.com",
        ],
        explorer_url="https://polygonscan.com",
    ),

    ChainId.FANTOM: ChainConfig(
        chain_id=ChainId.FANTOM,
        name="Fantom",
        native_token="FTM",
        native_decimals=18,
        rpc_endpoints=[
            "https://rpc.ftm.tools",
            "https://fantom.publicnode.com",
        ],
        explorer_url="https://ftmscan.com",
    ),

    ChainId.ARBITRUM: ChainConfig(
        chain_id=ChainId.ARBITRUM,
        name="Arbitrum",
        native_token="ETH",
        native_decimals=18,
        rpc_endpoints=[
            f"https://arbitrum-mainnet.infura.io/v3/{INFURA_KEY}" if INFURA_KEY else None,
            "https://arb1.arbitrum.io/rpc",
            "https://arbitrum.publicnode.com",
        ],
        explorer_url="https://arbiscan.io",
    ),

    ChainId.AVALANCHE: ChainConfig(
        chain_id=ChainId.AVALANCHE,
        name="Avalanche",
        native_token="AVAX",
        native_decimals=18,
        rpc_endpoints=[
            "https://api.avax.network/ext/bc/C/rpc",
            "https://avalanche.publicnode.com",
        ],
        explorer_url="https://snowtrace.io",
    ),
}
