"""
RPC endpoint manager
Keeps one AsyncWeb3 per endpoint and one multicall provider per (endpoint, chain)
"""
import time
from dataclasses import dataclass
from typing import Optional, TypeVar

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3

from web3helper.config.chains import CHAINS, ChainConfig, ChainId
from web3helper.config.multicall_addresses import MulticallRegistry
from web3helper.config.settings import REQUEST_TIMEOUT
from web3helper.contracts.base_contract import BaseContract
from web3helper.core.exceptions import NoEndpointError, UnknownAggregatorError
from web3helper.core.network.multicall import MulticallProvider
from web3helper.utils.logger import get_logger

logger = get_logger(__name__)

C = TypeVar("C", bound=BaseContract)

# Shared session for all providers
_GLOBAL_SESSION: Optional[aiohttp.ClientSession] = None


async def get_global_session() -> aiohttp.ClientSession:
    """Get or create the shared HTTP session"""
    global _GLOBAL_SESSION
    if _GLOBAL_SESSION is None or _GLOBAL_SESSION.closed:
        connector = aiohttp.TCPConnector(
            use_dns_cache=True,
            ttl_dns_cache=600,
            limit=100,
            limit_per_host=25,
        )
        _GLOBAL_SESSION = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
        )
    return _GLOBAL_SESSION


@dataclass
class RPCEndpointHealth:
    """Track health of an RPC endpoint"""
    url: str
    failures: int = 0
    last_failure: float = 0
    last_success: float = 0
    avg_latency_ms: float = 0

    def record_success(self, latency_ms: float):
        self.last_success = time.time()
        self.failures = 0
        # Exponential moving average
        if self.avg_latency_ms == 0:
            self.avg_latency_ms = latency_ms
        else:
            self.avg_latency_ms = 0.8 * self.avg_latency_ms + 0.2 * latency_ms

    def record_failure(self):
        self.failures += 1
        self.last_failure = time.time()

    def is_healthy(self) -> bool:
        # Unhealthy after 3+ failures within the last 60 seconds
        if self.failures >= 3 and time.time() - self.last_failure < 60:
            return False
        return True


class RPCManager:
    """
    Hands out web3 connections and multicall providers per chain
    """

    def __init__(
        self,
        chains: Optional[dict[ChainId, ChainConfig]] = None,
        registry: Optional[MulticallRegistry] = None
    ):
        self._chains = chains if chains is not None else CHAINS
        self._registry = registry
        self._web3_instances: dict[str, AsyncWeb3] = {}
        self._multicall_providers: dict[tuple[str, int], Optional[MulticallProvider]] = {}
        self._endpoint_health: dict[ChainId, dict[str, RPCEndpointHealth]] = {
            chain_id: {url: RPCEndpointHealth(url=url) for url in config.valid_rpcs}
            for chain_id, config in self._chains.items()
        }

    async def _get_web3(self, url: str) -> AsyncWeb3:
        """Get or create a Web3 instance for a specific endpoint"""
        if url not in self._web3_instances:
            session = await get_global_session()
            provider = AsyncHTTPProvider(
                url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)}
            )
            await provider.cache_async_session(session)
            self._web3_instances[url] = AsyncWeb3(provider)
        return self._web3_instances[url]

    def _get_best_endpoint(self, chain_id: ChainId) -> str:
        """Healthy endpoint with the lowest latency, unmeasured ones last"""
        if chain_id not in self._endpoint_health:
            raise NoEndpointError(f"Chain {chain_id} is not configured")

        health = self._endpoint_health[chain_id]
        healthy_endpoints = [
            (url, h.avg_latency_ms or float("inf"))
            for url, h in health.items()
            if h.is_healthy()
        ]

        if not healthy_endpoints:
            # All unhealthy, reset and use first
            for h in health.values():
                h.failures = 0
            return self._chains[chain_id].get_rpc(0)

        # Stable sort keeps configuration order among equal latencies
        healthy_endpoints.sort(key=lambda x: x[1])
        return healthy_endpoints[0][0]

    async def get_web3(self, chain_id: ChainId) -> AsyncWeb3:
        """Get a Web3 instance for the best available endpoint"""
        return await self._get_web3(self._get_best_endpoint(chain_id))

    async def ping(self, chain_id: ChainId) -> bool:
        """Probe every endpoint of a chain and update its health"""
        any_ok = False
        for url, health in self._endpoint_health[chain_id].items():
            web3 = await self._get_web3(url)
            start_time = time.time()
            try:
                await web3.eth.block_number
            except Exception as e:
                health.record_failure()
                logger.debug(f"RPC endpoint {url} failed: {e}")
                continue
            health.record_success((time.time() - start_time) * 1000)
            any_ok = True
        return any_ok

    async def get_multicall(self, chain_id: ChainId) -> Optional[MulticallProvider]:
        """
        Multicall provider for the chain's best endpoint, created once and
        reused. None when the chain has no known multicall contract.
        """
        url = self._get_best_endpoint(chain_id)
        key = (url, chain_id.value)

        if key not in self._multicall_providers:
            web3 = await self._get_web3(url)
            try:
                provider = await MulticallProvider.create(
                    web3, chain_id.value, registry=self._registry
                )
            except UnknownAggregatorError:
                logger.debug(f"No multicall contract on {self._chains[chain_id].name}, using individual calls")
                provider = None
            self._multicall_providers[key] = provider

        return self._multicall_providers[key]

    async def load(self, wrapper: type[C], address: str, chain_id: ChainId) -> C:
        """Wrap a contract on the given chain, with multicall when available"""
        web3 = await self.get_web3(chain_id)
        multicall = await self.get_multicall(chain_id)
        return wrapper.at(address, web3, multicall)

    async def close(self):
        """Close all Web3 providers and the shared session"""
        for url, w3 in self._web3_instances.items():
            if hasattr(w3.provider, "disconnect"):
                try:
                    await w3.provider.disconnect()
                except Exception as e:
                    logger.debug(f"Failed to disconnect {url}: {e}")
        self._web3_instances.clear()
        self._multicall_providers.clear()

        global _GLOBAL_SESSION
        if _GLOBAL_SESSION and not _GLOBAL_SESSION.closed:
            await _GLOBAL_SESSION.close()
            _GLOBAL_SESSION = None


# Global RPC manager instance
rpc_manager = RPCManager()
