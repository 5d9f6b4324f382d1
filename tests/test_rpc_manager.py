"""
Tests for the RPC manager
"""
import pytest

from conftest import FakeChain, FakeWeb3, TOKEN_ADDRESS, deploy_token, make_address
from web3helper.config.chains import CHAINS, ChainConfig, ChainId
from web3helper.config.multicall_addresses import MulticallRegistry
from web3helper.contracts.erc20 import ERC20
from web3helper.core.exceptions import NoEndpointError
from web3helper.utils.rpc_manager import RPCEndpointHealth, RPCManager

TEST_CHAINS = {
    ChainId.ETHEREUM: ChainConfig(
        chain_id=ChainId.ETHEREUM,
        name="Ethereum",
        native_token="ETH",
        native_decimals=18,
        rpc_endpoints=[None, "https://rpc-a.example", "https://rpc-b.example"],
        explorer_url="https://etherscan.io",
    ),
}


def make_manager(monkeypatch, registry=None) -> tuple[RPCManager, dict]:
    manager = RPCManager(chains=TEST_CHAINS, registry=registry)
    created = {}

    async def fake_get_web3(url):
        if url not in created:
            created[url] = FakeWeb3(FakeChain())
        return created[url]

    monkeypatch.setattr(manager, "_get_web3", fake_get_web3)
    return manager, created


def test_chain_configs_have_rpcs():
    for chain_id, config in CHAINS.items():
        assert config.chain_id == chain_id
        assert config.valid_rpcs


def test_unconfigured_endpoints_are_skipped():
    config = TEST_CHAINS[ChainId.ETHEREUM]

    assert config.valid_rpcs == ["https://rpc-a.example", "https://rpc-b.example"]
    assert config.get_rpc(3) == "https://rpc-b.example"


def test_endpoint_health():
    health = RPCEndpointHealth(url="https://rpc-a.example")
    for _ in range(3):
        health.record_failure()

    assert not health.is_healthy()

    health.record_success(120.0)
    health.record_success(20.0)

    assert health.is_healthy()
    assert health.avg_latency_ms == pytest.approx(100.0)


def test_best_endpoint_prefers_fast_and_healthy():
    manager = RPCManager(chains=TEST_CHAINS)
    health = manager._endpoint_health[ChainId.ETHEREUM]

    assert manager._get_best_endpoint(ChainId.ETHEREUM) == "https://rpc-a.example"

    health["https://rpc-a.example"].record_success(300.0)
    health["https://rpc-b.example"].record_success(50.0)
    assert manager._get_best_endpoint(ChainId.ETHEREUM) == "https://rpc-b.example"

    for _ in range(3):
        health["https://rpc-b.example"].record_failure()
    assert manager._get_best_endpoint(ChainId.ETHEREUM) == "https://rpc-a.example"


def test_all_unhealthy_resets_to_first():
    manager = RPCManager(chains=TEST_CHAINS)
    for health in manager._endpoint_health[ChainId.ETHEREUM].values():
        for _ in range(3):
            health.record_failure()

    assert manager._get_best_endpoint(ChainId.ETHEREUM) == "https://rpc-a.example"
    assert all(h.failures == 0 for h in manager._endpoint_health[ChainId.ETHEREUM].values())


def test_chain_without_endpoints():
    infura_only = ChainConfig(
        chain_id=ChainId.POLYGON,
        name="Polygon",
        native_token="MATIC",
        native_decimals=18,
        rpc_endpoints=[None],
        explorer_url="https://polygonscan.com",
    )
    manager = RPCManager(chains={**TEST_CHAINS, ChainId.POLYGON: infura_only})

    with pytest.raises(NoEndpointError, match="Polygon"):
        infura_only.get_rpc(0)
    with pytest.raises(NoEndpointError):
        manager._get_best_endpoint(ChainId.POLYGON)
    with pytest.raises(NoEndpointError):
        manager._get_best_endpoint(ChainId.BSC)


@pytest.mark.asyncio
async def test_multicall_provider_is_cached(monkeypatch):
    manager, created = make_manager(monkeypatch)

    first = await manager.get_multicall(ChainId.ETHEREUM)
    second = await manager.get_multicall(ChainId.ETHEREUM)

    assert first is second
    assert first.chain_id == 1
    assert first.web3 is created["https://rpc-a.example"]


@pytest.mark.asyncio
async def test_no_multicall_for_unregistered_chain(monkeypatch):
    manager, _ = make_manager(monkeypatch, registry=MulticallRegistry())

    assert await manager.get_multicall(ChainId.ETHEREUM) is None


@pytest.mark.asyncio
async def test_load_falls_back_to_individual_calls(monkeypatch):
    manager, created = make_manager(monkeypatch, registry=MulticallRegistry())
    web3 = await manager.get_web3(ChainId.ETHEREUM)
    owner = make_address(1)
    deploy_token(web3.eth._chain, {owner: 5})

    token = await manager.load(ERC20, TOKEN_ADDRESS, ChainId.ETHEREUM)

    assert token.contract.multicall is None
    assert token.contract.web3 is web3
    assert [b.balance for b in await token.balance_of_batch([owner])] == [5]


@pytest.mark.asyncio
async def test_ping_records_health(monkeypatch):
    manager, created = make_manager(monkeypatch)

    class BlockNumberEth:
        def __init__(self, fail):
            self.fail = fail

        @property
        def block_number(self):
            return self._block_number()

        async def _block_number(self):
            if self.fail:
                raise ConnectionError("unreachable")
            return 123

    created["https://rpc-a.example"] = type("W3", (), {"eth": BlockNumberEth(True)})()
    created["https://rpc-b.example"] = type("W3", (), {"eth": BlockNumberEth(False)})()

    assert await manager.ping(ChainId.ETHEREUM)

    health = manager._endpoint_health[ChainId.ETHEREUM]
    assert health["https://rpc-a.example"].failures == 1
    assert health["https://rpc-b.example"].last_success > 0
