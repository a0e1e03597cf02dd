import pytest
from eth_utils.address import to_checksum_address

from chains.dto import ChainConfig, StableConfig
from clients.evm.adapters import LiveChainAdapter
from clients.evm.codec import codec
from clients.evm.discovery import PoolDiscoverySource, StaticPoolProvider
from clients.evm.dto import Pool, PoolSnapshot, Token
from clients.evm.events import AddressesRejected, PoolsLoaded, SnapshotsLoaded
from clients.evm.multicall import AggregationMode
from tests._fakes import FakeAggregator, FakeProvider, make_address


WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
FOO = "0x" + "f0" * 20

P1, P2, P3 = make_address(1), make_address(2), make_address(3)

POOLS = {
    P1: {"token0": USDC, "token1": WETH, "fee": 500},
    P2: {"token0": FOO, "token1": WETH, "fee": 3000},
    # fee() reverts
    P3: {"token0": USDC, "token1": WETH},
}

BALANCES = {
    (USDC.lower(), P1): 123_456_789 * 10 ** 6,
    (WETH.lower(), P1): 2 ** 70,
    (WETH.lower(), P2): 10 ** 18,
}

ERC20 = {
    FOO: {"symbol": "FOO", "name": "Foo Token", "decimals": 9},
}


def respond(target, function, args):
    if target in POOLS:
        if function in ("slot0", "liquidity"):
            index = int(target, 16)
            return (2 ** 96 * index, 0, 0, 1, 1, 0, True) if function == "slot0" else 1000 * index
        return POOLS[target].get(function)

    if function == "balanceOf":
        return BALANCES.get((target, args[0].lower()))

    return ERC20.get(target, {}).get(function)


ethereum = ChainConfig(
    chain_id=1,
    name="ethereum",
    rpc_url="http://localhost:8545",
    multicall3_address="0xcA11bde05977b3631167028862bE2a173976CA11",
    stables=[StableConfig("USDC", USDC)],
    known_pools=[P1],
)


def _adapter(providers, listener=None, **kwargs):
    listener = listener or (lambda event: None)
    aggregator = FakeAggregator(respond)
    adapter = LiveChainAdapter(
        ethereum,
        aggregator=aggregator,
        discovery=PoolDiscoverySource(providers, chain_name="ethereum", listener=listener),
        listener=listener,
        **kwargs,
    )
    return adapter, aggregator


def test_capabilities():
    adapter, _ = _adapter([])

    assert adapter.get_chain_name() == "ethereum"
    assert adapter.get_stable_token_address() == USDC


@pytest.mark.asyncio
async def test_get_top_pools_assembles_pools(events, listener):
    adapter, aggregator = _adapter(
        [FakeProvider("api", [P2, P3]), StaticPoolProvider([P1])],
        listener,
    )

    pools = await adapter.get_top_pools(10)

    usdc = Token("USDC", "USD Coin", USDC, 6)
    weth = Token("WETH", "Wrapped Ether", WETH, 18)
    foo = Token("FOO", "Foo Token", to_checksum_address(FOO), 9)

    assert pools == [
        Pool(address=P2, token0=foo, token1=weth, reserve0=0, reserve1=0, fee_tier=3000),
        Pool(
            address=P1,
            token0=usdc,
            token1=weth,
            reserve0=123_456_789 * 10 ** 6,
            reserve1=2 ** 70,
            fee_tier=500,
        ),
    ]
    assert events[-1] == PoolsLoaded("ethereum", 2)

    # pool metadata, unknown token metadata, reserves
    assert len(aggregator.invocations) == 3
    metadata_targets = {call.target.lower() for call in aggregator.invocations[1]}
    assert metadata_targets == {FOO}


@pytest.mark.asyncio
async def test_get_top_pools_respects_limit():
    adapter, aggregator = _adapter([FakeProvider("api", [P1, P2, P3])])

    pools = await adapter.get_top_pools(1)

    assert [p.address for p in pools] == [P1]
    assert {call.target for call in aggregator.invocations[0]} == {P1}


@pytest.mark.asyncio
async def test_get_top_pools_filters_malformed_addresses(events, listener):
    adapter, aggregator = _adapter(
        [FakeProvider("api", ["0xPool_WETH_ethereum", P1, "0x1234"])],
        listener,
    )

    pools = await adapter.get_top_pools(10)

    assert [p.address for p in pools] == [P1]
    assert AddressesRejected("ethereum", 2) in events
    targets = {call.target.lower() for calls in aggregator.invocations for call in calls}
    assert "0xpool_weth_ethereum" not in targets
    assert "0x1234" not in targets


@pytest.mark.asyncio
async def test_get_top_pools_fills_limit_past_malformed_candidates():
    adapter, _ = _adapter([FakeProvider("api", ["0x1234", P1, P2])])

    pools = await adapter.get_top_pools(2)

    assert [p.address for p in pools] == [P1, P2]


@pytest.mark.asyncio
async def test_get_top_pools_unknown_token_falls_back_to_placeholder():
    bar = "0x" + "ba" * 20
    POOLS[make_address(9)] = {"token0": bar, "token1": WETH, "fee": 100}
    try:
        adapter, _ = _adapter([FakeProvider("api", [make_address(9)])])
        pools = await adapter.get_top_pools(1)
    finally:
        del POOLS[make_address(9)]

    assert pools[0].token0.symbol == LiveChainAdapter.UNKNOWN_SYMBOL
    assert pools[0].token0.decimals == 18
    assert pools[0].token0.address.lower() == bar


@pytest.mark.asyncio
async def test_get_top_pools_with_no_candidates_makes_no_calls():
    adapter, aggregator = _adapter([FakeProvider("api", error=RuntimeError("down"))])

    assert await adapter.get_top_pools(5) == []
    assert aggregator.invocations == []


@pytest.mark.asyncio
async def test_get_top_pools_rejects_negative_limit():
    adapter, _ = _adapter([])

    with pytest.raises(ValueError):
        await adapter.get_top_pools(-1)


@pytest.mark.asyncio
async def test_get_batch_pool_data_reads_price_and_liquidity(events, listener):
    adapter, aggregator = _adapter([], listener)

    snapshots = await adapter.get_batch_pool_data([P1, "bogus", P2])

    assert snapshots == [
        PoolSnapshot(P1, 2 ** 96 * 1, 1000),
        PoolSnapshot(P2, 2 ** 96 * 2, 2000),
    ]
    assert [codec.decode_call(c.call_data)[0] for c in aggregator.invocations[0]] == [
        "slot0", "liquidity", "slot0", "liquidity",
    ]
    assert AddressesRejected("ethereum", 1) in events
    assert events[-1] == SnapshotsLoaded("ethereum", 2)


@pytest.mark.asyncio
async def test_get_batch_pool_data_empty_makes_no_calls():
    adapter, aggregator = _adapter([])

    assert await adapter.get_batch_pool_data([]) == []
    assert await adapter.get_batch_pool_data(["0xnope"]) == []
    assert aggregator.invocations == []


@pytest.mark.asyncio
async def test_get_batch_pool_data_chunks_requests():
    adapter, aggregator = _adapter([], chunk_size=2)
    addresses = [make_address(i) for i in range(1, 6)]

    snapshots = await adapter.get_batch_pool_data(addresses)

    assert len(aggregator.invocations) == 3
    assert [s.address for s in snapshots] == addresses[:3]


@pytest.mark.asyncio
async def test_strict_mode_is_selectable():
    adapter, aggregator = _adapter(
        [FakeProvider("api", [P1, P3])],
        mode=AggregationMode.STRICT,
    )

    # P3's fee() reverts and takes the whole chunk with it
    assert await adapter.get_top_pools(10) == []
    assert len(aggregator.invocations) == 1


@pytest.mark.asyncio
async def test_context_manager_closes_aggregator():
    adapter, aggregator = _adapter([])

    async with adapter:
        pass

    assert aggregator.closed
