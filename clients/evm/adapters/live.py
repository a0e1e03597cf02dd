import logging
from web3 import AsyncWeb3

from chains.dto import ChainConfig
from chains.tokens import find_token
from clients.evm import address
from clients.evm.adapters.base import ChainAdapter
from clients.evm.base import Aggregator, Multicall3Client
from clients.evm.discovery import DexScreenerPoolProvider, PoolDiscoverySource, StaticPoolProvider
from clients.evm.dto import Pool, PoolSnapshot, Token
from clients.evm.events import AddressesRejected, EventListener, PoolsLoaded, SnapshotsLoaded, log_event
from clients.evm.multicall import AggregationMode, BatchRecord, BatchRequest, CallRequest, MulticallBatcher


module_logger = logging.getLogger(__name__)


class LiveChainAdapter(ChainAdapter):
    POOL_FUNCTIONS = ["token0", "token1", "fee"]
    SNAPSHOT_FUNCTIONS = ["slot0", "liquidity"]
    TOKEN_FUNCTIONS = ["symbol", "name", "decimals"]

    UNKNOWN_SYMBOL = "UNKNOWN"
    UNKNOWN_NAME = "Unknown Token"
    UNKNOWN_DECIMALS = 18

    def __init__(
        self,
        chain_config: ChainConfig,
        aggregator: Aggregator | None = None,
        discovery: PoolDiscoverySource | None = None,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        mode: AggregationMode = AggregationMode.LENIENT,
        listener: EventListener = log_event,
    ):
        self.chain_config = chain_config
        self.mode = mode
        self.listener = listener
        self._aggregator = aggregator or Multicall3Client(chain_config)

        self.batcher = MulticallBatcher(
            self._aggregator,
            chunk_size=chunk_size,
            concurrency=concurrency,
            chain_name=chain_config.name,
            listener=listener,
        )

        if discovery is None:
            discovery = PoolDiscoverySource(
                [
                    DexScreenerPoolProvider(chain_config.name, chain_config.stable.contract),
                    StaticPoolProvider(chain_config.known_pools),
                ],
                chain_name=chain_config.name,
                listener=listener,
            )
        self.discovery = discovery

    async def close(self):
        await self._aggregator.close()

    def get_chain_name(self) -> str:
        return self.chain_config.name

    def get_stable_token_address(self) -> str:
        return AsyncWeb3.to_checksum_address(self.chain_config.stable.contract)

    def _validated(self, candidates: list[str]) -> list[str]:
        valid = address.filter_valid(candidates)

        rejected = len(candidates) - len(valid)
        if rejected:
            self.listener(AddressesRejected(self.chain_config.name, rejected))

        return valid

    async def get_top_pools(self, limit: int) -> list[Pool]:
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        candidates = await self.discovery.discover(limit)
        pool_addresses = self._validated(candidates)

        if not pool_addresses:
            return []

        records = await self.batcher.fetch(pool_addresses, self.POOL_FUNCTIONS, self.mode)

        token_addresses = list(dict.fromkeys(
            token for record in records for token in record.values[:2]
        ))
        tokens = await self._resolve_tokens(token_addresses)
        reserves = await self._fetch_reserves(records)

        pools = []
        for record in records:
            token0, token1, fee = record.values
            reserve0, reserve1 = reserves.get(record.key, (0, 0))

            pools.append(
                Pool(
                    address=record.key,
                    token0=tokens[token0],
                    token1=tokens[token1],
                    reserve0=reserve0,
                    reserve1=reserve1,
                    fee_tier=int(fee),
                )
            )

        self.listener(PoolsLoaded(self.chain_config.name, len(pools)))
        return pools

    async def _resolve_tokens(self, token_addresses: list[str]) -> dict[str, Token]:
        tokens = {}
        unknown = []

        for token_address in token_addresses:
            meta = find_token(self.chain_config.name, token_address)
            if meta is None:
                unknown.append(token_address)
                continue

            tokens[token_address] = Token(
                symbol=meta.symbol,
                name=meta.name,
                address=token_address,
                decimals=meta.decimals,
            )

        if unknown:
            records = await self.batcher.fetch(unknown, self.TOKEN_FUNCTIONS)
            for record in records:
                symbol, name, decimals = record.values
                tokens[record.key] = Token(
                    symbol=symbol,
                    name=name,
                    address=record.key,
                    decimals=int(decimals),
                )

        for token_address in unknown:
            if token_address not in tokens:
                module_logger.debug(f"[{self.chain_config.name}] No metadata for token {token_address}")
                tokens[token_address] = Token(
                    symbol=self.UNKNOWN_SYMBOL,
                    name=self.UNKNOWN_NAME,
                    address=token_address,
                    decimals=self.UNKNOWN_DECIMALS,
                )

        return tokens

    async def _fetch_reserves(self, records: list[BatchRecord]) -> dict[str, tuple[int, int]]:
        requests = [
            BatchRequest(
                record.key,
                [
                    CallRequest(record.values[0], "balanceOf", (record.key,)),
                    CallRequest(record.values[1], "balanceOf", (record.key,)),
                ],
            )
            for record in records
        ]

        results = await self.batcher.fetch_requests(requests)

        return {
            result.key: (int(result.values[0]), int(result.values[1]))
            for result in results
        }

    async def get_batch_pool_data(self, addresses: list[str]) -> list[PoolSnapshot]:
        if not addresses:
            return []

        pool_addresses = self._validated(addresses)
        if not pool_addresses:
            return []

        records = await self.batcher.fetch(pool_addresses, self.SNAPSHOT_FUNCTIONS, self.mode)

        snapshots = []
        for record in records:
            slot0, liquidity = record.values
            sqrt_price_x96, *_ = slot0

            snapshots.append(
                PoolSnapshot(
                    address=record.key,
                    sqrt_price_x96=int(sqrt_price_x96),
                    liquidity=int(liquidity),
                )
            )

        self.listener(SnapshotsLoaded(self.chain_config.name, len(snapshots)))
        return snapshots
