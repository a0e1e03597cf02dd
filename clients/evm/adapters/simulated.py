import math
import random
from decimal import Decimal
from eth_utils.address import to_checksum_address
from eth_utils.crypto import keccak

from chains.tokens import TokenMetadata, tokens_for
from clients.evm import address
from clients.evm.adapters.base import ChainAdapter
from clients.evm.dto import Pool, PoolSnapshot, Token
from clients.evm.events import EventListener, PoolsLoaded, SnapshotsLoaded, log_event


BASE_PRICES = {
    "WETH": Decimal(3500),
    "WBTC": Decimal(65000),
    "UNI": Decimal(10),
    "AAVE": Decimal(120),
    "LINK": Decimal(18),
}


def _to_token(meta: TokenMetadata) -> Token:
    return Token(
        symbol=meta.symbol,
        name=meta.name,
        address=to_checksum_address(meta.address),
        decimals=meta.decimals,
    )


class SimulatedChainAdapter(ChainAdapter):
    """Registry tokens paired with the stable token at jittered base prices."""

    LIQUIDITY_UNITS = 1_000_000
    FEE_TIER = 3000
    MAX_JITTER_BPS = 100

    def __init__(
        self,
        chain_name: str,
        rng: random.Random | None = None,
        tokens: list[TokenMetadata] | None = None,
        stable_symbol: str = "USDC",
        listener: EventListener = log_event,
    ):
        self.chain_name = chain_name.lower()
        self.rng = rng or random.Random()
        self.listener = listener

        metadata = tokens if tokens is not None else tokens_for(self.chain_name)
        if not metadata:
            raise ValueError(f"No tokens registered for chain {chain_name}")

        stable_meta = next((t for t in metadata if t.symbol == stable_symbol), metadata[0])

        self.stable_token = _to_token(stable_meta)
        self.tokens = [_to_token(t) for t in metadata if t.address != stable_meta.address]

    def get_chain_name(self) -> str:
        return self.chain_name

    def get_stable_token_address(self) -> str:
        return self.stable_token.address

    def pool_address(self, token: Token) -> str:
        seed = f"{self.chain_name}:{token.symbol}:{self.stable_token.symbol}"
        return to_checksum_address(keccak(text=seed)[12:])

    def _price(self, symbol: str) -> Decimal:
        base_price = BASE_PRICES.get(symbol, Decimal(1))
        jitter_bps = self.rng.randint(-self.MAX_JITTER_BPS, self.MAX_JITTER_BPS)
        return base_price * (1 + Decimal(jitter_bps) / 10000)

    def _build_pool(self, token: Token) -> Pool:
        price = self._price(token.symbol)

        reserve0 = self.LIQUIDITY_UNITS * 10 ** token.decimals
        reserve1 = int(self.LIQUIDITY_UNITS * price * 10 ** self.stable_token.decimals)

        return Pool(
            address=self.pool_address(token),
            token0=token,
            token1=self.stable_token,
            reserve0=reserve0,
            reserve1=reserve1,
            fee_tier=self.FEE_TIER,
        )

    async def get_top_pools(self, limit: int) -> list[Pool]:
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        pools = [self._build_pool(token) for token in self.tokens[:limit]]

        self.listener(PoolsLoaded(self.chain_name, len(pools)))
        return pools

    @staticmethod
    def _snapshot(pool: Pool) -> PoolSnapshot:
        # sqrt(reserve1 / reserve0) in Q64.96
        return PoolSnapshot(
            address=pool.address,
            sqrt_price_x96=math.isqrt((pool.reserve1 << 192) // pool.reserve0),
            liquidity=math.isqrt(pool.reserve0 * pool.reserve1),
        )

    async def get_batch_pool_data(self, addresses: list[str]) -> list[PoolSnapshot]:
        if not addresses:
            return []

        pools_by_address = {
            self.pool_address(token).lower(): token for token in self.tokens
        }

        snapshots = []
        for candidate in addresses:
            if not address.validate(candidate):
                continue

            token = pools_by_address.get(candidate.lower())
            if token is None:
                continue

            snapshots.append(self._snapshot(self._build_pool(token)))

        self.listener(SnapshotsLoaded(self.chain_name, len(snapshots)))
        return snapshots
