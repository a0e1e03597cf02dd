from dataclasses import dataclass, field


@dataclass
class StableConfig:
    symbol: str
    contract: str


@dataclass
class ChainConfig:
    chain_id: int
    name: str
    rpc_url: str
    multicall3_address: str
    stables: list[StableConfig]
    # static discovery fallback
    known_pools: list[str] = field(default_factory=list)

    @property
    def stable(self) -> StableConfig:
        return self.stables[0]
