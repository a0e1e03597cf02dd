from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    symbol: str
    name: str
    address: str
    decimals: int


@dataclass(frozen=True)
class Pool:
    address: str
    token0: Token
    token1: Token
    reserve0: int
    reserve1: int
    fee_tier: int


@dataclass(frozen=True)
class Call:
    target: str
    call_data: bytes


@dataclass(frozen=True)
class CallResult:
    success: bool
    return_data: bytes


@dataclass(frozen=True)
class PoolSnapshot:
    address: str
    sqrt_price_x96: int
    liquidity: int
