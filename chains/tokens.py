from dataclasses import dataclass


@dataclass(frozen=True)
class TokenMetadata:
    symbol: str
    name: str
    address: str
    decimals: int


SUPPORTED_TOKENS: dict[str, list[TokenMetadata]] = {
    "ethereum": [
        TokenMetadata("WETH", "Wrapped Ether", "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2", 18),
        TokenMetadata("WBTC", "Wrapped Bitcoin", "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599", 8),
        TokenMetadata("USDC", "USD Coin", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", 6),
        TokenMetadata("LINK", "Chainlink", "0x514910771af9ca656af840dff83e8264ecf986ca", 18),
        TokenMetadata("AAVE", "Aave", "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9", 18),
    ],
    "polygon": [
        TokenMetadata("WMATIC", "Wrapped Matic", "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270", 18),
        TokenMetadata("USDC", "USD Coin", "0x2791bca1f2de4661ed88a30c99a7a9449aa84174", 6),
        TokenMetadata("WETH", "Wrapped Ether", "0x7ceb23fd6bc0ad59e62c253991a60552684b29c6", 18),
    ],
}


def tokens_for(chain_name: str) -> list[TokenMetadata]:
    return SUPPORTED_TOKENS.get(chain_name.lower(), [])


def find_token(chain_name: str, address: str) -> TokenMetadata | None:
    address = address.lower()
    for token in tokens_for(chain_name):
        if token.address == address:
            return token
    return None
