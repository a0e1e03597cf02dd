import asyncio
import logging
from typing import Any, Protocol
import aiohttp

from clients.evm import address
from clients.evm.errors import ProviderError
from clients.evm.events import AddressesRejected, EventListener, ProviderFailed, log_event
from config import settings


module_logger = logging.getLogger(__name__)


class DiscoveryProvider(Protocol):
    name: str

    async def fetch(self, limit: int) -> list[str]:
        ...


class StaticPoolProvider:
    name = "static"

    def __init__(self, addresses: list[str]):
        self.addresses = list(addresses)

    async def fetch(self, limit: int) -> list[str]:
        return self.addresses[:limit]


class DexScreenerPoolProvider:
    """Top pools for a token from the DexScreener API, by USD liquidity."""

    name = "dexscreener"

    def __init__(
        self,
        chain_name: str,
        token_address: str,
        api_base: str | None = None,
        timeout: float | None = None,
        dex_ids: list[str] | None = None,
    ):
        self.chain_name = chain_name
        self.token_address = token_address
        self.api_base = (api_base or settings.DISCOVERY_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.DISCOVERY_TIMEOUT_SECONDS
        self.dex_ids = dex_ids

    async def _get_json(self, url: str) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as client:
                async with client.get(url) as resp:
                    if resp.status != 200:
                        raise ProviderError(f"HTTP {resp.status} from {url}")
                    return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProviderError(f"Request to {url} failed: {e!r}") from e

    @staticmethod
    def _liquidity_usd(pair: dict) -> float:
        liquidity = pair.get("liquidity")
        if not isinstance(liquidity, dict):
            return 0.0
        try:
            return float(liquidity.get("usd") or 0)
        except (TypeError, ValueError):
            return 0.0

    def _parse_pairs(self, data: Any) -> list[str]:
        if not isinstance(data, dict):
            raise ProviderError(f"Unexpected response type: {type(data).__name__}")

        pairs = data.get("pairs")
        if pairs is None:
            return []
        if not isinstance(pairs, list):
            raise ProviderError("Unexpected 'pairs' field")

        candidates = [
            pair for pair in pairs
            if isinstance(pair, dict)
            and pair.get("chainId") == self.chain_name
            and isinstance(pair.get("pairAddress"), str)
            and (self.dex_ids is None or pair.get("dexId") in self.dex_ids)
        ]
        candidates.sort(key=self._liquidity_usd, reverse=True)

        return [pair["pairAddress"] for pair in candidates]

    async def fetch(self, limit: int) -> list[str]:
        data = await self._get_json(f"{self.api_base}/tokens/{self.token_address}")
        return self._parse_pairs(data)[:limit]


class PoolDiscoverySource:
    """Union of discovery providers, deduplicated case-insensitively."""

    def __init__(
        self,
        providers: list[DiscoveryProvider],
        chain_name: str = "",
        listener: EventListener = log_event,
    ):
        self.providers = providers
        self.chain_name = chain_name
        self.listener = listener

    async def _fetch_provider(self, provider: DiscoveryProvider, limit: int) -> list[str]:
        try:
            result = await provider.fetch(limit)
        except Exception as e:
            self.listener(ProviderFailed(self.chain_name, provider.name, repr(e)))
            return []

        if not isinstance(result, list):
            self.listener(
                ProviderFailed(self.chain_name, provider.name, f"unexpected result {type(result).__name__}")
            )
            return []

        valid = [candidate for candidate in result if address.validate(candidate)]

        rejected = len(result) - len(valid)
        if rejected:
            self.listener(AddressesRejected(self.chain_name, rejected))

        return valid

    async def discover(self, limit: int) -> list[str]:
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        if limit == 0 or not self.providers:
            return []

        results = await asyncio.gather(
            *[self._fetch_provider(provider, limit) for provider in self.providers]
        )

        seen = set()
        addresses = []
        for provider_addresses in results:
            for candidate in provider_addresses:
                key = candidate.lower()
                if key in seen:
                    continue
                seen.add(key)
                addresses.append(candidate)

        module_logger.debug(f"[{self.chain_name}] Discovered {len(addresses)} candidate pools")
        return addresses[:limit]
