import asyncio
import logging
from clients.evm.adapters import ChainAdapter
from clients.evm.dto import Pool, PoolSnapshot


module_logger = logging.getLogger(__name__)


class PoolScanner:
    """Runs the same retrieval against several chains at once.

    Results are keyed by chain name. An adapter that raises contributes an
    empty list instead of failing the scan.
    """

    def __init__(self, adapters: list[ChainAdapter]):
        self.adapters = adapters

    def _collect(self, results: list, operation: str) -> dict[str, list]:
        collected = {}

        for adapter, result in zip(self.adapters, results):
            chain_name = adapter.get_chain_name()

            if isinstance(result, Exception):
                module_logger.error(f"[{chain_name}] {operation} failed: {result!r}")
                result = []

            collected[chain_name] = result

        return collected

    async def scan_top_pools(self, limit: int) -> dict[str, list[Pool]]:
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        results = await asyncio.gather(
            *[adapter.get_top_pools(limit) for adapter in self.adapters],
            return_exceptions=True,
        )
        return self._collect(results, "get_top_pools")

    async def scan_snapshots(self, addresses: dict[str, list[str]]) -> dict[str, list[PoolSnapshot]]:
        results = await asyncio.gather(
            *[
                adapter.get_batch_pool_data(addresses.get(adapter.get_chain_name(), []))
                for adapter in self.adapters
            ],
            return_exceptions=True,
        )
        return self._collect(results, "get_batch_pool_data")

    async def close(self):
        await asyncio.gather(
            *[adapter.close() for adapter in self.adapters],
            return_exceptions=True,
        )
