from abc import ABC, abstractmethod
from clients.evm.dto import Pool, PoolSnapshot


class ChainAdapter(ABC):
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        pass

    @abstractmethod
    def get_chain_name(self) -> str:
        pass

    @abstractmethod
    def get_stable_token_address(self) -> str:
        pass

    @abstractmethod
    async def get_top_pools(self, limit: int) -> list[Pool]:
        pass

    @abstractmethod
    async def get_batch_pool_data(self, addresses: list[str]) -> list[PoolSnapshot]:
        pass
