from chains.dto import ChainConfig


class ChainRegistry:
    def __init__(self, chains: list[ChainConfig]):
        self._by_id: dict[int, ChainConfig] = {cfg.chain_id: cfg for cfg in chains}
        self._by_name: dict[str, ChainConfig] = {cfg.name: cfg for cfg in chains}

    def get(self, chain_id: int) -> ChainConfig | None:
        return self._by_id.get(chain_id)

    def get_by_name(self, name: str) -> ChainConfig | None:
        return self._by_name.get(name.lower())

    def list(self) -> list[ChainConfig]:
        return list(self._by_id.values())
