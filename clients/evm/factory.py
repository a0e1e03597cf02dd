from chains.dto import ChainConfig
from clients.evm.adapters import ChainAdapter, LiveChainAdapter, SimulatedChainAdapter
from clients.evm.events import EventListener, log_event
from config import settings


def create_adapter(
    chain_config: ChainConfig,
    simulated: bool | None = None,
    listener: EventListener = log_event,
) -> ChainAdapter:
    if simulated is None:
        simulated = settings.USE_SIMULATED_ADAPTERS

    if simulated:
        return SimulatedChainAdapter(
            chain_config.name,
            stable_symbol=chain_config.stable.symbol,
            listener=listener,
        )

    return LiveChainAdapter(chain_config, listener=listener)


def create_adapters(
    chain_configs: list[ChainConfig],
    simulated: bool | None = None,
    listener: EventListener = log_event,
) -> list[ChainAdapter]:
    return [create_adapter(cfg, simulated, listener) for cfg in chain_configs]
