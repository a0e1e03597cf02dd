from clients.evm.adapters.base import ChainAdapter
from clients.evm.adapters.live import LiveChainAdapter
from clients.evm.adapters.simulated import SimulatedChainAdapter


__all__ = ["ChainAdapter", "LiveChainAdapter", "SimulatedChainAdapter"]
