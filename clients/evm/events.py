import logging
from dataclasses import dataclass
from typing import Callable


module_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkFailed:
    chain: str
    chunk_index: int
    size: int
    reason: str


@dataclass(frozen=True)
class ProviderFailed:
    chain: str
    provider: str
    reason: str


@dataclass(frozen=True)
class AddressesRejected:
    chain: str
    count: int


@dataclass(frozen=True)
class PoolsLoaded:
    chain: str
    count: int


@dataclass(frozen=True)
class SnapshotsLoaded:
    chain: str
    count: int


Event = ChunkFailed | ProviderFailed | AddressesRejected | PoolsLoaded | SnapshotsLoaded
EventListener = Callable[[Event], None]


def log_event(event: Event) -> None:
    if isinstance(event, ChunkFailed):
        module_logger.warning(
            f"[{event.chain}] Multicall chunk {event.chunk_index} ({event.size} addresses) failed: {event.reason}"
        )
    elif isinstance(event, ProviderFailed):
        module_logger.warning(f"[{event.chain}] Discovery provider {event.provider} failed: {event.reason}")
    elif isinstance(event, AddressesRejected):
        module_logger.info(f"[{event.chain}] Rejected {event.count} malformed addresses")
    elif isinstance(event, PoolsLoaded):
        module_logger.info(f"[{event.chain}] Loaded {event.count} pools")
    elif isinstance(event, SnapshotsLoaded):
        module_logger.info(f"[{event.chain}] Loaded {event.count} pool snapshots")
