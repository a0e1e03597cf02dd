import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str = "false") -> bool:
    return _env(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    MULTICALL_CHUNK_SIZE: int
    MULTICALL_CONCURRENCY: int
    RPC_TIMEOUT_SECONDS: float
    DISCOVERY_TIMEOUT_SECONDS: float
    DISCOVERY_API_BASE: str
    USE_SIMULATED_ADAPTERS: bool

    def rpc_url_for(self, chain_name: str, default: str) -> str:
        key = "RPC_URL_" + chain_name.upper().replace("-", "_")
        return _env(key) or default


def get_settings() -> Settings:
    return Settings(
        MULTICALL_CHUNK_SIZE=int(_env("MULTICALL_CHUNK_SIZE", "50")),
        MULTICALL_CONCURRENCY=int(_env("MULTICALL_CONCURRENCY", "1")),
        RPC_TIMEOUT_SECONDS=float(_env("RPC_TIMEOUT_SECONDS", "15")),
        DISCOVERY_TIMEOUT_SECONDS=float(_env("DISCOVERY_TIMEOUT_SECONDS", "10")),
        DISCOVERY_API_BASE=_env("DISCOVERY_API_BASE", "https://api.dexscreener.com/latest/dex"),
        USE_SIMULATED_ADAPTERS=_bool("USE_SIMULATED_ADAPTERS"),
    )


settings = get_settings()
