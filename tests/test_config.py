from config import get_settings


def test_defaults(monkeypatch):
    for name in (
        "MULTICALL_CHUNK_SIZE",
        "MULTICALL_CONCURRENCY",
        "RPC_TIMEOUT_SECONDS",
        "USE_SIMULATED_ADAPTERS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.MULTICALL_CHUNK_SIZE == 50
    assert settings.MULTICALL_CONCURRENCY == 1
    assert settings.RPC_TIMEOUT_SECONDS == 15.0
    assert settings.USE_SIMULATED_ADAPTERS is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("MULTICALL_CHUNK_SIZE", "25")
    monkeypatch.setenv("USE_SIMULATED_ADAPTERS", "yes")
    monkeypatch.setenv("RPC_URL_POLYGON", "http://polygon.internal")

    settings = get_settings()

    assert settings.MULTICALL_CHUNK_SIZE == 25
    assert settings.USE_SIMULATED_ADAPTERS is True
    assert settings.rpc_url_for("polygon", "http://default") == "http://polygon.internal"
    assert settings.rpc_url_for("ethereum-sepolia", "http://default") == "http://default"
