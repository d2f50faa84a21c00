"""Tests for settings."""
from policy_adapter.config import Settings


def test_defaults(monkeypatch):
    """Test defaults match the conventional rule collection."""
    for key in ("STORE_BACKEND", "MONGO_DATABASE", "MONGO_COLLECTION", "SAVE_STRATEGY", "MONGO_SERVERS"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings(_env_file=None)

    assert settings.STORE_BACKEND == "mongo"
    assert settings.MONGO_DATABASE == "casbin"
    assert settings.MONGO_COLLECTION == "casbin_rules"
    assert settings.SAVE_STRATEGY == "replace"
    assert settings.server_list() == []


def test_environment_overrides(monkeypatch):
    """Test settings are read from the environment."""
    monkeypatch.setenv("MONGO_SERVERS", "a:1,b:2,")
    monkeypatch.setenv("SAVE_STRATEGY", "staged")
    monkeypatch.setenv("MONGO_OPERATION_TIMEOUT_S", "1.5")

    settings = Settings(_env_file=None)

    assert settings.server_list() == ["a:1", "b:2"]
    assert settings.SAVE_STRATEGY == "staged"
    assert settings.MONGO_OPERATION_TIMEOUT_S == 1.5
