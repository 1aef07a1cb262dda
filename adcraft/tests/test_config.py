import pytest

from adcraft.config import Config

CONFIG_VARS = (
    "STORE_BACKEND", "STORE_PATH", "PRODUCTS_KEY", "AVATARS_KEY",
    "PRODUCT_AVATAR_WEBHOOK_URL", "MAX_RETRIES", "RETRY_BACKOFF",
    "SENTRY_DSN", "DEBUG", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_defaults(clean_env):
    """Defaults when nothing is set in the environment."""
    cfg = Config()

    assert cfg.STORE_BACKEND == "file"
    assert cfg.PRODUCTS_KEY == "products"
    assert cfg.AVATARS_KEY == "avatars"
    assert cfg.MAX_RETRIES == 3
    assert cfg.RETRY_BACKOFF == 1.5
    assert cfg.DEBUG is False
    assert cfg.LOG_LEVEL == "INFO"
    assert not cfg.has_sentry
    assert not cfg.has_webhook


def test_config_environment(clean_env):
    clean_env.setenv("STORE_BACKEND", "Redis")
    clean_env.setenv("PRODUCTS_KEY", "adcraft_products")
    clean_env.setenv("PRODUCT_AVATAR_WEBHOOK_URL", "https://hooks.example.com/x")
    clean_env.setenv("MAX_RETRIES", "5")
    clean_env.setenv("DEBUG", "TRUE")

    cfg = Config()

    assert cfg.STORE_BACKEND == "redis"
    assert cfg.PRODUCTS_KEY == "adcraft_products"
    assert cfg.MAX_RETRIES == 5
    assert cfg.DEBUG is True
    assert cfg.has_webhook


def test_data_layer_uses_configured_keys(clean_env):
    from adcraft.data import DataLayer
    from adcraft.storage import MemoryStorage

    clean_env.setenv("STORE_BACKEND", "memory")
    clean_env.setenv("AVATARS_KEY", "adcraft_avatars")

    layer = DataLayer.from_config(Config())
    assert isinstance(layer.backend, MemoryStorage)
    assert layer.avatars.key == "adcraft_avatars"
