from __future__ import annotations

import pytest

from quotefeed.config import load_app_config


def test_defaults_use_memory_storage():
    config = load_app_config({})

    assert config.storage_backend == "memory"
    assert config.uses_postgres is False
    assert config.app_name == "Quotes Feed API"
    assert config.product_fetch_timeout == 10.0
    assert config.log_level == "INFO"
    assert config.cors_origins == ("http://localhost:5173",)
    assert config.db_config["port"] == 5432
    assert config.db_config["connect_timeout"] == 5


def test_postgres_settings_are_parsed():
    config = load_app_config(
        {
            "STORAGE_BACKEND": "Postgres",
            "DB_HOST": "db",
            "DB_PORT": "6543",
            "DB_NAME": "quotes",
            "DB_CONNECT_TIMEOUT": "2.2",
            "PRODUCT_FETCH_TIMEOUT": "0",
            "LOG_LEVEL": "debug",
            "CORS_ORIGINS": "https://a.example, ,https://b.example",
        }
    )

    assert config.uses_postgres is True
    assert config.db_config["host"] == "db"
    assert config.db_config["port"] == 6543
    assert config.db_config["dbname"] == "quotes"
    assert config.db_config["connect_timeout"] == 3
    assert config.product_fetch_timeout == 0.1
    assert config.log_level == "DEBUG"
    assert config.cors_origins == ("https://a.example", "https://b.example")


@pytest.mark.parametrize(
    "env",
    [
        {"STORAGE_BACKEND": "sqlite"},
        {"DB_PORT": "not-a-port"},
        {"DB_CONNECT_TIMEOUT": "-1"},
        {"PRODUCT_FETCH_TIMEOUT": "soon"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        load_app_config(env)
