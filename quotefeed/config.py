"""Application configuration helpers."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration for the quotes feed service."""

    app_name: str
    storage_backend: str
    db_config: Dict[str, Any] = field(default_factory=dict)
    product_fetch_timeout: float = 10.0
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = ()

    @property
    def uses_postgres(self) -> bool:
        return self.storage_backend == "postgres"


def _to_int(value: Optional[str], *, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected integer value, got {value!r}") from exc


def _to_float(value: Optional[str], *, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected float value, got {value!r}") from exc


def _parse_connect_timeout(value: Optional[str]) -> int:
    timeout = _to_float(value, default=5.0)
    if timeout < 0:
        raise ValueError("DB_CONNECT_TIMEOUT must be non-negative")
    return int(math.ceil(timeout))


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def load_app_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Load :class:`AppConfig` from environment variables."""

    env_mapping = os.environ if env is None else env

    storage_backend = (env_mapping.get("STORAGE_BACKEND") or "memory").strip().lower() or "memory"
    if storage_backend not in {"memory", "postgres"}:
        raise ValueError(f"Unsupported STORAGE_BACKEND {storage_backend!r}")

    db_config = {
        "host": env_mapping.get("DB_HOST", "127.0.0.1"),
        "port": _to_int(env_mapping.get("DB_PORT"), default=5432),
        "dbname": env_mapping.get("DB_NAME", "quotefeed"),
        "user": env_mapping.get("DB_USER", "quotefeed"),
        "password": env_mapping.get("DB_PASSWORD", "quotefeed"),
        "connect_timeout": _parse_connect_timeout(env_mapping.get("DB_CONNECT_TIMEOUT")),
    }

    product_fetch_timeout = max(0.1, _to_float(env_mapping.get("PRODUCT_FETCH_TIMEOUT"), default=10.0))
    log_level = (env_mapping.get("LOG_LEVEL") or "INFO").strip().upper()

    return AppConfig(
        app_name=env_mapping.get("APP_NAME", "Quotes Feed API"),
        storage_backend=storage_backend,
        db_config=db_config,
        product_fetch_timeout=product_fetch_timeout,
        log_level=log_level,
        cors_origins=_split_csv(env_mapping.get("CORS_ORIGINS", "http://localhost:5173")),
    )
