from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

_ENVIRONMENTS = {"development", "staging", "production"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TMS_ENV: 'development' (default), 'staging' or 'production'
    - TMS_PORT: port the API server listens on. Default 4000
    - TMS_DB_PATH: path to the sqlite db file. Default './data/tms.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name. Default 'INFO'
    """

    env: str
    port: int
    db_path: str
    cors_allow_origins: List[str]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_env_name(value: str) -> str:
    env = value.strip().lower()
    if env not in _ENVIRONMENTS:
        return "development"
    return env


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        env=_parse_env_name(_get_env("TMS_ENV", "development")),
        port=_parse_int(_get_env("TMS_PORT", "4000"), 4000),
        db_path=_get_env("TMS_DB_PATH", "./data/tms.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
