from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DATABASE_URL: SQLAlchemy connection string. Default 'sqlite:///./data/tasks.db'
    - DATABASE_ECHO: 'true' to log every SQL statement (default: false)
    - DATABASE_CREATE_TABLES: 'false' to skip creating tables at start-up (default: true)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: level name for the task_api loggers (default: INFO)
    """

    database_url: str = "sqlite:///./data/tasks.db"
    database_echo: bool = False
    create_tables: bool = True
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
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


def normalize_database_url(url: str) -> str:
    """
    Point bare Postgres URLs at the psycopg (v3) driver.

    Hosted Postgres providers hand out 'postgres://' or 'postgresql://' URLs,
    which SQLAlchemy would otherwise map to psycopg2 (or reject outright).
    """
    url = url.strip()
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    database_url = normalize_database_url(_get_env("DATABASE_URL", Settings.database_url))
    database_echo = _parse_bool(_get_env("DATABASE_ECHO", "false"), False)
    create_tables = _parse_bool(_get_env("DATABASE_CREATE_TABLES", "true"), True)

    cors_raw = _get_env("CORS_ALLOW_ORIGINS", "*")
    origins = _parse_origins(cors_raw)

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        database_url=database_url,
        database_echo=database_echo,
        create_tables=create_tables,
        cors_allow_origins=origins,
        log_level=log_level,
    )
