"""Application configuration helpers."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _parse_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _build_database_url(env: Mapping[str, str]) -> str:
    url = URL.create(
        "postgresql+psycopg",
        username=env.get("DB_USER", "postgres"),
        password=env.get("DB_PASSWORD", "postgres"),
        host=env.get("DB_HOST", "localhost"),
        port=_parse_int(env.get("DB_PORT"), 5432),
        database=env.get("DB_NAME", "project_management"),
    )
    return url.render_as_string(hide_password=False)


@dataclass(frozen=True)
class Config:
    """Central application configuration."""

    database_url: str
    app_port: int = 3030
    pool_size: int = 10
    max_overflow: int = 90
    pool_timeout: int = 30
    pool_recycle: int = 3600
    sqlalchemy_echo: bool = False
    database_ssl_mode: Optional[str] = "disable"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    jwt_secret: str = "secret"
    jwt_expire_minutes: int = 60
    jwt_refresh_ttl: str = "24h"


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a :class:`Config` from ``environ`` (defaults to ``os.environ``).

    A ``.env`` file in the working directory is loaded first when reading
    from the process environment. Values already set in the environment
    take precedence over the file.
    """

    if environ is None:
        if not load_dotenv():
            logger.info("No .env file found")
        environ = os.environ
    env = environ

    return Config(
        database_url=env.get("DATABASE_URL") or _build_database_url(env),
        app_port=_parse_int(env.get("APP_PORT"), 3030),
        pool_size=_parse_int(env.get("DB_POOL_SIZE"), 10),
        max_overflow=_parse_int(env.get("DB_MAX_OVERFLOW"), 90),
        pool_timeout=_parse_int(env.get("DB_POOL_TIMEOUT"), 30),
        pool_recycle=_parse_int(env.get("DB_POOL_RECYCLE"), 3600),
        sqlalchemy_echo=_parse_bool(env.get("SQLALCHEMY_ECHO")),
        database_ssl_mode=env.get("DB_SSL_MODE", "disable") or None,
        cors_origins=_parse_origins(env.get("CORS_ORIGINS")),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        jwt_secret=env.get("JWT_SECRET", "secret"),
        jwt_expire_minutes=_parse_int(env.get("JWT_EXPIRE_MINUTES"), 60),
        jwt_refresh_ttl=env.get("JWT_REFRESH_TOKEN", "24h"),
    )


__all__ = ["Config", "load_config"]
