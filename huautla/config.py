"""
huautla settings: the postgres connection, pool sizing and merge checks.

Everything comes from the environment and is kept as the raw string until
it is used, so importing huautla never fails on a bad value. validate()
(called by init_pool) and the typed properties raise ConfigError instead.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import TypeVar

from huautla.errors import ConfigError

T = TypeVar("T")


def _flag(name: str) -> bool:
    return os.environ.get(name, "").lower() == "true"


def _parse(kind: Callable[[str], T], name: str, raw: str) -> T:
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be {kind.__name__}, got {raw!r}") from e


class Settings:
    """Connection, pool and merge settings, as raw environment strings."""

    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    PGHOST: str = os.environ.get("PGHOST", "")
    PGPORT: str = os.environ.get("PGPORT", "5432")
    PGUSER: str = os.environ.get("PGUSER", "")
    PGPASSWORD: str = os.environ.get("PGPASSWORD", "")
    PGSSLMODE: str = os.environ.get("PGSSLMODE", "disable")
    PGDATABASE: str = os.environ.get("PGDATABASE", "huautla")

    # Pool
    DB_POOL_MIN: str = os.environ.get("DB_POOL_MIN", "2")
    DB_POOL_MAX: str = os.environ.get("DB_POOL_MAX", "20")
    DB_COMMAND_TIMEOUT: str = os.environ.get("DB_COMMAND_TIMEOUT", "60")

    # Raise on misordered join rows instead of silently fragmenting groups.
    # Debug aid only; leave off in production.
    STRICT_ROW_ORDER: bool = _flag("HUAUTLA_STRICT_ROW_ORDER")

    @property
    def port(self) -> int:
        return _parse(int, "PGPORT", self.PGPORT)

    @property
    def pool_min(self) -> int:
        return _parse(int, "DB_POOL_MIN", self.DB_POOL_MIN)

    @property
    def pool_max(self) -> int:
        return _parse(int, "DB_POOL_MAX", self.DB_POOL_MAX)

    @property
    def command_timeout(self) -> float:
        return _parse(float, "DB_COMMAND_TIMEOUT", self.DB_COMMAND_TIMEOUT)

    @property
    def dsn(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.PGUSER}:{self.PGPASSWORD}@{self.PGHOST}:{self.port}"
            f"/{self.PGDATABASE}?sslmode={self.PGSSLMODE}"
        )

    def validate(self) -> None:
        """
        Check that a pool can be opened with these settings.

        An explicit DATABASE_URL wins over the PG* pieces; otherwise host,
        user, password and port must all be present. Pool sizes and the
        command timeout must parse either way.

        Raises:
            ConfigError: naming the first missing or malformed setting
        """
        if not self.DATABASE_URL:
            if not self.PGHOST:
                raise ConfigError("postgres connection needs hostname attribute")
            if not self.PGUSER:
                raise ConfigError("postgres connection needs username attribute")
            if not self.PGPASSWORD:
                raise ConfigError("postgres connection needs password attribute")
            if not self.PGPORT:
                raise ConfigError("postgres connection needs port attribute")
            if self.port <= 0:
                raise ConfigError(f"PGPORT must be positive, got {self.port}")
        if self.pool_min > self.pool_max:
            raise ConfigError(f"DB_POOL_MIN ({self.pool_min}) is larger than DB_POOL_MAX ({self.pool_max})")
        if self.command_timeout <= 0:
            raise ConfigError(f"DB_COMMAND_TIMEOUT must be positive, got {self.command_timeout}")


# Shared by db.py and alembic/env.py
settings = Settings()
