"""
Configuration Schema (``inventory_config.schema``).

Frozen dataclasses describing the effective settings.  Instances are built
only by ``inventory_config.loader``; every field has a default taken from
the packaged ``defaults.yaml``.

Invariants enforced
-------------------
* All dataclasses are ``frozen=True`` -- settings are immutable once loaded.
* ``__post_init__`` rejects values the ledger cannot run with, raising
  ``ConfigError`` with the offending section and key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field


class ConfigError(ValueError):
    """Configuration file is malformed or holds an invalid value."""

    def __init__(self, section: str, key: str | None, reason: str):
        self.section = section
        self.key = key
        self.reason = reason
        where = f"{section}.{key}" if key else section
        super().__init__(f"Invalid configuration {where}: {reason}")


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _require_non_negative(section: str, key: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigError(section, key, f"must be a non-negative number, got {value!r}")


def _require_positive_int(section: str, key: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(section, key, f"must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class DatabaseSettings:
    """Store connection and pooling."""

    url: str = "sqlite:///inventory.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    pool_pre_ping: bool = True
    # Seconds a SQLite writer waits for the database lock
    busy_timeout: float = 30

    def __post_init__(self) -> None:
        if not isinstance(self.url, str) or not self.url:
            raise ConfigError("database", "url", "must be a non-empty string")
        for key in ("pool_size", "max_overflow", "pool_timeout", "pool_recycle", "busy_timeout"):
            _require_non_negative("database", key, getattr(self, key))

    @property
    def dialect(self) -> str:
        return self.url.split(":", 1)[0].split("+", 1)[0]


@dataclass(frozen=True)
class LedgerSettings:
    """Ledger engine defaults."""

    default_min_stock_level: int = 5
    recent_limit: int = 50
    max_storage_retries: int = 3
    retry_backoff_seconds: float = 0.05

    def __post_init__(self) -> None:
        value = self.default_min_stock_level
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(
                "ledger", "default_min_stock_level",
                f"must be an integer of zero or more, got {value!r}",
            )
        _require_positive_int("ledger", "recent_limit", self.recent_limit)
        _require_positive_int("ledger", "max_storage_retries", self.max_storage_retries)
        _require_non_negative("ledger", "retry_backoff_seconds", self.retry_backoff_seconds)


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"

    def __post_init__(self) -> None:
        if not isinstance(self.level, str) or self.level.upper() not in _LOG_LEVELS:
            raise ConfigError("logging", "level", f"unknown log level {self.level!r}")

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level.upper())


@dataclass(frozen=True)
class InventoryConfig:
    """Effective settings for one ledger deployment."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source: str = "<defaults>"
    checksum: str = ""
