"""
inventory_config -- single public entrypoint for ledger configuration.

Responsibility:
    ``get_active_config()`` is the only way to obtain settings at runtime.
    It applies the packaged defaults, overlays an optional deployment YAML
    file, validates the result and returns a frozen ``InventoryConfig``.

Architecture position:
    Sits above ``inventory_kernel``.  The kernel MUST NEVER import from
    ``inventory_config``; ``inventory_config.bridges`` turns settings into
    kernel objects.

Audit relevance:
    Every successful call logs ``config_loaded`` with the source path,
    database dialect and the checksum of the effective settings.
"""

from __future__ import annotations

from pathlib import Path

from inventory_config.loader import load_config
from inventory_config.schema import (
    ConfigError,
    DatabaseSettings,
    InventoryConfig,
    LedgerSettings,
    LoggingSettings,
)
from inventory_kernel.logging_config import get_logger

_logger = get_logger("config")

__all__ = [
    "ConfigError",
    "DatabaseSettings",
    "InventoryConfig",
    "LedgerSettings",
    "LoggingSettings",
    "get_active_config",
]


def get_active_config(path: Path | str | None = None) -> InventoryConfig:
    """
    Load the effective configuration.

    Args:
        path: Deployment YAML file.  None uses the packaged defaults only.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        ConfigError: unknown section/key or invalid value.
    """
    config = load_config(Path(path) if path is not None else None)
    _logger.info(
        "config_loaded",
        extra={
            "source": config.source,
            "dialect": config.database.dialect,
            "checksum": config.checksum,
        },
    )
    return config
