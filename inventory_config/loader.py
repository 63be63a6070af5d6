"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Reads YAML files and parses them into ``inventory_config.schema``
dataclasses.  Callers use ``inventory_config.get_active_config()``; this
module is its implementation.

Invariants enforced
-------------------
* Only ``yaml.safe_load`` is used.
* The packaged ``defaults.yaml`` is always applied first; an override file
  replaces individual keys within a section, never whole sections.
* Unknown sections or keys are rejected rather than ignored.
* ``compute_checksum`` is deterministic for equal settings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong shape or invalid value  -> ``ConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    ConfigError,
    DatabaseSettings,
    InventoryConfig,
    LedgerSettings,
    LoggingSettings,
)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_SECTIONS = {
    "database": DatabaseSettings,
    "ledger": LedgerSettings,
    "logging": LoggingSettings,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML file and return its top-level mapping.

    An empty file yields an empty dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file is not valid YAML.
        ConfigError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("<root>", None, f"{path} must contain a mapping")
    return data


def merge_sections(
    base: dict[str, Any], override: dict[str, Any]
) -> dict[str, dict[str, Any]]:
    """Key-by-key overlay of ``override`` onto ``base`` for each section."""
    unknown = sorted(set(override) - set(_SECTIONS))
    if unknown:
        raise ConfigError(unknown[0], None, "unknown configuration section")

    merged: dict[str, dict[str, Any]] = {}
    for section in _SECTIONS:
        values = dict(base.get(section) or {})
        extra = override.get(section)
        if extra is not None:
            if not isinstance(extra, dict):
                raise ConfigError(section, None, "must be a mapping")
            values.update(extra)
        merged[section] = values
    return merged


def parse_config(data: dict[str, dict[str, Any]], source: str) -> InventoryConfig:
    """Build an InventoryConfig from merged section mappings."""
    parsed: dict[str, Any] = {}
    for section, settings_cls in _SECTIONS.items():
        values = data.get(section, {})
        allowed = set(settings_cls.__dataclass_fields__)
        unknown = sorted(set(values) - allowed)
        if unknown:
            raise ConfigError(section, unknown[0], "unknown setting")
        parsed[section] = settings_cls(**values)

    return InventoryConfig(
        database=parsed["database"],
        ledger=parsed["ledger"],
        logging=parsed["logging"],
        source=source,
        checksum=compute_checksum(
            {section: asdict(settings) for section, settings in parsed.items()}
        ),
    )


def load_config(path: Path | None = None) -> InventoryConfig:
    """Defaults, overlaid with ``path`` when given."""
    defaults = load_yaml_file(DEFAULTS_PATH)
    override = load_yaml_file(path) if path is not None else {}
    source = str(path) if path is not None else str(DEFAULTS_PATH)
    return parse_config(merge_sections(defaults, override), source)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
