"""
Configuration Loader (``billing_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into a frozen
``BillingConfigurationSet``.  Runtime callers go through
``billing_config.get_active_config()``, never through this module.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError``.
* Wrong value types or an unknown currency  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from billing_config.schema import BillingConfigurationSet
from billing_kernel.db.types import validate_currency

_SECTIONS = ("analytics", "fee_adjustment")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load one YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_configuration_set(data: dict[str, Any]) -> BillingConfigurationSet:
    config_id = data["config_id"]
    if not isinstance(config_id, str) or not config_id.strip():
        raise ValueError(f"config_id must be a non-empty string, got {config_id!r}")

    version = data.get("version", 1)
    if not isinstance(version, int) or version < 1:
        raise ValueError(f"version must be a positive integer, got {version!r}")

    places = data.get("display_decimal_places", 2)
    if not isinstance(places, int) or not 0 <= places <= 9:
        raise ValueError(f"display_decimal_places must be 0..9, got {places!r}")

    sections: dict[str, dict[str, Any]] = {}
    for name in _SECTIONS:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"section {name!r} must be a mapping")
        sections[name] = dict(section)

    return BillingConfigurationSet(
        config_id=config_id,
        version=version,
        checksum=compute_checksum(data),
        currency=validate_currency(data.get("currency", "USD")),
        display_decimal_places=places,
        analytics=sections["analytics"],
        fee_adjustment=sections["fee_adjustment"],
    )


def load_configuration_set(path: Path) -> BillingConfigurationSet:
    return parse_configuration_set(load_yaml_file(path))
