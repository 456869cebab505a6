"""
billing_config -- single public entrypoint for billing configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains
    configuration.  No other component reads configuration files.

Architecture position:
    Configuration -- sits above ``billing_kernel`` and below
    ``billing_modules``.  The kernel never imports from ``billing_config``.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with the requested name.
    - ``ValueError`` / ``KeyError`` -- schema validation failures.

Audit relevance:
    Every successful load emits a ``BILLING_CONFIG_TRACE`` record with the
    config id, version and checksum, tying report figures to the exact
    configuration that produced them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from billing_config.loader import load_configuration_set
from billing_config.schema import BillingConfigurationSet

_logger = logging.getLogger("billing_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(
    config_dir: Path | None = None,
    name: str = "default",
) -> BillingConfigurationSet:
    """Load and validate ``<config_dir>/<name>.yaml``.

    Args:
        config_dir: Override path to the configuration sets directory.
            Defaults to billing_config/sets/.
        name: Configuration set name (file stem).

    Raises:
        FileNotFoundError: If the set does not exist.
        ValueError: If validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = Path(sets_dir) / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"No configuration set {name!r} in {sets_dir}")

    config = load_configuration_set(path)

    _logger.info(
        "BILLING_CONFIG_TRACE",
        extra={
            "trace_type": "BILLING_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "currency": config.currency,
        },
    )
    return config


__all__ = ["BillingConfigurationSet", "get_active_config"]
