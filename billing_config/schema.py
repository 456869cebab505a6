"""
Configuration Schema (``billing_config.schema``).

Frozen dataclass form of one YAML configuration set.  Module sections
(``analytics``, ``fee_adjustment``) stay plain dicts here; each module
parses its own section into its config dataclass via ``from_dict()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BillingConfigurationSet:
    """
    Attributes:
        config_id: Unique identifier (e.g., "practice-default").
        version: Configuration version number.
        checksum: SHA-256 of the canonical serialization.
        currency: ISO 4217 practice currency.
        display_decimal_places: Display rounding precision for money.
        analytics: Raw ``analytics`` section.
        fee_adjustment: Raw ``fee_adjustment`` section.
    """

    config_id: str
    version: int
    checksum: str
    currency: str = "USD"
    display_decimal_places: int = 2
    analytics: dict[str, Any] = field(default_factory=dict)
    fee_adjustment: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.config_id
