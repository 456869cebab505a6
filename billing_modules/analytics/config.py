"""
Analytics Configuration Schema.

Defaults for report pagination, display rounding and slow-query logging.
Values are loaded from the active configuration set at runtime.
"""

from dataclasses import dataclass
from typing import Self

from billing_config.schema import BillingConfigurationSet
from billing_kernel.db.types import validate_currency
from billing_kernel.logging_config import get_logger

logger = get_logger("modules.analytics.config")


@dataclass
class AnalyticsConfig:
    """
    Configuration schema for the analytics reports.

        config = AnalyticsConfig(default_page_size=25, max_page_size=200)
    """

    currency: str = "USD"
    display_decimal_places: int = 2

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Queries slower than this log a *_slow_query warning
    slow_query_threshold_ms: int = 1000

    def __post_init__(self):
        self.currency = validate_currency(self.currency)
        if not 0 <= self.display_decimal_places <= 9:
            raise ValueError("display_decimal_places must be between 0 and 9")
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be positive")
        if self.max_page_size < self.default_page_size:
            raise ValueError(
                f"max_page_size ({self.max_page_size}) cannot be below "
                f"default_page_size ({self.default_page_size})"
            )
        if self.slow_query_threshold_ms < 0:
            raise ValueError("slow_query_threshold_ms cannot be negative")

        logger.debug(
            "analytics_config_initialized",
            extra={
                "currency": self.currency,
                "default_page_size": self.default_page_size,
                "max_page_size": self.max_page_size,
                "slow_query_threshold_ms": self.slow_query_threshold_ms,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a dict (e.g. the ``analytics`` YAML section)."""
        logger.info(
            "analytics_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_config_set(cls, config_set: BillingConfigurationSet) -> Self:
        return cls.from_dict(
            {
                "currency": config_set.currency,
                "display_decimal_places": config_set.display_decimal_places,
                **config_set.analytics,
            }
        )
