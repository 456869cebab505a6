"""
Fee Adjustment Configuration Schema.

Whether fee and write-off edits are allowed once the appointment's
invoice is PAID or VOID, and the currency edits are calculated in.
"""

from dataclasses import dataclass
from typing import Self

from billing_config.schema import BillingConfigurationSet
from billing_kernel.db.types import validate_currency
from billing_kernel.logging_config import get_logger

logger = get_logger("modules.billing.config")


@dataclass
class FeeAdjustmentConfig:
    allow_edits_on_terminal_invoices: bool = False
    currency: str = "USD"

    def __post_init__(self):
        if not isinstance(self.allow_edits_on_terminal_invoices, bool):
            raise ValueError("allow_edits_on_terminal_invoices must be a boolean")
        self.currency = validate_currency(self.currency)

        logger.debug(
            "fee_adjustment_config_initialized",
            extra={
                "allow_edits_on_terminal_invoices": self.allow_edits_on_terminal_invoices,
                "currency": self.currency,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "fee_adjustment_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_config_set(cls, config_set: BillingConfigurationSet) -> Self:
        return cls.from_dict({"currency": config_set.currency, **config_set.fee_adjustment})
