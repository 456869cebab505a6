"""Kernel services - flush-only writers."""

from billing_kernel.services.base import BaseService
from billing_kernel.services.fee_adjustment_service import (
    UNCHECKED,
    FeeAdjustmentService,
)

__all__ = ["BaseService", "FeeAdjustmentService", "UNCHECKED"]
