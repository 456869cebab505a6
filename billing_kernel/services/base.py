"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Common constructor and session contract for every kernel service.
    Services persist through ``session.flush()`` and never commit.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Services flush within the caller's transaction and never commit or
      roll back.  The module service (or test harness) owns the boundary.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from billing_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Accepts a Session from the caller; flush-only."""

    def __init__(self, session: Session):
        self.session = session
