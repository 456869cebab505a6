"""
Clock -- Injectable time source.

Responsibility:
    Lets services stamp reports and audit fields without calling
    ``datetime.now()`` directly, so tests can pin the time.

Architecture position:
    Kernel > Domain -- pure functional core.  SystemClock is the one
    sanctioned I/O boundary for time.

Invariants enforced:
    - Times are naive practice-local wall-clock values, the same convention
      the appointment columns use.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta


class Clock(ABC):
    """Abstract clock interface, injected through service constructors."""

    @abstractmethod
    def now(self) -> datetime:
        """Current practice-local time."""
        ...


class SystemClock(Clock):
    """Production clock backed by the host's local time."""

    def now(self) -> datetime:
        return datetime.now()


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    ``now()`` returns the same value until ``advance()`` or ``set_time()``.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(2024, 1, 1, 12, 0, 0)
        self._advance_seconds = 0

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def set_time(self, time: datetime) -> None:
        self._fixed_time = time
        self._advance_seconds = 0

    def advance(self, seconds: int = 1) -> None:
        self._advance_seconds += seconds
