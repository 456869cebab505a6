"""
Values -- Immutable, self-validating monetary value objects.

Responsibility:
    Provides Currency and Money, the exact fixed-point primitives every
    charge, payment and balance figure is computed with.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Amounts are Decimal, never float.  A float passed in is rejected.
    - Arithmetic never mixes currencies silently.
    - An absent (None) amount is zero when lifted with from_nullable().
    - Rounding is explicit (round()), half-up, and only for display.

Failure modes:
    - TypeError on float amounts.
    - ValueError on unparseable amounts or unknown currency codes.
    - CurrencyMismatchError when arithmetic mixes currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable

from billing_kernel.db.types import DISPLAY_DECIMAL_PLACES, round_money, validate_currency
from billing_kernel.exceptions import CurrencyMismatchError

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class Currency:
    """ISO 4217 currency code, uppercased and validated on construction."""

    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", validate_currency(self.code))

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


def _to_decimal(value: Decimal | str | int) -> Decimal:
    if isinstance(value, float):
        raise TypeError("Money amounts must not be float; pass a Decimal or str")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs an exact Decimal amount with its Currency.  Comparisons and
        arithmetic are exact; nothing is rounded unless round() is called.

    Guarantees:
        - Immutable and hashable.
        - amount is always a Decimal.
        - Same-currency constraint on every binary operation.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _to_decimal(self.amount))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """Factory method for creating Money."""
        return cls(amount=_to_decimal(amount), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=_ZERO, currency=currency)

    @classmethod
    def from_nullable(
        cls,
        amount: Decimal | str | int | None,
        currency: str | Currency,
    ) -> Money:
        """Lift a nullable stored amount; None is zero."""
        if amount is None:
            return cls.zero(currency)
        return cls.of(amount, currency)

    @classmethod
    def sum(cls, values: Iterable[Money], currency: str | Currency) -> Money:
        """Sum Money values starting from zero in ``currency``."""
        total = cls.zero(currency)
        for value in values:
            total = total + value
        return total

    @property
    def is_zero(self) -> bool:
        return self.amount == _ZERO

    @property
    def is_positive(self) -> bool:
        return self.amount > _ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < _ZERO

    def round(self, decimal_places: int = DISPLAY_DECIMAL_PLACES) -> Money:
        """Round half-up for display.  Returns a new Money."""
        return Money(round_money(self.amount, decimal_places), self.currency)

    def floor_zero(self) -> Money:
        """max(self, 0) -- the display clamp for unpaid/uninvoiced."""
        if self.amount < _ZERO:
            return Money.zero(self.currency)
        return self

    def _check(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, float) or not isinstance(factor, (Decimal, int, str)):
            return NotImplemented
        return Money(self.amount * _to_decimal(factor), self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"
