"""
Module: billing_kernel.db.types
Responsibility: Annotated type aliases and the rounding/currency helpers
    shared by models, domain values and engines.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/ and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for money.  Amounts are Decimal, stored as Numeric(38, 9).
    - round_money() is the only rounding function for monetary values;
      it rounds half-up.
    - Currency codes are validated against ISO 4217.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated

from sqlalchemy import Numeric, String

# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Clinician revenue split, e.g. 42.5 (percent)
Percentage = Annotated[Decimal, Numeric(7, 4)]

# ISO 4217 currency code (e.g., "USD")
Currency = Annotated[str, String(3)]

# Short identifier strings (statuses, codes)
ShortCode = Annotated[str, String(50)]


MONEY_DECIMAL_PLACES = 9
DISPLAY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP


def money_from_str(value: str) -> Decimal:
    """
    Create a money Decimal from its string form.

    Raises:
        ValueError: If value is not a number.
    """
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc


def money_from_int(value: int, decimal_places: int = 2) -> Decimal:
    """
    Create a money Decimal from minor units.

    Example:
        money_from_int(1050, 2) -> Decimal("10.50")
    """
    return Decimal(value).scaleb(-decimal_places)


def round_money(
    value: Decimal,
    decimal_places: int = DISPLAY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value for display.

    This is the ONLY sanctioned rounding function for money.  Internal
    accumulation keeps full precision; rounding happens once, at the edge.
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    return value.quantize(quantum, rounding=rounding)


# Currencies a practice is expected to bill in.  Extend as needed.
ISO_4217_CURRENCIES: frozenset[str] = frozenset({
    "USD", "EUR", "GBP", "CAD", "AUD", "NZD", "CHF", "JPY",
    "SEK", "NOK", "DKK", "PLN", "CZK", "MXN", "BRL", "INR",
    "ZAR", "SGD", "HKD", "ILS",
})


def validate_currency(currency: str) -> str:
    """
    Validate and normalize an ISO 4217 currency code.

    Returns:
        The uppercase, trimmed code.

    Raises:
        ValueError: If the code is not a recognized currency.
    """
    if not currency or not isinstance(currency, str):
        raise ValueError(f"Invalid ISO 4217 currency code: {currency!r}")
    normalized = currency.upper().strip()
    if normalized not in ISO_4217_CURRENCIES:
        raise ValueError(f"Invalid ISO 4217 currency code: {currency!r}")
    return normalized
