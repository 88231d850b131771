"""
Module: costs_kernel.db.types
Responsibility: Decimal constants and rounding helpers for money, hours
    and percentages.  Centralizes precision so that every model, engine and
    service rounds identically.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    selectors/ and costs_engines.  MUST NOT import from any of
    those layers.

Invariants enforced:
    - No floats anywhere in the costs kernel.  All monetary amounts use
      Decimal with explicit precision.
    - round_money() is the ONLY sanctioned rounding function for reported
      money figures; round_percent() for revenue shares.
"""

from decimal import Decimal, ROUND_HALF_UP

MONEY_DECIMAL_PLACES = 2
PERCENT_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MINUTES_PER_HOUR = Decimal("60")


def to_decimal(value) -> Decimal:
    """Coerce a numeric input (Decimal, int, str) into Decimal; None -> 0."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Route floats through str() so 0.1 stays 0.1
        return Decimal(str(value))
    return Decimal(value)


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized using the rounding mode.
    """
    quantizer = Decimal(10) ** -decimal_places
    return value.quantize(quantizer, rounding=rounding)


def round_percent(value: Decimal) -> Decimal:
    """Round a percentage to PERCENT_DECIMAL_PLACES."""
    return round_money(value, PERCENT_DECIMAL_PLACES)


def minutes_to_hours(minutes: int | Decimal) -> Decimal:
    """Convert a minute count to (unrounded) Decimal hours."""
    return Decimal(minutes) / MINUTES_PER_HOUR
