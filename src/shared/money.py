"""Currency arithmetic on 2-place decimals."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce a number or numeric string to a 2-place decimal, rounding half-up."""
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a monetary amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent) -> Decimal:
    return to_money(Decimal(amount) * Decimal(str(percent)) / Decimal(100))


def format_money(amount: Decimal) -> str:
    return f"{to_money(amount):.2f}"
