"""LBP price helpers for receipt display."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Optional, Union

from invoice_printer.errors import FormatError

CURRENCY = "LBP"

PriceValue = Union[int, float, Decimal, str]


def strip_currency_noise(raw: str) -> str:
    """Remove the LBP marker and thousands separators from a price string."""
    return raw.replace(CURRENCY, "").replace(",", "").strip()


def _to_decimal(value: PriceValue, field: Optional[str]) -> Decimal:
    # bool is an int subclass; True must not print as "1 LBP"
    if isinstance(value, bool):
        raise FormatError(field, value)

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        cleaned = strip_currency_noise(value)
        if not cleaned:
            raise FormatError(field, value)
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            raise FormatError(field, value) from None
    else:
        raise FormatError(field, value)

    if not amount.is_finite():
        raise FormatError(field, value)
    return amount


def format_for_display(value: PriceValue, field: Optional[str] = None) -> str:
    """Format a price as a grouped integer followed by ``LBP``.

    Strings already carrying the marker are returned unchanged, which
    makes the function idempotent. Fractions round half away from zero.

    Args:
        value: Numeric amount, numeric string, or pre-formatted string
        field: Invoice field name, used in the error message

    Raises:
        FormatError: If the value is neither numeric nor pre-formatted
    """
    if isinstance(value, str) and CURRENCY in value:
        return value

    amount = _to_decimal(value, field)
    with localcontext() as ctx:
        # room for every integer digit plus a rounding carry
        ctx.prec = max(ctx.prec, amount.adjusted() + 2)
        amount = amount.quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if amount == 0:
        amount = Decimal(0)  # drop the sign of -0
    return f"{amount:,} {CURRENCY}"
