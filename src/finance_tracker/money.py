"""Currency formatting and calendar-month arithmetic.

Leaf module: depends on nothing within the package. Month rollover uses
clamp-to-last-day semantics throughout (``dateutil.relativedelta``), so
Jan 31 advanced by one month is Feb 28 (or 29).
"""

from __future__ import annotations

import calendar
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext

from dateutil.relativedelta import relativedelta

CENTS = Decimal("0.01")


def quantize_amount(value: Decimal | int | float | str) -> Decimal:
    """Round *value* half-up to 2 decimal places.

    Precision is widened to fit the integer digits, so any finite value
    quantizes without raising ``InvalidOperation``.
    """
    amount = Decimal(str(value))
    with localcontext() as ctx:
        if amount.is_finite():
            ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(
    amount: Decimal | int | float,
    symbol: str = "R$",
    decimal_sep: str = ",",
    thousands_sep: str = ".",
) -> str:
    """Render *amount* as localized currency text.

    The defaults produce Brazilian real formatting::

        >>> format_currency(Decimal("1234.5"))
        'R$ 1.234,50'
        >>> format_currency(-10)
        '-R$ 10,00'
    """
    value = quantize_amount(amount)
    sign = "-" if value < 0 else ""
    # "1,234.50" -> swap in the configured separators via a placeholder
    text = f"{abs(value):,.2f}"
    text = text.replace(",", "\0").replace(".", decimal_sep).replace("\0", thousands_sep)
    return f"{sign}{symbol} {text}"


def days_in_month(year: int, month: int) -> int:
    """Number of days in *month* of *year*."""
    return calendar.monthrange(year, month)[1]


def month_start(d: date) -> date:
    """First day of *d*'s month."""
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """Advance *d* by *months* calendar months, clamping to the last day.

    ``add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)``
    """
    return d + relativedelta(months=months)


def same_month(a: date, b: date) -> bool:
    """True if *a* and *b* fall in the same calendar month and year."""
    return a.year == b.year and a.month == b.month


def invoice_month(txn_date: date, closing_day: int) -> date:
    """Return the first-of-month anchor of the statement *txn_date* belongs to.

    A purchase made after the closing day goes to the next month's
    statement; a purchase on or before it stays in the current month's.
    Closing days beyond the month's length are clamped to its last day.
    """
    effective = max(1, min(closing_day, days_in_month(txn_date.year, txn_date.month)))
    anchor = month_start(txn_date)
    if txn_date.day > effective:
        return add_months(anchor, 1)
    return anchor


def parse_month(month: str) -> date:
    """Parse a ``YYYY-MM`` string into the first day of that month.

    Raises:
        ValueError: If *month* is not a valid ``YYYY-MM`` value.
    """
    if not re.fullmatch(r"\d{4}-\d{2}", month):
        raise ValueError(f"Invalid month format: {month!r}. Expected YYYY-MM.")
    year, mon = (int(part) for part in month.split("-"))
    if mon < 1 or mon > 12:
        raise ValueError(f"Invalid month: {month!r}. Month must be between 01 and 12.")
    return date(year, mon, 1)
