from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Union

import pandas as pd

Number = Union[Decimal, int, float, str]

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def days_in_month(year: int, month: int) -> int:
    """Number of days in a one-based month, leap years included."""
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> int:
    """Reduce a day-of-month to the last valid day of a shorter month."""
    return min(day, days_in_month(year, month))


def sunday_weekday(d: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday (the rule convention)."""
    return d.isoweekday() % 7


def is_calendar_date(value: Any) -> bool:
    """True for a plain ``date``; ``datetime`` (and pandas Timestamp) carry a time and do not count."""
    return isinstance(value, date) and not isinstance(value, datetime)


def is_iso_date(value: str) -> bool:
    return bool(_ISO_DATE_RE.match(value))


def parse_iso_date(value: Union[str, date]) -> date:
    """
    Parse a strict ``YYYY-MM-DD`` calendar date.

    ``date`` instances pass through; ``datetime`` instances are rejected because
    a time-of-day component has no meaning here.
    """
    if isinstance(value, date):
        if not is_calendar_date(value):
            raise ValueError(f"Expected a calendar date, got a timestamp: {value!r}")
        return value
    text = str(value).strip()
    if not is_iso_date(text):
        raise ValueError(f"Not an ISO calendar date (YYYY-MM-DD): {value!r}")
    return date.fromisoformat(text)


def to_decimal(value: Number) -> Decimal:
    """
    Coerce a numeric value to Decimal without binary float noise.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1"), not its
    53-bit expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, float):
        value = repr(float(value))
    try:
        out = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc
    if not out.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return out


def round_currency(x: Number, places: int = 2) -> Decimal:
    """Currency ROUND: half away from zero. Presentation only, never mid-accumulation."""
    quantum = Decimal(1).scaleb(-places)
    return to_decimal(x).quantize(quantum, rounding=ROUND_HALF_UP)
