"""
Value types shared by the expander, the projector and the ingestion layer.

All dates are ``datetime.date`` (timezone-less calendar dates). Money is
``Decimal`` and always non-negative on a transaction or rule; the sign comes
from the kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional, Union

from dateutil.relativedelta import relativedelta

from .utils import days_in_month, is_calendar_date


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Provenance(str, Enum):
    MANUAL = "manual"
    RECURRING = "recurring"
    IMPORTED = "imported"


# ---------------------------------------------------------------------------
# Cadence: closed set of frequencies, each with only the field it uses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Weekly:
    """Every 7 days from the rule start, on ``weekday`` (0=Sunday..6=Saturday)."""

    weekday: int

    frequency = "weekly"
    interval_days = 7

    def __post_init__(self) -> None:
        _check_weekday(self.weekday)


@dataclass(frozen=True)
class Fortnightly:
    """Every 14 days from the rule start, on ``weekday`` (0=Sunday..6=Saturday)."""

    weekday: int

    frequency = "fortnightly"
    interval_days = 14

    def __post_init__(self) -> None:
        _check_weekday(self.weekday)


@dataclass(frozen=True)
class Monthly:
    """Once a month on ``day_of_month``, clamped to the month's last day."""

    day_of_month: int

    frequency = "monthly"

    def __post_init__(self) -> None:
        if isinstance(self.day_of_month, bool) or not isinstance(self.day_of_month, int):
            raise ValueError(f"day_of_month must be an int, got {self.day_of_month!r}")
        if not 1 <= self.day_of_month <= 31:
            raise ValueError(f"day_of_month must be in 1..31, got {self.day_of_month}")


Cadence = Union[Weekly, Fortnightly, Monthly]


def _check_weekday(weekday: int) -> None:
    if isinstance(weekday, bool) or not isinstance(weekday, int):
        raise ValueError(f"weekday must be an int, got {weekday!r}")
    if not 0 <= weekday <= 6:
        raise ValueError(f"weekday must be in 0..6 (0=Sunday), got {weekday}")


# ---------------------------------------------------------------------------
# Transactions and rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Transaction:
    """A single dated cash movement."""

    id: str
    date: date
    kind: TransactionKind
    amount: Decimal
    note: Optional[str] = None
    provenance: Provenance = Provenance.MANUAL
    rule_id: Optional[str] = None  # only for recurring provenance

    def __post_init__(self) -> None:
        if not is_calendar_date(self.date):
            raise ValueError(f"Transaction {self.id!r} needs a calendar date, got {self.date!r}.")
        if self.amount < 0:
            raise ValueError(f"Transaction {self.id!r} has negative amount {self.amount}.")
        if self.rule_id is not None and self.provenance is not Provenance.RECURRING:
            raise ValueError(
                f"Transaction {self.id!r} references rule {self.rule_id!r} "
                f"but provenance is {self.provenance.value!r}."
            )

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind is TransactionKind.INCOME else -self.amount


@dataclass(frozen=True)
class RecurringRule:
    """A cadence definition producing zero or more transactions per month."""

    id: str
    kind: TransactionKind
    amount: Decimal
    cadence: Cadence
    start: date
    end: Optional[date] = None  # inclusive; None = open-ended
    note: Optional[str] = None
    active: bool = True

    def __post_init__(self) -> None:
        # amount and cadence are screened by the expander and validate_rules
        if not is_calendar_date(self.start):
            raise ValueError(f"Rule {self.id!r} needs a calendar start date, got {self.start!r}.")
        if self.end is not None and not is_calendar_date(self.end):
            raise ValueError(f"Rule {self.id!r} end must be a calendar date, got {self.end!r}.")

    @property
    def frequency(self) -> str:
        return self.cadence.frequency


# ---------------------------------------------------------------------------
# Projection window and output
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class MonthKey:
    """Projection window. ``month`` is one-based (1=January)."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"year out of range: {self.year}")

    @classmethod
    def of(cls, d: date) -> "MonthKey":
        return cls(d.year, d.month)

    @classmethod
    def parse(cls, label: str) -> "MonthKey":
        """Parse a ``YYYY-MM`` label."""
        parts = str(label).strip().split("-")
        if len(parts) != 2 or not all(p.isdigit() for p in parts) or len(parts[1]) != 2:
            raise ValueError(f"Not a month label (YYYY-MM): {label!r}")
        return cls(int(parts[0]), int(parts[1]))

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def days(self) -> int:
        return days_in_month(self.year, self.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.days)

    def contains(self, d: date) -> bool:
        return d.year == self.year and d.month == self.month

    def dates(self) -> Iterator[date]:
        for day in range(1, self.days + 1):
            yield date(self.year, self.month, day)

    def shift(self, months: int) -> "MonthKey":
        return MonthKey.of(self.first_day + relativedelta(months=months))

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class CashflowSnapshot:
    """One calendar day of a projected month."""

    date: date
    daily_delta: Decimal
    running_balance: Decimal
