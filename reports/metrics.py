"""
Month summary metrics — the totals line under the calendar.

Computed from a MonthProjection: income/expense totals over every transaction
in the month (manual, imported and recurring), the end balance, and where the
running balance bottoms out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import pandas as pd

from core.types import TransactionKind
from core.utils import round_currency

if TYPE_CHECKING:
    from engine.runner import MonthProjection


@dataclass(frozen=True)
class MonthSummary:
    month: str  # YYYY-MM
    starting_balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    end_balance: Decimal
    lowest_balance: Decimal
    lowest_balance_date: Optional[date]
    first_negative_date: Optional[date]
    negative_days: int
    transaction_count: int

    @property
    def net_change(self) -> Decimal:
        return self.total_income - self.total_expense

    def to_dataframe(self, places: int = 2) -> pd.DataFrame:
        """Convert to a display-friendly table."""

        def money(v: Decimal) -> str:
            return f"{round_currency(v, places):,.{places}f}"

        rows = [
            {"Metric": "Month", "Value": self.month},
            {"Metric": "Starting Balance", "Value": money(self.starting_balance)},
            {"Metric": "Income", "Value": money(self.total_income)},
            {"Metric": "Expense", "Value": money(-self.total_expense)},
            {"Metric": "Net Change", "Value": money(self.net_change)},
            {"Metric": "End Balance", "Value": money(self.end_balance)},
            {"Metric": "Lowest Balance", "Value": money(self.lowest_balance)},
            {
                "Metric": "Lowest Balance Date",
                "Value": self.lowest_balance_date.isoformat() if self.lowest_balance_date else "",
            },
            {"Metric": "Days Below Zero", "Value": str(self.negative_days)},
            {"Metric": "Transactions", "Value": str(self.transaction_count)},
        ]
        return pd.DataFrame(rows)


def compute_month_summary(projection: "MonthProjection") -> MonthSummary:
    """
    Summarise a projected month.

    The lowest balance is the minimum over the opening balance and every
    day's running balance; on ties the earliest day wins. The opening balance
    itself has no date, so ``lowest_balance_date`` is None when nothing in the
    month dips below it.
    """
    txns = projection.all_transactions
    income = sum(
        (t.amount for t in txns if t.kind is TransactionKind.INCOME), Decimal("0")
    )
    expense = sum(
        (t.amount for t in txns if t.kind is TransactionKind.EXPENSE), Decimal("0")
    )

    lowest = projection.starting_balance
    lowest_date: Optional[date] = None
    first_negative: Optional[date] = None
    negative_days = 0
    for s in projection.snapshots:
        if s.running_balance < lowest:
            lowest = s.running_balance
            lowest_date = s.date
        if s.running_balance < 0:
            negative_days += 1
            if first_negative is None:
                first_negative = s.date

    return MonthSummary(
        month=projection.month.label,
        starting_balance=projection.starting_balance,
        total_income=income,
        total_expense=expense,
        end_balance=projection.end_balance,
        lowest_balance=lowest,
        lowest_balance_date=lowest_date,
        first_negative_date=first_negative,
        negative_days=negative_days,
        transaction_count=len(txns),
    )
