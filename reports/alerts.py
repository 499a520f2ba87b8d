"""
Balance alerts — flags a user can act on before the month happens.

  OVERDRAWN:   running balance goes below zero on at least one day
  LOW_BALANCE: lowest balance falls under the configured threshold
  NET_OUTFLOW: the month spends more than it earns
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

import pandas as pd

from core.config import ProjectionConfig
from core.utils import Number, round_currency, to_decimal

from .metrics import MonthSummary


@dataclass
class BalanceReport:
    """Structured alert output for one month."""
    month: str
    end_balance: Decimal
    lowest_balance: Decimal
    low_balance_threshold: Decimal
    flags: List[str] = field(default_factory=list)

    @property
    def has_alerts(self) -> bool:
        return bool(self.flags)

    def to_dataframe(self, places: int = 2) -> pd.DataFrame:
        rows = [
            {"Metric": "Month", "Value": self.month},
            {"Metric": "End Balance", "Value": f"{round_currency(self.end_balance, places):,.{places}f}"},
            {"Metric": "Lowest Balance", "Value": f"{round_currency(self.lowest_balance, places):,.{places}f}"},
        ]
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags)})
        return pd.DataFrame(rows)


def generate_balance_report(
    summary: MonthSummary,
    *,
    low_balance_threshold: Optional[Number] = None,
    config: Optional[ProjectionConfig] = None,
) -> BalanceReport:
    """
    Build the alert report for a summarised month.

    Parameters
    ----------
    summary : MonthSummary
        Output of reports.metrics.compute_month_summary().
    low_balance_threshold : number, optional
        LOW_BALANCE fires when the lowest balance is strictly below this.
        Defaults to ``config.low_balance_threshold`` (0 unless configured).
        A zero threshold would only repeat OVERDRAWN, so LOW_BALANCE is skipped;
        a negative one acts as an overdraft limit.
    config : ProjectionConfig, optional
        Source of the default threshold.
    """
    cfg = config or ProjectionConfig()
    threshold = (
        to_decimal(low_balance_threshold)
        if low_balance_threshold is not None
        else cfg.low_balance_threshold
    )

    flags: List[str] = []
    if summary.negative_days > 0:
        flags.append(
            f"OVERDRAWN: balance below zero on {summary.negative_days} day(s), "
            f"first on {summary.first_negative_date.isoformat()}"
        )
    if threshold != 0 and summary.lowest_balance < threshold:
        flags.append(
            f"LOW_BALANCE: lowest balance {round_currency(summary.lowest_balance)} "
            f"is under {round_currency(threshold)}"
        )
    if summary.net_change < 0:
        flags.append(
            f"NET_OUTFLOW: expenses exceed income by {round_currency(-summary.net_change)}"
        )

    return BalanceReport(
        month=summary.month,
        end_balance=summary.end_balance,
        lowest_balance=summary.lowest_balance,
        low_balance_threshold=threshold,
        flags=flags,
    )
