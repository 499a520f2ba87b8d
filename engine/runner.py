"""
Projection runner — one month of the calendar, from stored rows to snapshots.

Steps (once per visible month):
  1. Keep stored transactions dated inside the month
  2. Drop stored rows tagged recurring (occurrences are derived, a stored copy
     would be counted twice)
  3. Expand the rules for the month
  4. Project the starting balance through every day
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from core.config import ProjectionConfig
from core.logging_setup import get_logger
from core.types import CashflowSnapshot, MonthKey, Provenance, RecurringRule, Transaction
from core.utils import Number, to_decimal

from .cashflow import merge_transactions, project
from .recurrence import expand

logger = get_logger("cashflow.engine.runner")


@dataclass(frozen=True)
class MonthProjection:
    """Everything the calendar needs to render one month."""

    month: MonthKey
    starting_balance: Decimal
    transactions: Tuple[Transaction, ...]   # manual + imported, inside the month
    occurrences: Tuple[Transaction, ...]    # derived from rules
    snapshots: Tuple[CashflowSnapshot, ...]
    config: ProjectionConfig = field(default_factory=ProjectionConfig)

    @property
    def end_balance(self) -> Decimal:
        if not self.snapshots:
            return self.starting_balance
        return self.snapshots[-1].running_balance

    @property
    def all_transactions(self) -> List[Transaction]:
        return merge_transactions(self.transactions, self.occurrences)


def select_month_transactions(
    transactions: Iterable[Transaction],
    month: MonthKey,
) -> List[Transaction]:
    """Stored transactions that belong in ``month``'s projection."""
    out: List[Transaction] = []
    n_recurring = 0
    for t in transactions:
        if not month.contains(t.date):
            continue
        if t.provenance is Provenance.RECURRING:
            n_recurring += 1
            continue
        out.append(t)
    if n_recurring:
        logger.warning(
            "Ignored %d stored recurring-provenance transactions in %s; "
            "occurrences are regenerated from rules.",
            n_recurring,
            month,
        )
    return out


def run_projection(
    transactions: Iterable[Transaction],
    rules: Iterable[RecurringRule],
    month: MonthKey,
    *,
    starting_balance: Number = Decimal("0"),
    config: Optional[ProjectionConfig] = None,
) -> MonthProjection:
    """
    Project one month: expand rules, merge with stored entries, walk the days.

    Parameters
    ----------
    transactions : iterable of Transaction
        Stored manual/imported transactions (any months; filtered here).
    rules : iterable of RecurringRule
        Current rule set.
    month : MonthKey
        Visible month.
    starting_balance : Decimal | int | float | str
        Balance carried into day 1.
    config : ProjectionConfig, optional
        Defaults to ``ProjectionConfig()``.
    """
    cfg = config or ProjectionConfig()
    rule_list = list(rules)
    opening = to_decimal(starting_balance)

    manual = select_month_transactions(transactions, month)
    occurrences = expand(rule_list, month.year, month.month, id_prefix=cfg.occurrence_id_prefix)
    snapshots = project(opening, manual, occurrences, month.year, month.month)

    logger.info(
        "Projected %s: %d manual, %d recurring, end balance %s.",
        month,
        len(manual),
        len(occurrences),
        snapshots[-1].running_balance,
    )

    return MonthProjection(
        month=month,
        starting_balance=opening,
        transactions=tuple(manual),
        occurrences=tuple(occurrences),
        snapshots=tuple(snapshots),
        config=cfg,
    )
