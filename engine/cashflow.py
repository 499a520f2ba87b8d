"""
Deterministic daily cashflow projection for one calendar month.

Key design principles:
  1. Amounts are stored non-negative; the sign is applied at summation by kind
  2. Full Decimal precision through the whole month, round_currency() only at output
  3. Running balance is a strict prefix sum, so days are walked in order
  4. Negative balances are valid and kept as-is
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from core.logging_setup import get_logger
from core.types import CashflowSnapshot, MonthKey, Transaction
from core.utils import Number, to_decimal

logger = get_logger("cashflow.engine.cashflow")


def merge_transactions(*groups: Iterable[Transaction]) -> List[Transaction]:
    """Union several transaction groups, stable-sorted by date (input order on ties)."""
    merged: List[Transaction] = []
    for group in groups:
        merged.extend(group)
    merged.sort(key=lambda t: t.date)
    return merged


def daily_deltas(transactions: Iterable[Transaction], month: MonthKey) -> Dict[date, Decimal]:
    """
    Sum signed amounts per calendar day of ``month``.

    Transactions dated outside the month are dropped, not rejected.
    """
    deltas: Dict[date, Decimal] = defaultdict(Decimal)
    n_outside = 0
    for t in transactions:
        if not month.contains(t.date):
            n_outside += 1
            continue
        deltas[t.date] += t.signed_amount
    if n_outside:
        logger.debug("Excluded %d transactions dated outside %s.", n_outside, month)
    return dict(deltas)


def project(
    starting_balance: Number,
    manual_transactions: Sequence[Transaction],
    recurring_occurrences: Sequence[Transaction],
    year: int,
    month: int,
) -> List[CashflowSnapshot]:
    """
    Walk every day of the month and produce (delta, running balance) snapshots.

    Parameters
    ----------
    starting_balance : Decimal | int | float | str
        Balance carried into the first day of the month.
    manual_transactions : sequence of Transaction
        Manual and imported entries; callers should pre-filter to the month.
    recurring_occurrences : sequence of Transaction
        Output of ``engine.recurrence.expand`` for the same month.
    year, month : int
        Target month, ``month`` one-based.

    Returns
    -------
    One CashflowSnapshot per calendar day, in date order, unrounded.
    """
    key = MonthKey(year, month)
    combined = merge_transactions(manual_transactions, recurring_occurrences)
    deltas = daily_deltas(combined, key)

    running = to_decimal(starting_balance)
    snapshots: List[CashflowSnapshot] = []
    for d in key.dates():
        delta = deltas.get(d, Decimal("0"))
        running += delta
        snapshots.append(CashflowSnapshot(date=d, daily_delta=delta, running_balance=running))

    return snapshots
