"""
Recurrence expansion — turn recurring rules into dated occurrences for one month.

Occurrences are derived, never stored: the calendar asks for a month, this
module regenerates that month's occurrences from the current rules, and an
edited rule therefore applies retroactively and prospectively.

Cadence policy (applied identically to weekly and fortnightly):
  - the cadence is anchored to the rule's start date
  - a date d qualifies iff it is on the rule weekday, start <= d <= end,
    and (d - start).days is a multiple of the interval (7 or 14)
  - a rule whose start date is not on its own weekday therefore never fires

Monthly rules clamp day_of_month to the month's last day (31 -> 28/29/30).
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence

from core.logging_setup import get_logger
from core.types import (
    Fortnightly,
    MonthKey,
    Monthly,
    Provenance,
    RecurringRule,
    Transaction,
    Weekly,
)
from core.utils import clamp_day, is_calendar_date, sunday_weekday

logger = get_logger("cashflow.engine.recurrence")


def occurrence_id(rule_id: str, on: date, *, prefix: str = "r") -> str:
    """
    Deterministic identifier for the occurrence of ``rule_id`` on ``on``.

    The ISO date suffix is fixed-width, so the id maps back to exactly one
    (rule_id, date) pair.
    """
    return f"{prefix}-{rule_id}-{on.isoformat()}"


def _rule_problem(rule: RecurringRule) -> Optional[str]:
    """Return why a rule cannot be expanded, or None if it is well-formed."""
    if not isinstance(rule.cadence, (Weekly, Fortnightly, Monthly)):
        return f"unknown cadence {rule.cadence!r}"
    if not isinstance(rule.amount, Decimal) or rule.amount < 0:
        return f"amount must be a non-negative Decimal, got {rule.amount!r}"
    if not is_calendar_date(rule.start):
        return f"start is not a calendar date: {rule.start!r}"
    if rule.end is not None and not is_calendar_date(rule.end):
        return f"end is not a calendar date: {rule.end!r}"
    return None


def _monthly_dates(rule: RecurringRule, cadence: Monthly, month: MonthKey) -> List[date]:
    day = clamp_day(month.year, month.month, cadence.day_of_month)
    d = date(month.year, month.month, day)
    if d < rule.start or (rule.end is not None and d > rule.end):
        return []
    return [d]


def _interval_dates(rule: RecurringRule, weekday: int, interval: int, month: MonthKey) -> List[date]:
    window_start = max(rule.start, month.first_day)
    window_end = month.last_day if rule.end is None else min(rule.end, month.last_day)
    if window_start > window_end:
        return []

    # Jump straight to the first cadence date on/after the window start.
    offset = (-(window_start - rule.start).days) % interval
    current = window_start + timedelta(days=offset)

    out: List[date] = []
    step = timedelta(days=interval)
    while current <= window_end:
        if sunday_weekday(current) == weekday:
            out.append(current)
        current += step
    return out


def _rule_dates(rule: RecurringRule, month: MonthKey) -> List[date]:
    cadence = rule.cadence
    if isinstance(cadence, Monthly):
        return _monthly_dates(rule, cadence, month)
    if isinstance(cadence, Weekly):
        return _interval_dates(rule, cadence.weekday, Weekly.interval_days, month)
    if isinstance(cadence, Fortnightly):
        return _interval_dates(rule, cadence.weekday, Fortnightly.interval_days, month)
    raise TypeError(f"Unhandled cadence: {cadence!r}")


def expand(
    rules: Sequence[RecurringRule],
    year: int,
    month: int,
    *,
    id_prefix: str = "r",
) -> List[Transaction]:
    """
    Generate every occurrence of ``rules`` that falls inside one calendar month.

    Parameters
    ----------
    rules : sequence of RecurringRule
        Rule set as stored; inactive rules are ignored.
    year, month : int
        Target month, ``month`` one-based.
    id_prefix : str
        Prefix of the derived occurrence ids.

    Returns
    -------
    List of recurring-provenance transactions, ascending by date. Same-date
    occurrences keep rule input order. Identical input gives identical output.

    Malformed rules are skipped with a warning rather than aborting the month.
    """
    key = MonthKey(year, month)
    first, last = key.first_day, key.last_day
    results: List[Transaction] = []

    for rule in rules:
        if not rule.active:
            continue

        problem = _rule_problem(rule)
        if problem is not None:
            logger.warning("Skipping recurring rule %r: %s", rule.id, problem)
            continue

        if rule.end is not None and rule.end < rule.start:
            logger.debug("Rule %r ends before it starts; no occurrences.", rule.id)
            continue
        if rule.end is not None and rule.end < first:
            continue
        if rule.start > last:
            continue

        for d in _rule_dates(rule, key):
            results.append(
                Transaction(
                    id=occurrence_id(rule.id, d, prefix=id_prefix),
                    date=d,
                    kind=rule.kind,
                    amount=rule.amount,
                    note=rule.note,
                    provenance=Provenance.RECURRING,
                    rule_id=rule.id,
                )
            )

    results.sort(key=lambda t: t.date)
    logger.debug("Expanded %d rules into %d occurrences for %s.", len(rules), len(results), key)
    return results
