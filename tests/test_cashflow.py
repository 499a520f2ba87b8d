import calendar
from datetime import date, timedelta
from decimal import Decimal

import pytest

from core.types import MonthKey, TransactionKind
from engine.cashflow import daily_deltas, merge_transactions, project
from engine.recurrence import expand

INCOME, EXPENSE = TransactionKind.INCOME, TransactionKind.EXPENSE


@pytest.mark.parametrize("year", [2023, 2024])
@pytest.mark.parametrize("month", range(1, 13))
def test_one_snapshot_per_day_without_gaps(year, month):
    snapshots = project(Decimal("0"), [], [], year, month)

    assert len(snapshots) == calendar.monthrange(year, month)[1]
    assert snapshots[0].date == date(year, month, 1)
    assert all(b.date - a.date == timedelta(days=1) for a, b in zip(snapshots, snapshots[1:]))


def test_empty_month_carries_starting_balance():
    snapshots = project(Decimal("250.75"), [], [], 2024, 2)

    assert len(snapshots) == 29
    assert all(s.daily_delta == 0 for s in snapshots)
    assert all(s.running_balance == Decimal("250.75") for s in snapshots)


def test_end_to_end_manual_and_monthly_income(salary_rule, txn_factory):
    rent = txn_factory("m1", date(2024, 3, 5), "200", EXPENSE)
    occurrences = expand([salary_rule], 2024, 3)

    snapshots = project(Decimal("1000"), [rent], occurrences, 2024, 3)
    by_day = {s.date.day: s for s in snapshots}

    assert by_day[1].daily_delta == Decimal("3000")
    assert by_day[1].running_balance == Decimal("4000")
    assert by_day[5].daily_delta == Decimal("-200")
    assert by_day[5].running_balance == Decimal("3800")
    for prev, cur in zip(snapshots, snapshots[1:]):
        if cur.date.day not in (1, 5):
            assert cur.daily_delta == 0
            assert cur.running_balance == prev.running_balance


def test_running_balance_is_prefix_sum(txn_factory):
    manual = [
        txn_factory("a", date(2024, 6, 3), "19.99", EXPENSE),
        txn_factory("b", date(2024, 6, 3), "500", INCOME),
        txn_factory("c", date(2024, 6, 17), "742.10", EXPENSE),
        txn_factory("d", date(2024, 6, 30), "0.01", INCOME),
    ]
    start = Decimal("12.34")

    snapshots = project(start, manual, [], 2024, 6)

    total = start
    for s in snapshots:
        total += s.daily_delta
        assert s.running_balance == total


def test_negative_balance_is_kept(txn_factory):
    snapshots = project(Decimal("10"), [txn_factory("x", date(2024, 1, 2), "60")], [], 2024, 1)

    assert snapshots[1].running_balance == Decimal("-50")
    assert snapshots[-1].running_balance == Decimal("-50")


def test_out_of_month_transactions_are_ignored(txn_factory):
    manual = [
        txn_factory("before", date(2024, 1, 31), "100"),
        txn_factory("inside", date(2024, 2, 1), "5"),
        txn_factory("after", date(2024, 3, 1), "100"),
    ]

    snapshots = project(Decimal("0"), manual, [], 2024, 2)

    assert snapshots[0].daily_delta == Decimal("-5")
    assert snapshots[-1].running_balance == Decimal("-5")


def test_no_rounding_during_accumulation(txn_factory):
    manual = [txn_factory(str(i), date(2024, 1, 1), "0.005", INCOME) for i in range(3)]

    snapshots = project(0.1, manual, [], 2024, 1)

    assert snapshots[0].daily_delta == Decimal("0.015")
    assert snapshots[0].running_balance == Decimal("0.115")


def test_merge_is_stable_for_same_day(txn_factory):
    first = txn_factory("first", date(2024, 1, 2), "1")
    second = txn_factory("second", date(2024, 1, 2), "1")
    earlier = txn_factory("earlier", date(2024, 1, 1), "1")

    merged = merge_transactions([first], [earlier, second])

    assert [t.id for t in merged] == ["earlier", "first", "second"]


def test_daily_deltas_only_covers_days_with_activity(txn_factory):
    deltas = daily_deltas(
        [
            txn_factory("a", date(2024, 1, 9), "10", INCOME),
            txn_factory("b", date(2024, 1, 9), "4", EXPENSE),
        ],
        MonthKey(2024, 1),
    )

    assert deltas == {date(2024, 1, 9): Decimal("6")}


def test_invalid_month_raises():
    with pytest.raises(ValueError):
        project(Decimal("0"), [], [], 2024, 13)
