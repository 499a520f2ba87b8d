from datetime import date
from decimal import Decimal

import pandas as pd

from core.config import ProjectionConfig
from core.types import CashflowSnapshot, MonthKey, TransactionKind
from engine.runner import run_projection
from reports.aggregator import aggregate_by_week, projection_to_frame, snapshots_to_frame
from reports.alerts import generate_balance_report
from reports.metrics import compute_month_summary


def _march(salary_rule, txn_factory, *extra, starting_balance="1000"):
    stored = [txn_factory("m1", date(2024, 3, 5), "200"), *extra]
    return run_projection(stored, [salary_rule], MonthKey(2024, 3), starting_balance=starting_balance)


def test_month_summary_totals(salary_rule, txn_factory):
    summary = compute_month_summary(_march(salary_rule, txn_factory))

    assert summary.month == "2024-03"
    assert summary.total_income == Decimal("3000")
    assert summary.total_expense == Decimal("200")
    assert summary.net_change == Decimal("2800")
    assert summary.end_balance == Decimal("3800")
    assert summary.lowest_balance == Decimal("1000")
    assert summary.lowest_balance_date is None
    assert summary.first_negative_date is None
    assert summary.negative_days == 0
    assert summary.transaction_count == 2


def test_month_summary_tracks_the_dip(salary_rule, txn_factory):
    big = txn_factory("car", date(2024, 3, 20), "5000")

    summary = compute_month_summary(_march(salary_rule, txn_factory, big))

    assert summary.lowest_balance == Decimal("-1200")
    assert summary.lowest_balance_date == date(2024, 3, 20)
    assert summary.first_negative_date == date(2024, 3, 20)
    assert summary.negative_days == 12


def test_summary_table_formats_money(salary_rule, txn_factory):
    table = compute_month_summary(_march(salary_rule, txn_factory)).to_dataframe()
    values = dict(zip(table["Metric"], table["Value"]))

    assert values["Income"] == "3,000.00"
    assert values["Expense"] == "-200.00"
    assert values["End Balance"] == "3,800.00"
    assert values["Lowest Balance Date"] == ""


def test_snapshots_to_frame_rounds_half_away_from_zero():
    snapshots = [
        CashflowSnapshot(date(2024, 1, 1), Decimal("0.125"), Decimal("0.125")),
        CashflowSnapshot(date(2024, 1, 2), Decimal("-0.125"), Decimal("0")),
    ]

    frame = snapshots_to_frame(snapshots)

    assert frame["daily_delta"].tolist() == [0.13, -0.13]
    assert frame["running_balance"].tolist() == [0.13, 0.0]
    assert pd.api.types.is_datetime64_any_dtype(frame["date"])


def test_aggregate_by_week_follows_sunday_first_grid(salary_rule, txn_factory):
    # March 2024 starts on a Friday: grid rows are 1-2, 3-9, 10-16, 17-23, 24-30, 31.
    frame = projection_to_frame(_march(salary_rule, txn_factory))

    weeks = aggregate_by_week(frame)

    assert weeks["days"].tolist() == [2, 7, 7, 7, 7, 1]
    assert weeks["start"].iloc[1] == pd.Timestamp("2024-03-03")
    assert weeks["net_delta"].tolist() == [3000.0, -200.0, 0.0, 0.0, 0.0, 0.0]
    assert weeks["closing_balance"].tolist() == [4000.0, 3800.0, 3800.0, 3800.0, 3800.0, 3800.0]


def test_aggregate_by_week_empty_frame():
    weeks = aggregate_by_week(snapshots_to_frame([]))

    assert weeks.empty
    assert "closing_balance" in weeks.columns


def test_balance_report_flags(salary_rule, txn_factory):
    big = txn_factory("car", date(2024, 3, 20), "5000")
    summary = compute_month_summary(_march(salary_rule, txn_factory, big))

    report = generate_balance_report(summary, low_balance_threshold="500")

    assert report.has_alerts
    assert report.flags == [
        "OVERDRAWN: balance below zero on 12 day(s), first on 2024-03-20",
        "LOW_BALANCE: lowest balance -1200.00 is under 500.00",
        "NET_OUTFLOW: expenses exceed income by 2200.00",
    ]
    table = report.to_dataframe()
    assert table["Metric"].tolist()[-1] == "FLAGS"


def test_balance_report_quiet_month(salary_rule, txn_factory):
    summary = compute_month_summary(_march(salary_rule, txn_factory))

    report = generate_balance_report(summary)

    assert not report.has_alerts
    assert report.low_balance_threshold == Decimal("0")
    assert "FLAGS" not in report.to_dataframe()["Metric"].tolist()


def test_low_balance_without_overdraft(salary_rule, txn_factory):
    income_only = txn_factory("gift", date(2024, 3, 2), "1", TransactionKind.INCOME)
    summary = compute_month_summary(_march(salary_rule, txn_factory, income_only, starting_balance="0"))

    report = generate_balance_report(summary, low_balance_threshold=Decimal("5000"))

    assert [f.split(":")[0] for f in report.flags] == ["LOW_BALANCE"]


def test_low_balance_threshold_comes_from_config(salary_rule, txn_factory):
    summary = compute_month_summary(_march(salary_rule, txn_factory))
    config = ProjectionConfig(low_balance_threshold=Decimal("1500"))

    report = generate_balance_report(summary, config=config)

    assert report.low_balance_threshold == Decimal("1500")
    assert report.flags == ["LOW_BALANCE: lowest balance 1000.00 is under 1500.00"]


def test_projection_to_frame_rounds_for_display(txn_factory):
    stored = [txn_factory("x", date(2024, 1, 1), "10.005", TransactionKind.INCOME)]
    projection = run_projection(stored, [], MonthKey(2024, 1), starting_balance="0")

    frame = projection_to_frame(projection)

    assert list(frame.columns) == ["date", "daily_delta", "running_balance"]
    assert len(frame) == 31
    assert frame["date"].iloc[0] == pd.Timestamp("2024-01-01")
    assert frame["daily_delta"].iloc[0] == 10.01
    assert projection.snapshots[0].daily_delta == Decimal("10.005")


def test_projection_to_frame_uses_configured_places(txn_factory):
    stored = [txn_factory("x", date(2024, 1, 1), "10.005", TransactionKind.INCOME)]
    config = ProjectionConfig(currency_places=0)
    projection = run_projection(stored, [], MonthKey(2024, 1), config=config)

    frame = projection_to_frame(projection)

    assert frame["running_balance"].iloc[-1] == 10.0


def test_negative_threshold_acts_as_overdraft_limit(salary_rule, txn_factory):
    big = txn_factory("car", date(2024, 3, 20), "5000")
    summary = compute_month_summary(_march(salary_rule, txn_factory, big))

    breached = generate_balance_report(summary, low_balance_threshold="-500")
    within = generate_balance_report(summary, low_balance_threshold="-1500")

    assert "LOW_BALANCE: lowest balance -1200.00 is under -500.00" in breached.flags
    assert not any(f.startswith("LOW_BALANCE") for f in within.flags)
