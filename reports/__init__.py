"""
Reports — month summary, display frames, and balance alerts.
"""

from .aggregator import aggregate_by_week, projection_to_frame, snapshots_to_frame
from .metrics import MonthSummary, compute_month_summary
from .alerts import BalanceReport, generate_balance_report

__all__ = [
    "aggregate_by_week",
    "projection_to_frame",
    "snapshots_to_frame",
    "MonthSummary",
    "compute_month_summary",
    "BalanceReport",
    "generate_balance_report",
]
