"""
Core package — value types, column schema, configuration, and shared utilities.
No projection logic lives here.
"""

from .schema import RULE_COLUMNS, TRANSACTION_COLUMNS
from .config import ProjectionConfig
from .types import (
    Cadence,
    CashflowSnapshot,
    Fortnightly,
    MonthKey,
    Monthly,
    Provenance,
    RecurringRule,
    Transaction,
    TransactionKind,
    Weekly,
)
from .utils import days_in_month, parse_iso_date, require_columns, round_currency, to_decimal

__all__ = [
    "RULE_COLUMNS",
    "TRANSACTION_COLUMNS",
    "ProjectionConfig",
    "Cadence",
    "CashflowSnapshot",
    "Fortnightly",
    "MonthKey",
    "Monthly",
    "Provenance",
    "RecurringRule",
    "Transaction",
    "TransactionKind",
    "Weekly",
    "days_in_month",
    "parse_iso_date",
    "require_columns",
    "round_currency",
    "to_decimal",
]
