"""
Data preparation — loading stored rows, alias normalisation, validation.
"""

from .loader import (
    Ledger,
    ledger_from_document,
    load_ledger_json,
    load_rules_csv,
    load_statement_csv,
    load_transactions_csv,
)
from .records import (
    canonicalize_columns,
    imported_transactions_from_statement,
    parse_rules,
    parse_transactions,
    rules_from_frame,
    select_columns,
    transactions_from_frame,
)
from .validators import ValidationResult, validate_rules, validate_transactions

__all__ = [
    "Ledger",
    "ledger_from_document",
    "load_ledger_json",
    "load_rules_csv",
    "load_statement_csv",
    "load_transactions_csv",
    "canonicalize_columns",
    "imported_transactions_from_statement",
    "parse_rules",
    "parse_transactions",
    "rules_from_frame",
    "select_columns",
    "transactions_from_frame",
    "ValidationResult",
    "validate_rules",
    "validate_transactions",
]
