from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from core.logging_setup import get_logger
from core.types import MonthKey, RecurringRule, Transaction
from core.utils import to_decimal

from .records import (
    imported_transactions_from_statement,
    parse_rules,
    parse_transactions,
    rules_from_frame,
    transactions_from_frame,
)

logger = get_logger("cashflow.data_prep.loader")

PathLike = Union[str, Path]


def _read_text_csv(path: PathLike) -> pd.DataFrame:
    # Everything as text; blanks stay "" so record validation sees exactly what was stored.
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def load_transactions_csv(path: PathLike) -> List[Transaction]:
    """Load stored transactions (one row per transaction, canonical or aliased headers)."""
    return transactions_from_frame(_read_text_csv(path))


def load_rules_csv(path: PathLike) -> List[RecurringRule]:
    """Load recurring rules (one row per rule, canonical or aliased headers)."""
    return rules_from_frame(_read_text_csv(path))


def load_statement_csv(path: PathLike) -> List[Transaction]:
    """Load a signed bank statement (date, amount, note) as imported transactions."""
    df = _read_text_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    return imported_transactions_from_statement(df)


@dataclass
class Ledger:
    """Contents of an exported calendar document."""
    transactions: List[Transaction] = field(default_factory=list)
    rules: List[RecurringRule] = field(default_factory=list)
    starting_balances: Dict[str, Decimal] = field(default_factory=dict)  # "YYYY-MM" -> balance

    def starting_balance_for(self, month: MonthKey) -> Decimal:
        return self.starting_balances.get(month.label, Decimal("0"))


def ledger_from_document(doc: dict) -> Ledger:
    """
    Build a Ledger from the export document
    ``{"transactions": [...], "recurringRules": [...], "startingBalanceByMonth": {...}}``.
    """
    balances: Dict[str, Decimal] = {}
    for label, value in (doc.get("startingBalanceByMonth") or {}).items():
        try:
            balances[MonthKey.parse(label).label] = to_decimal(value)
        except ValueError as exc:
            logger.warning("Skipping starting balance for %r: %s", label, exc)

    return Ledger(
        transactions=parse_transactions(doc.get("transactions") or []),
        rules=parse_rules(doc.get("recurringRules") or doc.get("rules") or []),
        starting_balances=balances,
    )


def load_ledger_json(path: PathLike) -> Ledger:
    with open(path, "r", encoding="utf-8") as fh:
        doc = json.load(fh)
    if not isinstance(doc, dict):
        raise ValueError(f"Expected a JSON object at top level in {path}.")
    return ledger_from_document(doc)
