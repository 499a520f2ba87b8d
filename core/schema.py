from __future__ import annotations

from typing import Tuple

# Canonical column names for transaction rows handed over by the persistence layer.
# Ingestion renames known aliases onto these before anything else looks at a row.
TRANSACTION_COLUMNS: Tuple[str, ...] = (
    "id",
    "date",
    "kind",
    "amount",
    "note",
    "provenance",
    "rule_id",
)

# Canonical column names for recurring-rule rows.
RULE_COLUMNS: Tuple[str, ...] = (
    "id",
    "kind",
    "amount",
    "note",
    "frequency",
    "start",
    "end",
    "weekday",
    "day_of_month",
    "active",
)

# Signed bank statement rows (the CSV import format): sign of amount gives the kind.
STATEMENT_COLUMNS: Tuple[str, ...] = (
    "date",
    "amount",
    "note",
)
