"""
Convert rows from the persistence layer into engine value types.

Rows arrive in two shapes:
  - camelCase from the browser store / JSON export (startDate, dayOfMonth, ruleId, type, source)
  - snake_case from the SQL store (start_date, day_of_month, rule_id)
Both are renamed onto the canonical columns in core.schema, then validated
with pydantic. Rows that fail validation are logged and skipped so one bad
row never blocks a month.
"""

from __future__ import annotations

import datetime as dt
import uuid
from collections import Counter
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.logging_setup import get_logger
from core.schema import RULE_COLUMNS, STATEMENT_COLUMNS, TRANSACTION_COLUMNS
from core.types import (
    Fortnightly,
    Monthly,
    Provenance,
    RecurringRule,
    Transaction,
    TransactionKind,
    Weekly,
)
from core.utils import parse_iso_date, require_columns, to_decimal

logger = get_logger("cashflow.data_prep.records")

_COLUMN_ALIASES: Dict[str, str] = {
    # kind
    "type": "kind",
    "direction": "kind",
    # provenance
    "source": "provenance",
    # rule back-reference
    "ruleId": "rule_id",
    "ruleID": "rule_id",
    "_ruleId": "rule_id",
    # rule dates
    "startDate": "start",
    "start_date": "start",
    "endDate": "end",
    "end_date": "end",
    # cadence fields
    "dayOfMonth": "day_of_month",
    "day": "day_of_month",
    "dayOfWeek": "weekday",
    # free text
    "notes": "note",
    "description": "note",
    # flags
    "isActive": "active",
    "is_active": "active",
}

# Store-specific provenance tags collapsed onto the three the engine knows.
_PROVENANCE_ALIASES: Dict[str, str] = {
    "manual": "manual",
    "recurring": "recurring",
    "imported": "imported",
    "import": "imported",
    "bank": "imported",
    "csv": "imported",
}

# Namespace for ids of statement rows, so the same statement imports to the same ids.
STATEMENT_NAMESPACE = uuid.UUID("6f1c1a52-3b0e-5d8c-9a47-2f6e7c0d4b18")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def canonicalize_record(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename aliased keys and drop blank values so model defaults apply."""
    out: Dict[str, Any] = {}
    for key, value in row.items():
        name = _COLUMN_ALIASES.get(key, key)
        if _is_blank(value):
            continue
        # canonical key wins over an alias if both are present
        if name in out and key != name:
            continue
        out[name] = value
    return out


def canonicalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy with aliased columns renamed onto their canonical names.

    When a canonical column and an alias of it are both present (say "kind"
    and "type"), each cell keeps the canonical value unless it is blank, in
    which case the alias fills it. Blank means None/NaN or empty text, since
    CSVs are read with ``keep_default_na=False``.
    """
    # canonical name -> column positions, the canonically named column first
    sources: Dict[str, List[int]] = {}
    for pos, original in enumerate(df.columns):
        name = _COLUMN_ALIASES.get(original, original)
        group = sources.setdefault(name, [])
        if original == name:
            group.insert(0, pos)
        else:
            group.append(pos)

    merged: Dict[str, pd.Series] = {}
    for name, positions in sources.items():
        s = df.iloc[:, positions[0]]
        for pos in positions[1:]:
            blank = s.map(_is_blank).astype(bool)
            s = s.where(~blank, df.iloc[:, pos])
        merged[name] = s
    return pd.DataFrame(merged, index=df.index, columns=list(sources))


# ---------------------------------------------------------------------------
# Validated records
# ---------------------------------------------------------------------------

class _Record(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", frozen=True)

    @field_validator("amount", mode="before", check_fields=False)
    @classmethod
    def amount_exact(cls, v: Any) -> Any:
        if isinstance(v, (float, int, str)) and not isinstance(v, bool):
            return to_decimal(v)
        return v

    @field_validator("kind", mode="before", check_fields=False)
    @classmethod
    def kind_lower(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


def _iso(v: Any) -> Any:
    if isinstance(v, dt.datetime):
        raise ValueError(f"Expected a calendar date, got a timestamp: {v!r}")
    if isinstance(v, str):
        return parse_iso_date(v)
    return v


class TransactionRecord(_Record):
    """A stored transaction row (manual entry or bank import)."""

    id: str = Field(..., min_length=1, description="Unique within its originating set")
    date: dt.date = Field(..., description="ISO calendar date")
    kind: Literal["income", "expense"] = Field(..., description="Sign of the movement")
    amount: Decimal = Field(..., ge=0, description="Non-negative; kind carries the sign")
    note: Optional[str] = None
    provenance: Literal["manual", "recurring", "imported"] = "manual"
    rule_id: Optional[str] = None

    @field_validator("id", "rule_id", mode="before")
    @classmethod
    def id_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, uuid.UUID)) and not isinstance(v, bool) else v

    @field_validator("date", mode="before")
    @classmethod
    def strict_date(cls, v: Any) -> Any:
        return _iso(v)

    @field_validator("provenance", mode="before")
    @classmethod
    def provenance_alias(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _PROVENANCE_ALIASES.get(v.strip().lower(), v)
        return v

    @model_validator(mode="after")
    def rule_ref_only_when_recurring(self) -> "TransactionRecord":
        if self.rule_id is not None and self.provenance != "recurring":
            raise ValueError("rule_id is only allowed on recurring transactions")
        return self

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            date=self.date,
            kind=TransactionKind(self.kind),
            amount=self.amount,
            note=self.note,
            provenance=Provenance(self.provenance),
            rule_id=self.rule_id,
        )


class RecurringRuleRecord(_Record):
    """A stored recurring rule row; exactly one cadence field is used per frequency."""

    id: str = Field(..., min_length=1, description="Stable; seeds occurrence ids")
    kind: Literal["income", "expense"]
    amount: Decimal = Field(..., ge=0)
    note: Optional[str] = None
    frequency: Literal["weekly", "fortnightly", "monthly"]
    start: dt.date
    end: Optional[dt.date] = None
    weekday: Optional[int] = Field(None, ge=0, le=6, description="0=Sunday..6=Saturday")
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    active: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def id_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, uuid.UUID)) and not isinstance(v, bool) else v

    @field_validator("start", "end", mode="before")
    @classmethod
    def strict_date(cls, v: Any) -> Any:
        return _iso(v)

    @field_validator("frequency", mode="before")
    @classmethod
    def frequency_lower(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def cadence_field_present(self) -> "RecurringRuleRecord":
        if self.frequency == "monthly" and self.day_of_month is None:
            raise ValueError("monthly rule requires day_of_month")
        if self.frequency in ("weekly", "fortnightly") and self.weekday is None:
            raise ValueError(f"{self.frequency} rule requires weekday")
        return self

    def to_domain(self) -> RecurringRule:
        if self.frequency == "monthly":
            cadence = Monthly(self.day_of_month)
        elif self.frequency == "weekly":
            cadence = Weekly(self.weekday)
        else:
            cadence = Fortnightly(self.weekday)
        return RecurringRule(
            id=self.id,
            kind=TransactionKind(self.kind),
            amount=self.amount,
            cadence=cadence,
            start=self.start,
            end=self.end,
            note=self.note,
            active=self.active,
        )


# ---------------------------------------------------------------------------
# Batch conversion
# ---------------------------------------------------------------------------

def parse_transactions(rows: Iterable[Mapping[str, Any]]) -> List[Transaction]:
    """Validate and convert transaction rows, skipping (and logging) bad ones."""
    out: List[Transaction] = []
    for i, row in enumerate(rows):
        try:
            out.append(TransactionRecord.model_validate(canonicalize_record(row)).to_domain())
        except ValidationError as exc:
            logger.warning("Skipping transaction row %d (%r): %s", i, row.get("id"), exc)
    return out


def parse_rules(rows: Iterable[Mapping[str, Any]]) -> List[RecurringRule]:
    """Validate and convert rule rows, skipping (and logging) bad ones."""
    out: List[RecurringRule] = []
    for i, row in enumerate(rows):
        try:
            out.append(RecurringRuleRecord.model_validate(canonicalize_record(row)).to_domain())
        except ValidationError as exc:
            logger.warning("Skipping recurring rule row %d (%r): %s", i, row.get("id"), exc)
    return out


def select_columns(df: pd.DataFrame, columns: Tuple[str, ...]) -> pd.DataFrame:
    """Return a canonicalized copy containing ONLY the known columns that are present."""
    d2 = canonicalize_columns(df)
    require_columns(d2, ["id"])
    present = [c for c in columns if c in d2.columns]
    return d2.loc[:, present].copy()


def transactions_from_frame(df: pd.DataFrame) -> List[Transaction]:
    return parse_transactions(select_columns(df, TRANSACTION_COLUMNS).to_dict("records"))


def rules_from_frame(df: pd.DataFrame) -> List[RecurringRule]:
    return parse_rules(select_columns(df, RULE_COLUMNS).to_dict("records"))


def imported_transactions_from_statement(df: pd.DataFrame) -> List[Transaction]:
    """
    Convert a signed bank statement (date, amount, note) into imported transactions.

    - negative amount -> expense, positive -> income, stored as the absolute value
    - rows with no date, an unparseable amount, or a zero amount are skipped
    - ids are uuid5 over (date, amount, note, repeat index) so re-importing the
      same statement yields the same ids and identical rows stay distinct
    """
    d2 = canonicalize_columns(df)
    require_columns(d2, [c for c in STATEMENT_COLUMNS if c != "note"])

    seen: Counter = Counter()
    out: List[Transaction] = []
    for i, row in enumerate(d2.to_dict("records")):
        raw_date, raw_amount = row.get("date"), row.get("amount")
        raw_note = row.get("note")
        note = None if _is_blank(raw_note) else str(raw_note).strip()
        if _is_blank(raw_date) or _is_blank(raw_amount):
            logger.warning("Skipping statement row %d: missing date or amount.", i)
            continue
        try:
            on = parse_iso_date(str(raw_date))
            amount = to_decimal(raw_amount)
        except ValueError as exc:
            logger.warning("Skipping statement row %d: %s", i, exc)
            continue
        if amount == 0:
            continue

        key = f"{on.isoformat()}|{amount}|{note or ''}"
        repeat = seen[key]
        seen[key] += 1
        out.append(
            Transaction(
                id=str(uuid.uuid5(STATEMENT_NAMESPACE, f"{key}|{repeat}")),
                date=on,
                kind=TransactionKind.EXPENSE if amount < 0 else TransactionKind.INCOME,
                amount=abs(amount),
                note=note,
                provenance=Provenance.IMPORTED,
            )
        )
    return out
