"""Shared pytest fixtures.

Builders keep test bodies short: rules and transactions default to the most
common shape and tests override only what they exercise.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from core.types import (
    Cadence,
    Monthly,
    Provenance,
    RecurringRule,
    Transaction,
    TransactionKind,
)


def make_rule(
    rule_id: str = "rule",
    *,
    cadence: Cadence = Monthly(1),
    start: date = date(2024, 1, 1),
    end: Optional[date] = None,
    amount: str = "100",
    kind: TransactionKind = TransactionKind.INCOME,
    active: bool = True,
    note: Optional[str] = None,
) -> RecurringRule:
    return RecurringRule(
        id=rule_id,
        kind=kind,
        amount=Decimal(amount),
        cadence=cadence,
        start=start,
        end=end,
        note=note,
        active=active,
    )


def make_txn(
    txn_id: str,
    on: date,
    amount: str,
    kind: TransactionKind = TransactionKind.EXPENSE,
    *,
    provenance: Provenance = Provenance.MANUAL,
    rule_id: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=txn_id,
        date=on,
        kind=kind,
        amount=Decimal(amount),
        provenance=provenance,
        rule_id=rule_id,
    )


@pytest.fixture
def rule_factory():
    return make_rule


@pytest.fixture
def txn_factory():
    return make_txn


@pytest.fixture
def salary_rule() -> RecurringRule:
    """Monthly income of 3000 on the 1st, open-ended from 2023-01-01."""
    return make_rule(
        "salary",
        cadence=Monthly(1),
        start=date(2023, 1, 1),
        amount="3000",
        note="Salary",
    )
