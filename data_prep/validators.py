"""
Data quality validation for rules and transactions before they reach the engine.

The engine itself fails safe (bad rules are skipped, out-of-month rows are
ignored); these checks are for the layer that accepts edits, so problems can
be shown to the user instead of silently producing an empty calendar.

Catches:
- Duplicate identifiers
- Negative amounts
- Rules that can never fire (end before start, weekday not matching start)
- Monthly days that will clamp in shorter months
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence

from core.types import Fortnightly, Monthly, Provenance, RecurringRule, Transaction, Weekly
from core.utils import sunday_weekday

_WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a batch."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_rules(rules: Sequence[RecurringRule]) -> ValidationResult:
    """
    Run all checks on a rule set.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Identifiers ---
    dup_ids = sorted(i for i, n in Counter(r.id for r in rules).items() if n > 1)
    if dup_ids:
        result.errors.append(f"Duplicate rule ids: {dup_ids}")

    for rule in rules:
        label = f"Rule {rule.id!r}"

        if not isinstance(rule.cadence, (Weekly, Fortnightly, Monthly)):
            result.errors.append(f"{label} has an unknown cadence {rule.cadence!r}.")
            continue

        if rule.amount < 0:
            result.errors.append(f"{label} has negative amount {rule.amount}.")

        if not rule.active:
            result.warnings.append(f"{label} is inactive and produces no occurrences.")

        if rule.end is not None and rule.end < rule.start:
            result.warnings.append(
                f"{label} ends ({rule.end.isoformat()}) before it starts "
                f"({rule.start.isoformat()}); it never produces occurrences."
            )

        cadence = rule.cadence
        if isinstance(cadence, (Weekly, Fortnightly)):
            start_wd = sunday_weekday(rule.start)
            if start_wd != cadence.weekday:
                result.warnings.append(
                    f"{label} is {cadence.frequency} on {_WEEKDAY_NAMES[cadence.weekday]} but starts on a "
                    f"{_WEEKDAY_NAMES[start_wd]} ({rule.start.isoformat()}); cadence is anchored to the "
                    f"start date, so it never produces occurrences."
                )
        elif cadence.day_of_month > 28:
            result.warnings.append(
                f"{label} is monthly on day {cadence.day_of_month}; it falls on the last day "
                f"of shorter months."
            )

    return result


def validate_transactions(transactions: Sequence[Transaction]) -> ValidationResult:
    """Run all checks on stored transactions."""
    result = ValidationResult()

    dup_ids = sorted(i for i, n in Counter(t.id for t in transactions).items() if n > 1)
    if dup_ids:
        result.warnings.append(f"{len(dup_ids)} duplicate transaction ids found: {dup_ids}")

    orphan = [t.id for t in transactions if t.provenance is Provenance.RECURRING and not t.rule_id]
    if orphan:
        result.errors.append(f"Recurring transactions without a rule reference: {orphan}")

    n_stored_recurring = sum(1 for t in transactions if t.provenance is Provenance.RECURRING)
    if n_stored_recurring:
        result.warnings.append(
            f"{n_stored_recurring} stored transactions are tagged recurring; occurrences are "
            f"regenerated from rules and these rows are ignored by the projection."
        )

    return result
