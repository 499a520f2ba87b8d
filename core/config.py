"""
Projection configuration.
Presentation rounding and alert thresholds live here; the engine math itself
has no tunables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from .utils import to_decimal


@dataclass(frozen=True)
class ProjectionConfig:
    # decimal places used when snapshots/summaries are rounded for display
    currency_places: int = 2

    # occurrence ids look like "<prefix>-<rule id>-<YYYY-MM-DD>"
    occurrence_id_prefix: str = "r"

    # reports flag any day whose running balance falls below this
    low_balance_threshold: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        if self.currency_places < 0:
            raise ValueError(f"currency_places must be >= 0, got {self.currency_places}")
        if not self.occurrence_id_prefix or "-" in self.occurrence_id_prefix:
            raise ValueError(
                f"occurrence_id_prefix must be non-empty and dash-free, "
                f"got {self.occurrence_id_prefix!r}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProjectionConfig":
        """Build a config from ``CASHFLOW_*`` environment variables, defaults otherwise."""
        env = os.environ if environ is None else environ
        defaults = cls()
        places = env.get("CASHFLOW_CURRENCY_PLACES")
        prefix = env.get("CASHFLOW_OCCURRENCE_PREFIX")
        threshold = env.get("CASHFLOW_LOW_BALANCE_THRESHOLD")
        return cls(
            currency_places=int(places) if places else defaults.currency_places,
            occurrence_id_prefix=prefix.strip() if prefix else defaults.occurrence_id_prefix,
            low_balance_threshold=(
                to_decimal(threshold) if threshold else defaults.low_balance_threshold
            ),
        )
