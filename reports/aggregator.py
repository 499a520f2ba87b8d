"""
Turn snapshot sequences into display tables.

Rounding happens here and only here: the engine keeps full Decimal precision,
these frames carry floats rounded to currency places for rendering/export.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
import pandas as pd

from core.types import CashflowSnapshot
from core.utils import require_columns, round_currency, sunday_weekday

if TYPE_CHECKING:
    from engine.runner import MonthProjection

SNAPSHOT_FRAME_COLUMNS = ("date", "daily_delta", "running_balance")


def snapshots_to_frame(
    snapshots: Sequence[CashflowSnapshot],
    *,
    places: int = 2,
) -> pd.DataFrame:
    """
    One row per day: date (datetime64), daily_delta, running_balance.

    Values are rounded half away from zero to ``places`` decimals.
    """
    rows = [
        {
            "date": s.date,
            "daily_delta": float(round_currency(s.daily_delta, places)),
            "running_balance": float(round_currency(s.running_balance, places)),
        }
        for s in snapshots
    ]
    out = pd.DataFrame(rows, columns=list(SNAPSHOT_FRAME_COLUMNS))
    out["date"] = pd.to_datetime(out["date"])
    return out


def projection_to_frame(projection: "MonthProjection") -> pd.DataFrame:
    """Daily rows of a projected month, rounded to its configured currency places."""
    return snapshots_to_frame(projection.snapshots, places=projection.config.currency_places)


def aggregate_by_week(frame: pd.DataFrame, *, places: int = 2) -> pd.DataFrame:
    """
    Collapse a month of daily rows into the rows of a Sunday-first calendar grid.

    Parameters
    ----------
    frame : pd.DataFrame
        Output of ``snapshots_to_frame`` for a single month (date order).

    Returns
    -------
    DataFrame with one row per grid week:
        week, start, end, days, net_delta, closing_balance
    """
    require_columns(frame, SNAPSHOT_FRAME_COLUMNS)
    if frame.empty:
        return pd.DataFrame(columns=["week", "start", "end", "days", "net_delta", "closing_balance"])

    df = frame.sort_values("date").reset_index(drop=True)
    first = pd.Timestamp(df["date"].iloc[0]).date()
    offset = sunday_weekday(first)
    df["week"] = (np.arange(len(df)) + offset) // 7

    grouped = df.groupby("week", as_index=False).agg(
        start=("date", "min"),
        end=("date", "max"),
        days=("date", "size"),
        net_delta=("daily_delta", "sum"),
        closing_balance=("running_balance", "last"),
    )
    grouped["net_delta"] = grouped["net_delta"].apply(lambda v: float(round_currency(v, places)))
    return grouped
