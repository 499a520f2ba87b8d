"""
Cashflow engine — recurrence expansion, daily projection, and the month runner.
"""

from .cashflow import project
from .recurrence import expand, occurrence_id
from .runner import MonthProjection, run_projection

__all__ = ["expand", "occurrence_id", "project", "MonthProjection", "run_projection"]
