"""
Month Closing module.

Preview, close and reopen a company month; persist the per-project
distribution of salaries, overhead and non-productive cost.
"""

from costs_modules.closing.config import ClosingConfig
from costs_modules.closing.models import (
    ClosingPreview,
    ClosingStatus,
    CostHourLine,
    MonthlyClosing,
    OverheadCostType,
)
from costs_modules.closing.service import MonthClosingService

__all__ = [
    "ClosingConfig",
    "ClosingPreview",
    "ClosingStatus",
    "CostHourLine",
    "MonthlyClosing",
    "OverheadCostType",
    "MonthClosingService",
]
