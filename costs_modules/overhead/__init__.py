"""Monthly overhead cost line items."""

from costs_modules.closing.models import OverheadCostType
from costs_modules.overhead.models import (
    OverheadCost,
    OverheadCostList,
    OverheadMutationResult,
)
from costs_modules.overhead.service import OverheadCostService

__all__ = [
    "OverheadCostType",
    "OverheadCost",
    "OverheadCostList",
    "OverheadMutationResult",
    "OverheadCostService",
]
