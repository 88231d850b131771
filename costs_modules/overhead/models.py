"""
Monthly Overhead Domain Models (``costs_modules.overhead.models``).

Overhead line items are company-wide monthly costs (structure, transfer
pricing, other professionals) that the closing distributes across
productive projects.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from costs_kernel.db.types import ZERO
from costs_modules.closing.models import OverheadCostType


@dataclass(frozen=True)
class OverheadCost:
    id: UUID
    company_id: UUID
    year: int
    month: int
    cost_type: OverheadCostType
    amount: Decimal
    description: str | None = None


@dataclass(frozen=True)
class OverheadCostList:
    year: int
    month: int
    items: tuple[OverheadCost, ...]

    @property
    def total(self) -> Decimal:
        return sum((item.amount for item in self.items), ZERO)


@dataclass(frozen=True)
class OverheadMutationResult:
    overhead: OverheadCost | None
    warning: str | None = None
