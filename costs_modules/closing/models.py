"""
Month Closing Domain Models (``costs_modules.closing.models``).

Responsibility
--------------
Frozen dataclass value objects for the closing lifecycle: the closing
state itself, the preview a close would commit, and per-user cost-hour
lines shown alongside the preview.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``MonthClosingService`` and returned to callers (HTTP layer, tests).

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from costs_engines.distribution import ProjectDistribution
from costs_engines.validation import ValidationIssue
from costs_kernel.db.types import ZERO


class ClosingStatus(str, Enum):
    """Lifecycle status of a company month.

    Contract: OPEN (no row) -> CLOSED -> REOPENED -> CLOSED ...
    """

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    REOPENED = "REOPENED"


class OverheadCostType(str, Enum):
    TRANSFER_PRICING = "TRANSFER_PRICING"
    OTHER_PROFESSIONALS = "OTHER_PROFESSIONALS"
    STRUCTURE_COSTS = "STRUCTURE_COSTS"
    OTHER = "OTHER"


@dataclass(frozen=True)
class MonthlyClosing:
    """Persisted (or implicit OPEN) closing state of a company month."""
    company_id: UUID
    year: int
    month: int
    status: ClosingStatus = ClosingStatus.OPEN
    id: UUID | None = None
    total_salaries: Decimal = ZERO
    total_overhead: Decimal = ZERO
    total_non_productive: Decimal = ZERO
    total_revenue: Decimal = ZERO
    closed_by_id: UUID | None = None
    closed_at: datetime | None = None
    reopened_by_id: UUID | None = None
    reopened_at: datetime | None = None
    reopen_reason: str | None = None
    distributions: tuple[ProjectDistribution, ...] = ()

    @property
    def is_closed(self) -> bool:
        return self.status == ClosingStatus.CLOSED

    @property
    def total_distributed(self) -> Decimal:
        return sum((d.total_distributed for d in self.distributions), ZERO)


@dataclass(frozen=True)
class CostHourLine:
    """Per-user cost-hour figures, rounded for display."""
    user_id: UUID
    user_name: str
    cost_hour: Decimal
    total_hours: Decimal
    total_salary: Decimal
    has_hours: bool


@dataclass(frozen=True)
class ClosingPreview:
    """
    What closing the month right now would commit.

    ``errors`` lists every blocking finding; ``can_close`` is True only when
    it is empty.  Distributions are computed even when blocked so the caller
    can inspect the would-be allocation.
    """
    company_id: UUID
    year: int
    month: int
    status: ClosingStatus
    errors: tuple[ValidationIssue, ...]
    total_salaries: Decimal
    total_overhead: Decimal
    total_non_productive: Decimal
    total_revenue: Decimal
    distributions: tuple[ProjectDistribution, ...]
    rounding_remainders: dict[str, Decimal] = field(default_factory=dict)
    equal_split: bool = False
    non_productive_hours_cost: Decimal = ZERO
    non_productive_zero_hours_salaries: Decimal = ZERO
    project_internal_costs: dict[UUID, Decimal] = field(default_factory=dict)
    cost_hours: tuple[CostHourLine, ...] = ()

    @property
    def can_close(self) -> bool:
        return len(self.errors) == 0

    @property
    def total_distributed(self) -> Decimal:
        return sum((d.total_distributed for d in self.distributions), ZERO)
