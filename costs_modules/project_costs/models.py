"""
Project Monthly Costs Domain Models (``costs_modules.project_costs.models``).

Live (non-closing) view of one project's month: revenue, external costs,
internal labour cost and the resulting net figures.  Also the yearly
summaries built from the same inputs and the bulk annual edit request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from costs_kernel.db.types import ZERO


class ExternalCostKind(str, Enum):
    """Budgeted (ESTIMATE) or incurred (ACTUAL) external cost."""

    ESTIMATE = "ESTIMATE"
    ACTUAL = "ACTUAL"


@dataclass(frozen=True)
class ProjectRevenue:
    id: UUID
    project_id: UUID
    year: int
    month: int
    estimated_revenue: Decimal | None = None
    actual_revenue: Decimal | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ExternalCostItem:
    """
    One external cost line.

    is_billed and issue_date only apply to ACTUAL costs and stay None on
    estimates.
    """

    id: UUID
    amount: Decimal
    provider_name: str | None = None
    description: str | None = None
    kind: ExternalCostKind = ExternalCostKind.ACTUAL
    project_id: UUID | None = None
    year: int | None = None
    month: int | None = None
    is_billed: bool | None = None
    issue_date: date | None = None


@dataclass(frozen=True)
class ExternalCostGroup:
    items: tuple[ExternalCostItem, ...] = ()

    @property
    def total(self) -> Decimal:
        return sum((item.amount for item in self.items), ZERO)


@dataclass(frozen=True)
class ProjectMonthlyCosts:
    """
    Guarantees:
        - internal_costs is None when the viewer is not a full admin; net
          results then exclude internal cost.
        - a net result is None when the matching revenue is not recorded.
    """
    project_id: UUID
    year: int
    month: int
    estimated_revenue: Decimal | None
    actual_revenue: Decimal | None
    revenue_notes: str | None
    estimated_costs: ExternalCostGroup
    actual_costs: ExternalCostGroup
    internal_costs: Decimal | None
    net_estimated: Decimal | None
    net_actual: Decimal | None


# ---------------------------------------------------------------------------
# Summaries across projects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthCostSummary:
    """Totals only; same visibility and net rules as ProjectMonthlyCosts."""

    month: int
    estimated_revenue: Decimal | None
    actual_revenue: Decimal | None
    estimated_costs: Decimal
    actual_costs: Decimal
    internal_costs: Decimal | None
    net_estimated: Decimal | None
    net_actual: Decimal | None


@dataclass(frozen=True)
class ProjectCostsSummary:
    project_id: UUID
    project_name: str
    team_id: UUID | None
    year: int
    months: tuple[MonthCostSummary, ...]


@dataclass(frozen=True)
class AnnualMonthCosts:
    month: int
    revenue_id: UUID | None
    estimated_revenue: Decimal | None
    actual_revenue: Decimal | None
    estimated_costs: ExternalCostGroup
    actual_costs: ExternalCostGroup


@dataclass(frozen=True)
class AnnualProjectCosts:
    project_id: UUID
    project_name: str
    project_code: str | None
    team_id: UUID | None
    months: tuple[AnnualMonthCosts, ...]


@dataclass(frozen=True)
class AnnualCosts:
    year: int
    projects: tuple[AnnualProjectCosts, ...]


# ---------------------------------------------------------------------------
# Bulk annual edit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RevenueEdit:
    """Fields to write; None leaves the stored value unchanged."""

    estimated_revenue: Decimal | None = None
    actual_revenue: Decimal | None = None
    notes: str | None = None


@dataclass(frozen=True)
class EstimateEdit:
    """Create an estimate when ``estimate_id`` is None, otherwise update it."""

    amount: Decimal
    estimate_id: UUID | None = None
    provider_name: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class AnnualCostEdit:
    project_id: UUID
    month: int
    revenue: RevenueEdit | None = None
    estimate: EstimateEdit | None = None
