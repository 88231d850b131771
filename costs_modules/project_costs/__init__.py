"""Per-project monthly revenue, external costs and live cost views."""

from costs_modules.project_costs.models import (
    AnnualCostEdit,
    AnnualCosts,
    AnnualMonthCosts,
    AnnualProjectCosts,
    EstimateEdit,
    ExternalCostGroup,
    ExternalCostItem,
    ExternalCostKind,
    MonthCostSummary,
    ProjectCostsSummary,
    ProjectMonthlyCosts,
    ProjectRevenue,
    RevenueEdit,
)
from costs_modules.project_costs.service import ProjectCostsService

__all__ = [
    "AnnualCostEdit",
    "AnnualCosts",
    "AnnualMonthCosts",
    "AnnualProjectCosts",
    "EstimateEdit",
    "ExternalCostGroup",
    "ExternalCostItem",
    "ExternalCostKind",
    "MonthCostSummary",
    "ProjectCostsSummary",
    "ProjectMonthlyCosts",
    "ProjectRevenue",
    "RevenueEdit",
    "ProjectCostsService",
]
