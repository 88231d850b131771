"""Pydantic request/response schemas for the costs API."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from costs_engines.validation import ValidationErrorType
from costs_modules.closing.models import ClosingStatus, OverheadCostType
from costs_modules.project_costs.models import ExternalCostKind


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Monthly closing
# ---------------------------------------------------------------------------


class ValidationIssueOut(_FromAttributes):
    type: ValidationErrorType
    message: str
    user_id: UUID | None = None
    user_name: str | None = None
    project_id: UUID | None = None
    project_name: str | None = None


class DistributionOut(_FromAttributes):
    project_id: UUID
    project_name: str
    project_revenue: Decimal
    revenue_share_percent: Decimal
    distributed_salaries: Decimal
    distributed_overhead: Decimal
    distributed_non_productive: Decimal
    total_distributed: Decimal


class ClosingOut(_FromAttributes):
    id: UUID | None = None
    year: int
    month: int
    status: ClosingStatus
    total_salaries: Decimal
    total_overhead: Decimal
    total_non_productive: Decimal
    total_revenue: Decimal
    total_distributed: Decimal
    closed_by_id: UUID | None = None
    closed_at: datetime | None = None
    reopened_by_id: UUID | None = None
    reopened_at: datetime | None = None
    reopen_reason: str | None = None
    distributions: list[DistributionOut] = []


class CostHourOut(_FromAttributes):
    user_id: UUID
    user_name: str
    cost_hour: Decimal
    total_hours: Decimal
    total_salary: Decimal
    has_hours: bool


class ProjectInternalCostOut(BaseModel):
    project_id: UUID
    internal_cost: Decimal


class PreviewOut(_FromAttributes):
    year: int
    month: int
    status: ClosingStatus
    can_close: bool
    errors: list[ValidationIssueOut]
    total_salaries: Decimal
    total_overhead: Decimal
    total_non_productive: Decimal
    total_revenue: Decimal
    total_distributed: Decimal
    distributions: list[DistributionOut]
    rounding_remainders: dict[str, Decimal]
    equal_split: bool
    non_productive_hours_cost: Decimal
    non_productive_zero_hours_salaries: Decimal
    project_internal_costs: list[ProjectInternalCostOut]
    cost_hours: list[CostHourOut]


class CloseResponse(BaseModel):
    success: bool = True
    closing: ClosingOut


class ReopenRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class ValidationFailureOut(BaseModel):
    code: str
    message: str
    errors: list[ValidationIssueOut]


class ErrorOut(BaseModel):
    code: str
    message: str


# ---------------------------------------------------------------------------
# Monthly salaries
# ---------------------------------------------------------------------------


class SalaryUpsertRequest(BaseModel):
    user_id: UUID
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    base_salary: Decimal | None = Field(default=None, ge=0)
    extras: Decimal | None = Field(default=None, ge=0)
    extras_description: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=500)


class MonthlySalaryOut(_FromAttributes):
    id: UUID
    user_id: UUID
    year: int
    month: int
    extras: Decimal
    extras_description: str | None = None
    notes: str | None = None
    base_salary_snapshot: Decimal | None = None


class SalaryLineOut(_FromAttributes):
    user_id: UUID
    user_name: str
    monthly_salary_id: UUID | None = None
    base_salary: Decimal | None = None
    extras: Decimal
    total_salary: Decimal
    hourly_cost: Decimal | None = None
    is_snapshot: bool
    extras_description: str | None = None
    notes: str | None = None


class SalaryListOut(_FromAttributes):
    year: int
    month: int
    status: ClosingStatus
    total: Decimal
    items: list[SalaryLineOut]


class SalaryMutationOut(_FromAttributes):
    salary: MonthlySalaryOut | None = None
    warning: str | None = None


# ---------------------------------------------------------------------------
# Monthly overhead
# ---------------------------------------------------------------------------


class OverheadCreateRequest(BaseModel):
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    amount: Decimal = Field(ge=0)
    cost_type: OverheadCostType
    description: str | None = Field(default=None, max_length=500)


class OverheadUpdateRequest(BaseModel):
    amount: Decimal | None = Field(default=None, ge=0)
    cost_type: OverheadCostType | None = None
    description: str | None = Field(default=None, max_length=500)


class OverheadOut(_FromAttributes):
    id: UUID
    year: int
    month: int
    cost_type: OverheadCostType
    amount: Decimal
    description: str | None = None


class OverheadListOut(_FromAttributes):
    year: int
    month: int
    total: Decimal
    items: list[OverheadOut]


class OverheadMutationOut(_FromAttributes):
    overhead: OverheadOut | None = None
    warning: str | None = None


# ---------------------------------------------------------------------------
# Project monthly costs
# ---------------------------------------------------------------------------


class RevenueUpsertRequest(BaseModel):
    estimated_revenue: Decimal | None = Field(default=None, ge=0)
    actual_revenue: Decimal | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=1000)


class RevenueOut(_FromAttributes):
    id: UUID
    project_id: UUID
    year: int
    month: int
    estimated_revenue: Decimal | None = None
    actual_revenue: Decimal | None = None
    notes: str | None = None


class ExternalCostItemOut(_FromAttributes):
    id: UUID
    kind: ExternalCostKind
    project_id: UUID | None = None
    year: int | None = None
    month: int | None = None
    amount: Decimal
    provider_name: str | None = None
    description: str | None = None
    is_billed: bool | None = None
    issue_date: date | None = None


class ExternalCostGroupOut(_FromAttributes):
    total: Decimal
    items: list[ExternalCostItemOut]


class RevenueSummaryOut(BaseModel):
    estimated: Decimal | None = None
    actual: Decimal | None = None
    notes: str | None = None


class ExternalCostsOut(BaseModel):
    estimated: ExternalCostGroupOut
    actual: ExternalCostGroupOut


class NetResultOut(BaseModel):
    estimated: Decimal | None = None
    actual: Decimal | None = None


class ProjectMonthlyCostsOut(BaseModel):
    project_id: UUID
    year: int
    month: int
    revenue: RevenueSummaryOut
    external_costs: ExternalCostsOut
    internal_costs: Decimal | None = None
    net_result: NetResultOut


# ---------------------------------------------------------------------------
# External costs, project summaries and the annual grid
# ---------------------------------------------------------------------------


class ExternalCostCreateRequest(BaseModel):
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    amount: Decimal = Field(ge=0)
    provider_name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    is_billed: bool | None = None
    issue_date: date | None = None


class ExternalCostUpdateRequest(BaseModel):
    year: int | None = Field(default=None, ge=2000, le=2100)
    month: int | None = Field(default=None, ge=1, le=12)
    amount: Decimal | None = Field(default=None, ge=0)
    provider_name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    is_billed: bool | None = None
    issue_date: date | None = None

    @model_validator(mode="after")
    def _year_and_month_together(self):
        if (self.year is None) != (self.month is None):
            raise ValueError("year and month must be given together")
        return self


class MonthCostSummaryOut(_FromAttributes):
    month: int
    estimated_revenue: Decimal | None = None
    actual_revenue: Decimal | None = None
    estimated_costs: Decimal
    actual_costs: Decimal
    internal_costs: Decimal | None = None
    net_estimated: Decimal | None = None
    net_actual: Decimal | None = None


class ProjectCostsSummaryOut(_FromAttributes):
    project_id: UUID
    project_name: str
    team_id: UUID | None = None
    year: int
    months: list[MonthCostSummaryOut]


class ProjectsSummaryOut(BaseModel):
    projects: list[ProjectCostsSummaryOut]


class AnnualMonthCostsOut(_FromAttributes):
    month: int
    revenue_id: UUID | None = None
    estimated_revenue: Decimal | None = None
    actual_revenue: Decimal | None = None
    estimated_costs: ExternalCostGroupOut
    actual_costs: ExternalCostGroupOut


class AnnualProjectCostsOut(_FromAttributes):
    project_id: UUID
    project_name: str
    project_code: str | None = None
    team_id: UUID | None = None
    months: list[AnnualMonthCostsOut]


class AnnualCostsOut(_FromAttributes):
    year: int
    projects: list[AnnualProjectCostsOut]


class EstimateOperationIn(BaseModel):
    action: Literal["create", "update"]
    id: UUID | None = None
    amount: Decimal = Field(ge=0)
    provider_name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _update_needs_id(self):
        if self.action == "update" and self.id is None:
            raise ValueError("id is required to update an estimate")
        return self


class AnnualCostItemIn(BaseModel):
    project_id: UUID
    month: int = Field(ge=1, le=12)
    revenue: RevenueUpsertRequest | None = None
    cost_estimate: EstimateOperationIn | None = None


class AnnualCostsSaveRequest(BaseModel):
    year: int = Field(ge=2000, le=2100)
    items: list[AnnualCostItemIn]
