"""Project revenue, external costs and live cost views."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from costs_api.dependencies import get_actor, get_project_costs_service, path_period
from costs_api.schemas import (
    AnnualCostsOut,
    AnnualCostsSaveRequest,
    ExternalCostCreateRequest,
    ExternalCostGroupOut,
    ExternalCostItemOut,
    ExternalCostsOut,
    ExternalCostUpdateRequest,
    NetResultOut,
    ProjectCostsSummaryOut,
    ProjectMonthlyCostsOut,
    ProjectsSummaryOut,
    RevenueOut,
    RevenueSummaryOut,
    RevenueUpsertRequest,
)
from costs_kernel.domain.actor import Actor
from costs_kernel.domain.period import MonthPeriod
from costs_modules.project_costs.models import (
    AnnualCostEdit,
    EstimateEdit,
    ExternalCostKind,
    RevenueEdit,
)
from costs_modules.project_costs.service import ProjectCostsService

router = APIRouter(tags=["projects"])

_KIND_BY_SEGMENT = {
    "cost-estimates": ExternalCostKind.ESTIMATE,
    "cost-actuals": ExternalCostKind.ACTUAL,
}


# ---------------------------------------------------------------------------
# Revenue and the single-month view
# ---------------------------------------------------------------------------


@router.get("/projects/{project_id}/revenue", response_model=list[RevenueOut])
def list_revenues(
    project_id: UUID,
    year: int | None = Query(default=None),
    actor: Actor = Depends(get_actor),
    service: ProjectCostsService = Depends(get_project_costs_service),
):
    return [RevenueOut.model_validate(r) for r in service.list_revenues(actor, project_id, year)]


@router.put("/projects/{project_id}/revenue/{year}/{month}", response_model=RevenueOut)
def upsert_revenue(
    project_id: UUID,
    body: RevenueUpsertRequest,
    period: MonthPeriod = Depends(path_period),
    actor: Actor = Depends(get_actor),
    service: ProjectCostsService = Depends(get_project_costs_service),
):
    revenue = service.upsert_revenue(
        actor,
        project_id,
        period,
        estimated_revenue=body.estimated_revenue,
        actual_revenue=body.actual_revenue,
        notes=body.notes,
    )
    return RevenueOut.model_validate(revenue)


@router.get("/projects/{project_id}/monthly/{year}/{month}", response_model=ProjectMonthlyCostsOut)
def get_monthly_costs(
    project_id: UUID,
    period: MonthPeriod = Depends(path_period),
    actor: Actor = Depends(get_actor),
    service: ProjectCostsService = Depends(get_project_costs_service),
):
    costs = service.get_monthly_costs(actor, project_id, period)
    return ProjectMonthlyCostsOut(
        project_id=costs.project_id,
        year=costs.year,
        month=costs.month,
        revenue=RevenueSummaryOut(
            estimated=costs.estimated_revenue,
            actual=costs.actual_revenue,
            notes=costs.revenue_notes,
        ),
        external_costs=ExternalCostsOut(
            estimated=ExternalCostGroupOut.model_validate(costs.estimated_costs),
            actual=ExternalCostGroupOut.model_validate(costs.actual_costs),
        ),
        internal_costs=costs.internal_costs,
        net_result=NetResultOut(estimated=costs.net_estimated, actual=costs.net_actual),
    )


# ---------------------------------------------------------------------------
# External cost estimates and actuals
# ---------------------------------------------------------------------------


def _add_external_cost_routes(segment: str, kind: ExternalCostKind) -> None:
    @router.get(
        f"/projects/{{project_id}}/{segment}",
        response_model=list[ExternalCostItemOut],
        name=f"list_{kind.value.lower()}s",
    )
    def list_costs(
        project_id: UUID,
        year: int | None = Query(default=None),
        month: int | None = Query(default=None),
        actor: Actor = Depends(get_actor),
        service: ProjectCostsService = Depends(get_project_costs_service),
    ):
        items = service.list_external_costs(actor, kind, project_id, year=year, month=month)
        return [ExternalCostItemOut.model_validate(item) for item in items]

    @router.post(
        f"/projects/{{project_id}}/{segment}",
        response_model=ExternalCostItemOut,
        status_code=201,
        name=f"create_{kind.value.lower()}",
    )
    def create_cost(
        project_id: UUID,
        body: ExternalCostCreateRequest,
        actor: Actor = Depends(get_actor),
        service: ProjectCostsService = Depends(get_project_costs_service),
    ):
        item = service.create_external_cost(
            actor,
            kind,
            project_id,
            MonthPeriod(body.year, body.month),
            amount=body.amount,
            provider_name=body.provider_name,
            description=body.description,
            is_billed=body.is_billed,
            issue_date=body.issue_date,
        )
        return ExternalCostItemOut.model_validate(item)

    @router.patch(
        f"/{segment}/{{cost_id}}",
        response_model=ExternalCostItemOut,
        name=f"update_{kind.value.lower()}",
    )
    def update_cost(
        cost_id: UUID,
        body: ExternalCostUpdateRequest,
        actor: Actor = Depends(get_actor),
        service: ProjectCostsService = Depends(get_project_costs_service),
    ):
        period = MonthPeriod(body.year, body.month) if body.year is not None else None
        item = service.update_external_cost(
            actor,
            kind,
            cost_id,
            period=period,
            amount=body.amount,
            provider_name=body.provider_name,
            description=body.description,
            is_billed=body.is_billed,
            issue_date=body.issue_date,
        )
        return ExternalCostItemOut.model_validate(item)

    @router.delete(f"/{segment}/{{cost_id}}", status_code=204, name=f"delete_{kind.value.lower()}")
    def delete_cost(
        cost_id: UUID,
        actor: Actor = Depends(get_actor),
        service: ProjectCostsService = Depends(get_project_costs_service),
    ):
        service.delete_external_cost(actor, kind, cost_id)


for _segment, _kind in _KIND_BY_SEGMENT.items():
    _add_external_cost_routes(_segment, _kind)


# ---------------------------------------------------------------------------
# Every visible project
# ---------------------------------------------------------------------------


@router.get("/projects-summary", response_model=ProjectsSummaryOut)
def get_projects_summary(
    year: int = Query(...),
    month: int | None = Query(default=None),
    actor: Actor = Depends(get_actor),
    service: ProjectCostsService = Depends(get_project_costs_service),
):
    summaries = service.get_projects_summary(actor, year, month)
    return ProjectsSummaryOut(
        projects=[ProjectCostsSummaryOut.model_validate(s) for s in summaries]
    )


@router.get("/projects-annual", response_model=AnnualCostsOut)
def get_annual_costs(
    year: int = Query(...),
    actor: Actor = Depends(get_actor),
    service: ProjectCostsService = Depends(get_project_costs_service),
):
    return AnnualCostsOut.model_validate(service.get_annual_costs(actor, year))


@router.post("/projects-annual", status_code=204)
def save_annual_costs(
    body: AnnualCostsSaveRequest,
    actor: Actor = Depends(get_actor),
    service: ProjectCostsService = Depends(get_project_costs_service),
):
    edits = [
        AnnualCostEdit(
            project_id=item.project_id,
            month=item.month,
            revenue=(
                RevenueEdit(
                    estimated_revenue=item.revenue.estimated_revenue,
                    actual_revenue=item.revenue.actual_revenue,
                    notes=item.revenue.notes,
                )
                if item.revenue is not None
                else None
            ),
            estimate=(
                EstimateEdit(
                    amount=item.cost_estimate.amount,
                    estimate_id=item.cost_estimate.id if item.cost_estimate.action == "update" else None,
                    provider_name=item.cost_estimate.provider_name,
                    description=item.cost_estimate.description,
                )
                if item.cost_estimate is not None
                else None
            ),
        )
        for item in body.items
    ]
    service.save_annual_costs(actor, body.year, edits)
