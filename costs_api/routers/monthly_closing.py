"""Month closing endpoints: status, preview, close and reopen."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from costs_api.dependencies import get_actor, get_closing_service, path_period
from costs_api.schemas import (
    ClosingOut,
    CloseResponse,
    CostHourOut,
    DistributionOut,
    PreviewOut,
    ProjectInternalCostOut,
    ReopenRequest,
    ValidationFailureOut,
    ValidationIssueOut,
)
from costs_kernel.domain.actor import Actor
from costs_kernel.domain.period import MonthPeriod
from costs_modules.closing.models import ClosingPreview
from costs_modules.closing.service import MonthClosingService

router = APIRouter(prefix="/monthly-closing", tags=["monthly-closing"])


def _preview_out(preview: ClosingPreview) -> PreviewOut:
    return PreviewOut(
        year=preview.year,
        month=preview.month,
        status=preview.status,
        can_close=preview.can_close,
        errors=[ValidationIssueOut.model_validate(e) for e in preview.errors],
        total_salaries=preview.total_salaries,
        total_overhead=preview.total_overhead,
        total_non_productive=preview.total_non_productive,
        total_revenue=preview.total_revenue,
        total_distributed=preview.total_distributed,
        distributions=[DistributionOut.model_validate(d) for d in preview.distributions],
        rounding_remainders=preview.rounding_remainders,
        equal_split=preview.equal_split,
        non_productive_hours_cost=preview.non_productive_hours_cost,
        non_productive_zero_hours_salaries=preview.non_productive_zero_hours_salaries,
        project_internal_costs=[
            ProjectInternalCostOut(project_id=project_id, internal_cost=cost)
            for project_id, cost in preview.project_internal_costs.items()
        ],
        cost_hours=[CostHourOut.model_validate(line) for line in preview.cost_hours],
    )


@router.get("/{year}/{month}", response_model=ClosingOut)
def get_closing(
    period: MonthPeriod = Depends(path_period),
    actor: Actor = Depends(get_actor),
    service: MonthClosingService = Depends(get_closing_service),
):
    return ClosingOut.model_validate(service.get_closing(actor.company_id, period))


@router.get("/{year}/{month}/preview", response_model=PreviewOut)
def preview_closing(
    period: MonthPeriod = Depends(path_period),
    actor: Actor = Depends(get_actor),
    service: MonthClosingService = Depends(get_closing_service),
):
    return _preview_out(service.preview(actor.company_id, period))


@router.post(
    "/{year}/{month}/close",
    response_model=CloseResponse,
    responses={400: {"model": ValidationFailureOut}, 409: {}},
)
def close_month(
    period: MonthPeriod = Depends(path_period),
    actor: Actor = Depends(get_actor),
    service: MonthClosingService = Depends(get_closing_service),
):
    closing = service.close(actor.company_id, period, actor.user_id)
    return CloseResponse(success=True, closing=ClosingOut.model_validate(closing))


@router.post("/{year}/{month}/reopen", response_model=ClosingOut)
def reopen_month(
    body: ReopenRequest,
    period: MonthPeriod = Depends(path_period),
    actor: Actor = Depends(get_actor),
    service: MonthClosingService = Depends(get_closing_service),
):
    closing = service.reopen(actor.company_id, period, actor.user_id, body.reason)
    return ClosingOut.model_validate(closing)
