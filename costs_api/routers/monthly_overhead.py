"""Monthly overhead line item endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from costs_api.dependencies import get_actor, get_overhead_service, query_period
from costs_api.schemas import (
    OverheadCreateRequest,
    OverheadListOut,
    OverheadMutationOut,
    OverheadUpdateRequest,
)
from costs_kernel.domain.actor import Actor
from costs_kernel.domain.period import MonthPeriod
from costs_modules.overhead.service import OverheadCostService

router = APIRouter(prefix="/monthly-overhead", tags=["monthly-overhead"])


@router.get("", response_model=OverheadListOut)
def list_overhead(
    period: MonthPeriod = Depends(query_period),
    actor: Actor = Depends(get_actor),
    service: OverheadCostService = Depends(get_overhead_service),
):
    return OverheadListOut.model_validate(service.list_costs(actor.company_id, period))


@router.post("", response_model=OverheadMutationOut, status_code=201)
def create_overhead(
    body: OverheadCreateRequest,
    actor: Actor = Depends(get_actor),
    service: OverheadCostService = Depends(get_overhead_service),
):
    result = service.create(
        actor.company_id,
        actor.user_id,
        MonthPeriod(body.year, body.month),
        amount=body.amount,
        cost_type=body.cost_type,
        description=body.description,
    )
    return OverheadMutationOut.model_validate(result)


@router.patch("/{overhead_id}", response_model=OverheadMutationOut)
def update_overhead(
    overhead_id: UUID,
    body: OverheadUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: OverheadCostService = Depends(get_overhead_service),
):
    result = service.update(
        actor.company_id,
        actor.user_id,
        overhead_id,
        amount=body.amount,
        cost_type=body.cost_type,
        description=body.description,
    )
    return OverheadMutationOut.model_validate(result)


@router.delete("/{overhead_id}", response_model=OverheadMutationOut)
def delete_overhead(
    overhead_id: UUID,
    actor: Actor = Depends(get_actor),
    service: OverheadCostService = Depends(get_overhead_service),
):
    result = service.delete(actor.company_id, actor.user_id, overhead_id)
    return OverheadMutationOut.model_validate(result)
