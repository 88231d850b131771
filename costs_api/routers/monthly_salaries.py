"""Monthly salary endpoints (list, upsert, delete)."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from costs_api.dependencies import get_actor, get_salary_service, query_period
from costs_api.schemas import SalaryListOut, SalaryMutationOut, SalaryUpsertRequest
from costs_kernel.domain.actor import Actor
from costs_kernel.domain.period import MonthPeriod
from costs_modules.salaries.service import MonthlySalaryService

router = APIRouter(prefix="/monthly-salaries", tags=["monthly-salaries"])


@router.get("", response_model=SalaryListOut)
def list_salaries(
    period: MonthPeriod = Depends(query_period),
    actor: Actor = Depends(get_actor),
    service: MonthlySalaryService = Depends(get_salary_service),
):
    return SalaryListOut.model_validate(service.list_salaries(actor.company_id, period))


@router.post("", response_model=SalaryMutationOut)
def upsert_salary(
    body: SalaryUpsertRequest,
    actor: Actor = Depends(get_actor),
    service: MonthlySalaryService = Depends(get_salary_service),
):
    result = service.upsert(
        actor.company_id,
        actor.user_id,
        body.user_id,
        MonthPeriod(body.year, body.month),
        base_salary=body.base_salary,
        extras=body.extras,
        extras_description=body.extras_description,
        notes=body.notes,
    )
    return SalaryMutationOut.model_validate(result)


@router.delete("/{salary_id}", response_model=SalaryMutationOut)
def delete_salary(
    salary_id: UUID,
    actor: Actor = Depends(get_actor),
    service: MonthlySalaryService = Depends(get_salary_service),
):
    result = service.delete(actor.company_id, actor.user_id, salary_id)
    return SalaryMutationOut.model_validate(result)
