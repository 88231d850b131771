"""FastAPI dependencies: database session, caller identity, period, services."""

from __future__ import annotations

from collections.abc import Generator
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Path, Query, Request
from sqlalchemy.orm import Session

from costs_kernel.domain.actor import Actor
from costs_kernel.domain.clock import Clock
from costs_kernel.domain.period import MonthPeriod
from costs_kernel.models.enums import UserRole
from costs_modules.closing.config import ClosingConfig
from costs_modules.closing.service import MonthClosingService
from costs_modules.overhead.service import OverheadCostService
from costs_modules.project_costs.service import ProjectCostsService
from costs_modules.salaries.service import MonthlySalaryService


def get_db_session(request: Request) -> Generator[Session, None, None]:
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_closing_config(request: Request) -> ClosingConfig:
    return request.app.state.config.closing


def get_actor(
    x_user_id: UUID = Header(...),
    x_company_id: UUID = Header(...),
    x_user_role: str = Header(...),
    x_team_id: UUID | None = Header(default=None),
) -> Actor:
    """Caller identity as forwarded by the authenticating gateway."""
    try:
        role = UserRole(x_user_role.upper())
    except ValueError:
        raise HTTPException(status_code=401, detail="Unknown user role")
    return Actor(user_id=x_user_id, company_id=x_company_id, role=role, team_id=x_team_id)


def path_period(year: int = Path(...), month: int = Path(...)) -> MonthPeriod:
    return MonthPeriod(year, month)


def query_period(year: int = Query(...), month: int = Query(...)) -> MonthPeriod:
    return MonthPeriod(year, month)


def get_closing_service(
    session: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
    config: ClosingConfig = Depends(get_closing_config),
) -> MonthClosingService:
    return MonthClosingService(session, clock=clock, config=config)


def get_salary_service(
    session: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
    config: ClosingConfig = Depends(get_closing_config),
) -> MonthlySalaryService:
    return MonthlySalaryService(session, clock=clock, config=config)


def get_overhead_service(
    session: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
    config: ClosingConfig = Depends(get_closing_config),
) -> OverheadCostService:
    return OverheadCostService(session, clock=clock, config=config)


def get_project_costs_service(
    session: Session = Depends(get_db_session),
    config: ClosingConfig = Depends(get_closing_config),
) -> ProjectCostsService:
    return ProjectCostsService(session, config=config)
