"""
Project Monthly Costs Service (``costs_modules.project_costs.service``).

Responsibility
--------------
Record a project's monthly revenue and external costs (estimates and
actuals) and report live cost views: one project's month, every visible
project's monthly totals for a year, and the annual grid edited in bulk.
Internal labour cost is priced at each user's current ``hourly_cost``.

Invariants enforced
-------------------
* Full admins (OWNER, ADMIN) reach every project of their company; team
  leaders only projects of their own team; other roles none.
* Internal cost is hidden (None) from non-full-admins and then left out of
  the net result.
* A net result is None while the matching revenue is not recorded.
* Every mutation owns its transaction (commit / rollback).  The bulk
  annual save is all-or-nothing.
* Revenue and external cost edits never reopen a closed month.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from costs_engines.project_cost import CostMode, ProjectCostAggregator
from costs_kernel.db.types import ZERO, round_money
from costs_kernel.domain.actor import Actor
from costs_kernel.domain.period import MonthPeriod
from costs_kernel.exceptions import (
    ExternalCostNotFoundError,
    InvalidInputError,
    ProjectAccessDeniedError,
    ProjectNotFoundError,
)
from costs_kernel.logging_config import LogContext, get_logger
from costs_kernel.models.project import Project
from costs_kernel.models.revenue import (
    ProjectExternalCostActual,
    ProjectExternalCostEstimate,
    ProjectMonthlyRevenue,
)
from costs_kernel.selectors.cost_inputs import CostInputsSelector
from costs_modules.closing.config import ClosingConfig
from costs_modules.project_costs.models import (
    AnnualCostEdit,
    AnnualCosts,
    AnnualMonthCosts,
    AnnualProjectCosts,
    ExternalCostGroup,
    ExternalCostItem,
    ExternalCostKind,
    MonthCostSummary,
    ProjectCostsSummary,
    ProjectMonthlyCosts,
    ProjectRevenue,
)

logger = get_logger("modules.project_costs.service")

MAX_DESCRIPTION_LENGTH = 500

_MODEL_BY_KIND = {
    ExternalCostKind.ESTIMATE: ProjectExternalCostEstimate,
    ExternalCostKind.ACTUAL: ProjectExternalCostActual,
}

ALL_MONTHS = tuple(range(1, 13))


def _net(revenue: Decimal | None, external: Decimal, internal: Decimal | None) -> Decimal | None:
    if revenue is None:
        return None
    return round_money(revenue - external - (internal if internal is not None else ZERO))


def _revenue_dto(row: ProjectMonthlyRevenue) -> ProjectRevenue:
    return ProjectRevenue(
        id=row.id,
        project_id=row.project_id,
        year=row.year,
        month=row.month,
        estimated_revenue=row.estimated_revenue,
        actual_revenue=row.actual_revenue,
        notes=row.notes,
    )


def _cost_item(row) -> ExternalCostItem:
    is_actual = isinstance(row, ProjectExternalCostActual)
    return ExternalCostItem(
        id=row.id,
        amount=row.amount,
        provider_name=row.provider_name,
        description=row.description,
        kind=ExternalCostKind.ACTUAL if is_actual else ExternalCostKind.ESTIMATE,
        project_id=row.project_id,
        year=row.year,
        month=row.month,
        is_billed=row.is_billed if is_actual else None,
        issue_date=row.issue_date if is_actual else None,
    )


class ProjectCostsService:
    def __init__(
        self,
        session: Session,
        config: ClosingConfig | None = None,
    ):
        self._session = session
        self._config = config or ClosingConfig()
        self._inputs = CostInputsSelector(session)
        self._aggregator = ProjectCostAggregator()

    # =========================================================================
    # Revenue
    # =========================================================================

    def list_revenues(
        self, actor: Actor, project_id: UUID, year: int | None = None
    ) -> tuple[ProjectRevenue, ...]:
        """Revenue rows of a project, newest month first, optionally one year."""
        if year is not None:
            MonthPeriod(year, 1)
        self._get_visible_project(actor, project_id)

        stmt = select(ProjectMonthlyRevenue).where(ProjectMonthlyRevenue.project_id == project_id)
        if year is not None:
            stmt = stmt.where(ProjectMonthlyRevenue.year == year)
        stmt = stmt.order_by(ProjectMonthlyRevenue.year.desc(), ProjectMonthlyRevenue.month.desc())
        return tuple(_revenue_dto(row) for row in self._session.scalars(stmt))

    def upsert_revenue(
        self,
        actor: Actor,
        project_id: UUID,
        period: MonthPeriod,
        estimated_revenue: Decimal | None = None,
        actual_revenue: Decimal | None = None,
        notes: str | None = None,
    ) -> ProjectRevenue:
        """
        Create or update the project's revenue for the month.

        None leaves a field unchanged.  Revenue edits do not reopen a closed
        month; the next close picks them up.

        Raises:
            ProjectNotFoundError, ProjectAccessDeniedError, InvalidInputError.
        """
        self._check_revenue(estimated_revenue, actual_revenue)

        with LogContext.bind(
            company_id=actor.company_id, actor_id=actor.user_id, period=period.code
        ):
            try:
                self._get_visible_project(actor, project_id)
                row = self._write_revenue(
                    actor.user_id, project_id, period, estimated_revenue, actual_revenue, notes
                )
                self._session.flush()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "project_revenue_upserted",
                extra={
                    "project_id": str(project_id),
                    "estimated_revenue": str(row.estimated_revenue),
                    "actual_revenue": str(row.actual_revenue),
                },
            )
            return _revenue_dto(row)

    # =========================================================================
    # External costs (estimates and actuals)
    # =========================================================================

    def list_external_costs(
        self,
        actor: Actor,
        kind: ExternalCostKind,
        project_id: UUID,
        year: int | None = None,
        month: int | None = None,
    ) -> tuple[ExternalCostItem, ...]:
        """Newest month first, then newest entry first within a month."""
        if year is not None or month is not None:
            MonthPeriod(year if year is not None else 2000, month if month is not None else 1)
        self._get_visible_project(actor, project_id)

        model = _MODEL_BY_KIND[ExternalCostKind(kind)]
        stmt = select(model).where(model.project_id == project_id)
        if year is not None:
            stmt = stmt.where(model.year == year)
        if month is not None:
            stmt = stmt.where(model.month == month)
        stmt = stmt.order_by(
            model.year.desc(), model.month.desc(), model.created_at.desc(), model.id
        )
        return tuple(_cost_item(row) for row in self._session.scalars(stmt))

    def create_external_cost(
        self,
        actor: Actor,
        kind: ExternalCostKind,
        project_id: UUID,
        period: MonthPeriod,
        amount: Decimal,
        provider_name: str | None = None,
        description: str | None = None,
        is_billed: bool | None = None,
        issue_date: date | None = None,
    ) -> ExternalCostItem:
        """
        Record an estimate or an actual for the project's month.

        Raises:
            ProjectNotFoundError, ProjectAccessDeniedError, InvalidInputError.
        """
        kind = ExternalCostKind(kind)
        self._check_cost_fields(kind, amount, description, is_billed, issue_date)

        with LogContext.bind(
            company_id=actor.company_id, actor_id=actor.user_id, period=period.code
        ):
            try:
                self._get_visible_project(actor, project_id)
                row = self._new_cost_row(
                    kind, actor.user_id, project_id, period, amount, provider_name, description
                )
                if kind == ExternalCostKind.ACTUAL:
                    row.is_billed = bool(is_billed)
                    row.issue_date = issue_date
                self._session.flush()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "external_cost_created",
                extra={
                    "cost_id": str(row.id),
                    "kind": kind,
                    "project_id": str(project_id),
                    "amount": str(amount),
                },
            )
            return _cost_item(row)

    def update_external_cost(
        self,
        actor: Actor,
        kind: ExternalCostKind,
        cost_id: UUID,
        period: MonthPeriod | None = None,
        amount: Decimal | None = None,
        provider_name: str | None = None,
        description: str | None = None,
        is_billed: bool | None = None,
        issue_date: date | None = None,
    ) -> ExternalCostItem:
        """Patch a cost line; None leaves a field unchanged."""
        kind = ExternalCostKind(kind)
        self._check_cost_fields(kind, amount, description, is_billed, issue_date)

        with LogContext.bind(company_id=actor.company_id, actor_id=actor.user_id):
            try:
                row = self._get_visible_cost(actor, kind, cost_id)
                if period is not None:
                    row.year = period.year
                    row.month = period.month
                if amount is not None:
                    row.amount = amount
                if provider_name is not None:
                    row.provider_name = provider_name
                if description is not None:
                    row.description = description
                if is_billed is not None:
                    row.is_billed = is_billed
                if issue_date is not None:
                    row.issue_date = issue_date
                row.updated_by_id = actor.user_id
                self._session.flush()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "external_cost_updated",
                extra={"cost_id": str(cost_id), "kind": kind, "amount": str(row.amount)},
            )
            return _cost_item(row)

    def delete_external_cost(self, actor: Actor, kind: ExternalCostKind, cost_id: UUID) -> None:
        kind = ExternalCostKind(kind)
        with LogContext.bind(company_id=actor.company_id, actor_id=actor.user_id):
            try:
                row = self._get_visible_cost(actor, kind, cost_id)
                self._session.delete(row)
                self._session.flush()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info("external_cost_deleted", extra={"cost_id": str(cost_id), "kind": kind})

    # =========================================================================
    # Single project month
    # =========================================================================

    def get_monthly_costs(
        self,
        actor: Actor,
        project_id: UUID,
        period: MonthPeriod,
    ) -> ProjectMonthlyCosts:
        """Live monthly cost view of one project."""
        self._get_visible_project(actor, project_id)

        revenue = self._session.scalars(
            select(ProjectMonthlyRevenue).where(
                ProjectMonthlyRevenue.project_id == project_id,
                ProjectMonthlyRevenue.year == period.year,
                ProjectMonthlyRevenue.month == period.month,
            )
        ).first()
        estimated = ExternalCostGroup(
            items=self._external_items(ProjectExternalCostEstimate, project_id, period)
        )
        actual = ExternalCostGroup(
            items=self._external_items(ProjectExternalCostActual, project_id, period)
        )

        internal_costs = None
        if actor.is_full_admin:
            internal_costs = self._live_internal_cost(actor.company_id, project_id, period)

        estimated_revenue = revenue.estimated_revenue if revenue is not None else None
        actual_revenue = revenue.actual_revenue if revenue is not None else None

        return ProjectMonthlyCosts(
            project_id=project_id,
            year=period.year,
            month=period.month,
            estimated_revenue=estimated_revenue,
            actual_revenue=actual_revenue,
            revenue_notes=revenue.notes if revenue is not None else None,
            estimated_costs=estimated,
            actual_costs=actual,
            internal_costs=internal_costs,
            net_estimated=_net(estimated_revenue, estimated.total, internal_costs),
            net_actual=_net(actual_revenue, actual.total, internal_costs),
        )

    # =========================================================================
    # All visible projects
    # =========================================================================

    def get_projects_summary(
        self, actor: Actor, year: int, month: int | None = None
    ) -> tuple[ProjectCostsSummary, ...]:
        """
        Monthly totals of every active project the actor can see, by name.

        Covers the whole year unless ``month`` narrows it to one month.
        """
        MonthPeriod(year, month if month is not None else 1)
        months = (month,) if month is not None else ALL_MONTHS
        projects = self._visible_active_projects(actor)
        if not projects:
            return ()

        project_ids = [p.id for p in projects]
        revenues = self._revenues_by_project_month(project_ids, year)
        estimates = self._cost_totals(ProjectExternalCostEstimate, project_ids, year)
        actuals = self._cost_totals(ProjectExternalCostActual, project_ids, year)

        summaries = []
        for project in projects:
            lines = []
            for m in months:
                key = (project.id, m)
                revenue = revenues.get(key)
                estimated_revenue = revenue.estimated_revenue if revenue is not None else None
                actual_revenue = revenue.actual_revenue if revenue is not None else None
                estimated_costs = estimates.get(key, ZERO)
                actual_costs = actuals.get(key, ZERO)
                internal_costs = None
                if actor.is_full_admin:
                    internal_costs = self._live_internal_cost(
                        actor.company_id, project.id, MonthPeriod(year, m)
                    )
                lines.append(
                    MonthCostSummary(
                        month=m,
                        estimated_revenue=estimated_revenue,
                        actual_revenue=actual_revenue,
                        estimated_costs=estimated_costs,
                        actual_costs=actual_costs,
                        internal_costs=internal_costs,
                        net_estimated=_net(estimated_revenue, estimated_costs, internal_costs),
                        net_actual=_net(actual_revenue, actual_costs, internal_costs),
                    )
                )
            summaries.append(
                ProjectCostsSummary(
                    project_id=project.id,
                    project_name=project.name,
                    team_id=project.team_id,
                    year=year,
                    months=tuple(lines),
                )
            )
        return tuple(summaries)

    def get_annual_costs(self, actor: Actor, year: int) -> AnnualCosts:
        """Twelve months of revenue and external cost lines per visible project."""
        MonthPeriod(year, 1)
        projects = self._visible_active_projects(actor)
        if not projects:
            return AnnualCosts(year=year, projects=())

        project_ids = [p.id for p in projects]
        revenues = self._revenues_by_project_month(project_ids, year)
        estimates = self._cost_items(ProjectExternalCostEstimate, project_ids, year)
        actuals = self._cost_items(ProjectExternalCostActual, project_ids, year)

        annual = []
        for project in projects:
            months = []
            for m in ALL_MONTHS:
                key = (project.id, m)
                revenue = revenues.get(key)
                months.append(
                    AnnualMonthCosts(
                        month=m,
                        revenue_id=revenue.id if revenue is not None else None,
                        estimated_revenue=revenue.estimated_revenue if revenue is not None else None,
                        actual_revenue=revenue.actual_revenue if revenue is not None else None,
                        estimated_costs=ExternalCostGroup(items=tuple(estimates.get(key, ()))),
                        actual_costs=ExternalCostGroup(items=tuple(actuals.get(key, ()))),
                    )
                )
            annual.append(
                AnnualProjectCosts(
                    project_id=project.id,
                    project_name=project.name,
                    project_code=project.code,
                    team_id=project.team_id,
                    months=tuple(months),
                )
            )
        return AnnualCosts(year=year, projects=tuple(annual))

    def save_annual_costs(self, actor: Actor, year: int, edits: list[AnnualCostEdit]) -> None:
        """
        Apply revenue upserts and estimate creates/updates for one year.

        Access to every referenced project is checked before anything is
        written; the edits are then applied in a single transaction.

        Raises:
            InvalidPeriodError, InvalidInputError, ProjectNotFoundError,
            ProjectAccessDeniedError, ExternalCostNotFoundError.
        """
        for edit in edits:
            MonthPeriod(year, edit.month)
            if edit.revenue is not None:
                self._check_revenue(edit.revenue.estimated_revenue, edit.revenue.actual_revenue)
            if edit.estimate is not None:
                self._check_cost_fields(
                    ExternalCostKind.ESTIMATE, edit.estimate.amount, edit.estimate.description
                )

        with LogContext.bind(company_id=actor.company_id, actor_id=actor.user_id):
            try:
                allowed = set()
                for project_id in dict.fromkeys(edit.project_id for edit in edits):
                    allowed.add(self._get_visible_project(actor, project_id).id)

                for edit in edits:
                    period = MonthPeriod(year, edit.month)
                    if edit.revenue is not None:
                        self._write_revenue(
                            actor.user_id,
                            edit.project_id,
                            period,
                            edit.revenue.estimated_revenue,
                            edit.revenue.actual_revenue,
                            edit.revenue.notes,
                        )
                    estimate = edit.estimate
                    if estimate is None:
                        continue
                    if estimate.estimate_id is None:
                        self._new_cost_row(
                            ExternalCostKind.ESTIMATE,
                            actor.user_id,
                            edit.project_id,
                            period,
                            estimate.amount,
                            estimate.provider_name,
                            estimate.description,
                        )
                        continue

                    row = self._get_company_cost(
                        actor, ExternalCostKind.ESTIMATE, estimate.estimate_id
                    )
                    if row.project_id not in allowed:
                        raise ProjectAccessDeniedError(str(row.project_id), str(actor.user_id))
                    row.amount = estimate.amount
                    if estimate.provider_name is not None:
                        row.provider_name = estimate.provider_name
                    if estimate.description is not None:
                        row.description = estimate.description
                    row.updated_by_id = actor.user_id

                self._session.flush()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "annual_costs_saved",
                extra={"year": year, "edit_count": len(edits), "project_count": len(allowed)},
            )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _live_internal_cost(
        self, company_id: UUID, project_id: UUID, period: MonthPeriod
    ) -> Decimal:
        aggregates = self._inputs.time_aggregates(
            company_id, period, self._config.counted_entry_types, project_id=project_id
        )
        costs = self._aggregator.aggregate(
            time_aggregates=aggregates,
            hourly_costs=self._inputs.hourly_costs(company_id),
            mode=CostMode.LIVE,
        )
        return costs.get(project_id, round_money(ZERO))

    def _external_items(self, model, project_id: UUID, period: MonthPeriod) -> tuple[ExternalCostItem, ...]:
        rows = self._session.scalars(
            select(model)
            .where(
                model.project_id == project_id,
                model.year == period.year,
                model.month == period.month,
            )
            .order_by(model.created_at, model.id)
        )
        return tuple(_cost_item(row) for row in rows)

    def _revenues_by_project_month(
        self, project_ids: list[UUID], year: int
    ) -> dict[tuple[UUID, int], ProjectMonthlyRevenue]:
        rows = self._session.scalars(
            select(ProjectMonthlyRevenue).where(
                ProjectMonthlyRevenue.project_id.in_(project_ids),
                ProjectMonthlyRevenue.year == year,
            )
        )
        return {(row.project_id, row.month): row for row in rows}

    def _cost_items(
        self, model, project_ids: list[UUID], year: int
    ) -> dict[tuple[UUID, int], list[ExternalCostItem]]:
        grouped: dict[tuple[UUID, int], list[ExternalCostItem]] = defaultdict(list)
        rows = self._session.scalars(
            select(model)
            .where(model.project_id.in_(project_ids), model.year == year)
            .order_by(model.created_at, model.id)
        )
        for row in rows:
            grouped[(row.project_id, row.month)].append(_cost_item(row))
        return grouped

    def _cost_totals(
        self, model, project_ids: list[UUID], year: int
    ) -> dict[tuple[UUID, int], Decimal]:
        return {
            key: sum((item.amount for item in items), ZERO)
            for key, items in self._cost_items(model, project_ids, year).items()
        }

    def _write_revenue(
        self,
        actor_id: UUID,
        project_id: UUID,
        period: MonthPeriod,
        estimated_revenue: Decimal | None,
        actual_revenue: Decimal | None,
        notes: str | None,
    ) -> ProjectMonthlyRevenue:
        row = self._session.scalars(
            select(ProjectMonthlyRevenue).where(
                ProjectMonthlyRevenue.project_id == project_id,
                ProjectMonthlyRevenue.year == period.year,
                ProjectMonthlyRevenue.month == period.month,
            )
        ).first()
        if row is None:
            row = ProjectMonthlyRevenue(
                project_id=project_id,
                year=period.year,
                month=period.month,
                created_by_id=actor_id,
            )
            self._session.add(row)

        if estimated_revenue is not None:
            row.estimated_revenue = estimated_revenue
        if actual_revenue is not None:
            row.actual_revenue = actual_revenue
        if notes is not None:
            row.notes = notes
        row.updated_by_id = actor_id
        return row

    def _new_cost_row(
        self,
        kind: ExternalCostKind,
        actor_id: UUID,
        project_id: UUID,
        period: MonthPeriod,
        amount: Decimal,
        provider_name: str | None,
        description: str | None,
    ):
        row = _MODEL_BY_KIND[kind](
            project_id=project_id,
            year=period.year,
            month=period.month,
            amount=amount,
            provider_name=provider_name,
            description=description,
            created_by_id=actor_id,
            updated_by_id=actor_id,
        )
        self._session.add(row)
        return row

    def _get_company_cost(self, actor: Actor, kind: ExternalCostKind, cost_id: UUID):
        row = self._session.get(_MODEL_BY_KIND[kind], cost_id)
        if row is None:
            raise ExternalCostNotFoundError(kind.value, str(cost_id))
        project = self._session.get(Project, row.project_id)
        if project is None or project.company_id != actor.company_id:
            raise ExternalCostNotFoundError(kind.value, str(cost_id))
        return row

    def _get_visible_cost(self, actor: Actor, kind: ExternalCostKind, cost_id: UUID):
        row = self._get_company_cost(actor, kind, cost_id)
        self._get_visible_project(actor, row.project_id)
        return row

    def _visible_active_projects(self, actor: Actor) -> list[Project]:
        projects = self._session.scalars(
            select(Project)
            .where(Project.company_id == actor.company_id, Project.is_active.is_(True))
            .order_by(Project.name, Project.id)
        )
        return [p for p in projects if actor.can_view_project(p.team_id)]

    def _get_visible_project(self, actor: Actor, project_id: UUID) -> Project:
        project = self._session.get(Project, project_id)
        if project is None or project.company_id != actor.company_id:
            raise ProjectNotFoundError(str(project_id))
        if not actor.can_view_project(project.team_id):
            logger.warning(
                "project_access_denied",
                extra={"project_id": str(project_id), "actor_id": str(actor.user_id)},
            )
            raise ProjectAccessDeniedError(str(project_id), str(actor.user_id))
        return project

    @staticmethod
    def _check_revenue(estimated_revenue: Decimal | None, actual_revenue: Decimal | None) -> None:
        for field_name, value in (
            ("estimated_revenue", estimated_revenue),
            ("actual_revenue", actual_revenue),
        ):
            if value is not None and value < ZERO:
                raise InvalidInputError(field_name, "must be zero or positive")

    @staticmethod
    def _check_cost_fields(
        kind: ExternalCostKind,
        amount: Decimal | None,
        description: str | None,
        is_billed: bool | None = None,
        issue_date: date | None = None,
    ) -> None:
        if amount is not None and amount < ZERO:
            raise InvalidInputError("amount", "must be zero or positive")
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidInputError(
                "description", f"must be at most {MAX_DESCRIPTION_LENGTH} characters"
            )
        if kind == ExternalCostKind.ESTIMATE and (is_billed is not None or issue_date is not None):
            raise InvalidInputError("is_billed", "only applies to actual costs")
