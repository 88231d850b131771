"""
Module: costs_kernel.selectors.cost_inputs
Responsibility: Read-only queries that gather the inputs of a month closing
    (users, counted time, projects, revenues) scoped to one company.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every query is filtered by company_id.
    - Time is attributed to the month containing its start_time, using the
      half-open range [period.start, period.end).
    - Only the caller-supplied counted entry types contribute minutes.
    - Running entries (duration_minutes NULL) contribute zero minutes.

Failure modes:
    - None beyond database errors; empty results are valid inputs.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from costs_kernel.domain.inputs import ProjectInput, TimeAggregate, UserCostInput
from costs_kernel.domain.period import MonthPeriod
from costs_kernel.models.enums import EntryType, RelationType
from costs_kernel.models.project import Project, ProjectCategory
from costs_kernel.models.revenue import ProjectMonthlyRevenue
from costs_kernel.models.time_entry import TimeEntry
from costs_kernel.models.user import User
from costs_kernel.selectors.base import BaseSelector


class CostInputsSelector(BaseSelector):
    """Queries feeding the cost engines."""

    def cost_users(self, company_id: UUID) -> list[UserCostInput]:
        """Non-guest, non-deleted users of the company, active or not."""
        stmt = (
            select(User)
            .where(
                User.company_id == company_id,
                User.relation_type != RelationType.GUEST.value,
                User.deleted_at.is_(None),
            )
            .order_by(User.name, User.id)
        )
        return [
            UserCostInput(
                user_id=u.id,
                name=u.name,
                salary=u.salary,
                hourly_cost=u.hourly_cost,
                is_active=u.is_active,
            )
            for u in self.session.scalars(stmt)
        ]

    def hourly_costs(self, company_id: UUID) -> dict[UUID, Decimal | None]:
        """Live hourly_cost of every user of the company (guests included)."""
        stmt = select(User.id, User.hourly_cost).where(User.company_id == company_id)
        return {row.id: row.hourly_cost for row in self.session.execute(stmt)}

    def time_aggregates(
        self,
        company_id: UUID,
        period: MonthPeriod,
        entry_types: Iterable[EntryType],
        project_id: UUID | None = None,
    ) -> list[TimeAggregate]:
        """
        Counted minutes grouped by (user_id, project_id) for the month.

        One aggregation query serves every calculator: cost-hour needs the
        per-user sum, the non-productive and project calculators need the
        per-project split.
        """
        minutes = func.coalesce(func.sum(TimeEntry.duration_minutes), 0)
        stmt = (
            select(TimeEntry.user_id, TimeEntry.project_id, minutes.label("minutes"))
            .where(
                TimeEntry.company_id == company_id,
                TimeEntry.entry_type.in_([t.value for t in entry_types]),
                TimeEntry.start_time >= period.start,
                TimeEntry.start_time < period.end,
            )
            .group_by(TimeEntry.user_id, TimeEntry.project_id)
        )
        if project_id is not None:
            stmt = stmt.where(TimeEntry.project_id == project_id)

        return [
            TimeAggregate(
                user_id=row.user_id,
                project_id=row.project_id,
                minutes=int(row.minutes),
            )
            for row in self.session.execute(stmt)
        ]

    def active_projects(self, company_id: UUID) -> list[ProjectInput]:
        """Active projects with their category name, ordered by name."""
        stmt = (
            select(Project, ProjectCategory.name.label("category_name"))
            .outerjoin(ProjectCategory, Project.category_id == ProjectCategory.id)
            .where(Project.company_id == company_id, Project.is_active.is_(True))
            .order_by(Project.name, Project.id)
        )
        return [
            ProjectInput(
                project_id=project.id,
                name=project.name,
                code=project.code,
                category_name=category_name,
                team_id=project.team_id,
                is_active=project.is_active,
            )
            for project, category_name in self.session.execute(stmt)
        ]

    def project_ids_in_category(self, company_id: UUID, category_name: str) -> set[UUID]:
        """
        Ids of every project (active or not) whose category has exactly this
        name.  Empty when the company has no such category.
        """
        stmt = (
            select(Project.id)
            .join(ProjectCategory, Project.category_id == ProjectCategory.id)
            .where(
                Project.company_id == company_id,
                ProjectCategory.company_id == company_id,
                ProjectCategory.name == category_name,
            )
        )
        return set(self.session.scalars(stmt))

    def actual_revenues(
        self,
        project_ids: Sequence[UUID],
        period: MonthPeriod,
    ) -> dict[UUID, Decimal | None]:
        """
        actual_revenue per project for the month.

        A project with no revenue row is absent from the result; a row with
        actual_revenue NULL maps to None.
        """
        if not project_ids:
            return {}
        stmt = select(
            ProjectMonthlyRevenue.project_id, ProjectMonthlyRevenue.actual_revenue
        ).where(
            ProjectMonthlyRevenue.project_id.in_(list(project_ids)),
            ProjectMonthlyRevenue.year == period.year,
            ProjectMonthlyRevenue.month == period.month,
        )
        return {row.project_id: row.actual_revenue for row in self.session.execute(stmt)}
