"""
Monthly Salary Module Service (``costs_modules.salaries.service``).

Responsibility
--------------
List, upsert and delete per-user monthly salary data.  A new base salary
also updates the user's live ``salary`` and ``hourly_cost``.

Architecture position
---------------------
**Modules layer**.  Delegates the CLOSED -> REOPENED side effect to
``MonthClosingService.on_inputs_changed`` inside the same transaction.

Invariants enforced
-------------------
* Each mutating method owns its transaction (commit / rollback).
* ``base_salary_snapshot`` is never written here; only a close writes it.
* The listing of a CLOSED month shows the snapshot, so later salary
  changes do not alter what was closed.
* hourly_cost = salary / standard_monthly_hours, rounded to 2 decimals.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from costs_kernel.db.types import ZERO, round_money, to_decimal
from costs_kernel.domain.clock import Clock, SystemClock
from costs_kernel.domain.period import MonthPeriod
from costs_kernel.exceptions import (
    InvalidInputError,
    MonthlySalaryNotFoundError,
    UserNotFoundError,
)
from costs_kernel.logging_config import LogContext, get_logger
from costs_kernel.models.enums import RelationType
from costs_kernel.models.user import User
from costs_modules.closing.config import ClosingConfig
from costs_modules.closing.models import ClosingStatus
from costs_modules.closing.orm import MonthlyUserSalaryModel
from costs_modules.closing.service import MonthClosingService
from costs_modules.salaries.models import (
    MonthlySalaryLine,
    MonthlySalaryList,
    SalaryMutationResult,
)

logger = get_logger("modules.salaries.service")


class MonthlySalaryService:
    """
    Per-user monthly salary management.

    Contract
    --------
    * Mutations return ``SalaryMutationResult``; ``warning`` is set when the
      month was CLOSED and has been reopened by the edit.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ClosingConfig | None = None,
        closing_service: MonthClosingService | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ClosingConfig()
        self._closing = closing_service or MonthClosingService(
            session, clock=self._clock, config=self._config
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def list_salaries(self, company_id: UUID, period: MonthPeriod) -> MonthlySalaryList:
        """One line per active, non-guest user, ordered by name."""
        status = self._closing.get_status(company_id, period)
        use_snapshot = status == ClosingStatus.CLOSED

        users = self._session.scalars(
            select(User)
            .where(
                User.company_id == company_id,
                User.is_active.is_(True),
                User.relation_type != RelationType.GUEST.value,
                User.deleted_at.is_(None),
            )
            .order_by(User.name, User.id)
        ).all()
        rows = {
            row.user_id: row
            for row in self._session.scalars(
                select(MonthlyUserSalaryModel).where(
                    MonthlyUserSalaryModel.company_id == company_id,
                    MonthlyUserSalaryModel.year == period.year,
                    MonthlyUserSalaryModel.month == period.month,
                )
            )
        }

        items = []
        for user in users:
            row = rows.get(user.id)
            extras = to_decimal(row.extras) if row is not None else ZERO
            is_snapshot = (
                use_snapshot and row is not None and row.base_salary_snapshot is not None
            )
            base_salary = row.base_salary_snapshot if is_snapshot else user.salary
            items.append(
                MonthlySalaryLine(
                    user_id=user.id,
                    user_name=user.name,
                    base_salary=base_salary,
                    extras=extras,
                    total_salary=round_money(to_decimal(base_salary) + extras),
                    hourly_cost=user.hourly_cost,
                    is_snapshot=is_snapshot,
                    monthly_salary_id=row.id if row is not None else None,
                    extras_description=row.extras_description if row is not None else None,
                    notes=row.notes if row is not None else None,
                )
            )

        return MonthlySalaryList(
            year=period.year, month=period.month, status=status, items=tuple(items)
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    def upsert(
        self,
        company_id: UUID,
        actor_id: UUID,
        user_id: UUID,
        period: MonthPeriod,
        base_salary: Decimal | None = None,
        extras: Decimal | None = None,
        extras_description: str | None = None,
        notes: str | None = None,
    ) -> SalaryMutationResult:
        """
        Create or update the user's monthly row.

        Fields passed as None are left unchanged (extras defaults to 0 on
        create).  A base_salary different from the user's current salary
        updates ``User.salary`` and recomputes ``User.hourly_cost``.

        Raises:
            UserNotFoundError, InvalidInputError, ConcurrentClosingError.
        """
        if base_salary is not None and base_salary < ZERO:
            raise InvalidInputError("base_salary", "must be zero or positive")
        if extras is not None and extras < ZERO:
            raise InvalidInputError("extras", "must be zero or positive")

        with LogContext.bind(company_id=company_id, actor_id=actor_id, period=period.code):
            try:
                user = self._get_user(company_id, user_id)

                if base_salary is not None and base_salary != user.salary:
                    previous = user.salary
                    user.salary = base_salary
                    # Fallback policy: no per-user work schedule, so every
                    # salary is spread over the configured standard month.
                    user.hourly_cost = round_money(
                        base_salary / self._config.standard_monthly_hours
                    )
                    user.updated_by_id = actor_id
                    logger.info(
                        "user_salary_updated",
                        extra={
                            "user_id": str(user_id),
                            "previous_salary": str(previous) if previous is not None else None,
                            "salary": str(base_salary),
                            "hourly_cost": str(user.hourly_cost),
                        },
                    )

                row = self._session.scalars(
                    select(MonthlyUserSalaryModel).where(
                        MonthlyUserSalaryModel.company_id == company_id,
                        MonthlyUserSalaryModel.user_id == user_id,
                        MonthlyUserSalaryModel.year == period.year,
                        MonthlyUserSalaryModel.month == period.month,
                    )
                ).first()
                if row is None:
                    row = MonthlyUserSalaryModel(
                        company_id=company_id,
                        user_id=user_id,
                        year=period.year,
                        month=period.month,
                        extras=ZERO,
                        created_by_id=actor_id,
                    )
                    self._session.add(row)

                if extras is not None:
                    row.extras = extras
                if extras_description is not None:
                    row.extras_description = extras_description
                if notes is not None:
                    row.notes = notes
                row.updated_by_id = actor_id
                self._session.flush()

                warning = self._closing.on_inputs_changed(company_id, period, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "monthly_salary_upserted",
                extra={
                    "monthly_salary_id": str(row.id),
                    "user_id": str(user_id),
                    "extras": str(row.extras),
                    "reopened": warning is not None,
                },
            )
            return SalaryMutationResult(salary=row.to_dto(), warning=warning)

    def delete(self, company_id: UUID, actor_id: UUID, salary_id: UUID) -> SalaryMutationResult:
        """
        Remove a monthly salary row.

        Raises:
            MonthlySalaryNotFoundError, ConcurrentClosingError.
        """
        with LogContext.bind(company_id=company_id, actor_id=actor_id):
            try:
                row = self._session.get(MonthlyUserSalaryModel, salary_id)
                if row is None or row.company_id != company_id:
                    raise MonthlySalaryNotFoundError(str(salary_id))

                period = MonthPeriod(row.year, row.month)
                self._session.delete(row)
                self._session.flush()

                warning = self._closing.on_inputs_changed(company_id, period, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "monthly_salary_deleted",
                extra={
                    "monthly_salary_id": str(salary_id),
                    "period": period.code,
                    "reopened": warning is not None,
                },
            )
            return SalaryMutationResult(salary=None, warning=warning)

    def _get_user(self, company_id: UUID, user_id: UUID) -> User:
        user = self._session.get(User, user_id)
        if user is None or user.company_id != company_id or user.deleted_at is not None:
            raise UserNotFoundError(str(user_id))
        return user
