"""
Month Closing Module Service (``costs_modules.closing.service``).

Responsibility
--------------
Orchestrates the month-closing lifecycle -- preview, close, reopen and the
implicit reopen triggered by input edits -- by gathering inputs through
``CostInputsSelector``, delegating every computation to ``costs_engines``
and persisting the outcome through the closing ORM models.

Architecture position
---------------------
**Modules layer**.  ``MonthClosingService`` is the sole public entry point
for closing state transitions.  ``MonthlySalaryService`` and
``OverheadCostService`` call ``on_inputs_changed`` inside their own
transactions; it is the only place that flips CLOSED -> REOPENED as a
side effect.

Invariants enforced
-------------------
* Each public mutating method (close, reopen) owns its transaction:
  ``commit`` on success, ``rollback`` on any exception.
* close() locks the closing row (SELECT ... FOR UPDATE), then re-reads every
  input and re-runs the full preview inside the transaction that commits.
  A blocked preview raises ``ClosingValidationError`` before any write.
* Salary snapshot, closing upsert and distribution replacement are one
  atomic write; on failure the prior state is left intact.
* A CLOSED month rejects a second close; REOPENED months may be closed.
* Version compare-and-swap failures and unique-constraint collisions surface
  as ``ConcurrentClosingError``.  Nothing is retried.

Failure modes
-------------
* ``MonthAlreadyClosedError`` -- close() on a CLOSED month.
* ``ClosingValidationError`` -- close() while preview reports errors.
* ``ClosingNotFoundError`` / ``MonthNotClosedError`` -- reopen() on a month
  with no row / a month that is still OPEN.
* ``InvalidInputError`` -- empty or over-long reopen reason.
* ``ConcurrentClosingError`` -- lost a race with another close/reopen.

Audit relevance
---------------
Structured log events ``month_closed``, ``month_reopened``,
``month_auto_reopened`` and ``month_close_blocked`` carry the company,
period, actor and totals.  closed_by/closed_at and reopened_by/reopened_at/
reopen_reason are persisted on the closing row.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from costs_engines.cost_hour import CostHourCalculator, UserCostHour
from costs_engines.distribution import DistributionPlan, DistributionPlanner, DistributionTarget
from costs_engines.non_productive import NonProductiveCost, NonProductiveCostCalculator
from costs_engines.project_cost import CostMode, ProjectCostAggregator
from costs_engines.validation import ValidationGate, ValidationResult
from costs_kernel.db.types import ZERO, round_money, to_decimal
from costs_kernel.domain.clock import Clock, SystemClock
from costs_kernel.domain.inputs import ProjectInput, UserCostInput
from costs_kernel.domain.period import MonthPeriod
from costs_kernel.exceptions import (
    ClosingNotFoundError,
    ClosingValidationError,
    ConcurrentClosingError,
    InvalidInputError,
    MonthAlreadyClosedError,
    MonthNotClosedError,
)
from costs_kernel.logging_config import LogContext, get_logger
from costs_kernel.selectors.cost_inputs import CostInputsSelector
from costs_modules.closing.config import ClosingConfig
from costs_modules.closing.models import (
    ClosingPreview,
    ClosingStatus,
    CostHourLine,
    MonthlyClosing,
)
from costs_modules.closing.orm import (
    MonthlyClosingModel,
    MonthlyOverheadCostModel,
    MonthlyUserSalaryModel,
    ProjectMonthlyDistributionModel,
)

logger = get_logger("modules.closing.service")


@dataclass(frozen=True)
class _MonthInputs:
    """Everything one preview reads, kept together so close() can reuse it."""

    users: list[UserCostInput]
    active_users: list[UserCostInput]
    extras: dict[UUID, Decimal]
    cost_hours: dict[UUID, UserCostHour]
    non_productive: NonProductiveCost
    projects: list[ProjectInput]
    revenues: dict[UUID, Decimal | None]
    total_salaries: Decimal
    total_overhead: Decimal
    validation: ValidationResult
    plan: DistributionPlan
    internal_costs: dict[UUID, Decimal]


class MonthClosingService:
    """
    Preview, close and reopen company months.

    Contract
    --------
    * ``get_closing`` and ``preview`` are read-only.
    * ``close`` and ``reopen`` commit on success and roll back on failure.
    * ``on_inputs_changed`` only flushes; the calling service commits.

    Guarantees
    ----------
    * Clock is injectable for deterministic testing.
    * All money uses ``Decimal`` -- NEVER ``float``.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ClosingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ClosingConfig()
        self._inputs = CostInputsSelector(session)
        self._cost_hour = CostHourCalculator()
        self._non_productive = NonProductiveCostCalculator()
        self._project_cost = ProjectCostAggregator()
        self._planner = DistributionPlanner()
        self._gate = ValidationGate()

    # =========================================================================
    # Queries
    # =========================================================================

    def get_closing(self, company_id: UUID, period: MonthPeriod) -> MonthlyClosing:
        """Closing state with its distributions; implicit OPEN if never closed."""
        closing = self._get_closing(company_id, period)
        if closing is None:
            return MonthlyClosing(company_id=company_id, year=period.year, month=period.month)
        return closing.to_dto()

    def get_status(self, company_id: UUID, period: MonthPeriod) -> ClosingStatus:
        closing = self._get_closing(company_id, period)
        return ClosingStatus(closing.status) if closing is not None else ClosingStatus.OPEN

    def preview(self, company_id: UUID, period: MonthPeriod) -> ClosingPreview:
        """Validation findings and the would-be allocation.  Persists nothing."""
        with LogContext.bind(company_id=company_id, period=period.code):
            inputs = self._gather_inputs(company_id, period)
            status = self.get_status(company_id, period)
            logger.info(
                "month_preview_computed",
                extra={
                    "can_close": inputs.validation.can_close,
                    "error_count": len(inputs.validation.errors),
                    "project_count": len(inputs.projects),
                },
            )
            return self._to_preview(company_id, period, status, inputs)

    # =========================================================================
    # Transitions
    # =========================================================================

    def close(self, company_id: UUID, period: MonthPeriod, actor_id: UUID) -> MonthlyClosing:
        """
        Close the month.

        Postconditions:
            - Every active non-guest user with a salary has a monthly salary
              row whose base_salary_snapshot equals their current salary.
            - The closing row is CLOSED with fresh totals, closed_by/closed_at
              set and reopened_* cleared.
            - Distribution rows are exactly the fresh plan.

        Raises:
            MonthAlreadyClosedError, ClosingValidationError,
            ConcurrentClosingError.
        """
        with LogContext.bind(company_id=company_id, actor_id=actor_id, period=period.code):
            try:
                closing = self._get_closing_for_update(company_id, period)
                if closing is not None and closing.status == ClosingStatus.CLOSED.value:
                    raise MonthAlreadyClosedError(str(company_id), period.code)

                inputs = self._gather_inputs(company_id, period)
                if not inputs.validation.can_close:
                    logger.warning(
                        "month_close_blocked",
                        extra={
                            "error_count": len(inputs.validation.errors),
                            "error_types": sorted({e.type.value for e in inputs.validation.errors}),
                        },
                    )
                    raise ClosingValidationError(period.code, list(inputs.validation.errors))

                self._snapshot_salaries(company_id, period, inputs.active_users, actor_id)

                if closing is None:
                    closing = MonthlyClosingModel(
                        company_id=company_id,
                        year=period.year,
                        month=period.month,
                        created_by_id=actor_id,
                    )
                    self._session.add(closing)

                plan = inputs.plan
                closing.status = ClosingStatus.CLOSED.value
                closing.total_salaries = plan.total_salaries
                closing.total_overhead = plan.total_overhead
                closing.total_non_productive = plan.total_non_productive
                closing.total_revenue = plan.total_revenue
                closing.closed_by_id = actor_id
                closing.closed_at = self._clock.now()
                closing.reopened_by_id = None
                closing.reopened_at = None
                closing.reopen_reason = None
                closing.updated_by_id = actor_id

                # Old rows must be gone before the new ones hit the unique key
                closing.distributions.clear()
                self._session.flush()
                for dist in plan.distributions:
                    closing.distributions.append(
                        ProjectMonthlyDistributionModel.from_dto(dist, created_by_id=actor_id)
                    )
                self._session.flush()
                self._session.commit()
            except (IntegrityError, StaleDataError):
                self._session.rollback()
                logger.warning("concurrent_month_close_conflict")
                raise ConcurrentClosingError(str(company_id), period.code, "close")
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "month_closed",
                extra={
                    "closing_id": str(closing.id),
                    "total_salaries": str(plan.total_salaries),
                    "total_overhead": str(plan.total_overhead),
                    "total_non_productive": str(plan.total_non_productive),
                    "total_revenue": str(plan.total_revenue),
                    "distribution_count": len(plan.distributions),
                },
            )
            return closing.to_dto()

    def reopen(
        self,
        company_id: UUID,
        period: MonthPeriod,
        actor_id: UUID,
        reason: str,
    ) -> MonthlyClosing:
        """
        Reopen a closed month so its inputs can be corrected and re-closed.

        A REOPENED month may be reopened again; the latest reason and actor
        replace the previous ones.

        Distribution rows are kept until the next close replaces them.

        Raises:
            InvalidInputError, ClosingNotFoundError, MonthNotClosedError,
            ConcurrentClosingError.
        """
        reason = (reason or "").strip()
        if not reason:
            raise InvalidInputError("reason", "must not be empty")
        if len(reason) > self._config.max_reopen_reason_length:
            raise InvalidInputError(
                "reason",
                f"must be at most {self._config.max_reopen_reason_length} characters",
            )

        with LogContext.bind(company_id=company_id, actor_id=actor_id, period=period.code):
            try:
                closing = self._get_closing_for_update(company_id, period)
                if closing is None:
                    raise ClosingNotFoundError(str(company_id), period.code)
                if closing.status == ClosingStatus.OPEN.value:
                    raise MonthNotClosedError(str(company_id), period.code)

                self._mark_reopened(closing, actor_id, reason)
                self._session.flush()
                self._session.commit()
            except StaleDataError:
                self._session.rollback()
                logger.warning("concurrent_month_reopen_conflict")
                raise ConcurrentClosingError(str(company_id), period.code, "reopen")
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "month_reopened",
                extra={"closing_id": str(closing.id), "reason": reason},
            )
            return closing.to_dto()

    def on_inputs_changed(
        self,
        company_id: UUID,
        period: MonthPeriod,
        actor_id: UUID,
    ) -> str | None:
        """
        Flip a CLOSED month to REOPENED after one of its inputs changed.

        Runs inside the caller's transaction (flush only).  Returns the
        warning to show the user, or None when the month was not CLOSED.
        """
        closing = self._get_closing_for_update(company_id, period)
        if closing is None or closing.status != ClosingStatus.CLOSED.value:
            return None

        self._mark_reopened(closing, actor_id, self._config.auto_reopen_reason)
        try:
            self._session.flush()
        except StaleDataError:
            raise ConcurrentClosingError(str(company_id), period.code, "reopen")

        logger.info(
            "month_auto_reopened",
            extra={
                "closing_id": str(closing.id),
                "company_id": str(company_id),
                "period": period.code,
                "actor_id": str(actor_id),
            },
        )
        return (
            f"Month {period.code} was closed and has been reopened because its "
            f"data changed. Close it again to update the cost distribution."
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _gather_inputs(self, company_id: UUID, period: MonthPeriod) -> _MonthInputs:
        config = self._config
        users = self._inputs.cost_users(company_id)
        active_users = [u for u in users if u.is_active]
        extras = self._extras_by_user(company_id, period)
        time_aggregates = self._inputs.time_aggregates(
            company_id, period, config.counted_entry_types
        )

        cost_hours = self._cost_hour.calculate(
            users=users, extras=extras, time_aggregates=time_aggregates
        )
        non_productive_ids = self._inputs.project_ids_in_category(
            company_id, config.non_productive_category_name
        )
        non_productive = self._non_productive.calculate(
            cost_hours=cost_hours,
            time_aggregates=time_aggregates,
            non_productive_project_ids=non_productive_ids,
        )

        projects = [
            p
            for p in self._inputs.active_projects(company_id)
            if p.category_name != config.non_productive_category_name
        ]
        revenues = self._inputs.actual_revenues([p.project_id for p in projects], period)

        # Users without a salary are reported as MISSING_SALARY and their
        # extras stay out of the pool.
        total_salaries = sum(
            (to_decimal(u.salary) + to_decimal(extras.get(u.user_id)) for u in active_users if u.has_salary),
            ZERO,
        )
        total_overhead = self._overhead_total(company_id, period)

        validation = self._gate.validate(
            active_users=active_users, projects=projects, revenues=revenues
        )
        plan = self._planner.plan(
            targets=[
                DistributionTarget(
                    project_id=p.project_id,
                    project_name=p.name,
                    revenue=to_decimal(revenues.get(p.project_id)),
                )
                for p in projects
            ],
            total_salaries=total_salaries,
            total_overhead=total_overhead,
            total_non_productive=non_productive.total,
        )
        internal_costs = self._project_cost.aggregate(
            time_aggregates=time_aggregates,
            hourly_costs=self._inputs.hourly_costs(company_id),
            mode=CostMode.CLOSING,
            cost_hours=cost_hours,
        )

        return _MonthInputs(
            users=users,
            active_users=active_users,
            extras=extras,
            cost_hours=cost_hours,
            non_productive=non_productive,
            projects=projects,
            revenues=revenues,
            total_salaries=total_salaries,
            total_overhead=total_overhead,
            validation=validation,
            plan=plan,
            internal_costs=internal_costs,
        )

    def _to_preview(
        self,
        company_id: UUID,
        period: MonthPeriod,
        status: ClosingStatus,
        inputs: _MonthInputs,
    ) -> ClosingPreview:
        names = {u.user_id: u.name for u in inputs.users}
        cost_hour_lines = tuple(
            CostHourLine(
                user_id=c.user_id,
                user_name=names.get(c.user_id, ""),
                cost_hour=round_money(c.cost_hour),
                total_hours=round_money(c.total_hours),
                total_salary=round_money(c.total_salary),
                has_hours=c.has_hours,
            )
            for c in sorted(inputs.cost_hours.values(), key=lambda c: (names.get(c.user_id, ""), str(c.user_id)))
        )
        plan = inputs.plan
        return ClosingPreview(
            company_id=company_id,
            year=period.year,
            month=period.month,
            status=status,
            errors=inputs.validation.errors,
            total_salaries=plan.total_salaries,
            total_overhead=plan.total_overhead,
            total_non_productive=plan.total_non_productive,
            total_revenue=plan.total_revenue,
            distributions=plan.distributions,
            rounding_remainders=dict(plan.rounding_remainders),
            equal_split=plan.equal_split,
            non_productive_hours_cost=inputs.non_productive.hours_cost,
            non_productive_zero_hours_salaries=inputs.non_productive.zero_hours_salaries,
            project_internal_costs={
                p.project_id: inputs.internal_costs.get(p.project_id, ZERO)
                for p in inputs.projects
            },
            cost_hours=cost_hour_lines,
        )

    def _snapshot_salaries(
        self,
        company_id: UUID,
        period: MonthPeriod,
        active_users: list[UserCostInput],
        actor_id: UUID,
    ) -> None:
        existing = {
            row.user_id: row
            for row in self._session.scalars(
                select(MonthlyUserSalaryModel).where(
                    MonthlyUserSalaryModel.company_id == company_id,
                    MonthlyUserSalaryModel.year == period.year,
                    MonthlyUserSalaryModel.month == period.month,
                )
            )
        }
        for user in active_users:
            if not user.has_salary:
                continue
            row = existing.get(user.user_id)
            if row is None:
                row = MonthlyUserSalaryModel(
                    company_id=company_id,
                    user_id=user.user_id,
                    year=period.year,
                    month=period.month,
                    extras=ZERO,
                    created_by_id=actor_id,
                )
                self._session.add(row)
            row.base_salary_snapshot = user.salary
            row.updated_by_id = actor_id

    def _mark_reopened(self, closing: MonthlyClosingModel, actor_id: UUID, reason: str) -> None:
        closing.status = ClosingStatus.REOPENED.value
        closing.reopened_by_id = actor_id
        closing.reopened_at = self._clock.now()
        closing.reopen_reason = reason
        closing.updated_by_id = actor_id

    def _extras_by_user(self, company_id: UUID, period: MonthPeriod) -> dict[UUID, Decimal]:
        stmt = select(MonthlyUserSalaryModel.user_id, MonthlyUserSalaryModel.extras).where(
            MonthlyUserSalaryModel.company_id == company_id,
            MonthlyUserSalaryModel.year == period.year,
            MonthlyUserSalaryModel.month == period.month,
        )
        return {row.user_id: to_decimal(row.extras) for row in self._session.execute(stmt)}

    def _overhead_total(self, company_id: UUID, period: MonthPeriod) -> Decimal:
        stmt = select(func.coalesce(func.sum(MonthlyOverheadCostModel.amount), 0)).where(
            MonthlyOverheadCostModel.company_id == company_id,
            MonthlyOverheadCostModel.year == period.year,
            MonthlyOverheadCostModel.month == period.month,
        )
        return to_decimal(self._session.scalar(stmt))

    def _closing_stmt(self, company_id: UUID, period: MonthPeriod):
        return select(MonthlyClosingModel).where(
            MonthlyClosingModel.company_id == company_id,
            MonthlyClosingModel.year == period.year,
            MonthlyClosingModel.month == period.month,
        )

    def _get_closing(self, company_id: UUID, period: MonthPeriod) -> MonthlyClosingModel | None:
        return self._session.scalars(self._closing_stmt(company_id, period)).first()

    def _get_closing_for_update(
        self, company_id: UUID, period: MonthPeriod
    ) -> MonthlyClosingModel | None:
        stmt = (
            self._closing_stmt(company_id, period)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.scalars(stmt).first()
