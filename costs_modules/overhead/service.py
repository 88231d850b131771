"""
Monthly Overhead Module Service (``costs_modules.overhead.service``).

Responsibility
--------------
CRUD for monthly overhead line items.  Every mutation of a CLOSED month
reopens it through ``MonthClosingService.on_inputs_changed``.

Invariants enforced
-------------------
* Each mutating method owns its transaction (commit / rollback).
* amount >= 0; description at most 500 characters.
* Items are company scoped; an id from another company is not found.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from costs_kernel.db.types import ZERO
from costs_kernel.domain.clock import Clock, SystemClock
from costs_kernel.domain.period import MonthPeriod
from costs_kernel.exceptions import InvalidInputError, OverheadCostNotFoundError
from costs_kernel.logging_config import LogContext, get_logger
from costs_modules.closing.config import ClosingConfig
from costs_modules.closing.models import OverheadCostType
from costs_modules.closing.orm import MonthlyOverheadCostModel
from costs_modules.closing.service import MonthClosingService
from costs_modules.overhead.models import OverheadCostList, OverheadMutationResult

logger = get_logger("modules.overhead.service")

MAX_DESCRIPTION_LENGTH = 500


class OverheadCostService:
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ClosingConfig | None = None,
        closing_service: MonthClosingService | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._closing = closing_service or MonthClosingService(
            session, clock=self._clock, config=config
        )

    def list_costs(self, company_id: UUID, period: MonthPeriod) -> OverheadCostList:
        rows = self._session.scalars(
            select(MonthlyOverheadCostModel)
            .where(
                MonthlyOverheadCostModel.company_id == company_id,
                MonthlyOverheadCostModel.year == period.year,
                MonthlyOverheadCostModel.month == period.month,
            )
            .order_by(MonthlyOverheadCostModel.cost_type, MonthlyOverheadCostModel.created_at)
        )
        return OverheadCostList(
            year=period.year,
            month=period.month,
            items=tuple(row.to_dto() for row in rows),
        )

    def create(
        self,
        company_id: UUID,
        actor_id: UUID,
        period: MonthPeriod,
        amount: Decimal,
        cost_type: OverheadCostType,
        description: str | None = None,
    ) -> OverheadMutationResult:
        """Add a line item.  Raises InvalidInputError on a negative amount."""
        self._check_amount(amount)
        self._check_description(description)

        with LogContext.bind(company_id=company_id, actor_id=actor_id, period=period.code):
            try:
                row = MonthlyOverheadCostModel(
                    company_id=company_id,
                    year=period.year,
                    month=period.month,
                    cost_type=OverheadCostType(cost_type).value,
                    amount=amount,
                    description=description,
                    created_by_id=actor_id,
                )
                self._session.add(row)
                self._session.flush()

                warning = self._closing.on_inputs_changed(company_id, period, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "overhead_cost_created",
                extra={
                    "overhead_id": str(row.id),
                    "cost_type": row.cost_type,
                    "amount": str(amount),
                    "reopened": warning is not None,
                },
            )
            return OverheadMutationResult(overhead=row.to_dto(), warning=warning)

    def update(
        self,
        company_id: UUID,
        actor_id: UUID,
        overhead_id: UUID,
        amount: Decimal | None = None,
        cost_type: OverheadCostType | None = None,
        description: str | None = None,
    ) -> OverheadMutationResult:
        """Patch a line item; None leaves a field unchanged."""
        if amount is not None:
            self._check_amount(amount)
        self._check_description(description)

        with LogContext.bind(company_id=company_id, actor_id=actor_id):
            try:
                row = self._get_row(company_id, overhead_id)
                if amount is not None:
                    row.amount = amount
                if cost_type is not None:
                    row.cost_type = OverheadCostType(cost_type).value
                if description is not None:
                    row.description = description
                row.updated_by_id = actor_id
                self._session.flush()

                period = MonthPeriod(row.year, row.month)
                warning = self._closing.on_inputs_changed(company_id, period, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "overhead_cost_updated",
                extra={
                    "overhead_id": str(overhead_id),
                    "amount": str(row.amount),
                    "reopened": warning is not None,
                },
            )
            return OverheadMutationResult(overhead=row.to_dto(), warning=warning)

    def delete(self, company_id: UUID, actor_id: UUID, overhead_id: UUID) -> OverheadMutationResult:
        with LogContext.bind(company_id=company_id, actor_id=actor_id):
            try:
                row = self._get_row(company_id, overhead_id)
                period = MonthPeriod(row.year, row.month)
                self._session.delete(row)
                self._session.flush()

                warning = self._closing.on_inputs_changed(company_id, period, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "overhead_cost_deleted",
                extra={"overhead_id": str(overhead_id), "reopened": warning is not None},
            )
            return OverheadMutationResult(overhead=None, warning=warning)

    def _get_row(self, company_id: UUID, overhead_id: UUID) -> MonthlyOverheadCostModel:
        row = self._session.get(MonthlyOverheadCostModel, overhead_id)
        if row is None or row.company_id != company_id:
            raise OverheadCostNotFoundError(str(overhead_id))
        return row

    @staticmethod
    def _check_amount(amount: Decimal) -> None:
        if amount < ZERO:
            raise InvalidInputError("amount", "must be zero or positive")

    @staticmethod
    def _check_description(description: str | None) -> None:
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidInputError(
                "description", f"must be at most {MAX_DESCRIPTION_LENGTH} characters"
            )
