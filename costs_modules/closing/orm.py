"""
SQLAlchemy ORM persistence models for the Month Closing module.

Responsibility
--------------
Persist the closing state of a (company, month), the per-project
distribution written at close time, the per-user monthly salary data
(extras and the base salary snapshot), and monthly overhead line items.

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``MonthClosingService``,
``MonthlySalaryService`` and ``OverheadCostService``.  Inherits from
``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* One ``MonthlyClosingModel`` per (company_id, year, month)
  (``uq_monthly_closing_period``); a concurrent first close of the same
  month fails on this constraint.
* ``MonthlyClosingModel.version`` is SQLAlchemy's ``version_id_col``: every
  UPDATE is a compare-and-swap on the version read.
* One ``ProjectMonthlyDistributionModel`` per (closing_id, project_id);
  rows are replaced wholesale on every close.
* One ``MonthlyUserSalaryModel`` per (company_id, user_id, year, month).
* All monetary fields use ``Decimal`` -- NEVER float.  Status is stored
  as String(20).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from costs_kernel.db.base import TrackedBase, UUIDString
from costs_kernel.db.types import ZERO
from costs_modules.closing.models import ClosingStatus, OverheadCostType

# ---------------------------------------------------------------------------
# MonthlyClosingModel
# ---------------------------------------------------------------------------


class MonthlyClosingModel(TrackedBase):
    """
    The closing state of one company month.

    Maps to the ``MonthlyClosing`` DTO in ``costs_modules.closing.models``.

    Guarantees:
        - status follows OPEN -> CLOSED -> REOPENED -> CLOSED ...; a missing
          row is the implicit OPEN state.
        - reopened_* columns are cleared on every close.
    """

    __tablename__ = "monthly_closings"

    __table_args__ = (
        UniqueConstraint("company_id", "year", "month", name="uq_monthly_closing_period"),
        Index("idx_monthly_closing_status", "status"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ClosingStatus.OPEN.value
    )

    total_salaries: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    total_overhead: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    total_non_productive: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    total_revenue: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)

    closed_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    reopened_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    reopened_at: Mapped[datetime | None] = mapped_column(nullable=True)
    reopen_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    distributions: Mapped[list["ProjectMonthlyDistributionModel"]] = relationship(
        "ProjectMonthlyDistributionModel",
        back_populates="closing",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProjectMonthlyDistributionModel.project_name",
    )

    __mapper_args__ = {"version_id_col": version}

    def to_dto(self):
        from costs_modules.closing.models import MonthlyClosing

        return MonthlyClosing(
            id=self.id,
            company_id=self.company_id,
            year=self.year,
            month=self.month,
            status=ClosingStatus(self.status),
            total_salaries=self.total_salaries,
            total_overhead=self.total_overhead,
            total_non_productive=self.total_non_productive,
            total_revenue=self.total_revenue,
            closed_by_id=self.closed_by_id,
            closed_at=self.closed_at,
            reopened_by_id=self.reopened_by_id,
            reopened_at=self.reopened_at,
            reopen_reason=self.reopen_reason,
            distributions=tuple(d.to_dto() for d in self.distributions),
        )

    def __repr__(self) -> str:
        return f"<MonthlyClosingModel {self.year}-{self.month:02d} [{self.status}]>"


# ---------------------------------------------------------------------------
# ProjectMonthlyDistributionModel
# ---------------------------------------------------------------------------


class ProjectMonthlyDistributionModel(TrackedBase):
    """Costs assigned to one productive project when the month was closed."""

    __tablename__ = "project_monthly_distributions"

    __table_args__ = (
        UniqueConstraint("closing_id", "project_id", name="uq_distribution_closing_project"),
        Index("idx_distribution_project", "project_id"),
    )

    closing_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("monthly_closings.id", ondelete="CASCADE"), nullable=False
    )
    project_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=False
    )
    # Denormalized for stable ordering and history after renames
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)

    project_revenue: Mapped[Decimal] = mapped_column(nullable=False)
    revenue_share_percent: Mapped[Decimal] = mapped_column(nullable=False)
    distributed_salaries: Mapped[Decimal] = mapped_column(nullable=False)
    distributed_overhead: Mapped[Decimal] = mapped_column(nullable=False)
    distributed_non_productive: Mapped[Decimal] = mapped_column(nullable=False)
    total_distributed: Mapped[Decimal] = mapped_column(nullable=False)

    closing: Mapped[MonthlyClosingModel] = relationship(
        "MonthlyClosingModel", back_populates="distributions"
    )

    def to_dto(self):
        from costs_engines.distribution import ProjectDistribution

        return ProjectDistribution(
            project_id=self.project_id,
            project_name=self.project_name,
            project_revenue=self.project_revenue,
            revenue_share_percent=self.revenue_share_percent,
            distributed_salaries=self.distributed_salaries,
            distributed_overhead=self.distributed_overhead,
            distributed_non_productive=self.distributed_non_productive,
            total_distributed=self.total_distributed,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ProjectMonthlyDistributionModel":
        return cls(
            project_id=dto.project_id,
            project_name=dto.project_name,
            project_revenue=dto.project_revenue,
            revenue_share_percent=dto.revenue_share_percent,
            distributed_salaries=dto.distributed_salaries,
            distributed_overhead=dto.distributed_overhead,
            distributed_non_productive=dto.distributed_non_productive,
            total_distributed=dto.total_distributed,
            created_by_id=created_by_id,
        )


# ---------------------------------------------------------------------------
# MonthlyUserSalaryModel
# ---------------------------------------------------------------------------


class MonthlyUserSalaryModel(TrackedBase):
    """
    Per-user monthly salary data.

    ``extras`` is always editable.  ``base_salary_snapshot`` is written only
    by a close and is what CLOSED months show as the base salary.
    """

    __tablename__ = "monthly_user_salaries"

    __table_args__ = (
        UniqueConstraint(
            "company_id", "user_id", "year", "month", name="uq_monthly_user_salary"
        ),
        Index("idx_monthly_salary_period", "company_id", "year", "month"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    base_salary_snapshot: Mapped[Decimal | None] = mapped_column(nullable=True)
    extras: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    extras_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def to_dto(self):
        from costs_modules.salaries.models import MonthlySalary

        return MonthlySalary(
            id=self.id,
            company_id=self.company_id,
            user_id=self.user_id,
            year=self.year,
            month=self.month,
            extras=self.extras,
            extras_description=self.extras_description,
            notes=self.notes,
            base_salary_snapshot=self.base_salary_snapshot,
        )

    def __repr__(self) -> str:
        return f"<MonthlyUserSalaryModel {self.user_id} {self.year}-{self.month:02d}>"


# ---------------------------------------------------------------------------
# MonthlyOverheadCostModel
# ---------------------------------------------------------------------------


class MonthlyOverheadCostModel(TrackedBase):
    """A dated overhead line item (structure costs, transfer pricing, ...)."""

    __tablename__ = "monthly_overhead_costs"

    __table_args__ = (
        Index("idx_overhead_period", "company_id", "year", "month"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_type: Mapped[str] = mapped_column(
        String(30), nullable=False, default=OverheadCostType.OTHER.value
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def to_dto(self):
        from costs_modules.overhead.models import OverheadCost

        return OverheadCost(
            id=self.id,
            company_id=self.company_id,
            year=self.year,
            month=self.month,
            cost_type=OverheadCostType(self.cost_type),
            amount=self.amount,
            description=self.description,
        )

    def __repr__(self) -> str:
        return f"<MonthlyOverheadCostModel {self.cost_type} {self.amount}>"
