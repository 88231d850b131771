"""
Module: costs_kernel.models.revenue
Responsibility: ORM persistence for per-project monthly revenue and external
    cost line items.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one revenue row per (project, year, month).
    - actual_revenue NULL means "not recorded", which blocks closing
      (MISSING_REVENUE); an explicit 0 is a recorded value.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from costs_kernel.db.base import TrackedBase, UUIDString


class ProjectMonthlyRevenue(TrackedBase):
    __tablename__ = "project_monthly_revenues"

    __table_args__ = (
        UniqueConstraint("project_id", "year", "month", name="uq_project_revenue_month"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    estimated_revenue: Mapped[Decimal | None] = mapped_column(nullable=True)
    actual_revenue: Mapped[Decimal | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        return f"<ProjectMonthlyRevenue {self.year}-{self.month:02d} {self.actual_revenue}>"


class ProjectExternalCostEstimate(TrackedBase):
    """Budgeted external cost (providers, subcontractors) for a project month."""

    __tablename__ = "project_external_cost_estimates"

    __table_args__ = (
        Index("idx_cost_estimate_project_month", "project_id", "year", "month"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    provider_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)


class ProjectExternalCostActual(TrackedBase):
    """Incurred external cost for a project month."""

    __tablename__ = "project_external_cost_actuals"

    __table_args__ = (
        Index("idx_cost_actual_project_month", "project_id", "year", "month"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    provider_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_billed: Mapped[bool] = mapped_column(nullable=False, default=False)
    issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
