"""
Module: costs_kernel.models.user
Responsibility: ORM persistence for company members and their cost data.
Architecture position: Kernel > Models.  May import from db/base.py only.

Users are owned by the identity subsystem; the costs kernel reads them and
writes only ``salary`` / ``hourly_cost`` when a monthly salary upsert carries
a new base salary.

Invariants enforced:
    - GUEST users and soft-deleted users (deleted_at set) never enter any
      cost computation.
    - salary is nullable: NULL means "not configured", which blocks closing
      for active non-guest users (MISSING_SALARY).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from costs_kernel.db.base import TrackedBase, UUIDString
from costs_kernel.models.enums import RelationType, UserRole


class User(TrackedBase):
    """A company member whose logged time and salary feed the month closing."""

    __tablename__ = "users"

    __table_args__ = (
        Index("idx_user_company", "company_id"),
        Index("idx_user_team", "team_id"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    team_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        String(20), nullable=False, default=UserRole.WORKER.value
    )
    relation_type: Mapped[RelationType] = mapped_column(
        String(20), nullable=False, default=RelationType.EMPLOYEE.value
    )

    # Monthly base salary; NULL when not configured
    salary: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Live cost per hour used outside closings
    hourly_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<User {self.name} [{self.relation_type}]>"

    @property
    def is_guest(self) -> bool:
        return self.relation_type == RelationType.GUEST

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
