"""
Module: costs_kernel.models.project
Responsibility: ORM persistence for projects and their categories.
Architecture position: Kernel > Models.  May import from db/base.py only.

A project is productive unless its category is the company's non-productive
category (matched by exact, case-sensitive name).  Projects without a
category are productive.
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from costs_kernel.db.base import TrackedBase, UUIDString


class ProjectCategory(TrackedBase):
    __tablename__ = "project_categories"

    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_project_category_name"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<ProjectCategory {self.name}>"


class Project(TrackedBase):
    """A company project that receives distributed costs when productive."""

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_project_company", "company_id"),
        Index("idx_project_category", "category_id"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    category_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("project_categories.id"), nullable=True
    )
    team_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    category: Mapped[ProjectCategory | None] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<Project {self.name}>"
