"""
Module: costs_kernel.models.time_entry
Responsibility: ORM persistence for logged time.
Architecture position: Kernel > Models.  May import from db/base.py only.

duration_minutes is NULL while an entry is still running; such entries count
as zero minutes.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from costs_kernel.db.base import TrackedBase, UUIDString
from costs_kernel.models.enums import EntryType


class TimeEntry(TrackedBase):
    __tablename__ = "time_entries"

    __table_args__ = (
        Index("idx_time_entry_company_start", "company_id", "start_time"),
        Index("idx_time_entry_user", "user_id"),
        Index("idx_time_entry_project", "project_id"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )
    project_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=True
    )

    start_time: Mapped[datetime] = mapped_column(nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    entry_type: Mapped[EntryType] = mapped_column(
        String(20), nullable=False, default=EntryType.WORK.value
    )

    def __repr__(self) -> str:
        return f"<TimeEntry {self.entry_type} {self.duration_minutes}m>"
