"""ORM models for the read-only inputs of the month closing."""

from costs_kernel.models.enums import EntryType, RelationType, UserRole
from costs_kernel.models.project import Project, ProjectCategory
from costs_kernel.models.revenue import (
    ProjectExternalCostActual,
    ProjectExternalCostEstimate,
    ProjectMonthlyRevenue,
)
from costs_kernel.models.time_entry import TimeEntry
from costs_kernel.models.user import User

__all__ = [
    "EntryType",
    "RelationType",
    "UserRole",
    "Project",
    "ProjectCategory",
    "ProjectExternalCostActual",
    "ProjectExternalCostEstimate",
    "ProjectMonthlyRevenue",
    "TimeEntry",
    "User",
]
