"""
Input snapshots -- immutable views of the read-only entities.

Selectors translate ORM rows into these frozen dataclasses so that the pure
engines in ``costs_engines`` never touch a Session or an ORM instance.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class UserCostInput:
    """A non-guest, non-deleted user with the data needed to cost their time."""

    user_id: UUID
    name: str
    salary: Decimal | None
    hourly_cost: Decimal | None
    is_active: bool

    @property
    def has_salary(self) -> bool:
        """A salary counts as configured whenever it is set, zero included."""
        return self.salary is not None


@dataclass(frozen=True)
class TimeAggregate:
    """Counted minutes for one (user, project) pair within a month."""

    user_id: UUID
    project_id: UUID | None
    minutes: int


@dataclass(frozen=True)
class ProjectInput:
    project_id: UUID
    name: str
    code: str | None
    category_name: str | None
    team_id: UUID | None
    is_active: bool
