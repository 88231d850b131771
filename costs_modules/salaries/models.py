"""
Monthly Salary Domain Models (``costs_modules.salaries.models``).

Frozen value objects returned by ``MonthlySalaryService``.  Mutation
results carry an optional ``warning`` set when the edit reopened a closed
month.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from costs_kernel.db.types import ZERO
from costs_modules.closing.models import ClosingStatus


@dataclass(frozen=True)
class MonthlySalary:
    """The monthly salary row of one user."""
    id: UUID
    company_id: UUID
    user_id: UUID
    year: int
    month: int
    extras: Decimal = ZERO
    extras_description: str | None = None
    notes: str | None = None
    base_salary_snapshot: Decimal | None = None


@dataclass(frozen=True)
class MonthlySalaryLine:
    """
    One user's salary figures for a month.

    ``base_salary`` is the close-time snapshot when the month is CLOSED and a
    snapshot exists, otherwise the user's current salary.
    """
    user_id: UUID
    user_name: str
    base_salary: Decimal | None
    extras: Decimal
    total_salary: Decimal
    hourly_cost: Decimal | None
    is_snapshot: bool = False
    monthly_salary_id: UUID | None = None
    extras_description: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class MonthlySalaryList:
    year: int
    month: int
    status: ClosingStatus
    items: tuple[MonthlySalaryLine, ...]

    @property
    def total(self) -> Decimal:
        return sum((line.total_salary for line in self.items), ZERO)


@dataclass(frozen=True)
class SalaryMutationResult:
    salary: MonthlySalary | None
    warning: str | None = None
