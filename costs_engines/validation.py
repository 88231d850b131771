"""
Module: costs_engines.validation
Responsibility:
    Enumerate every condition that prevents a month from being closed.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Findings are aggregated, never fail-fast: every missing salary and every
      missing revenue is reported in one pass.
    - Order is stable: MISSING_SALARY (user name order), MISSING_REVENUE
      (project name order), NO_ACTIVE_PROJECTS, ZERO_REVENUE.
    - can_close is True only when the list is empty.  ZERO_REVENUE blocks
      like every other finding.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from costs_engines.tracer import traced_engine
from costs_kernel.db.types import ZERO
from costs_kernel.domain.inputs import ProjectInput, UserCostInput


class ValidationErrorType(str, Enum):
    MISSING_SALARY = "MISSING_SALARY"
    MISSING_REVENUE = "MISSING_REVENUE"
    NO_ACTIVE_PROJECTS = "NO_ACTIVE_PROJECTS"
    ZERO_REVENUE = "ZERO_REVENUE"


@dataclass(frozen=True)
class ValidationIssue:
    type: ValidationErrorType
    message: str
    user_id: UUID | None = None
    user_name: str | None = None
    project_id: UUID | None = None
    project_name: str | None = None


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...]

    @property
    def can_close(self) -> bool:
        return len(self.errors) == 0


class ValidationGate:
    """Pre-close checks over the month's inputs."""

    @traced_engine("validation", "1.0")
    def validate(
        self,
        *,
        active_users: Iterable[UserCostInput],
        projects: Sequence[ProjectInput],
        revenues: Mapping[UUID, Decimal | None],
    ) -> ValidationResult:
        """
        Args:
            active_users: Active, non-guest, non-deleted users.
            projects: Productive active projects.
            revenues: actual_revenue per project id; a project absent from the
                mapping (or mapped to None) has no recorded revenue.
        """
        errors: list[ValidationIssue] = []

        for user in sorted(active_users, key=lambda u: (u.name, str(u.user_id))):
            if not user.has_salary:
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.MISSING_SALARY,
                        message=f"User {user.name} has no salary configured",
                        user_id=user.user_id,
                        user_name=user.name,
                    )
                )

        recorded = {pid: rev for pid, rev in revenues.items() if rev is not None}
        ordered_projects = sorted(projects, key=lambda p: (p.name, str(p.project_id)))
        for project in ordered_projects:
            if project.project_id not in recorded:
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.MISSING_REVENUE,
                        message=f"Project {project.name} has no actual revenue for this month",
                        project_id=project.project_id,
                        project_name=project.name,
                    )
                )

        if not ordered_projects:
            errors.append(
                ValidationIssue(
                    type=ValidationErrorType.NO_ACTIVE_PROJECTS,
                    message="There are no active productive projects to distribute costs to",
                )
            )
        else:
            project_ids = {p.project_id for p in ordered_projects}
            recorded_for_projects = [
                rev for pid, rev in recorded.items() if pid in project_ids
            ]
            total = sum(recorded_for_projects, ZERO)
            if recorded_for_projects and total == ZERO:
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.ZERO_REVENUE,
                        message=(
                            "Total actual revenue for the month is zero; "
                            "costs will be distributed equally"
                        ),
                    )
                )

        return ValidationResult(errors=tuple(errors))
