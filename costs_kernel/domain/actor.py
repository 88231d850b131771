"""
Actor -- caller identity supplied by the outer authentication layer.

The costs kernel never authenticates anyone; it receives the actor and uses
it for audit columns (closed_by, reopened_by) and project visibility.
"""

from dataclasses import dataclass
from uuid import UUID

from costs_kernel.models.enums import UserRole

FULL_ADMIN_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN})


@dataclass(frozen=True)
class Actor:
    user_id: UUID
    company_id: UUID
    role: UserRole
    team_id: UUID | None = None

    @property
    def is_full_admin(self) -> bool:
        """OWNER and ADMIN see every project of the company."""
        return self.role in FULL_ADMIN_ROLES

    def can_view_project(self, project_team_id: UUID | None) -> bool:
        """Admins see every project; team leaders only their own team's."""
        if self.is_full_admin:
            return True
        if self.role != UserRole.TEAM_LEADER:
            return False
        return self.team_id is not None and project_team_id == self.team_id
