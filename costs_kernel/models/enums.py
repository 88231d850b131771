"""Enumerations shared by the input entities (users, time entries)."""

from enum import Enum


class UserRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    TEAM_LEADER = "TEAM_LEADER"
    WORKER = "WORKER"
    AUDITOR = "AUDITOR"


class RelationType(str, Enum):
    """Employment relation.  GUEST users never carry cost."""

    EMPLOYEE = "EMPLOYEE"
    CONTRACTOR = "CONTRACTOR"
    GUEST = "GUEST"


class EntryType(str, Enum):
    """Time entry kind.  WORK and PAUSE_COFFEE count as worked time."""

    WORK = "WORK"
    PAUSE_COFFEE = "PAUSE_COFFEE"
    PAUSE_LUNCH = "PAUSE_LUNCH"
    PAUSE_PERSONAL = "PAUSE_PERSONAL"
