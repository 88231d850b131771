"""Database layer - engine, declarative base and rounding helpers."""

from costs_kernel.db.base import Base, TrackedBase, UUIDString
from costs_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from costs_kernel.db.types import round_money, round_percent

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "round_money",
    "round_percent",
]
