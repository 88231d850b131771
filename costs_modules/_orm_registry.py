"""
Module ORM Registry (``costs_modules._orm_registry``).

Responsibility
--------------
Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
contains its table definition before ``create_tables()`` runs.

Architecture position
---------------------
**Modules layer** -- utility.  Called lazily by
``costs_kernel.db.engine.create_tables``.
"""


def import_all_orm_models() -> None:
    """Import kernel models and every module ORM.  Idempotent."""
    # Kernel tables first (users, projects, time entries, revenues)
    import costs_kernel.models  # noqa: F401
    import costs_modules.closing.orm  # noqa: F401
