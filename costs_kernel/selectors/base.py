"""
Module: costs_kernel.selectors.base
Responsibility: Common base for read-only query objects.
Architecture position: Kernel > Selectors.  May import from db/, models/
    and domain/.  MUST NOT import from costs_modules or outer layers.

Invariants enforced:
    - Selectors never add, delete, flush or commit.
    - Results are frozen dataclasses or plain mappings, never ORM instances,
      so engines cannot lazy-load through them.
    - The caller owns the session.  A close() therefore reads its inputs in
      the same transaction that writes the closing.
"""

from sqlalchemy.orm import Session


class BaseSelector:
    def __init__(self, session: Session):
        self.session = session
