"""Tests for the kernel engine module and ORM round-trips."""

import pytest

from costs_kernel.db import engine as engine_module
from costs_kernel.db.engine import (
    get_engine,
    init_engine_from_url,
    is_postgres,
    reset_engine,
    session_scope,
)
from costs_kernel.models.user import User


class TestEngineLifecycle:
    def test_uninitialized_engine_raises(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()

    def test_sqlite_engine(self, engine):
        assert get_engine() is engine
        assert engine.dialect.name == "sqlite"
        assert not is_postgres()

    def test_init_logs_dialect(self, captured_logs):
        init_engine_from_url("sqlite://")
        try:
            records = [r for r in captured_logs() if r["message"] == "engine_initialized"]
            assert records and records[0]["dialect"] == "sqlite"
        finally:
            reset_engine()


class TestSessionScope:
    def test_commits_on_success(self, engine, company_id):
        with session_scope() as s:
            s.add(User(company_id=company_id, name="Ana"))
        with session_scope() as s:
            assert s.query(User).filter_by(company_id=company_id).count() == 1

    def test_rolls_back_on_error(self, engine, company_id):
        with pytest.raises(ValueError):
            with session_scope() as s:
                s.add(User(company_id=company_id, name="Ana"))
                s.flush()
                raise ValueError("boom")
        with session_scope() as s:
            assert s.query(User).filter_by(company_id=company_id).count() == 0

    def test_reset_clears_factory(self, engine):
        reset_engine()
        assert engine_module._SessionFactory is None
