"""
Tests for the module-level engine and session_scope helpers.
"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from billing_kernel.db.engine import (
    bind_engine,
    create_tables,
    get_engine,
    get_session,
    is_postgres,
    reset_engine,
    session_scope,
)
from billing_kernel.models import ClientGroup


@pytest.fixture
def bound_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    bind_engine(engine)
    create_tables()
    yield engine
    reset_engine()


def _group_count() -> int:
    with session_scope() as session:
        return session.execute(select(func.count(ClientGroup.id))).scalar_one()


class TestUninitialized:
    def test_get_engine_requires_init(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()
        with pytest.raises(RuntimeError):
            get_session()
        assert not is_postgres()


class TestSessionScope:
    def test_commits_on_exit(self, bound_engine):
        with session_scope() as session:
            session.add(ClientGroup(name="Committed", created_at=datetime(2024, 1, 1)))

        assert _group_count() == 1
        assert get_engine() is bound_engine
        assert not is_postgres()

    def test_rolls_back_on_error(self, bound_engine, captured_logs):
        with pytest.raises(ValueError):
            with session_scope() as session:
                session.add(ClientGroup(name="Discarded"))
                session.flush()
                raise ValueError("boom")

        assert _group_count() == 0
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())
