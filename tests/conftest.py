from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from dayflow.db import get_session
from dayflow.main import app
from dayflow.models import Employee, LeaveBalance, LeaveType, SQLModel

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine

# Point at PostgreSQL (postgresql+asyncpg://...) to exercise real row locking.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _create_engine(url: str) -> AsyncEngine:
    if not url.startswith("sqlite"):
        return create_async_engine(url)

    _engine = create_async_engine(url, poolclass=StaticPool, connect_args={"check_same_thread": False})

    # pysqlite's own transaction handling breaks SAVEPOINT; take over BEGIN.
    @event.listens_for(_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
        dbapi_connection.isolation_level = None

    @event.listens_for(_engine.sync_engine, "begin")
    def _on_begin(conn) -> None:  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")

    return _engine


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create an engine with a fresh schema for each test."""
    _engine = _create_engine(TEST_DATABASE_URL)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a session inside an outer transaction that rolls back after each test.

    Commits and rollbacks issued by the code under test act on savepoints, so
    the workflow's own transaction boundaries behave as in production.
    """
    async with engine.connect() as conn:
        txn = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False, join_transaction_mode="create_savepoint")
        yield session
        await session.close()
        await txn.rollback()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Reference data helpers
# ---------------------------------------------------------------------------


async def add_employee(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    first_name: str = "Test",
    last_name: str = "Employee",
) -> uuid.UUID:
    """Insert and commit an employee; return its id."""
    employee_id = employee_id or uuid.uuid4()
    session.add(
        Employee(
            id=employee_id,
            employee_code=f"EMP-{employee_id.hex}",
            first_name=first_name,
            last_name=last_name,
            department="Engineering",
        )
    )
    await session.commit()
    return employee_id


async def add_leave_type(session: AsyncSession, name: str = "Annual Leave", is_paid: bool = True) -> uuid.UUID:
    """Insert and commit a leave type; return its id."""
    leave_type_id = uuid.uuid4()
    session.add(LeaveType(id=leave_type_id, name=name, default_days_per_year=20, is_paid=is_paid))
    await session.commit()
    return leave_type_id


async def add_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    total_allocated: int = 20,
    used: int = 0,
    pending: int = 0,
) -> uuid.UUID:
    """Insert and commit a yearly balance row; return its id."""
    balance_id = uuid.uuid4()
    session.add(
        LeaveBalance(
            id=balance_id,
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            year=year,
            total_allocated=total_allocated,
            used=used,
            pending=pending,
        )
    )
    await session.commit()
    return balance_id
