from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlmodel import col

from dayflow.exceptions import ConsistencyError, InsufficientBalanceError
from dayflow.models.balance import LeaveBalance
from dayflow.models.leave_type import LeaveType
from dayflow.schemas.balance import BalanceListResponse, LeaveBalanceResponse
from dayflow.schemas.request import LeaveTypeBrief

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _balance_key(employee_id: uuid.UUID, leave_type_id: uuid.UUID, year: int) -> list:
    """WHERE clauses selecting the single balance row for employee/type/year."""
    return [
        col(LeaveBalance.employee_id) == employee_id,
        col(LeaveBalance.leave_type_id) == leave_type_id,
        col(LeaveBalance.year) == year,
    ]


def _build_balance_response(balance: LeaveBalance, leave_type: LeaveType) -> LeaveBalanceResponse:
    """Map a balance row and its leave type to the response schema."""
    return LeaveBalanceResponse(
        id=balance.id,
        employee_id=balance.employee_id,
        leave_type=LeaveTypeBrief(id=leave_type.id, name=leave_type.name, is_paid=leave_type.is_paid),
        year=balance.year,
        total_allocated=balance.total_allocated,
        used=balance.used,
        pending=balance.pending,
        available=balance.available,
        updated_at=balance.updated_at,
    )


async def _reconcile(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    days: int,
    *,
    consume: bool,
) -> None:
    """Take ``days`` out of ``pending``, moving them to ``used`` when consuming.

    The ``pending >= days`` guard means a row that never held this
    reservation is reported instead of being driven negative.
    """
    values: dict = {
        "pending": col(LeaveBalance.pending) - days,
        "updated_at": datetime.now(UTC),
    }
    if consume:
        values["used"] = col(LeaveBalance.used) + days

    result = await session.execute(
        update(LeaveBalance)
        .where(*_balance_key(employee_id, leave_type_id, year), col(LeaveBalance.pending) >= days)
        .values(**values)
        .returning(col(LeaveBalance.id))
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        logger.error(
            "Leave balance missing or under-reserved: employee=%s leave_type=%s year=%d days=%d consume=%s",
            employee_id,
            leave_type_id,
            year,
            days,
            consume,
        )
        raise ConsistencyError(f"Leave balance record not found for {year} or holds fewer than {days} pending days")


# ---------------------------------------------------------------------------
# Guarded writes
# ---------------------------------------------------------------------------


async def reserve_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    days: int,
) -> None:
    """Hold ``days`` as pending if, and only if, that many days are available.

    The availability check and the increment are one conditional UPDATE, so
    concurrent reservations against the same row are serialized by the
    database and can never jointly overdraw it.
    """
    available = col(LeaveBalance.total_allocated) - col(LeaveBalance.used) - col(LeaveBalance.pending)
    result = await session.execute(
        update(LeaveBalance)
        .where(*_balance_key(employee_id, leave_type_id, year), available >= days)
        .values(pending=col(LeaveBalance.pending) + days, updated_at=datetime.now(UTC))
        .returning(col(LeaveBalance.id))
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        logger.info(
            "Reservation refused: employee=%s leave_type=%s year=%d days=%d",
            employee_id,
            leave_type_id,
            year,
            days,
        )
        raise InsufficientBalanceError()


async def consume_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    days: int,
) -> None:
    """Convert a reservation into used days (approval)."""
    await _reconcile(session, employee_id, leave_type_id, year, days, consume=True)


async def release_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    days: int,
) -> None:
    """Drop a reservation back into the available pool (rejection, cancellation)."""
    await _reconcile(session, employee_id, leave_type_id, year, days, consume=False)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> LeaveBalance | None:
    """Fetch a single balance row, bypassing any stale copy held by the session."""
    result = await session.execute(
        select(LeaveBalance)
        .where(*_balance_key(employee_id, leave_type_id, year))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_employee_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
) -> BalanceListResponse:
    """List an employee's balances for a year, ordered by leave type name."""
    result = await session.execute(
        select(LeaveBalance, LeaveType)
        .join(LeaveType, col(LeaveType.id) == col(LeaveBalance.leave_type_id))
        .where(col(LeaveBalance.employee_id) == employee_id, col(LeaveBalance.year) == year)
        .order_by(col(LeaveType.name))
        .execution_options(populate_existing=True)
    )
    items = [_build_balance_response(balance, leave_type) for balance, leave_type in result.all()]
    return BalanceListResponse(items=items, total=len(items))
