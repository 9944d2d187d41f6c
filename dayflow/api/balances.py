# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from dayflow.api.deps import AuthDep
from dayflow.db import SessionDep
from dayflow.exceptions import ForbiddenError
from dayflow.schemas.balance import BalanceListResponse
from dayflow.services import leave as leave_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balances",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=2000, le=2100),
) -> BalanceListResponse:
    """Get an employee's leave balances for a year (defaults to the current year)."""
    if employee_id != auth.employee_id and not auth.can_decide:
        raise ForbiddenError("Not authorized to view these balances")
    return await leave_service.get_balances(session, employee_id, year or date.today().year)
