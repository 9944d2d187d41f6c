# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from dayflow.schemas.request import LeaveTypeBrief


class LeaveBalanceResponse(BaseModel):
    """Yearly balance for one leave type."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveTypeBrief
    year: int
    total_allocated: int
    used: int
    pending: int
    available: int
    updated_at: datetime | None


class BalanceListResponse(BaseModel):
    """All leave balances of an employee for one year."""

    items: list[LeaveBalanceResponse]
    total: int
