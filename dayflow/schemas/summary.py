from __future__ import annotations

from pydantic import BaseModel

from dayflow.schemas.balance import LeaveBalanceResponse
from dayflow.schemas.request import LeaveRequestResponse, LeaveRequestStats


class MyLeaveSummaryResponse(BaseModel):
    """Employee dashboard: current-year balances, recent requests and counts."""

    year: int
    balances: list[LeaveBalanceResponse]
    recent_requests: list[LeaveRequestResponse]
    stats: LeaveRequestStats
