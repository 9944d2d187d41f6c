# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import AnyHttpUrl, BaseModel, Field

from dayflow.models.enums import LeaveRequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a leave request.

    Date order and the booking window are checked by the leave workflow.
    """

    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    reason: str = Field(min_length=10, max_length=1000)
    document_url: AnyHttpUrl | None = None


class ApprovePayload(BaseModel):
    """Request body for approving a leave request."""

    approver_comment: str | None = Field(default=None, max_length=500)


class RejectPayload(BaseModel):
    """Request body for rejecting a leave request. The comment is mandatory."""

    approver_comment: str = Field(max_length=500)


class LeaveRequestFilters(BaseModel):
    """Filters and pagination for the approver listing."""

    status: LeaveRequestStatus | None = None
    employee_id: uuid.UUID | None = None
    leave_type_id: uuid.UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EmployeeBrief(BaseModel):
    id: uuid.UUID
    employee_code: str
    first_name: str
    last_name: str
    department: str | None


class LeaveTypeBrief(BaseModel):
    id: uuid.UUID
    name: str
    is_paid: bool


class ApproverBrief(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str


class LeaveRequestResponse(BaseModel):
    """A leave request with denormalized employee, leave type and approver fields."""

    id: uuid.UUID
    employee: EmployeeBrief
    leave_type: LeaveTypeBrief
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveRequestStatus
    document_url: str | None
    approver: ApproverBrief | None
    approver_comment: str | None
    approved_at: datetime | None
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    pagination: Pagination


class LeaveRequestStats(BaseModel):
    """Per-status request counts for one employee."""

    total_requests: int = 0
    pending_requests: int = 0
    approved_requests: int = 0
    rejected_requests: int = 0
    cancelled_requests: int = 0
