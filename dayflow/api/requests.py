# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from dayflow.api.deps import ApproverDep, AuthDep
from dayflow.db import SessionDep
from dayflow.models.enums import LeaveRequestStatus
from dayflow.schemas.request import (
    ApprovePayload,
    LeaveRequestFilters,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    RejectPayload,
    SubmitLeavePayload,
)
from dayflow.schemas.summary import MyLeaveSummaryResponse
from dayflow.services import leave as leave_service

requests_router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_leave_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Submit a leave request for the authenticated employee."""
    return await leave_service.submit_leave_request(session, auth.employee_id, payload)


@requests_router.get("/me", response_model=list[LeaveRequestResponse])
async def get_my_leave_requests(
    session: SessionDep,
    auth: AuthDep,
    limit: int = Query(default=10, ge=1, le=100),
) -> list[LeaveRequestResponse]:
    """List the authenticated employee's most recent leave requests."""
    return await leave_service.get_my_requests(session, auth.employee_id, limit)


@requests_router.get("/me/summary", response_model=MyLeaveSummaryResponse)
async def get_my_leave_summary(
    session: SessionDep,
    auth: AuthDep,
) -> MyLeaveSummaryResponse:
    """Balances, recent requests and counts for the authenticated employee."""
    return await leave_service.get_my_summary(session, auth.employee_id)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_leave_requests(
    session: SessionDep,
    auth: ApproverDep,
    status_filter: LeaveRequestStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    leave_type_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests with optional filters (HR/admin only)."""
    filters = LeaveRequestFilters(
        status=status_filter,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return await leave_service.list_leave_requests(session, filters)


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await leave_service.get_request(session, auth, request_id)


@requests_router.patch("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ApproverDep,
    payload: ApprovePayload | None = None,
) -> LeaveRequestResponse:
    """Approve a pending leave request (HR/admin only)."""
    return await leave_service.approve_request(session, auth, request_id, payload)


@requests_router.patch("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave_request(
    request_id: uuid.UUID,
    payload: RejectPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> LeaveRequestResponse:
    """Reject a pending leave request with a comment (HR/admin only)."""
    return await leave_service.reject_request(session, auth, request_id, payload)


@requests_router.patch("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Cancel a pending leave request."""
    return await leave_service.cancel_request(session, auth, request_id)
