"""Leave reservation workflow.

Submitting a request reserves its days against the yearly balance; deciding
it (approve, reject, cancel) reconciles that reservation. Each mutating
operation runs as one transaction: the balance update and the request write
either both commit or neither does. Balances are always bucketed under the
request's ``start_date.year``, both when reserving and when reconciling.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from dayflow.config import get_settings
from dayflow.db import transaction
from dayflow.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from dayflow.models.enums import AuditAction, LeaveRequestStatus
from dayflow.schemas.summary import MyLeaveSummaryResponse
from dayflow.services import balance as balance_store
from dayflow.services import request as request_store
from dayflow.services.audit import record_request_change, snapshot_request
from dayflow.services.duration import calculate_leave_days, validate_leave_window

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from dayflow.models.request import LeaveRequest
    from dayflow.schemas.auth import AuthContext
    from dayflow.schemas.balance import BalanceListResponse
    from dayflow.schemas.request import (
        ApprovePayload,
        LeaveRequestFilters,
        LeaveRequestListResponse,
        LeaveRequestResponse,
        RejectPayload,
        SubmitLeavePayload,
    )

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_pending(leave_request: LeaveRequest, verb: str) -> None:
    if leave_request.status != LeaveRequestStatus.PENDING.value:
        raise InvalidStateError(
            f"Cannot {verb} request with status: {leave_request.status}",
            current_status=leave_request.status,
        )


async def _decide(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    *,
    new_status: LeaveRequestStatus,
    audit_action: AuditAction,
    approver_comment: str | None,
) -> LeaveRequestResponse:
    """Shared approve/reject flow.

    1. Require an employee profile for the approver.
    2. Lock the request row.
    3. Require PENDING.
    4. Transition status with approver fields.
    5. Consume (approve) or release (reject) the reservation.
    6. Audit log, commit, return details.
    """
    verb = "approve" if new_status is LeaveRequestStatus.APPROVED else "reject"

    async with transaction(session):
        if not await request_store.employee_exists(session, auth.employee_id):
            raise NotFoundError("Approver employee profile not found")

        leave_request = await request_store.lock_request(session, request_id)
        _ensure_pending(leave_request, verb)
        before = snapshot_request(leave_request)

        updated = await request_store.transition_request(
            session,
            request_id,
            new_status,
            approver_id=auth.employee_id,
            approver_comment=approver_comment,
            approved_at=datetime.now(UTC),
        )
        if updated is None:
            # Only reachable when the backing store does not honour FOR UPDATE.
            raise InvalidStateError(f"Cannot {verb} request: it has already been decided")

        year = updated.start_date.year
        if new_status is LeaveRequestStatus.APPROVED:
            await balance_store.consume_balance(
                session, updated.employee_id, updated.leave_type_id, year, updated.total_days
            )
        else:
            await balance_store.release_balance(
                session, updated.employee_id, updated.leave_type_id, year, updated.total_days
            )

        record_request_change(session, updated, actor_id=auth.employee_id, action=audit_action, before=before)

    logger.info("Leave request %s %s by %s", request_id, new_status.value.lower(), auth.employee_id)
    return await request_store.get_request_detail(session, request_id)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def submit_leave_request(
    session: AsyncSession,
    employee_id: uuid.UUID,
    payload: SubmitLeavePayload,
    *,
    today: date | None = None,
) -> LeaveRequestResponse:
    """Submit a leave request, reserving its days against the yearly balance.

    Flow:
    1. Validate the date window (no store access).
    2. Count inclusive calendar days.
    3. Reserve the days with a guarded UPDATE; refuse if not available.
    4. Insert the PENDING request.
    5. Write audit log and commit.
    """
    settings = get_settings()
    today = today or date.today()

    validate_leave_window(payload.start_date, payload.end_date, today, settings.leave_max_advance_years)
    total_days = calculate_leave_days(payload.start_date, payload.end_date)

    async with transaction(session):
        await balance_store.reserve_balance(
            session, employee_id, payload.leave_type_id, payload.start_date.year, total_days
        )
        leave_request = await request_store.create_request(
            session,
            employee_id=employee_id,
            leave_type_id=payload.leave_type_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            total_days=total_days,
            reason=payload.reason,
            document_url=str(payload.document_url) if payload.document_url is not None else None,
        )
        request_id = leave_request.id
        record_request_change(session, leave_request, actor_id=employee_id, action=AuditAction.SUBMIT)

    logger.info("Leave request %s submitted by %s for %d day(s)", request_id, employee_id, total_days)
    return await request_store.get_request_detail(session, request_id)


async def approve_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: ApprovePayload | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request: its reserved days become used days."""
    return await _decide(
        session,
        auth,
        request_id,
        new_status=LeaveRequestStatus.APPROVED,
        audit_action=AuditAction.APPROVE,
        approver_comment=payload.approver_comment if payload else None,
    )


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: RejectPayload,
) -> LeaveRequestResponse:
    """Reject a pending request and release its reservation. A comment is required."""
    comment = payload.approver_comment.strip()
    if not comment:
        raise ValidationError("Approver comment is required for rejection")

    return await _decide(
        session,
        auth,
        request_id,
        new_status=LeaveRequestStatus.REJECTED,
        audit_action=AuditAction.REJECT,
        approver_comment=comment,
    )


async def cancel_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Cancel a pending request and release its reservation.

    Only the requester may cancel, whatever their role; approvers end other
    people's requests by rejecting them with a comment.
    """
    async with transaction(session):
        leave_request = await request_store.lock_request(session, request_id)
        if leave_request.employee_id != auth.employee_id:
            raise ForbiddenError("Not authorized to cancel this request")
        _ensure_pending(leave_request, "cancel")
        before = snapshot_request(leave_request)

        updated = await request_store.transition_request(
            session, request_id, LeaveRequestStatus.CANCELLED, employee_id=auth.employee_id
        )
        if updated is None:
            raise InvalidStateError("Cannot cancel request: it has already been decided")

        await balance_store.release_balance(
            session, updated.employee_id, updated.leave_type_id, updated.start_date.year, updated.total_days
        )

        record_request_change(session, updated, actor_id=auth.employee_id, action=AuditAction.CANCEL, before=before)

    logger.info("Leave request %s cancelled by %s", request_id, auth.employee_id)
    return await request_store.get_request_detail(session, request_id)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get one request. Employees see only their own; approvers see all."""
    detail = await request_store.get_request_detail(session, request_id)
    if not auth.can_decide and detail.employee.id != auth.employee_id:
        raise NotFoundError("Leave request not found")
    return detail


async def get_my_requests(
    session: AsyncSession,
    employee_id: uuid.UUID,
    limit: int = 10,
) -> list[LeaveRequestResponse]:
    """The caller's most recent requests."""
    return await request_store.list_employee_requests(session, employee_id, limit)


async def list_leave_requests(
    session: AsyncSession,
    filters: LeaveRequestFilters,
) -> LeaveRequestListResponse:
    """Approver listing with filters and pagination."""
    return await request_store.list_requests(session, filters)


async def get_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
) -> BalanceListResponse:
    """An employee's balances for one year."""
    return await balance_store.get_employee_balances(session, employee_id, year)


async def get_my_summary(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    today: date | None = None,
) -> MyLeaveSummaryResponse:
    """Current-year balances, the latest requests and per-status counts."""
    settings = get_settings()
    year = (today or date.today()).year

    balances = await balance_store.get_employee_balances(session, employee_id, year)
    recent = await request_store.list_employee_requests(session, employee_id, settings.recent_requests_limit)
    stats = await request_store.get_request_stats(session, employee_id)

    return MyLeaveSummaryResponse(
        year=year,
        balances=balances.items,
        recent_requests=recent,
        stats=stats,
    )
