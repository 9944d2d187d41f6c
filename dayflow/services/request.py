from __future__ import annotations

import math
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import aliased
from sqlmodel import col

from dayflow.exceptions import NotFoundError
from dayflow.models.employee import Employee
from dayflow.models.enums import LeaveRequestStatus
from dayflow.models.leave_type import LeaveType
from dayflow.models.request import LeaveRequest
from dayflow.schemas.request import (
    ApproverBrief,
    EmployeeBrief,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    LeaveRequestStats,
    LeaveTypeBrief,
    Pagination,
)

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from dayflow.schemas.request import LeaveRequestFilters

_Approver = aliased(Employee, name="approver")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _detail_query() -> Select:
    """Requests joined with the employee, leave type and (optional) approver."""
    return (
        select(LeaveRequest, Employee, LeaveType, _Approver)
        .join(Employee, col(Employee.id) == col(LeaveRequest.employee_id))
        .join(LeaveType, col(LeaveType.id) == col(LeaveRequest.leave_type_id))
        .outerjoin(_Approver, _Approver.id == col(LeaveRequest.approver_id))
        .execution_options(populate_existing=True)
    )


def _build_request_response(
    request: LeaveRequest,
    employee: Employee,
    leave_type: LeaveType,
    approver: Employee | None,
) -> LeaveRequestResponse:
    """Map a joined request row to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        employee=EmployeeBrief(
            id=employee.id,
            employee_code=employee.employee_code,
            first_name=employee.first_name,
            last_name=employee.last_name,
            department=employee.department,
        ),
        leave_type=LeaveTypeBrief(id=leave_type.id, name=leave_type.name, is_paid=leave_type.is_paid),
        start_date=request.start_date,
        end_date=request.end_date,
        total_days=request.total_days,
        reason=request.reason,
        status=LeaveRequestStatus(request.status),
        document_url=request.document_url,
        approver=(
            ApproverBrief(id=approver.id, first_name=approver.first_name, last_name=approver.last_name)
            if approver is not None
            else None
        ),
        approver_comment=request.approver_comment,
        approved_at=request.approved_at,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def _filter_clauses(filters: LeaveRequestFilters) -> list:
    clauses = []
    if filters.status is not None:
        clauses.append(col(LeaveRequest.status) == filters.status.value)
    if filters.employee_id is not None:
        clauses.append(col(LeaveRequest.employee_id) == filters.employee_id)
    if filters.leave_type_id is not None:
        clauses.append(col(LeaveRequest.leave_type_id) == filters.leave_type_id)
    if filters.start_date is not None:
        clauses.append(col(LeaveRequest.start_date) >= filters.start_date)
    if filters.end_date is not None:
        clauses.append(col(LeaveRequest.end_date) <= filters.end_date)
    return clauses


def _newest_first(query: Select) -> Select:
    return query.order_by(col(LeaveRequest.created_at).desc(), col(LeaveRequest.id).desc())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_request(
    session: AsyncSession,
    *,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    start_date: date,
    end_date: date,
    total_days: int,
    reason: str,
    document_url: str | None = None,
) -> LeaveRequest:
    """Insert a PENDING request. The caller must already hold its reservation."""
    leave_request = LeaveRequest(
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        start_date=start_date,
        end_date=end_date,
        total_days=total_days,
        reason=reason,
        status=LeaveRequestStatus.PENDING.value,
        document_url=document_url,
    )
    session.add(leave_request)
    await session.flush()
    return leave_request


async def lock_request(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    """Fetch a request with an exclusive row lock held until the transaction ends."""
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    leave_request = result.scalar_one_or_none()
    if leave_request is None:
        raise NotFoundError("Leave request not found")
    return leave_request


async def employee_exists(session: AsyncSession, employee_id: uuid.UUID) -> bool:
    result = await session.execute(select(col(Employee.id)).where(col(Employee.id) == employee_id))
    return result.scalar_one_or_none() is not None


async def transition_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    new_status: LeaveRequestStatus,
    *,
    employee_id: uuid.UUID | None = None,
    **fields: Any,
) -> LeaveRequest | None:
    """Move a PENDING request to ``new_status`` in one conditional UPDATE.

    Extra ``fields`` (approver, comment, timestamp) are written alongside the
    status. When ``employee_id`` is given the request must also belong to
    that employee. Returns the updated request, or None when no PENDING row
    matched.
    """
    clauses = [
        col(LeaveRequest.id) == request_id,
        col(LeaveRequest.status) == LeaveRequestStatus.PENDING.value,
    ]
    if employee_id is not None:
        clauses.append(col(LeaveRequest.employee_id) == employee_id)

    result = await session.execute(
        update(LeaveRequest)
        .where(*clauses)
        .values(status=new_status.value, updated_at=datetime.now(UTC), **fields)
        .returning(LeaveRequest)
        .execution_options(synchronize_session=False, populate_existing=True)
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_request_detail(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequestResponse:
    """Get a single request with display fields. Raises NotFoundError if absent."""
    result = await session.execute(_detail_query().where(col(LeaveRequest.id) == request_id))
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Leave request not found")
    return _build_request_response(*row)


async def list_employee_requests(
    session: AsyncSession,
    employee_id: uuid.UUID,
    limit: int = 10,
) -> list[LeaveRequestResponse]:
    """An employee's most recent requests, newest first."""
    result = await session.execute(
        _newest_first(_detail_query().where(col(LeaveRequest.employee_id) == employee_id)).limit(limit)
    )
    return [_build_request_response(*row) for row in result.all()]


async def list_requests(session: AsyncSession, filters: LeaveRequestFilters) -> LeaveRequestListResponse:
    """List requests matching the filters, one page at a time, newest first."""
    clauses = _filter_clauses(filters)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*clauses))
    total = count_result.scalar_one()

    offset = (filters.page - 1) * filters.limit
    result = await session.execute(
        _newest_first(_detail_query().where(*clauses)).offset(offset).limit(filters.limit)
    )

    return LeaveRequestListResponse(
        items=[_build_request_response(*row) for row in result.all()],
        pagination=Pagination(
            page=filters.page,
            limit=filters.limit,
            total=total,
            total_pages=math.ceil(total / filters.limit),
        ),
    )


async def get_request_stats(session: AsyncSession, employee_id: uuid.UUID) -> LeaveRequestStats:
    """Count an employee's requests overall and per status."""

    def _count_status(status: LeaveRequestStatus) -> Any:
        return func.coalesce(
            func.sum(case((col(LeaveRequest.status) == status.value, 1), else_=0)),
            0,
        )

    result = await session.execute(
        select(
            func.count().label("total"),
            _count_status(LeaveRequestStatus.PENDING).label("pending"),
            _count_status(LeaveRequestStatus.APPROVED).label("approved"),
            _count_status(LeaveRequestStatus.REJECTED).label("rejected"),
            _count_status(LeaveRequestStatus.CANCELLED).label("cancelled"),
        )
        .select_from(LeaveRequest)
        .where(col(LeaveRequest.employee_id) == employee_id)
    )
    row = result.one()
    return LeaveRequestStats(
        total_requests=int(row.total),
        pending_requests=int(row.pending),
        approved_requests=int(row.approved),
        rejected_requests=int(row.rejected),
        cancelled_requests=int(row.cancelled),
    )
