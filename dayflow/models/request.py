# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from dayflow.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from dayflow.models.enums import LeaveRequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """An employee's leave application with its approval workflow state."""

    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.Index("ix_leave_request_employee_status", "employee_id", "status"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_request_date_order"),
        sa.CheckConstraint("total_days > 0", name="ck_leave_request_positive_days"),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id"), nullable=False, index=True),
    )
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_types.id"), nullable=False, index=True),
    )
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: str = Field(
        default=LeaveRequestStatus.PENDING,
        max_length=20,
        index=True,
        sa_column_kwargs={"server_default": "PENDING"},
    )
    approver_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id"), nullable=True),
    )
    approver_comment: str | None = None
    approved_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
    )
    document_url: str | None = Field(default=None, max_length=2048)
