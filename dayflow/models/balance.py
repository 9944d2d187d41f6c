# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from dayflow.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase


class LeaveBalance(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """Yearly leave balance for one employee and leave type.

    ``pending`` holds days reserved by requests awaiting a decision and
    ``used`` the days consumed by approved requests. The check constraints
    back the engine's guards: nothing may push the row past its allocation.
    """

    __tablename__ = "employee_leave_balances"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "leave_type_id", "year", name="uq_balance_employee_type_year"),
        sa.CheckConstraint("used >= 0", name="ck_balance_used_non_negative"),
        sa.CheckConstraint("pending >= 0", name="ck_balance_pending_non_negative"),
        sa.CheckConstraint("used + pending <= total_allocated", name="ck_balance_within_allocation"),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_types.id", ondelete="CASCADE"), nullable=False),
    )
    year: int
    total_allocated: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    pending: int = Field(default=0, sa_column_kwargs={"server_default": "0"})

    @property
    def available(self) -> int:
        """Days that a new reservation may still claim."""
        return self.total_allocated - self.used - self.pending
