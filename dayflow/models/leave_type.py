from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from dayflow.models.base import TimestampMixin, UUIDBase


class LeaveType(UUIDBase, TimestampMixin, table=True):
    """A category of leave (e.g. Annual, Sick) with its allocation defaults."""

    __tablename__ = "leave_types"

    name: str = Field(max_length=100, unique=True)
    description: str | None = None
    default_days_per_year: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    is_paid: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    requires_document: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
