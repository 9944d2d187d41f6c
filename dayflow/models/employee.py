from __future__ import annotations

from sqlmodel import Field

from dayflow.models.base import TimestampMixin, UUIDBase


class Employee(UUIDBase, TimestampMixin, table=True):
    """Directory entry for an employee. Owned by the employee directory; read-only here."""

    __tablename__ = "employees"

    employee_code: str = Field(max_length=50, unique=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    department: str | None = Field(default=None, max_length=100)
