# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from dayflow.models.enums import Role


class AuthContext(BaseModel):
    """Caller identity resolved by the authentication layer."""

    employee_id: uuid.UUID
    role: Role = Role.EMPLOYEE

    @property
    def can_decide(self) -> bool:
        """Whether the caller may approve or reject leave requests."""
        return self.role in (Role.HR, Role.ADMIN)
