# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from dayflow.exceptions import ForbiddenError
from dayflow.models.enums import Role
from dayflow.schemas.auth import AuthContext


async def get_auth_context(
    x_employee_id: uuid.UUID = Header(),
    x_role: Role = Header(default=Role.EMPLOYEE),
) -> AuthContext:
    """Extract the caller identity forwarded by the authentication gateway."""
    return AuthContext(employee_id=x_employee_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_approver(
    auth: AuthDep,
) -> AuthContext:
    """Require the HR or admin role for the request."""
    if not auth.can_decide:
        raise ForbiddenError("HR or admin access required")
    return auth


ApproverDep = Annotated[AuthContext, Depends(require_approver)]
