from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dayflow.models.audit import AuditLog
from dayflow.models.enums import AuditEntityType

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from dayflow.models.enums import AuditAction
    from dayflow.models.request import LeaveRequest


def snapshot_request(leave_request: LeaveRequest, **overrides: Any) -> dict[str, Any]:
    """JSON-safe copy of a request's columns, with ``overrides`` applied on top."""
    return {**leave_request.model_dump(mode="json"), **overrides}


def record_request_change(
    session: AsyncSession,
    leave_request: LeaveRequest,
    *,
    actor_id: uuid.UUID,
    action: AuditAction,
    before: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit entry for ``leave_request`` in the caller's transaction.

    The after-image is taken from the request as it stands now.
    """
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=AuditEntityType.LEAVE_REQUEST.value,
        entity_id=leave_request.id,
        action=action.value,
        before_json=before,
        after_json=snapshot_request(leave_request),
    )
    session.add(entry)
    return entry
