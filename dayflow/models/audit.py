# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from dayflow.models.base import TimestampMixin, UUIDBase
from dayflow.models.enums import AuditEntityType


class AuditLog(UUIDBase, TimestampMixin, table=True):
    """Append-only trail of leave workflow mutations.

    ``before_json`` is empty for a submission; ``after_json`` always holds the
    request as it was committed.
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        sa.Index("ix_audit_entity", "entity_type", "entity_id"),
        sa.Index("ix_audit_log_created_at", "created_at"),
    )

    actor_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id"), nullable=False),
    )
    entity_type: str = Field(default=AuditEntityType.LEAVE_REQUEST, max_length=50)
    entity_id: uuid.UUID
    action: str = Field(max_length=50)
    before_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    after_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
