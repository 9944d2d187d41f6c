from __future__ import annotations

import enum


class LeaveRequestStatus(enum.StrEnum):
    """State machine for leave requests. Every state but PENDING is terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class Role(enum.StrEnum):
    """Caller role supplied by the (external) authentication layer."""

    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
