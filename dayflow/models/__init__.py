from sqlmodel import SQLModel

from dayflow.models.audit import AuditLog
from dayflow.models.balance import LeaveBalance
from dayflow.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from dayflow.models.employee import Employee
from dayflow.models.enums import AuditAction, AuditEntityType, LeaveRequestStatus, Role
from dayflow.models.leave_type import LeaveType
from dayflow.models.request import LeaveRequest

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Employee",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveRequestStatus",
    "LeaveType",
    "Role",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
]
