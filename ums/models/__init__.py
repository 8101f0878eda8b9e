from sqlmodel import SQLModel

from ums.models.audit import AuditLog
from ums.models.base import TimestampMixin, UUIDBase
from ums.models.enums import (
    AuditAction,
    AuditEntityType,
    MergeStatus,
    ProfileSection,
    RequestStatus,
    RequestType,
    Role,
)
from ums.models.profile import UserProfile
from ums.models.request import ChangeRequest

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "ChangeRequest",
    "MergeStatus",
    "ProfileSection",
    "RequestStatus",
    "RequestType",
    "Role",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UserProfile",
]
