# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from ums.models.base import TimestampMixin, UUIDBase
from ums.models.enums import MergeStatus, RequestStatus


class ChangeRequest(UUIDBase, TimestampMixin, table=True):
    """A manager-initiated change to a user's profile, subject to admin approval."""

    __tablename__ = "change_request"
    __table_args__ = (
        sa.Index("ix_change_request_status_type", "status", "type"),
        sa.Index("ix_change_request_merge", "status", "merge_status"),
    )

    type: str = Field(max_length=50, index=True)
    status: str = Field(
        default=RequestStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    data: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    user_id: uuid.UUID = Field(index=True)
    requester_id: uuid.UUID = Field(index=True)
    admin_remark: str | None = None
    manager_response: str | None = None
    decided_by: uuid.UUID | None = None
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    merge_status: str = Field(
        default=MergeStatus.NOT_APPLICABLE,
        max_length=50,
        sa_column_kwargs={"server_default": "NOT_APPLICABLE"},
    )
    merge_attempts: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    merge_error: str | None = None
    merged_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
