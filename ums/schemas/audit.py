# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from ums.models.enums import AuditAction, AuditEntityType


class AuditEntryResponse(BaseModel):
    """One recorded mutation."""

    id: uuid.UUID
    actor_id: uuid.UUID | None
    action: AuditAction
    before_json: dict[str, Any] | None
    after_json: dict[str, Any] | None
    created_at: datetime


class AuditTrailResponse(BaseModel):
    entity_type: AuditEntityType
    entity_id: uuid.UUID
    items: list[AuditEntryResponse]
