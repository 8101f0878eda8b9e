# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from ums.models.audit import AuditLog
from ums.models.enums import AuditAction, AuditEntityType
from ums.schemas.audit import AuditEntryResponse, AuditTrailResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

logger = logging.getLogger(__name__)


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Snapshot a row as JSON-safe values for ``before_json``/``after_json``."""
    return model.model_dump(mode="json")


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID | None,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction. ``actor_id`` is None for the merge worker."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    logger.debug("Audit %s %s %s by %s", entity_type.value, entity_id, action.value, actor_id or "system")
    return entry


async def get_audit_trail(
    session: AsyncSession,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
) -> AuditTrailResponse:
    """All audit rows for one entity, oldest first."""
    result = await session.execute(
        select(AuditLog)
        .where(
            col(AuditLog.entity_type) == entity_type.value,
            col(AuditLog.entity_id) == entity_id,
        )
        .order_by(col(AuditLog.created_at), col(AuditLog.id))
    )
    items = [
        AuditEntryResponse(
            id=entry.id,
            actor_id=entry.actor_id,
            action=AuditAction(entry.action),
            before_json=entry.before_json,
            after_json=entry.after_json,
            created_at=entry.created_at,
        )
        for entry in result.scalars().all()
    ]
    return AuditTrailResponse(entity_type=entity_type, entity_id=entity_id, items=items)
