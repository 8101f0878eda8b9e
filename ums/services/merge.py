"""Merge applier: projects approved change requests onto user profiles.

Every merge attempt runs in its own transaction after the approval has been
committed. The profile write and the ``merge_status=APPLIED`` marker commit
together, and the request row is locked while the attempt runs, so a merge is
applied at most once no matter how many callers (approve, admin retry, worker)
race to run it. A failed attempt is rolled back and recorded as ``FAILED``;
the approval itself is never touched.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Collection
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlmodel import col

from ums.exceptions import MergeApplicationFailure
from ums.models.base import now_utc
from ums.models.enums import AuditAction, AuditEntityType, MergeStatus, ProfileSection, RequestStatus, RequestType
from ums.models.request import ChangeRequest
from ums.schemas.request import (
    LeavePayload,
    OutpassPayload,
    ProfileUpdatePayload,
    RequestPayload,
    SalaryPayload,
)
from ums.services.audit import model_to_audit_dict, write_audit_log
from ums.services.profile import (
    AppendToArray,
    MergeKeys,
    ReplaceSection,
    SectionMutation,
    ensure_profile,
    mutate_section,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ums.services.user import UserDirectory

logger = logging.getLogger(__name__)

_payload_adapter: TypeAdapter[RequestPayload] = TypeAdapter(RequestPayload)

_MAX_ERROR_LENGTH = 1000
_KNOWN_TYPES = frozenset(t.value for t in RequestType)


@dataclass
class MergeOutcome:
    """Result of one merge attempt."""

    status: MergeStatus
    detail: str | None = None


# ---------------------------------------------------------------------------
# Pure projection
# ---------------------------------------------------------------------------


def parse_payload(request_type: str, data: dict[str, Any]) -> RequestPayload:
    """Parse a stored ``data`` document into its typed payload."""
    return _payload_adapter.validate_python({**data, "type": request_type})


def plan_mutation(payload: RequestPayload, now: datetime) -> SectionMutation:
    """Map a payload to the section operation that applies it.

    LEAVE and OUTPASS append a timestamped entry, SALARY merges keys, and
    PROFILE_UPDATE replaces the whole section.
    """
    approved_at = now.isoformat()
    if isinstance(payload, LeavePayload):
        return AppendToArray(
            section=ProfileSection.LEAVE,
            key="requests",
            item={**payload.leave, "approvedAt": approved_at},
        )
    if isinstance(payload, OutpassPayload):
        return AppendToArray(
            section=ProfileSection.LEAVE,
            key="outpasses",
            item={**payload.outpass, "approvedAt": approved_at},
        )
    if isinstance(payload, SalaryPayload):
        return MergeKeys(section=ProfileSection.SALARY, partial=payload.salary)
    if isinstance(payload, ProfileUpdatePayload):
        return ReplaceSection(section=payload.section, value=payload.data)
    msg = f"No projection for payload {type(payload).__name__}"
    raise MergeApplicationFailure(msg)


# ---------------------------------------------------------------------------
# Applier
# ---------------------------------------------------------------------------


async def apply_approved_request(
    session: AsyncSession,
    request: ChangeRequest,
    user_directory: UserDirectory,
    now: datetime | None = None,
) -> MergeOutcome:
    """Project one approved request onto its target profile. Does not commit.

    Returns SKIPPED (never raises) for the no-op paths: unknown type, missing
    or unknown target user, or a payload that no longer parses.
    """
    if request.type not in _KNOWN_TYPES:
        logger.warning("Merge skipped for request=%s: unknown type %r", request.id, request.type)
        return MergeOutcome(MergeStatus.SKIPPED, f"Unknown request type '{request.type}'")

    if not request.data.get("userId"):
        logger.warning("Merge skipped for request=%s: data has no userId", request.id)
        return MergeOutcome(MergeStatus.SKIPPED, "Request data has no userId")

    try:
        payload = parse_payload(request.type, request.data)
    except PydanticValidationError as exc:
        logger.warning("Merge skipped for request=%s: invalid payload: %s", request.id, exc)
        return MergeOutcome(MergeStatus.SKIPPED, f"Invalid payload: {exc}"[:_MAX_ERROR_LENGTH])

    if await user_directory.get_user(payload.user_id) is None:
        logger.warning("Merge skipped for request=%s: target user %s not found", request.id, payload.user_id)
        return MergeOutcome(MergeStatus.SKIPPED, f"Target user {payload.user_id} not found")

    await ensure_profile(session, payload.user_id)
    mutation = plan_mutation(payload, now or now_utc())
    await mutate_section(session, payload.user_id, mutation)
    return MergeOutcome(MergeStatus.APPLIED)


async def _lock_request(session: AsyncSession, request_id: uuid.UUID) -> ChangeRequest | None:
    result = await session.execute(
        select(ChangeRequest)
        .where(col(ChangeRequest.id) == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _record_failure(
    session: AsyncSession,
    request_id: uuid.UUID,
    actor_id: uuid.UUID | None,
    error: str,
) -> None:
    request = await _lock_request(session, request_id)
    if request is None:
        return
    before = model_to_audit_dict(request)
    request.merge_status = MergeStatus.FAILED.value
    request.merge_attempts += 1
    request.merge_error = error[:_MAX_ERROR_LENGTH]
    request.updated_at = now_utc()
    session.add(request)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=AuditAction.MERGE_FAILED,
        before_json=before,
        after_json=model_to_audit_dict(request),
    )
    await session.commit()


async def run_merge(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    actor_id: uuid.UUID | None,
    user_directory: UserDirectory,
    eligible: Collection[MergeStatus] = (MergeStatus.PENDING,),
) -> MergeStatus | None:
    """Run one merge attempt for an approved request and record its outcome.

    1. Lock the request row; bail out unless it is APPROVED with an eligible
       merge status (another caller may already have applied it).
    2. Apply the projection and mark APPLIED or SKIPPED, then commit.
    3. On any error, roll back and record FAILED in a fresh transaction.

    Returns the recorded merge status, or None when the attempt was not eligible.
    """
    eligible_values = {s.value for s in eligible}
    try:
        request = await _lock_request(session, request_id)
        if (
            request is None
            or request.status != RequestStatus.APPROVED.value
            or request.merge_status not in eligible_values
        ):
            await session.commit()
            return None

        before = model_to_audit_dict(request)
        outcome = await apply_approved_request(session, request, user_directory)

        now = now_utc()
        request.merge_status = outcome.status.value
        request.merge_attempts += 1
        request.merge_error = outcome.detail
        request.merged_at = now if outcome.status == MergeStatus.APPLIED else None
        request.updated_at = now
        session.add(request)
        await session.flush()

        await write_audit_log(
            session,
            actor_id=actor_id,
            entity_type=AuditEntityType.REQUEST,
            entity_id=request.id,
            action=AuditAction.MERGE if outcome.status == MergeStatus.APPLIED else AuditAction.MERGE_SKIPPED,
            before_json=before,
            after_json=model_to_audit_dict(request),
        )
        await session.commit()
    except Exception as exc:
        logger.exception("Merge failed for request=%s", request_id)
        await session.rollback()
        await _record_failure(session, request_id, actor_id, f"{type(exc).__name__}: {exc}")
        return MergeStatus.FAILED

    if outcome.status == MergeStatus.APPLIED:
        logger.info("Merge applied for request=%s type=%s", request_id, request.type)
    return outcome.status


async def find_unmerged_request_ids(
    session: AsyncSession,
    *,
    max_attempts: int,
    limit: int,
) -> list[uuid.UUID]:
    """Approved requests whose merge is still pending or failed, oldest first."""
    result = await session.execute(
        select(col(ChangeRequest.id))
        .where(
            col(ChangeRequest.status) == RequestStatus.APPROVED.value,
            col(ChangeRequest.merge_status).in_([MergeStatus.PENDING.value, MergeStatus.FAILED.value]),
            col(ChangeRequest.merge_attempts) < max_attempts,
        )
        .order_by(col(ChangeRequest.updated_at))
        .limit(limit)
    )
    return list(result.scalars().all())


async def count_merge_backlog(session: AsyncSession) -> int:
    """Number of approved requests whose profile merge has not landed yet."""
    result = await session.execute(
        select(func.count())
        .select_from(ChangeRequest)
        .where(
            col(ChangeRequest.status) == RequestStatus.APPROVED.value,
            col(ChangeRequest.merge_status).in_([MergeStatus.PENDING.value, MergeStatus.FAILED.value]),
        )
    )
    return result.scalar_one()
