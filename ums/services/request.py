# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select, update
from sqlmodel import col

from ums.exceptions import (
    EmptyRemark,
    EmptyResponse,
    Forbidden,
    NotFound,
    NotOwner,
    NotPending,
    NotRejected,
    StateConflict,
    ValidationError,
)
from ums.models.base import now_utc
from ums.models.enums import AuditAction, AuditEntityType, MergeStatus, RequestStatus, RequestType
from ums.models.request import ChangeRequest
from ums.schemas.request import RequestListResponse, RequestResponse
from ums.services.audit import get_audit_trail, model_to_audit_dict, write_audit_log
from ums.services.merge import parse_payload, run_merge

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ums.schemas.audit import AuditTrailResponse
    from ums.schemas.auth import AuthContext
    from ums.schemas.request import RejectPayload, RequestPayload, ResubmitPayload
    from ums.services.user import UserDirectory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: ChangeRequest) -> RequestResponse:
    """Map a request model to its response schema."""
    return RequestResponse(
        id=request.id,
        type=RequestType(request.type),
        status=RequestStatus(request.status),
        data=request.data,
        user_id=request.user_id,
        requester_id=request.requester_id,
        admin_remark=request.admin_remark,
        manager_response=request.manager_response,
        decided_by=request.decided_by,
        decided_at=request.decided_at,
        merge_status=MergeStatus(request.merge_status),
        merge_attempts=request.merge_attempts,
        merge_error=request.merge_error,
        merged_at=request.merged_at,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


async def _get_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> ChangeRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    result = await session.execute(select(ChangeRequest).where(col(ChangeRequest.id) == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFound("Request not found")
    return request


async def _transition(
    session: AsyncSession,
    request: ChangeRequest,
    expected: RequestStatus,
    values: dict[str, Any],
) -> bool:
    """Compare-and-swap the request's status.

    Issues a single ``UPDATE ... WHERE id = :id AND status = :expected``. Returns
    False when no row matched, meaning a concurrent writer moved the request
    first. The caller's copy is refreshed on success.
    """
    result = await session.execute(
        update(ChangeRequest)
        .where(
            col(ChangeRequest.id) == request.id,
            col(ChangeRequest.status) == expected.value,
        )
        .values(**values, updated_at=now_utc())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        return False
    await session.refresh(request)
    return True


def _require_text(value: str | None) -> str | None:
    """Strip ``value``; blank or missing text becomes None."""
    if value is None:
        return None
    return value.strip() or None


def _frozen_keys_checked(request: ChangeRequest, updated_data: dict[str, Any]) -> dict[str, Any]:
    """Drop ``type`` from revised data and normalize ``userId``; neither may change."""
    updates = dict(updated_data)
    if "type" in updates and str(updates.pop("type")) != request.type:
        msg = "'type' cannot be changed on resubmission"
        raise ValidationError(msg)
    if "userId" in updates:
        try:
            user_id = uuid.UUID(str(updates["userId"]))
        except ValueError:
            msg = "'userId' must be a UUID"
            raise ValidationError(msg) from None
        if user_id != request.user_id:
            msg = "'userId' cannot be changed on resubmission"
            raise ValidationError(msg)
        updates["userId"] = str(user_id)
    return updates


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: RequestPayload,
    user_directory: UserDirectory,
) -> RequestResponse:
    """Create a PENDING request on behalf of the target user."""
    if await user_directory.get_user(payload.user_id) is None:
        raise NotFound("Target user not found")

    request = ChangeRequest(
        type=RequestType(payload.type).value,
        status=RequestStatus.PENDING.value,
        data=payload.to_document(),
        user_id=payload.user_id,
        requester_id=auth.user_id,
    )
    session.add(request)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    await session.refresh(request)
    logger.info("Request %s created: type=%s user=%s by=%s", request.id, request.type, request.user_id, auth.user_id)
    return _build_request_response(request)


async def approve_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    user_directory: UserDirectory,
) -> RequestResponse:
    """Approve a pending request and apply it to the target profile.

    1. Fetch the request (404) and check it is PENDING.
    2. CAS status PENDING -> APPROVED with ``merge_status=PENDING``.
    3. Audit log and commit. The approval is final from here on.
    4. Run the merge in its own transaction; its outcome lands on
       ``merge_status`` and never reverts the approval. If even recording the
       outcome fails, the approval is returned with ``merge_status=PENDING``.
    """
    request = await _get_request_or_404(session, request_id)
    if request.status != RequestStatus.PENDING.value:
        raise NotPending()

    before = model_to_audit_dict(request)
    now = now_utc()
    swapped = await _transition(
        session,
        request,
        RequestStatus.PENDING,
        {
            "status": RequestStatus.APPROVED.value,
            "decided_by": auth.user_id,
            "decided_at": now,
            "merge_status": MergeStatus.PENDING.value,
        },
    )
    if not swapped:
        raise NotPending()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=AuditAction.APPROVE,
        before_json=before,
        after_json=model_to_audit_dict(request),
    )
    await session.commit()
    logger.info("Request %s approved by %s", request.id, auth.user_id)
    approved = _build_request_response(request)

    try:
        await run_merge(session, request_id, actor_id=auth.user_id, user_directory=user_directory)
        await session.refresh(request)
    except Exception:
        # merge_status stays PENDING in the committed approval; the worker retries it.
        logger.exception("Merge bookkeeping failed for approved request=%s", request_id)
        await session.rollback()
        return approved
    return _build_request_response(request)


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: RejectPayload | None,
) -> RequestResponse:
    """Reject a pending request. The remark is stored and echoed into ``data.rejectionReason``."""
    request = await _get_request_or_404(session, request_id)

    remark = _require_text(payload.remark if payload else None)
    if remark is None:
        raise EmptyRemark()
    if request.status != RequestStatus.PENDING.value:
        raise NotPending()

    before = model_to_audit_dict(request)
    swapped = await _transition(
        session,
        request,
        RequestStatus.PENDING,
        {
            "status": RequestStatus.REJECTED.value,
            "admin_remark": remark,
            "data": {**request.data, "rejectionReason": remark},
            "decided_by": auth.user_id,
            "decided_at": now_utc(),
        },
    )
    if not swapped:
        raise NotPending()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=AuditAction.REJECT,
        before_json=before,
        after_json=model_to_audit_dict(request),
    )
    await session.commit()
    logger.info("Request %s rejected by %s", request.id, auth.user_id)
    return _build_request_response(request)


async def resubmit_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: ResubmitPayload | None,
) -> RequestResponse:
    """Send a rejected request back to PENDING with the manager's response.

    Guards run in order: existence, ownership, response text, state. Revised
    data is shallow-merged over the stored document and must still parse as a
    payload of the request's type.
    """
    request = await _get_request_or_404(session, request_id)

    if request.requester_id != auth.user_id:
        raise NotOwner()

    response = _require_text(payload.response if payload else None)
    if response is None:
        raise EmptyResponse()
    if request.status != RequestStatus.REJECTED.value:
        raise NotRejected()

    data = dict(request.data)
    if payload is not None and payload.updated_data:
        updates = _frozen_keys_checked(request, payload.updated_data)
        data.update(updates)
        try:
            parse_payload(request.type, data)
        except PydanticValidationError as exc:
            msg = f"Invalid data for {request.type} request: {exc.errors(include_url=False)}"
            raise ValidationError(msg) from None

    before = model_to_audit_dict(request)
    swapped = await _transition(
        session,
        request,
        RequestStatus.REJECTED,
        {
            "status": RequestStatus.PENDING.value,
            "manager_response": response,
            "data": data,
        },
    )
    if not swapped:
        raise NotRejected()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=AuditAction.RESUBMIT,
        before_json=before,
        after_json=model_to_audit_dict(request),
    )
    await session.commit()
    logger.info("Request %s resubmitted by %s", request.id, auth.user_id)
    return _build_request_response(request)


async def retry_merge(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    user_directory: UserDirectory,
) -> RequestResponse:
    """Re-run the merge of an approved request whose merge did not apply."""
    request = await _get_request_or_404(session, request_id)
    if request.status != RequestStatus.APPROVED.value:
        raise StateConflict("Only approved requests can be merged")
    if request.merge_status == MergeStatus.APPLIED.value:
        raise StateConflict("Request has already been merged")

    await run_merge(
        session,
        request.id,
        actor_id=auth.user_id,
        user_directory=user_directory,
        eligible=(MergeStatus.PENDING, MergeStatus.FAILED, MergeStatus.SKIPPED),
    )

    await session.refresh(request)
    return _build_request_response(request)


async def get_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    requester_id: uuid.UUID | None = None,
) -> RequestResponse:
    """Get a single request by ID, optionally restricted to one requester."""
    request = await _get_request_or_404(session, request_id)
    if requester_id is not None and request.requester_id != requester_id:
        raise Forbidden("Not authorized to view this request")
    return _build_request_response(request)


async def list_requests(
    session: AsyncSession,
    status_filter: RequestStatus | None = None,
    type_filter: RequestType | None = None,
    requester_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    merge_status: MergeStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests with optional filters, ordered by created_at DESC."""
    base_filters = []

    if status_filter is not None:
        base_filters.append(col(ChangeRequest.status) == status_filter.value)
    if type_filter is not None:
        base_filters.append(col(ChangeRequest.type) == type_filter.value)
    if requester_id is not None:
        base_filters.append(col(ChangeRequest.requester_id) == requester_id)
    if user_id is not None:
        base_filters.append(col(ChangeRequest.user_id) == user_id)
    if merge_status is not None:
        base_filters.append(col(ChangeRequest.merge_status) == merge_status.value)

    count_result = await session.execute(select(func.count()).select_from(ChangeRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(ChangeRequest)
        .where(*base_filters)
        .order_by(col(ChangeRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return RequestListResponse(
        items=[_build_request_response(r) for r in requests],
        total=total,
    )


async def get_request_audit_trail(session: AsyncSession, request_id: uuid.UUID) -> AuditTrailResponse:
    """Audit history of one request, including merge attempts."""
    request = await _get_request_or_404(session, request_id)
    return await get_audit_trail(session, AuditEntityType.REQUEST, request.id)
