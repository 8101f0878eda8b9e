# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from ums.api.deps import AdminDep, ManagerDep, UserDirectoryDep, parse_enum_filter
from ums.db import SessionDep
from ums.models.enums import MergeStatus, RequestStatus, RequestType
from ums.schemas.audit import AuditTrailResponse
from ums.schemas.request import (
    CreateRequestPayload,
    LeavePayload,
    OutpassPayload,
    ProfileUpdatePayload,
    RejectPayload,
    RequestListResponse,
    RequestResponse,
    ResubmitPayload,
    SalaryPayload,
)
from ums.services import request as request_service

manager_requests_router = APIRouter(prefix="/manager/requests", tags=["manager-requests"])
admin_requests_router = APIRouter(prefix="/admin/requests", tags=["admin-requests"])


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


@manager_requests_router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: CreateRequestPayload,
    session: SessionDep,
    auth: ManagerDep,
    users: UserDirectoryDep,
) -> RequestResponse:
    """Create a change request of any type for a user."""
    return await request_service.create_request(session, auth, payload.root, users)


@manager_requests_router.post("/leave", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    payload: LeavePayload,
    session: SessionDep,
    auth: ManagerDep,
    users: UserDirectoryDep,
) -> RequestResponse:
    """Create a LEAVE request for a user."""
    return await request_service.create_request(session, auth, payload, users)


@manager_requests_router.post("/outpass", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_outpass_request(
    payload: OutpassPayload,
    session: SessionDep,
    auth: ManagerDep,
    users: UserDirectoryDep,
) -> RequestResponse:
    """Create an OUTPASS request for a user."""
    return await request_service.create_request(session, auth, payload, users)


@manager_requests_router.post("/salary", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_salary_request(
    payload: SalaryPayload,
    session: SessionDep,
    auth: ManagerDep,
    users: UserDirectoryDep,
) -> RequestResponse:
    """Create a SALARY request for a user."""
    return await request_service.create_request(session, auth, payload, users)


@manager_requests_router.post(
    "/profile-edit", response_model=RequestResponse, status_code=status.HTTP_201_CREATED
)
async def create_profile_edit_request(
    payload: ProfileUpdatePayload,
    session: SessionDep,
    auth: ManagerDep,
    users: UserDirectoryDep,
) -> RequestResponse:
    """Propose a full replacement of one of a user's profile sections."""
    return await request_service.create_request(session, auth, payload, users)


@manager_requests_router.get("", response_model=RequestListResponse)
async def list_own_requests(
    session: SessionDep,
    auth: ManagerDep,
    status_filter: str | None = Query(default=None, alias="status"),
    type_filter: str | None = Query(default=None, alias="type"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List the requests this manager created."""
    return await request_service.list_requests(
        session,
        status_filter=parse_enum_filter(RequestStatus, status_filter, "status"),
        type_filter=parse_enum_filter(RequestType, type_filter, "type"),
        requester_id=auth.user_id,
        offset=offset,
        limit=limit,
    )


@manager_requests_router.get("/{request_id}", response_model=RequestResponse)
async def get_own_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
) -> RequestResponse:
    """Get one of this manager's requests."""
    return await request_service.get_request(session, request_id, requester_id=auth.user_id)


@manager_requests_router.post("/{request_id}/resubmit", response_model=RequestResponse)
async def resubmit_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
    payload: ResubmitPayload | None = None,
) -> RequestResponse:
    """Resubmit a rejected request with a response and optional revised data."""
    return await request_service.resubmit_request(session, auth, request_id, payload)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AdminDep,
    status_filter: str | None = Query(default=None, alias="status"),
    type_filter: str | None = Query(default=None, alias="type"),
    requester_id: uuid.UUID | None = Query(default=None),
    user_id: uuid.UUID | None = Query(default=None),
    merge_status: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List all requests with optional filters."""
    return await request_service.list_requests(
        session,
        status_filter=parse_enum_filter(RequestStatus, status_filter, "status"),
        type_filter=parse_enum_filter(RequestType, type_filter, "type"),
        requester_id=requester_id,
        user_id=user_id,
        merge_status=parse_enum_filter(MergeStatus, merge_status, "merge_status"),
        offset=offset,
        limit=limit,
    )


@admin_requests_router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> RequestResponse:
    """Get any single request."""
    return await request_service.get_request(session, request_id)


@admin_requests_router.get("/{request_id}/audit", response_model=AuditTrailResponse)
async def get_request_audit(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> AuditTrailResponse:
    """Audit history of a request: decisions, resubmissions and merge attempts."""
    return await request_service.get_request_audit_trail(session, request_id)


@admin_requests_router.post("/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    users: UserDirectoryDep,
) -> RequestResponse:
    """Approve a pending request and merge it into the target profile."""
    return await request_service.approve_request(session, auth, request_id, users)


@admin_requests_router.post("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    payload: RejectPayload | None = None,
) -> RequestResponse:
    """Reject a pending request. A remark is required."""
    return await request_service.reject_request(session, auth, request_id, payload)


@admin_requests_router.post("/{request_id}/retry-merge", response_model=RequestResponse)
async def retry_merge(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    users: UserDirectoryDep,
) -> RequestResponse:
    """Re-run the profile merge of an approved request that did not apply."""
    return await request_service.retry_merge(session, auth, request_id, users)
