# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from ums.api.deps import AdminDep, ManagerDep, UserDirectoryDep
from ums.db import SessionDep
from ums.exceptions import NotFound
from ums.schemas.user import UpsertUserRequest, UserListResponse, UserProfileResponse, UserResponse
from ums.services import profile as profile_service
from ums.services.user import UserDirectory, UserInfo

manager_users_router = APIRouter(prefix="/manager/users", tags=["manager-users"])
admin_users_router = APIRouter(prefix="/admin/users", tags=["admin-users"])


def _build_user_response(user: UserInfo) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        army_number=user.army_number,
    )


async def _list_users(users: UserDirectory) -> UserListResponse:
    items = [_build_user_response(u) for u in await users.list_users()]
    return UserListResponse(items=items, total=len(items))


async def _user_with_profile(session: SessionDep, users: UserDirectory, user_id: uuid.UUID) -> UserProfileResponse:
    user = await users.get_user(user_id)
    if user is None:
        raise NotFound("User not found")
    profile = await profile_service.get_profile(session, user_id)
    return UserProfileResponse(user=_build_user_response(user), profile=profile)


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


@manager_users_router.get("", response_model=UserListResponse)
async def manager_list_users(auth: ManagerDep, users: UserDirectoryDep) -> UserListResponse:
    """List users a manager can raise requests for."""
    return await _list_users(users)


@manager_users_router.get("/{user_id}/profile", response_model=UserProfileResponse)
async def manager_get_user_profile(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
    users: UserDirectoryDep,
) -> UserProfileResponse:
    """View a user's profile (read-only)."""
    return await _user_with_profile(session, users, user_id)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_users_router.get("", response_model=UserListResponse)
async def admin_list_users(auth: AdminDep, users: UserDirectoryDep) -> UserListResponse:
    """List all users."""
    return await _list_users(users)


@admin_users_router.get("/{user_id}/profile", response_model=UserProfileResponse)
async def admin_get_user_profile(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    users: UserDirectoryDep,
) -> UserProfileResponse:
    """View any user's profile (read-only)."""
    return await _user_with_profile(session, users, user_id)


@admin_users_router.put("/{user_id}", response_model=UserResponse)
async def upsert_user(
    user_id: uuid.UUID,
    payload: UpsertUserRequest,
    auth: AdminDep,
    users: UserDirectoryDep,
) -> UserResponse:
    """Create or update a user in the stub directory (admin only)."""
    user = UserInfo(
        id=user_id,
        username=payload.username,
        email=payload.email,
        role=payload.role,
        army_number=payload.army_number,
    )
    users.seed(user)  # ty: ignore[unresolved-attribute]
    return _build_user_response(user)
