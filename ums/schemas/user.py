# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from ums.models.enums import Role
from ums.schemas.profile import ProfileResponse


class UpsertUserRequest(BaseModel):
    """Request body for upserting a user in the stub directory."""

    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    role: Role = Role.USER
    army_number: str | None = Field(default=None, max_length=50)


class UserResponse(BaseModel):
    """Response schema for a directory user."""

    id: uuid.UUID
    username: str
    email: str
    role: Role
    army_number: str | None


class UserListResponse(BaseModel):
    """List of directory users."""

    items: list[UserResponse]
    total: int


class UserProfileResponse(BaseModel):
    """A directory user together with their profile, for read-only views."""

    user: UserResponse
    profile: ProfileResponse
