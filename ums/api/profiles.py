# ruff: noqa: B008, TC001
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body

from ums.api.deps import ProfileOwnerDep
from ums.db import SessionDep
from ums.models.enums import ProfileSection
from ums.schemas.profile import ProfileResponse
from ums.services import profile as profile_service

profile_router = APIRouter(prefix="/profile", tags=["profile"])


@profile_router.get("", response_model=ProfileResponse)
async def get_own_profile(
    session: SessionDep,
    auth: ProfileOwnerDep,
) -> ProfileResponse:
    """Get the caller's own profile."""
    return await profile_service.get_profile(session, auth.user_id)


@profile_router.put("/{section}", response_model=ProfileResponse)
async def update_own_section(
    section: ProfileSection,
    session: SessionDep,
    auth: ProfileOwnerDep,
    value: dict[str, Any] | list[Any] = Body(),
) -> ProfileResponse:
    """Replace one section of the caller's own profile. Takes effect immediately."""
    return await profile_service.upsert_profile_section(session, auth, auth.user_id, section, value)
