# ruff: noqa: TC003
from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from ums.models.base import now_utc
from ums.models.enums import AuditAction, AuditEntityType, ProfileSection
from ums.models.profile import UserProfile
from ums.schemas.profile import ProfileResponse, SectionValue
from ums.services.audit import write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ums.schemas.auth import AuthContext


# ---------------------------------------------------------------------------
# Section mutations
#
# Each mutation is a pure function of the current section value. The store
# applies it while holding the profile row lock, so callers never perform
# their own read-modify-write.
# ---------------------------------------------------------------------------


def _as_object(value: SectionValue) -> dict[str, Any]:
    """Copy a section as a dict. Anything that is not a JSON object counts as empty."""
    return copy.deepcopy(value) if isinstance(value, dict) else {}


@dataclass(frozen=True)
class SectionMutation:
    """Base for named, atomic section operations."""

    section: ProfileSection

    def apply(self, current: SectionValue) -> SectionValue:
        raise NotImplementedError


@dataclass(frozen=True)
class AppendToArray(SectionMutation):
    """Append ``item`` to the list stored under ``key`` of an object section."""

    key: str
    item: Any

    def apply(self, current: SectionValue) -> SectionValue:
        section = _as_object(current)
        existing = section.get(self.key)
        items = existing if isinstance(existing, list) else []
        section[self.key] = [*items, copy.deepcopy(self.item)]
        return section


@dataclass(frozen=True)
class MergeKeys(SectionMutation):
    """Shallow-merge ``partial`` over an object section."""

    partial: dict[str, Any]

    def apply(self, current: SectionValue) -> SectionValue:
        return {**_as_object(current), **copy.deepcopy(self.partial)}


@dataclass(frozen=True)
class ReplaceSection(SectionMutation):
    """Overwrite the section wholesale."""

    value: SectionValue

    def apply(self, current: SectionValue) -> SectionValue:
        return copy.deepcopy(self.value)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def build_profile_response(user_id: uuid.UUID, profile: UserProfile | None) -> ProfileResponse:
    """Map a profile row (or its absence) to the response schema."""
    if profile is None:
        return ProfileResponse(user_id=user_id)
    return ProfileResponse(
        user_id=profile.user_id,
        personal_details=profile.personal_details,
        family=profile.family,
        education=profile.education,
        medical=profile.medical,
        others=profile.others,
        leave_data=profile.leave_data,
        salary_data=profile.salary_data,
        documents=profile.documents,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


async def _select_profile(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> UserProfile | None:
    query = select(UserProfile).where(col(UserProfile.user_id) == user_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def ensure_profile(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> UserProfile:
    """Return the user's profile row, creating an empty one if absent.

    The insert runs in a savepoint: if a concurrent writer created the row
    first, the unique key violation is absorbed and the winner's row is read.
    """
    profile = await _select_profile(session, user_id, for_update=for_update)
    if profile is not None:
        return profile

    try:
        async with session.begin_nested():
            profile = UserProfile(user_id=user_id)
            session.add(profile)
    except IntegrityError:
        profile = await _select_profile(session, user_id, for_update=for_update)
        if profile is None:
            raise
    return profile


async def mutate_section(
    session: AsyncSession,
    user_id: uuid.UUID,
    mutation: SectionMutation,
) -> UserProfile:
    """Apply one section mutation under the profile row lock. Does not commit."""
    profile = await ensure_profile(session, user_id, for_update=True)
    column = mutation.section.column
    setattr(profile, column, mutation.apply(getattr(profile, column)))
    profile.updated_at = now_utc()
    session.add(profile)
    await session.flush()
    return profile


async def get_profile(session: AsyncSession, user_id: uuid.UUID) -> ProfileResponse:
    """Read a profile. A user without a row gets an all-null profile; nothing is created."""
    profile = await _select_profile(session, user_id)
    return build_profile_response(user_id, profile)


async def upsert_profile_section(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    section: ProfileSection,
    value: SectionValue,
) -> ProfileResponse:
    """Replace one section directly. Used by self-service edits; no approval involved."""
    profile = await ensure_profile(session, user_id, for_update=True)
    before = getattr(profile, section.column)

    profile = await mutate_section(session, user_id, ReplaceSection(section=section, value=value))

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.PROFILE,
        entity_id=user_id,
        action=AuditAction.UPDATE,
        before_json={section.column: before},
        after_json={section.column: getattr(profile, section.column)},
    )

    await session.commit()
    await session.refresh(profile)
    return build_profile_response(user_id, profile)
