from __future__ import annotations

from typing import TYPE_CHECKING

from conftest import MANAGER_ID, USER_ID
from ums.models.enums import MergeStatus, RequestStatus
from ums.models.profile import UserProfile
from ums.models.request import ChangeRequest
from ums.worker import run_merge_retry_once

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from ums.services.user import InMemoryUserDirectory


def _approved(merge_status: MergeStatus, attempts: int = 0, **leave: int) -> ChangeRequest:
    return ChangeRequest(
        type="LEAVE",
        status=RequestStatus.APPROVED.value,
        data={"userId": str(USER_ID), "leave": leave or {"days": 1}},
        user_id=USER_ID,
        requester_id=MANAGER_ID,
        merge_status=merge_status.value,
        merge_attempts=attempts,
    )


async def test_retry_applies_pending_and_failed(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    user_directory: InMemoryUserDirectory,
) -> None:
    pending = _approved(MergeStatus.PENDING, days=1)
    failed = _approved(MergeStatus.FAILED, attempts=2, days=2)
    exhausted = _approved(MergeStatus.FAILED, attempts=5, days=3)
    db_session.add_all([pending, failed, exhausted])
    await db_session.commit()

    result = await run_merge_retry_once(session_factory, user_directory, max_attempts=5, batch_size=50)

    assert result.processed == 2
    assert result.applied == 2
    assert result.failed == 0

    for request in (pending, failed, exhausted):
        await db_session.refresh(request)
    assert pending.merge_status == MergeStatus.APPLIED.value
    assert failed.merge_status == MergeStatus.APPLIED.value
    assert failed.merge_attempts == 3
    assert exhausted.merge_status == MergeStatus.FAILED.value

    profile = await db_session.get(UserProfile, USER_ID, populate_existing=True)
    assert profile is not None
    assert sorted(r["days"] for r in profile.leave_data["requests"]) == [1, 2]  # type: ignore[index]


async def test_retry_with_nothing_to_do(
    session_factory: async_sessionmaker[AsyncSession],
    user_directory: InMemoryUserDirectory,
) -> None:
    result = await run_merge_retry_once(session_factory, user_directory, max_attempts=5, batch_size=50)
    assert result.processed == 0


async def test_retry_skips_missing_user(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    user_directory: InMemoryUserDirectory,
) -> None:
    request = _approved(MergeStatus.PENDING)
    db_session.add(request)
    await db_session.commit()
    user_directory._users.pop(USER_ID)

    result = await run_merge_retry_once(session_factory, user_directory, max_attempts=5, batch_size=50)

    assert result.skipped == 1
    await db_session.refresh(request)
    assert request.merge_status == MergeStatus.SKIPPED.value
