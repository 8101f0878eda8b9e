"""Worker process for the merge retry loop.

Approved requests whose merge is still PENDING (the process died between the
approval commit and the merge) or FAILED are re-run on a fixed interval until
they apply or run out of attempts.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ums.config import get_settings
from ums.db import get_session_factory
from ums.logging_setup import setup_logging
from ums.models.enums import MergeStatus
from ums.services.merge import find_unmerged_request_ids, run_merge
from ums.services.user import get_user_directory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from ums.services.user import UserDirectory

logger = logging.getLogger(__name__)


@dataclass
class MergeRetryResult:
    """Counts from one pass of the retry loop."""

    processed: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0


async def run_merge_retry_once(
    session_factory: async_sessionmaker[AsyncSession],
    user_directory: UserDirectory,
    *,
    max_attempts: int,
    batch_size: int,
) -> MergeRetryResult:
    """Retry one batch of unmerged approved requests, each in its own session."""
    result = MergeRetryResult()

    async with session_factory() as session:
        request_ids = await find_unmerged_request_ids(session, max_attempts=max_attempts, limit=batch_size)

    for request_id in request_ids:
        async with session_factory() as session:
            outcome = await run_merge(
                session,
                request_id,
                actor_id=None,
                user_directory=user_directory,
                eligible=(MergeStatus.PENDING, MergeStatus.FAILED),
            )
        if outcome is None:
            continue
        result.processed += 1
        if outcome == MergeStatus.APPLIED:
            result.applied += 1
        elif outcome == MergeStatus.SKIPPED:
            result.skipped += 1
        else:
            result.failed += 1

    return result


async def run_merge_retry_loop() -> None:
    """Main worker loop."""
    settings = get_settings()
    session_factory = get_session_factory()
    logger.info("Merge retry worker started (interval=%ss)", settings.merge_retry_interval_seconds)

    while True:
        try:
            result = await run_merge_retry_once(
                session_factory,
                get_user_directory(),
                max_attempts=settings.merge_retry_max_attempts,
                batch_size=settings.merge_retry_batch_size,
            )
            if result.processed > 0:
                logger.info(
                    "Merge retry run complete: processed=%d applied=%d skipped=%d failed=%d",
                    result.processed,
                    result.applied,
                    result.skipped,
                    result.failed,
                )
        except Exception:
            logger.exception("Merge retry run failed")

        await asyncio.sleep(settings.merge_retry_interval_seconds)


def main() -> None:
    """Entry point for the worker process."""
    setup_logging(get_settings())
    asyncio.run(run_merge_retry_loop())


if __name__ == "__main__":
    main()
