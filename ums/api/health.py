import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from ums.config import get_settings
from ums.db import SessionDep
from ums.services.merge import count_merge_backlog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

HealthStatus = Literal["ok", "degraded", "error"]


class HealthResponse(BaseModel):
    """Service health plus the number of approved requests still waiting on a profile merge."""

    status: HealthStatus
    version: str
    environment: str
    merge_backlog: int | None


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report database reachability and the merge backlog.

    Any approved request whose merge is PENDING or FAILED makes the service
    ``degraded`` until the worker or an admin retry applies it.
    """
    settings = get_settings()
    status: HealthStatus = "ok"
    backlog: int | None = None

    try:
        backlog = await count_merge_backlog(session)
    except Exception:
        logger.exception("Health check: database connectivity failed")
        status = "degraded"

    if backlog:
        logger.warning("Health check: %d approved request(s) not merged into profiles", backlog)
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        environment=settings.environment,
        merge_backlog=backlog,
    )
