from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import FastAPI, Request, Response

    from ums.config import Settings

logger = logging.getLogger("ums.access")

REQUEST_ID_HEADER = "X-Request-Id"


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure CORS and per-request access logging."""
    app.add_middleware(
        CORSMiddleware,  # ty: ignore[invalid-argument-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def _access_log_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        # Reuse the gateway's id when present so log lines correlate across hops.
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            logger.info(
                "%s %s -> %d (%.1f ms)",
                request.method,
                request.url.path,
                status_code,
                (time.perf_counter() - started) * 1000,
                extra={
                    "request_id": request_id,
                    "principal": request.headers.get("X-User-Id"),
                    "role": request.headers.get("X-Role"),
                },
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
