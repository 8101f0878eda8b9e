from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input, rejected before any state change."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class EmptyRemark(ValidationError):
    def __init__(self) -> None:
        super().__init__("Remark is required for rejection")


class EmptyResponse(ValidationError):
    def __init__(self) -> None:
        super().__init__("Response is required for resubmission")


class NotFound(AppError):
    """Unknown request or user id."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class StateConflict(AppError):
    """A lifecycle guard failed. Nothing was mutated."""

    def __init__(self, message: str, status_code: int = status.HTTP_409_CONFLICT) -> None:
        super().__init__(message, status_code=status_code)


class NotPending(StateConflict):
    def __init__(self) -> None:
        super().__init__("Request not pending")


class NotRejected(StateConflict):
    def __init__(self) -> None:
        super().__init__("Only rejected requests can be resubmitted")


class NotOwner(StateConflict):
    def __init__(self) -> None:
        super().__init__(
            "Only the original requester can resubmit this request",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class Unauthorized(AppError):
    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class Forbidden(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class MergeApplicationFailure(AppError):
    """The merge applier could not project an approved request onto a profile."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
