# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, RootModel, field_validator

from ums.models.enums import REQUESTABLE_SECTIONS, MergeStatus, ProfileSection, RequestStatus, RequestType

# ---------------------------------------------------------------------------
# Typed payloads
#
# The persisted ``data`` document keeps camelCase keys (``userId``); the
# models accept either spelling on input and dump by alias.
# ---------------------------------------------------------------------------


class _PayloadBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")

    def to_document(self) -> dict[str, Any]:
        """Render the payload as the request's persisted ``data`` document."""
        return self.model_dump(mode="json", by_alias=True, exclude={"type"})


class LeavePayload(_PayloadBase):
    """Leave to append to the user's ``leave_data.requests``."""

    type: Literal["LEAVE"] = "LEAVE"
    leave: dict[str, Any]


class OutpassPayload(_PayloadBase):
    """Outpass to append to the user's ``leave_data.outpasses``."""

    type: Literal["OUTPASS"] = "OUTPASS"
    outpass: dict[str, Any]


class SalaryPayload(_PayloadBase):
    """Salary keys to merge over the user's ``salary_data``."""

    type: Literal["SALARY"] = "SALARY"
    salary: dict[str, Any]


class ProfileUpdatePayload(_PayloadBase):
    """Full replacement of one profile section."""

    type: Literal["PROFILE_UPDATE"] = "PROFILE_UPDATE"
    section: ProfileSection
    data: dict[str, Any] | list[Any] | None

    @field_validator("section")
    @classmethod
    def _validate_section(cls, value: ProfileSection) -> ProfileSection:
        if value not in REQUESTABLE_SECTIONS:
            msg = f"Section '{value}' cannot be changed through a request"
            raise ValueError(msg)
        return value


RequestPayload = Annotated[
    LeavePayload | OutpassPayload | SalaryPayload | ProfileUpdatePayload,
    Field(discriminator="type"),
]


class CreateRequestPayload(RootModel[RequestPayload]):
    """Request body for the generic create endpoint, tagged by ``type``."""


# ---------------------------------------------------------------------------
# Lifecycle action bodies
# ---------------------------------------------------------------------------


class RejectPayload(BaseModel):
    """Request body for rejecting a pending request."""

    remark: str | None = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("remark", "reason"),
    )


class ResubmitPayload(BaseModel):
    """Request body for resubmitting a rejected request."""

    response: str | None = Field(default=None, max_length=2000)
    updated_data: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("updated_data", "updatedData"),
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    """Response schema for a single change request."""

    id: uuid.UUID
    type: RequestType
    status: RequestStatus
    data: dict[str, Any]
    user_id: uuid.UUID
    requester_id: uuid.UUID
    admin_remark: str | None
    manager_response: str | None
    decided_by: uuid.UUID | None
    decided_at: datetime | None
    merge_status: MergeStatus
    merge_attempts: int
    merge_error: str | None
    merged_at: datetime | None
    created_at: datetime
    updated_at: datetime


class RequestListResponse(BaseModel):
    """Paginated list of change requests."""

    items: list[RequestResponse]
    total: int
