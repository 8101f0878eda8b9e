# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel

SectionValue = dict[str, Any] | list[Any] | None


class ProfileResponse(BaseModel):
    """A user's profile. Timestamps are null until the first section write."""

    user_id: uuid.UUID
    personal_details: SectionValue = None
    family: SectionValue = None
    education: SectionValue = None
    medical: SectionValue = None
    others: SectionValue = None
    leave_data: SectionValue = None
    salary_data: SectionValue = None
    documents: SectionValue = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
