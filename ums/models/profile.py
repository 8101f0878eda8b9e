# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from ums.models.base import now_utc


class UserProfile(SQLModel, table=True):
    """Per-user profile document, one JSON column per named section."""

    __tablename__ = "user_profile"

    user_id: uuid.UUID = Field(primary_key=True, sa_type=sa.Uuid)
    personal_details: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    family: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    education: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    medical: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    others: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    leave_data: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    salary_data: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    documents: dict[str, Any] | list[Any] | None = Field(default=None, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    updated_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
