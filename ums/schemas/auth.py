# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from ums.models.enums import Role


class AuthContext(BaseModel):
    """Authenticated principal extracted from request headers."""

    user_id: uuid.UUID
    role: Role = Role.USER
