# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Annotated, TypeVar

from fastapi import Depends, Header

from ums.exceptions import Forbidden, Unauthorized, ValidationError
from ums.models.enums import Role
from ums.schemas.auth import AuthContext
from ums.services.user import UserDirectory, get_user_directory

_E = TypeVar("_E", bound=StrEnum)


async def get_auth_context(
    x_user_id: str | None = Header(default=None),
    x_role: str | None = Header(default=None),
) -> AuthContext:
    """Extract the authenticated principal from gateway headers.

    A missing or malformed principal is 401; role checks happen separately.
    """
    if not x_user_id or not x_role:
        raise Unauthorized()
    try:
        return AuthContext(user_id=uuid.UUID(x_user_id), role=Role(x_role.upper()))
    except ValueError:
        raise Unauthorized("Invalid principal") from None


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


def require_roles(*roles: Role) -> Callable[[AuthContext], Awaitable[AuthContext]]:
    """Build a dependency that admits only principals holding one of ``roles``."""
    allowed = frozenset(roles)
    label = " or ".join(r.value for r in roles)

    async def _require(auth: AuthDep) -> AuthContext:
        if auth.role not in allowed:
            raise Forbidden(f"Role {label} required")
        return auth

    return _require


AdminDep = Annotated[AuthContext, Depends(require_roles(Role.ADMIN))]
ManagerDep = Annotated[AuthContext, Depends(require_roles(Role.MANAGER))]
ProfileOwnerDep = Annotated[AuthContext, Depends(require_roles(Role.USER, Role.MANAGER, Role.ADMIN))]

UserDirectoryDep = Annotated[UserDirectory, Depends(get_user_directory)]


def parse_enum_filter(enum_cls: type[_E], value: str | None, name: str) -> _E | None:
    """Parse a case-insensitive query filter into ``enum_cls``."""
    if value is None or not value.strip():
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        msg = f"Unknown {name} '{value}'. Expected one of: {allowed}"
        raise ValidationError(msg) from None
