# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from ums.models.enums import Role


class UserInfo(BaseModel):
    """User metadata from the identity directory."""

    id: uuid.UUID
    username: str
    email: str
    role: Role = Role.USER
    army_number: str | None = None


@runtime_checkable
class UserDirectory(Protocol):
    """Interface for the user directory that owns accounts."""

    async def get_user(self, user_id: uuid.UUID) -> UserInfo | None:
        """Fetch user metadata. Returns None if not found."""
        ...

    async def list_users(self) -> list[UserInfo]:
        """List all users ordered by username."""
        ...


class InMemoryUserDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._users: dict[uuid.UUID, UserInfo] = {}

    def seed(self, user: UserInfo) -> None:
        """Seed a user for testing."""
        self._users[user.id] = user

    async def get_user(self, user_id: uuid.UUID) -> UserInfo | None:
        """Fetch user metadata. Returns None if not found."""
        return self._users.get(user_id)

    async def list_users(self) -> list[UserInfo]:
        """List all users ordered by username."""
        return sorted(self._users.values(), key=lambda u: u.username)


_user_directory: UserDirectory = InMemoryUserDirectory()


def get_user_directory() -> UserDirectory:
    """FastAPI dependency for the user directory."""
    return _user_directory


def set_user_directory(directory: UserDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _user_directory
    _user_directory = directory
