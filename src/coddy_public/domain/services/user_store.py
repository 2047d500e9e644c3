"""Storage port used by the authentication flow.

Kept small and framework-agnostic so tests can supply simple fakes.
"""

from datetime import datetime
from typing import Protocol

from coddy_public.domain.entities import NewUser, User


class UserStoreError(Exception):
    """Base exception for user store failures."""

    pass


class UserAlreadyExistsError(UserStoreError):
    """Raised when inserting a user whose email is already taken."""

    pass


class UserStore(Protocol):
    """The operations the authentication flow needs from persistent storage.

    Implementations must enforce email uniqueness and perform atomic
    single-row reads and writes.
    """

    async def find_user_by_email(self, email: str) -> User | None: ...

    async def insert_user(self, new_user: NewUser) -> User: ...

    async def update_last_login(self, user_id: str, timestamp: datetime) -> None: ...


__all__ = ["UserAlreadyExistsError", "UserStore", "UserStoreError"]
