"""User entity for authentication.

Users are uniquely identified by their lowercased email address.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_ROLE = "student"


@dataclass
class User:
    """User as seen by the authentication flow.

    Attributes:
        id: Unique identifier (UUID string).
        email: Lowercased email address.
        password_hash: Hashed password (never store plaintext).
        name: Display name.
        role: Role name, "student" for self-registered users.
        is_active: Whether the user can log in.
        created_at: Timestamp when the user was created.
        last_login: Timestamp of last successful login (nullable).
    """

    id: str
    email: str
    password_hash: str
    name: str
    role: str = DEFAULT_ROLE
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_login: datetime | None = None

    def __post_init__(self) -> None:
        """Validate user data after initialization."""
        if not self.id:
            raise ValueError("User ID is required")
        if not self.email:
            raise ValueError("Email is required")
        if not self.password_hash:
            raise ValueError("Password hash is required")

    def to_public(self) -> "PublicUser":
        return PublicUser(id=self.id, email=self.email, name=self.name, role=self.role)

    def token_claims(self) -> dict[str, Any]:
        """Claims embedded in the auth token issued for this user."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "name": self.name,
            "type": "auth",
        }

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


@dataclass(frozen=True)
class PublicUser:
    """The part of a user that may be returned to clients."""

    id: str
    email: str
    name: str
    role: str


@dataclass(frozen=True)
class NewUser:
    """Fields for a user that has not been stored yet."""

    email: str
    password_hash: str
    name: str
    role: str = DEFAULT_ROLE
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
