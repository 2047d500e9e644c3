"""Persistence repositories for database operations."""

from coddy_public.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = ["UserRepository"]
