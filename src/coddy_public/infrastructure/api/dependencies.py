"""FastAPI dependencies wiring the auth flow to settings and storage."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coddy_public.core.config import Settings, get_settings
from coddy_public.domain.services import AuthService
from coddy_public.infrastructure.auth import PasswordHasher, TokenService
from coddy_public.infrastructure.persistence.database import get_db_session
from coddy_public.infrastructure.persistence.repositories import UserRepository


@lru_cache
def _password_hasher(time_cost: int, memory_cost: int, parallelism: int) -> PasswordHasher:
    # One hasher per parameter set, so its dummy hash is computed once
    return PasswordHasher(time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism)


def get_password_hasher(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PasswordHasher:
    return _password_hasher(
        settings.password_hash_time_cost,
        settings.password_hash_memory_cost,
        settings.password_hash_parallelism,
    )


def get_token_service(settings: Annotated[Settings, Depends(get_settings)]) -> TokenService:
    return TokenService.from_settings(settings)


async def get_user_store(
    session: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> UserRepository | None:
    """User store for the request, or None when no database is configured."""
    if session is None:
        return None
    return UserRepository(session)


async def get_auth_service(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[UserRepository | None, Depends(get_user_store)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> AuthService:
    return AuthService(
        store=store,
        token_service=token_service,
        password_hasher=password_hasher,
        login_failure_delay=settings.login_failure_delay_ms / 1000,
    )
