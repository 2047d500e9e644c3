"""User repository for database operations."""

import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coddy_public.domain.entities import NewUser, User
from coddy_public.domain.services.user_store import UserAlreadyExistsError
from coddy_public.infrastructure.persistence.models import UserModel


class UserRepository:
    """SQL implementation of the user store used by the auth flow."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def find_user_by_email(self, email: str) -> User | None:
        """Get a user by (lowercased) email.

        Args:
            email: User's email address.

        Returns:
            User if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.lower())
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model is not None else None

    async def insert_user(self, new_user: NewUser) -> User:
        """Insert a new user and commit.

        Args:
            new_user: Fields of the user to create.

        Returns:
            The stored user.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
        """
        model = UserModel(
            id=str(uuid.uuid4()),
            email=new_user.email.lower(),
            password_hash=new_user.password_hash,
            name=new_user.name,
            role=new_user.role,
            is_active=new_user.is_active,
            created_at=new_user.created_at,
        )
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise UserAlreadyExistsError(f"Email already registered: {new_user.email}") from e
        await self.session.refresh(model)
        return model.to_entity()

    async def update_last_login(self, user_id: str, timestamp: datetime) -> None:
        """Update the last_login timestamp for a user.

        Args:
            user_id: ID of the user to update.
            timestamp: Time of the successful login.
        """
        await self.session.execute(
            update(UserModel).where(UserModel.id == user_id).values(last_login=timestamp)
        )
        await self.session.commit()
