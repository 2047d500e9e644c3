"""SQLAlchemy models.

All models inherit from the Base class defined in database.py.
"""

from coddy_public.infrastructure.persistence.models.user import UserModel

__all__ = ["UserModel"]
