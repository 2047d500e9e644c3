"""Domain services.

Services contain business logic that doesn't naturally fit within a single entity.
"""

from coddy_public.domain.services.auth_service import AuthService
from coddy_public.domain.services.credential_validator import (
    is_valid_email,
    is_valid_name,
    is_valid_password,
    sanitize_input,
)
from coddy_public.domain.services.password_validator import (
    PasswordValidator,
    ValidationError,
    default_password_validator,
)
from coddy_public.domain.services.user_store import (
    UserAlreadyExistsError,
    UserStore,
    UserStoreError,
)

__all__ = [
    "AuthService",
    "PasswordValidator",
    "UserAlreadyExistsError",
    "UserStore",
    "UserStoreError",
    "ValidationError",
    "default_password_validator",
    "is_valid_email",
    "is_valid_name",
    "is_valid_password",
    "sanitize_input",
]
