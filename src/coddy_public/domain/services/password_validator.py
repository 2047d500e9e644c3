"""Password validation service.

Validates password strength:
- Minimum length
- Uppercase letter requirement
- Lowercase letter requirement
- Digit requirement
- Special character requirement
- Only letters, digits and the special characters are allowed
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationError:
    """Represents a credential validation error.

    Attributes:
        field: The field name.
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str


class PasswordValidator:
    """Validates password strength.

    Default policy:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character from ``@$!%*?&``
    """

    SPECIAL_CHARS = "@$!%*?&"

    def __init__(self, min_length: int = 8) -> None:
        """Initialize the password validator.

        Args:
            min_length: Minimum password length (default 8).
        """
        self.min_length = min_length
        special = re.escape(self.SPECIAL_CHARS)
        self._special_re = re.compile(f"[{special}]")
        self._allowed_re = re.compile(f"[A-Za-z0-9{special}]*")

    def validate(self, password: str) -> list[ValidationError]:
        """Validate a password against the policy.

        Args:
            password: The password to validate.

        Returns:
            List of validation errors. Empty list if password is valid.
        """
        if not isinstance(password, str):
            return [
                ValidationError(
                    field="password",
                    message="Password must be a string",
                    code="password_invalid_type",
                )
            ]

        errors: list[ValidationError] = []

        if len(password) < self.min_length:
            errors.append(
                ValidationError(
                    field="password",
                    message=f"Password must be at least {self.min_length} characters",
                    code="password_too_short",
                )
            )

        if not re.search(r"[A-Z]", password):
            errors.append(
                ValidationError(
                    field="password",
                    message="Password must contain at least one uppercase letter",
                    code="password_no_uppercase",
                )
            )

        if not re.search(r"[a-z]", password):
            errors.append(
                ValidationError(
                    field="password",
                    message="Password must contain at least one lowercase letter",
                    code="password_no_lowercase",
                )
            )

        if not re.search(r"\d", password):
            errors.append(
                ValidationError(
                    field="password",
                    message="Password must contain at least one digit",
                    code="password_no_digit",
                )
            )

        if not self._special_re.search(password):
            errors.append(
                ValidationError(
                    field="password",
                    message=f"Password must contain at least one of {self.SPECIAL_CHARS}",
                    code="password_no_special",
                )
            )

        if not self._allowed_re.fullmatch(password):
            errors.append(
                ValidationError(
                    field="password",
                    message="Password contains characters that are not allowed",
                    code="password_invalid_character",
                )
            )

        return errors

    def is_valid(self, password: str) -> bool:
        """Check if a password is valid.

        Args:
            password: The password to validate.

        Returns:
            True if password meets all requirements, False otherwise.
        """
        return len(self.validate(password)) == 0


# Default validator instance
default_password_validator = PasswordValidator()
