"""Credential format checks and input sanitization."""

from typing import TypeVar

from email_validator import EmailNotValidError, validate_email

from coddy_public.domain.services.password_validator import default_password_validator

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100

_T = TypeVar("_T")

# Characters with meaning in HTML or quoted attribute contexts
_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        '"': "&quot;",
        "'": "&#x27;",
        "<": "&lt;",
        ">": "&gt;",
        "/": "&#x2F;",
        "\\": "&#x5C;",
        "`": "&#96;",
    }
)


def is_valid_email(email: object) -> bool:
    """Check email grammar. No DNS or deliverability lookups are made."""
    if not isinstance(email, str) or not email:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_password(password: object) -> bool:
    """Check the password against the default strength policy."""
    return isinstance(password, str) and default_password_validator.is_valid(password)


def is_valid_name(name: object) -> bool:
    return isinstance(name, str) and NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH


def sanitize_input(value: _T) -> _T:
    """Trim whitespace and HTML-escape a string.

    Non-string values are returned unchanged.

    Example:
        >>> sanitize_input("  <b>Ada</b> ")
        '&lt;b&gt;Ada&lt;&#x2F;b&gt;'
    """
    if not isinstance(value, str):
        return value
    return value.strip().translate(_ESCAPES)
