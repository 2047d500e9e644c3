"""JWT token service.

Issues and validates the signed, time-limited bearer tokens handed out at
login and registration. Tokens are stateless: validity depends only on the
signature and the embedded expiry, there is no server-side session record.

``verify`` is the only trust check. ``decode`` and ``is_expired`` read the
payload without checking the signature and must never be used to authorise
a caller.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt

from coddy_public.core.config import Settings


class TokenError(Exception):
    """Base exception for token-related errors."""

    pass


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(TokenError):
    """Raised when a token is malformed or its signature does not verify."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Service for issuing and validating auth tokens.

    The secret, algorithm and lifetime are fixed when the service is built;
    callers cannot choose their own expiry.
    """

    def __init__(
        self,
        secret_key: str,
        expires_in: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the token service.

        Args:
            secret_key: Secret key for signing tokens.
            expires_in: Lifetime of issued tokens.
            algorithm: Signing algorithm.
            clock: Source of the current time for issuing and expiry checks,
                overridable in tests.
        """
        self._secret_key = secret_key
        self._expires_in = expires_in
        self._algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.jwt_secret,
            expires_in=settings.jwt_expires_in,
            algorithm=settings.jwt_algorithm,
        )

    @property
    def expires_in(self) -> timedelta:
        return self._expires_in

    def issue(self, claims: dict[str, Any]) -> str:
        """Create a signed token carrying ``claims``.

        Args:
            claims: JSON-serializable claims. ``iat`` and ``exp`` are set by
                the service and override any caller-supplied values.

        Returns:
            Encoded JWT.
        """
        now = self._clock()
        payload = {
            **claims,
            "iat": int(now.timestamp()),
            # Rounded up so a token never expires before its full lifetime
            "exp": math.ceil((now + self._expires_in).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Verify signature and expiry and return the claims.

        Args:
            token: The encoded JWT token.

        Returns:
            Decoded token payload.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is malformed or the signature
                does not verify.
        """
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError("Invalid token") from e

    def decode(self, token: str) -> dict[str, Any] | None:
        """Read the claims without verifying signature or expiry.

        For inspection only.

        Returns:
            The payload, or None if the token cannot be parsed.
        """
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError:
            return None

    def is_expired(self, token: str) -> bool:
        """Check whether a token is past its expiry.

        Malformed tokens and tokens without a numeric ``exp`` count as
        expired. The signature is not checked.
        """
        payload = self.decode(token)
        if not payload:
            return True
        exp = payload.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return True
        return exp <= self._clock().timestamp()
