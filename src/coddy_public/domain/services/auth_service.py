"""Authentication use cases: login, registration and token verification.

Each use case returns a result value (see ``domain.entities.auth_result``)
rather than raising for business outcomes. Unexpected failures from the user
store or the password hasher are logged here and turned into an
``INTERNAL_ERROR`` failure.

Login failures are padded to a fixed minimum duration so that "no such
user", "wrong password" and "account disabled" cannot be told apart by
response latency. The padding is an ``asyncio.sleep`` and only suspends the
current request.
"""

import asyncio
import time
from datetime import datetime, timezone

from coddy_public.core.logging import get_logger
from coddy_public.domain.entities import (
    AuthErrorCode,
    AuthFailure,
    AuthSession,
    LoginResult,
    NewUser,
    RegisterResult,
    TokenIdentity,
    User,
    VerifyResult,
)
from coddy_public.domain.services.credential_validator import (
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    is_valid_email,
    is_valid_name,
    is_valid_password,
    sanitize_input,
)
from coddy_public.domain.services.user_store import UserAlreadyExistsError, UserStore
from coddy_public.infrastructure.auth import PasswordHasher, TokenError, TokenService

logger = get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters with uppercase, lowercase, "
    "number, and special character"
)

_UNAVAILABLE = AuthFailure(
    AuthErrorCode.SERVICE_UNAVAILABLE,
    "Database service not configured. Please add database credentials.",
)
_INVALID_CREDENTIALS = AuthFailure(AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
_ACCOUNT_DISABLED = AuthFailure(
    AuthErrorCode.ACCOUNT_DISABLED, "Account is disabled. Contact support."
)
_EMAIL_TAKEN = AuthFailure(
    AuthErrorCode.CONFLICT, "Email already registered. Please use another email or login."
)


def _invalid_input(message: str) -> AuthFailure:
    return AuthFailure(AuthErrorCode.INVALID_INPUT, message)


def _internal(message: str, exc: BaseException) -> AuthFailure:
    return AuthFailure(AuthErrorCode.INTERNAL_ERROR, message, detail=f"{type(exc).__name__}: {exc}")


class AuthService:
    """Orchestrates the authentication use cases.

    Holds no per-request state; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        store: UserStore | None,
        token_service: TokenService,
        password_hasher: PasswordHasher,
        login_failure_delay: float = 1.0,
    ) -> None:
        """Initialize the service.

        Args:
            store: User store, or None when no database is configured.
            token_service: Issues and verifies tokens.
            password_hasher: Hashes and verifies passwords.
            login_failure_delay: Minimum duration of a failed login, in seconds.
        """
        self.store = store
        self.token_service = token_service
        self.password_hasher = password_hasher
        self.login_failure_delay = login_failure_delay

    async def login(self, email: str, password: str) -> LoginResult:
        """Authenticate a user by email and password.

        Flow:
        1. Require a configured store and well-formed input
        2. Look up the user by lowercased email
        3. Reject unknown, disabled or mismatching users after the delay floor
        4. Issue a token and record the login time (best-effort)
        """
        if self.store is None:
            return _UNAVAILABLE
        if not email or not password:
            return _invalid_input("Email and password are required")
        if not is_valid_email(email):
            return _invalid_input("Invalid email format")

        started = time.monotonic()
        email = email.lower()

        try:
            user = await self.store.find_user_by_email(email)
        except Exception as e:
            logger.error("Login lookup failed", email=email, error=str(e))
            user = None

        if user is None:
            logger.info("Login failed: user not found", email=email)
            # Spend the same verification work as a real user would cost
            try:
                await asyncio.to_thread(
                    self.password_hasher.verify, password, self.password_hasher.dummy_hash
                )
            except Exception as e:
                logger.warning("Dummy password verification failed", error=str(e))
            await self._pad_failure(started)
            return _INVALID_CREDENTIALS

        if not user.is_active:
            logger.info("Login failed: user inactive", user_id=user.id)
            await self._pad_failure(started)
            return _ACCOUNT_DISABLED

        try:
            matches = await asyncio.to_thread(
                self.password_hasher.verify, password, user.password_hash
            )
        except Exception as e:
            logger.error("Password verification failed", user_id=user.id, error=str(e))
            return _internal("Login failed. Please try again later.", e)

        if not matches:
            logger.info("Login failed: invalid password", user_id=user.id)
            await self._pad_failure(started)
            return _INVALID_CREDENTIALS

        try:
            token = self.token_service.issue(user.token_claims())
        except Exception as e:
            logger.error("Token issuance failed", user_id=user.id, error=str(e))
            return _internal("Login failed. Please try again later.", e)

        await self._record_login(user)

        logger.info("User logged in successfully", user_id=user.id, email=user.email)
        return AuthSession(token=token, user=user.to_public())

    async def register(self, email: str, password: str, name: str) -> RegisterResult:
        """Create a student account and sign it in.

        Flow:
        1. Require a configured store
        2. Sanitize email (lowercased) and name
        3. Validate email, password strength and name length, first failure wins
        4. Reject an email that is already registered
        5. Hash password and insert the user
        6. Issue a token
        """
        if self.store is None:
            return _UNAVAILABLE

        email = sanitize_input(email)
        if isinstance(email, str):
            email = email.lower()
        name = sanitize_input(name)

        if not is_valid_email(email):
            return _invalid_input("Invalid email format")
        if not is_valid_password(password):
            return _invalid_input(PASSWORD_POLICY_MESSAGE)
        if not is_valid_name(name):
            return _invalid_input(
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
            )

        try:
            existing = await self.store.find_user_by_email(email)
        except Exception as e:
            logger.error("Registration lookup failed", email=email, error=str(e))
            return _internal("Registration failed. Please try again later.", e)

        if existing is not None:
            logger.info("Registration failed: email exists", email=email)
            return _EMAIL_TAKEN

        try:
            password_hash = await asyncio.to_thread(self.password_hasher.hash, password)
            user = await self.store.insert_user(
                NewUser(email=email, password_hash=password_hash, name=name)
            )
            token = self.token_service.issue(user.token_claims())
        except UserAlreadyExistsError:
            # Lost the race against a concurrent registration
            logger.info("Registration failed: email exists on insert", email=email)
            return _EMAIL_TAKEN
        except Exception as e:
            logger.error("User creation failed", email=email, error=str(e))
            return _internal("Registration failed. Please try again later.", e)

        logger.info("User registered successfully", user_id=user.id, email=user.email)
        return AuthSession(token=token, user=user.to_public())

    async def verify_token(self, token: str | None) -> VerifyResult:
        """Verify a presented token and return its claims."""
        if not token:
            return _invalid_input("Token is required")
        try:
            claims = self.token_service.verify(token)
        except TokenError as e:
            return AuthFailure(AuthErrorCode.UNAUTHORIZED, str(e) or "Invalid or expired token")
        return TokenIdentity(claims=claims)

    async def _pad_failure(self, started: float) -> None:
        remaining = self.login_failure_delay - (time.monotonic() - started)
        if remaining > 0:
            await asyncio.sleep(remaining)

    async def _record_login(self, user: User) -> None:
        try:
            await self.store.update_last_login(user.id, datetime.now(timezone.utc))
        except Exception as e:
            logger.warning("Failed to update last login", user_id=user.id, error=str(e))
