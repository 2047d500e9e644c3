"""Unit tests for AuthService."""

import asyncio
import time
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from coddy_public.domain.entities import (
    AuthErrorCode,
    AuthFailure,
    AuthSession,
    NewUser,
    TokenIdentity,
    User,
)
from coddy_public.domain.services.auth_service import (
    INVALID_CREDENTIALS_MESSAGE,
    PASSWORD_POLICY_MESSAGE,
    AuthService,
)
from coddy_public.domain.services.user_store import UserAlreadyExistsError
from coddy_public.infrastructure.auth import TokenService
from tests.conftest import TEST_SECRET

PASSWORD = "Strong1!"


class InMemoryUserStore:
    """User store keyed by lowercased email."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.last_login_updates: list[tuple[str, datetime]] = []

    async def find_user_by_email(self, email):
        return self.users.get(email.lower())

    async def insert_user(self, new_user: NewUser):
        email = new_user.email.lower()
        if email in self.users:
            raise UserAlreadyExistsError(email)
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=new_user.password_hash,
            name=new_user.name,
            role=new_user.role,
            is_active=new_user.is_active,
            created_at=new_user.created_at,
        )
        self.users[email] = user
        return user

    async def update_last_login(self, user_id, timestamp):
        self.last_login_updates.append((user_id, timestamp))


@pytest.fixture
def store():
    return InMemoryUserStore()


@pytest.fixture
def auth_service(store, token_service, password_hasher):
    return AuthService(
        store=store,
        token_service=token_service,
        password_hasher=password_hasher,
        login_failure_delay=0,
    )


@pytest.fixture
def existing_user(store, password_hasher):
    user = User(
        id="user-1",
        email="ada@example.com",
        password_hash=password_hasher.hash(PASSWORD),
        name="Ada Lovelace",
    )
    store.users[user.email] = user
    return user


def assert_failure(result, code, message=None):
    assert isinstance(result, AuthFailure)
    assert result.code is code
    if message is not None:
        assert result.message == message


class TestLogin:
    """Tests for AuthService.login."""

    @pytest.mark.asyncio
    async def test_login_success(self, auth_service, existing_user, token_service, store):
        result = await auth_service.login("ada@example.com", PASSWORD)

        assert isinstance(result, AuthSession)
        assert result.user.id == existing_user.id
        assert result.user.email == "ada@example.com"
        assert result.user.role == "student"
        claims = token_service.verify(result.token)
        assert claims["id"] == existing_user.id
        assert claims["type"] == "auth"
        assert [user_id for user_id, _ in store.last_login_updates] == [existing_user.id]

    @pytest.mark.asyncio
    async def test_login_email_is_case_insensitive(self, auth_service, existing_user):
        result = await auth_service.login("ADA@Example.COM", PASSWORD)

        assert isinstance(result, AuthSession)
        assert result.user.id == existing_user.id

    @pytest.mark.asyncio
    async def test_public_user_has_no_password_hash(self, auth_service, existing_user):
        result = await auth_service.login("ada@example.com", PASSWORD)

        assert not hasattr(result.user, "password_hash")

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(
        self, auth_service, existing_user
    ):
        unknown = await auth_service.login("nobody@example.com", PASSWORD)
        wrong = await auth_service.login("ada@example.com", "Wrong1!pw")

        assert_failure(unknown, AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
        assert unknown == wrong
        assert unknown.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_email_runs_dummy_verification(self, auth_service, password_hasher):
        with patch.object(password_hasher, "verify", wraps=password_hasher.verify) as verify:
            await auth_service.login("nobody@example.com", PASSWORD)

        verify.assert_called_once_with(PASSWORD, password_hasher.dummy_hash)

    @pytest.mark.asyncio
    async def test_lookup_error_treated_as_not_found(self, auth_service, store):
        store.find_user_by_email = AsyncMock(side_effect=RuntimeError("db down"))

        result = await auth_service.login("ada@example.com", PASSWORD)

        assert_failure(result, AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

    @pytest.mark.asyncio
    async def test_disabled_account(self, auth_service, existing_user, store):
        existing_user.is_active = False

        result = await auth_service.login("ada@example.com", PASSWORD)

        assert_failure(
            result, AuthErrorCode.ACCOUNT_DISABLED, "Account is disabled. Contact support."
        )
        assert result.status_code == 403
        assert store.last_login_updates == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [("", PASSWORD), ("ada@example.com", "")])
    async def test_missing_fields(self, auth_service, email, password):
        result = await auth_service.login(email, password)

        assert_failure(result, AuthErrorCode.INVALID_INPUT, "Email and password are required")

    @pytest.mark.asyncio
    async def test_invalid_email_format(self, auth_service):
        result = await auth_service.login("not-an-email", PASSWORD)

        assert_failure(result, AuthErrorCode.INVALID_INPUT, "Invalid email format")
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_no_store_is_service_unavailable(self, token_service, password_hasher):
        service = AuthService(None, token_service, password_hasher, login_failure_delay=0)

        result = await service.login("ada@example.com", PASSWORD)

        assert_failure(result, AuthErrorCode.SERVICE_UNAVAILABLE)
        assert result.status_code == 503

    @pytest.mark.asyncio
    async def test_last_login_failure_does_not_fail_login(self, auth_service, existing_user, store):
        store.update_last_login = AsyncMock(side_effect=RuntimeError("write failed"))

        result = await auth_service.login("ada@example.com", PASSWORD)

        assert isinstance(result, AuthSession)

    @pytest.mark.asyncio
    async def test_verify_error_is_internal(self, auth_service, existing_user, password_hasher):
        with patch.object(password_hasher, "verify", side_effect=RuntimeError("boom")):
            result = await auth_service.login("ada@example.com", PASSWORD)

        assert_failure(result, AuthErrorCode.INTERNAL_ERROR, "Login failed. Please try again later.")
        assert result.detail == "RuntimeError: boom"

    @pytest.mark.asyncio
    async def test_token_error_is_internal(self, auth_service, existing_user, token_service):
        with patch.object(token_service, "issue", side_effect=RuntimeError("boom")):
            result = await auth_service.login("ada@example.com", PASSWORD)

        assert_failure(result, AuthErrorCode.INTERNAL_ERROR)
        assert result.status_code == 500

    @pytest.mark.asyncio
    async def test_failures_wait_for_delay_floor(self, store, token_service, password_hasher):
        service = AuthService(store, token_service, password_hasher, login_failure_delay=0.5)

        with patch("coddy_public.domain.services.auth_service.asyncio.sleep") as sleep:
            await service.login("nobody@example.com", PASSWORD)

        sleep.assert_awaited_once()
        (remaining,), _ = sleep.await_args
        assert 0 < remaining <= 0.5

    @pytest.mark.asyncio
    async def test_disabled_account_waits_for_delay_floor(
        self, store, existing_user, token_service, password_hasher
    ):
        existing_user.is_active = False
        service = AuthService(store, token_service, password_hasher, login_failure_delay=0.5)

        with patch("coddy_public.domain.services.auth_service.asyncio.sleep") as sleep:
            await service.login("ada@example.com", PASSWORD)

        sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_success_is_not_delayed(
        self, store, existing_user, token_service, password_hasher
    ):
        service = AuthService(store, token_service, password_hasher, login_failure_delay=0.5)

        with patch("coddy_public.domain.services.auth_service.asyncio.sleep") as sleep:
            result = await service.login("ada@example.com", PASSWORD)

        assert isinstance(result, AuthSession)
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dummy_verification_error_still_pads_and_rejects(
        self, store, token_service, password_hasher
    ):
        service = AuthService(store, token_service, password_hasher, login_failure_delay=0.5)

        with patch.object(password_hasher, "verify", side_effect=RuntimeError("boom")):
            with patch("coddy_public.domain.services.auth_service.asyncio.sleep") as sleep:
                result = await service.login("nobody@example.com", PASSWORD)

        assert_failure(result, AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
        sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unencodable_password_for_unknown_email(self, auth_service):
        result = await auth_service.login("nobody@example.com", "\ud800")

        assert_failure(result, AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

    @pytest.mark.asyncio
    async def test_unencodable_password_for_known_email(self, auth_service, existing_user):
        result = await auth_service.login("ada@example.com", "\ud800")

        assert_failure(result, AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)


class TestLoginConcurrency:
    """The failed-login floor suspends only the request that waits on it."""

    FLOOR = 0.2

    @pytest.mark.asyncio
    async def test_concurrent_failures_wait_in_parallel(
        self, store, existing_user, token_service, password_hasher
    ):
        service = AuthService(store, token_service, password_hasher, login_failure_delay=self.FLOOR)
        attempts = 5

        started = time.monotonic()
        results = await asyncio.gather(
            *[service.login(f"nobody{i}@example.com", PASSWORD) for i in range(attempts)]
        )
        elapsed = time.monotonic() - started

        assert all(result.code is AuthErrorCode.INVALID_CREDENTIALS for result in results)
        assert elapsed >= self.FLOOR
        assert elapsed < attempts * self.FLOOR / 2

    @pytest.mark.asyncio
    async def test_success_is_not_held_up_by_waiting_failures(
        self, store, existing_user, token_service, password_hasher
    ):
        service = AuthService(store, token_service, password_hasher, login_failure_delay=self.FLOOR)
        started = time.monotonic()
        finished = {}

        async def timed(label, email, password):
            result = await service.login(email, password)
            finished[label] = time.monotonic() - started
            return result

        results = await asyncio.gather(
            timed("failure-1", "nobody@example.com", PASSWORD),
            timed("failure-2", "ada@example.com", "Wrong1!pw"),
            timed("success", "ada@example.com", PASSWORD),
        )

        assert isinstance(results[2], AuthSession)
        assert finished["success"] < self.FLOOR
        assert finished["failure-1"] >= self.FLOOR
        assert finished["failure-2"] >= self.FLOOR


class TestRegister:
    """Tests for AuthService.register."""

    @pytest.mark.asyncio
    async def test_register_success(self, auth_service, store, token_service, password_hasher):
        result = await auth_service.register("Ada@Example.com", PASSWORD, "Ada Lovelace")

        assert isinstance(result, AuthSession)
        assert result.user.email == "ada@example.com"
        assert result.user.name == "Ada Lovelace"
        assert result.user.role == "student"

        stored = store.users["ada@example.com"]
        assert stored.is_active is True
        assert stored.password_hash != PASSWORD
        assert password_hasher.verify(PASSWORD, stored.password_hash)
        assert datetime.now(timezone.utc) - stored.created_at < timedelta(minutes=1)

        claims = token_service.verify(result.token)
        assert claims["id"] == stored.id
        assert claims["email"] == "ada@example.com"
        assert claims["role"] == "student"
        assert claims["name"] == "Ada Lovelace"
        assert claims["type"] == "auth"

    @pytest.mark.asyncio
    async def test_registered_user_can_login(self, auth_service):
        await auth_service.register("ada@example.com", PASSWORD, "Ada Lovelace")

        result = await auth_service.login("ada@example.com", PASSWORD)

        assert isinstance(result, AuthSession)

    @pytest.mark.asyncio
    async def test_name_is_sanitized(self, auth_service, store):
        await auth_service.register("ada@example.com", PASSWORD, "  <b>Ada</b> ")

        assert store.users["ada@example.com"].name == "&lt;b&gt;Ada&lt;&#x2F;b&gt;"

    @pytest.mark.asyncio
    async def test_email_is_trimmed(self, auth_service, store):
        result = await auth_service.register("  ada@example.com ", PASSWORD, "Ada Lovelace")

        assert isinstance(result, AuthSession)
        assert "ada@example.com" in store.users

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, auth_service, existing_user):
        result = await auth_service.register("ADA@example.com", PASSWORD, "Another Ada")

        assert_failure(
            result,
            AuthErrorCode.CONFLICT,
            "Email already registered. Please use another email or login.",
        )
        assert result.status_code == 409

    @pytest.mark.asyncio
    async def test_insert_race_is_conflict(self, auth_service, store):
        store.insert_user = AsyncMock(side_effect=UserAlreadyExistsError("ada@example.com"))

        result = await auth_service.register("ada@example.com", PASSWORD, "Ada Lovelace")

        assert_failure(result, AuthErrorCode.CONFLICT)

    @pytest.mark.asyncio
    async def test_insert_error_is_internal(self, auth_service, store):
        store.insert_user = AsyncMock(side_effect=RuntimeError("disk full"))

        result = await auth_service.register("ada@example.com", PASSWORD, "Ada Lovelace")

        assert_failure(
            result, AuthErrorCode.INTERNAL_ERROR, "Registration failed. Please try again later."
        )
        assert result.detail == "RuntimeError: disk full"

    @pytest.mark.asyncio
    async def test_lookup_error_is_internal(self, auth_service, store):
        store.find_user_by_email = AsyncMock(side_effect=RuntimeError("db down"))

        result = await auth_service.register("ada@example.com", PASSWORD, "Ada Lovelace")

        assert_failure(result, AuthErrorCode.INTERNAL_ERROR)

    @pytest.mark.asyncio
    async def test_weak_password(self, auth_service, store):
        result = await auth_service.register("ada@example.com", "weakpass", "Ada Lovelace")

        assert_failure(result, AuthErrorCode.INVALID_INPUT, PASSWORD_POLICY_MESSAGE)
        assert store.users == {}

    @pytest.mark.asyncio
    async def test_invalid_email(self, auth_service):
        result = await auth_service.register("not-an-email", PASSWORD, "Ada Lovelace")

        assert_failure(result, AuthErrorCode.INVALID_INPUT, "Invalid email format")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Al", "x" * 101, "   "])
    async def test_invalid_name(self, auth_service, name):
        result = await auth_service.register("ada@example.com", PASSWORD, name)

        assert_failure(
            result, AuthErrorCode.INVALID_INPUT, "Name must be between 3 and 100 characters"
        )

    @pytest.mark.asyncio
    async def test_first_failing_rule_wins(self, auth_service):
        result = await auth_service.register("not-an-email", "weakpass", "Al")

        assert_failure(result, AuthErrorCode.INVALID_INPUT, "Invalid email format")

    @pytest.mark.asyncio
    async def test_no_store_is_service_unavailable(self, token_service, password_hasher):
        service = AuthService(None, token_service, password_hasher)

        result = await service.register("ada@example.com", PASSWORD, "Ada Lovelace")

        assert_failure(result, AuthErrorCode.SERVICE_UNAVAILABLE)


class TestVerifyToken:
    """Tests for AuthService.verify_token."""

    @pytest.mark.asyncio
    async def test_valid_token(self, auth_service, existing_user, token_service):
        token = token_service.issue(existing_user.token_claims())

        result = await auth_service.verify_token(token)

        assert isinstance(result, TokenIdentity)
        assert result.claims["id"] == existing_user.id
        assert result.claims["email"] == existing_user.email

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token(self, auth_service, token):
        result = await auth_service.verify_token(token)

        assert_failure(result, AuthErrorCode.INVALID_INPUT, "Token is required")

    @pytest.mark.asyncio
    async def test_garbage_token(self, auth_service):
        result = await auth_service.verify_token("garbage")

        assert_failure(result, AuthErrorCode.UNAUTHORIZED, "Invalid token")
        assert result.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token(self, auth_service, existing_user):
        issued_at = datetime.now(timezone.utc) - timedelta(days=8)
        token = TokenService(TEST_SECRET, clock=lambda: issued_at).issue(
            existing_user.token_claims()
        )

        result = await auth_service.verify_token(token)

        assert_failure(result, AuthErrorCode.UNAUTHORIZED, "Token has expired")

    @pytest.mark.asyncio
    async def test_verify_does_not_need_store(self, token_service, password_hasher):
        service = AuthService(None, token_service, password_hasher)
        token = token_service.issue({"id": "user-1", "type": "auth"})

        result = await service.verify_token(token)

        assert isinstance(result, TokenIdentity)
