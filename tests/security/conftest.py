import uuid
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from coddy_public.core.config import Settings
from coddy_public.infrastructure.auth import PasswordHasher
from coddy_public.infrastructure.persistence.models import UserModel
from tests.conftest import make_settings

# Failed logins are padded to this floor in the security suite
LOGIN_FLOOR_MS = 250


class AttackClient:
    """A wrapper around AsyncClient that records every request it makes."""

    def __init__(self, client: AsyncClient):
        self.client = client
        self.log: List[Dict[str, Any]] = []

    async def _make_request(
        self,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        description: str = "",
        **kwargs,
    ) -> Any:
        response = await self.client.request(method, url, json=json, **kwargs)
        self.log.append(
            {
                "description": description or f"{method} {url}",
                "method": method,
                "url": url,
                "status": response.status_code,
            }
        )
        return response

    async def get(self, url: str, description: str = "", **kwargs) -> Any:
        return await self._make_request("GET", url, description=description, **kwargs)

    async def post(
        self, url: str, json: Optional[Dict[str, Any]] = None, description: str = "", **kwargs
    ) -> Any:
        return await self._make_request("POST", url, json=json, description=description, **kwargs)


@pytest.fixture
def settings() -> Settings:
    """Security tests run with a real (short) failed-login floor."""
    return make_settings(login_failure_delay_ms=LOGIN_FLOOR_MS)


@pytest_asyncio.fixture
async def attack_client(client: AsyncClient) -> AttackClient:
    return AttackClient(client)


@pytest_asyncio.fixture
async def login_test_user(db_session: AsyncSession, password_hasher: PasswordHasher):
    """Create an active and a disabled user with a known password."""
    password = "Secure1!pw"
    active = UserModel(
        id=str(uuid.uuid4()),
        email="test-login@example.com",
        password_hash=password_hasher.hash(password),
        name="Login Tester",
        is_active=True,
    )
    disabled = UserModel(
        id=str(uuid.uuid4()),
        email="disabled@example.com",
        password_hash=password_hasher.hash(password),
        name="Disabled Tester",
        is_active=False,
    )
    db_session.add_all([active, disabled])
    await db_session.commit()

    return {
        "email": active.email,
        "disabled_email": disabled.email,
        "password": password,
        "id": active.id,
    }
