from datetime import date
from typing import Optional

import pytest
import pytest_asyncio
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials
from httpx import ASGITransport, AsyncClient

from main import app
from storefront.api.users.models import DecodedToken
from storefront.config.constants import UserRole
from storefront.database.connection import (
    build_engine,
    build_session_factory,
    create_tables,
)
from storefront.database.models import User
from storefront.dependencies.auth import security, verify_token
from storefront.shared.cache_service import build_cache_context
from storefront.shared.core_cache import InMemoryCacheBackend
from storefront.shared.exceptions import UnauthorizedException
from tests.constants import (
    ADMIN_TOKEN,
    ADMIN_UID,
    BASE_URL,
    CUSTOMER_TOKEN,
    CUSTOMER_UID,
    OTHER_CUSTOMER_TOKEN,
    OTHER_CUSTOMER_UID,
)

TOKENS = {
    ADMIN_TOKEN: DecodedToken(uid=ADMIN_UID, role=UserRole.ADMIN),
    CUSTOMER_TOKEN: DecodedToken(uid=CUSTOMER_UID, role=UserRole.USER),
    OTHER_CUSTOMER_TOKEN: DecodedToken(uid=OTHER_CUSTOMER_UID, role=UserRole.USER),
}


async def fake_verify_token(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> DecodedToken:
    """Stands in for Firebase: maps fixed bearer tokens to identities."""
    if not credentials or not credentials.credentials:
        raise UnauthorizedException(detail="Authentication token is missing")
    decoded = TOKENS.get(credentials.credentials)
    if decoded is None:
        raise UnauthorizedException(detail="Invalid authentication credentials")
    return decoded


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache_backend():
    return InMemoryCacheBackend()


@pytest_asyncio.fixture
async def cache(cache_backend):
    context = build_cache_context(cache_backend)
    await context.connect()
    yield context
    await context.close()


@pytest.fixture
def test_app(session_factory, cache):
    """The application wired to an in-memory database and cache."""
    app.state.session_factory = session_factory
    app.state.cache = cache
    app.dependency_overrides[verify_token] = fake_verify_token
    yield app
    app.dependency_overrides.clear()


def _client(test_app, token: Optional[str]) -> AsyncClient:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return AsyncClient(
        transport=ASGITransport(app=test_app), base_url=BASE_URL, headers=headers
    )


@pytest_asyncio.fixture
async def admin_client(test_app):
    """Fixture to get an httpx.AsyncClient with admin authentication."""
    async with _client(test_app, ADMIN_TOKEN) as client:
        yield client


@pytest_asyncio.fixture
async def customer_client(test_app):
    """Fixture to get an httpx.AsyncClient with customer authentication."""
    async with _client(test_app, CUSTOMER_TOKEN) as client:
        yield client


@pytest_asyncio.fixture
async def other_customer_client(test_app):
    async with _client(test_app, OTHER_CUSTOMER_TOKEN) as client:
        yield client


@pytest_asyncio.fixture
async def anonymous_client(test_app):
    """Fixture to get an httpx.AsyncClient without any authentication."""
    async with _client(test_app, None) as client:
        yield client


@pytest_asyncio.fixture
async def customer_profile(session_factory):
    """A stored profile for the customer, required before reviewing."""
    user = User(
        id=CUSTOMER_UID,
        name="Casey Customer",
        email="casey@example.com",
        photo="https://img.example.com/casey.png",
        gender="female",
        role=UserRole.USER.value,
        dob=date(1998, 3, 14),
    )
    async with session_factory() as session:
        session.add(user)
        await session.commit()
    return user
