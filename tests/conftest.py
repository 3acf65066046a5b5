"""
Shared fixtures: an app wired to a throwaway SQLite database, an HTTP client
over ASGI, and logged-in principals of every kind.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
for _kind in ("USER", "ADMIN", "VENTURE"):
    os.environ.setdefault(f"{_kind}_ACCESS_TOKEN_SECRET", f"test-{_kind.lower()}-access")
    os.environ.setdefault(f"{_kind}_REFRESH_TOKEN_SECRET", f"test-{_kind.lower()}-refresh")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.core.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services import auth as auth_service  # noqa: E402


def pytest_collection_modifyitems(config, items):
    for item in items:
        if item.get_closest_marker("unit") or item.get_closest_marker("api"):
            continue
        if "_api" in item.path.name:
            item.add_marker(pytest.mark.api)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        PUBLIC_BASE_URL="http://test",
        COOKIE_SECURE=False,
        LOG_LEVEL="WARNING",
        LOG_JSON=False,
    )


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.db.create_all()
    yield application
    await application.state.db.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def db(app):
    async with app.state.db.sessionmaker() as session:
        yield session


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def login(client: AsyncClient, prefix: str, creds: dict) -> dict:
    res = await client.post(f"{prefix}/login", json=creds)
    assert res.status_code == 200, res.text
    # Keep explicit headers the only credential source between principals.
    client.cookies.clear()
    return res.json()["data"]


async def _register_venture(client: AsyncClient, business_name: str) -> dict:
    suffix = uuid.uuid4().hex[:8]
    creds = {"email": f"shop-{suffix}@example.com", "password": "venture-pass"}
    res = await client.post(
        "/ventures/register",
        json={"businessName": business_name, "phoneNumber": "9800000001", **creds},
    )
    assert res.status_code == 201, res.text
    data = await login(client, "/ventures", creds)
    return {
        "id": data["venture"]["id"],
        "token": data["accessToken"],
        "refresh": data["refreshToken"],
        "headers": auth_header(data["accessToken"]),
    }


@pytest_asyncio.fixture
async def venture(client):
    return await _register_venture(client, "Lamp Shop")


@pytest_asyncio.fixture
async def rival_venture(client):
    return await _register_venture(client, "Candle Corner")


@pytest_asyncio.fixture
async def user(client):
    suffix = str(uuid.uuid4().int)[:8]
    creds = {"phoneNumber": f"98{suffix}", "password": "user-pass"}
    res = await client.post(
        "/users/register",
        json={"name": "Asha", "email": f"asha-{suffix}@example.com", **creds},
    )
    assert res.status_code == 201, res.text
    data = await login(client, "/users", creds)
    return {
        "id": data["user"]["id"],
        "token": data["accessToken"],
        "refresh": data["refreshToken"],
        "headers": auth_header(data["accessToken"]),
    }


@pytest_asyncio.fixture
async def admin(client, db):
    creds = {"email": "root@example.com", "password": "admin-pass"}
    result = await auth_service.register(db, "admin", {"name": "Root", **creds})
    assert result.value.email == "root@example.com"
    data = await login(client, "/admin", creds)
    return {
        "id": data["admin"]["id"],
        "token": data["accessToken"],
        "refresh": data["refreshToken"],
        "headers": auth_header(data["accessToken"]),
    }
