"""Test fixtures — one app, one database per test.

Learn: create_app() takes its Settings as an argument, so every test builds
its own app with its own signing secret and its own database. By default
that is a fresh SQLite file under tmp_path (sqlite+aiosqlite); set
TASKGATE_TEST_DATABASE_URL to run the same tests against PostgreSQL.

httpx's ASGITransport does not run the lifespan, so the fixture creates
the tables itself and disposes the engine afterwards.

Cookies: httpx keeps the Set-Cookie from /auth/login, and the gate prefers
the cookie over the Authorization header. helpers.login() clears the
client's cookies so tests choose their token carrier explicitly.
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from taskgate.config import Settings
from taskgate.db.engine import init_models
from taskgate.main import create_app
from tests.helpers import TEST_JWT_SECRET, bearer, login, register, unique_username


@pytest.fixture()
def settings(tmp_path):
    database_url = os.environ.get(
        "TASKGATE_TEST_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'taskgate.db'}",
    )
    return Settings(
        database_url=database_url,
        jwt_secret=TEST_JWT_SECRET,
        cookie_secure=False,
        create_tables=False,
        _env_file=None,
    )


@pytest_asyncio.fixture()
async def app(settings):
    app = create_app(settings)
    engine = app.state.engine
    await init_models(engine)
    yield app
    if engine.dialect.name != "sqlite":
        # Shared server database: leave it empty for the next test.
        async with engine.begin() as conn:
            await conn.execute(text("DELETE FROM tasks"))
            await conn.execute(text("DELETE FROM accounts"))
    await engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """A session on the test app's database, for inspecting rows directly."""
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def alice(client):
    """A registered, logged-in account: (account dict, bearer headers)."""
    username = unique_username("alice")
    account = await register(client, username)
    token = await login(client, username)
    return account, bearer(token)


@pytest_asyncio.fixture()
async def bob(client):
    username = unique_username("bob")
    account = await register(client, username)
    token = await login(client, username)
    return account, bearer(token)
