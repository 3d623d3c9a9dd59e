import httpx
import pytest

from gametracker.core.config import Settings
from gametracker.core.db import create_tables
from gametracker.core.security import PasswordHasher, TokenService
from gametracker.main import create_app


TEST_SECRET = "test-secret"


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET=TEST_SECRET,
        BCRYPT_ROUNDS=4,
        DB_CONNECT_RETRIES=1,
        DB_RETRY_DELAY=0,
    )


@pytest.fixture()
async def app(settings):
    application = create_app(settings)
    await create_tables(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest.fixture()
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture()
async def session(app):
    async with app.state.sessionmaker() as s:
        yield s


@pytest.fixture()
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture()
def tokens():
    return TokenService(TEST_SECRET)
