"""API test fixtures — isolated app per test over a file-backed SQLite database.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path with the schema created
    - The app under test is built by create_app() with explicit Settings (no .env)
    - The client sees 500 responses instead of re-raised exceptions

Design Decisions:
    - File database over :memory: — list endpoints open two sessions concurrently,
      and each aiosqlite connection to :memory: would see its own empty database
    - Schema created directly from metadata; migrations are not exercised here
    - make_settings / make_app let a test override any setting (rate limit, environment, ...)
"""

import pytest

from postboard.config import Settings
from postboard.db.base import Base
from postboard.main import create_app
import postboard.models  # noqa: F401  registers tables on Base.metadata
from postboard.seed import seed
from tests.api.fakes import make_client


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides) -> Settings:
        values = {
            "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
            "environment": "test",
            "rate_limit_max": 10_000,
            "log_format": "text",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
async def make_app():
    """Build apps with the schema in place; disposes their engines afterwards."""
    built = []

    async def _make(settings: Settings, session_store=None):
        app = create_app(settings, session_store=session_store)
        async with app.state.lifecycle.db.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        built.append(app)
        return app

    yield _make
    for app in built:
        await app.state.lifecycle.shutdown()


@pytest.fixture
async def app(make_app, settings):
    return await make_app(settings)


@pytest.fixture
async def client(app):
    async with make_client(app) as c:
        yield c


@pytest.fixture
async def db(app):
    async with app.state.lifecycle.db.session() as session:
        yield session


@pytest.fixture
async def seeded(db):
    """John Doe and Jane Smith, one published post each."""
    return await seed(db)
