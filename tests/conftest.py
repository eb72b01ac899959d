# tests/conftest.py
# Shared fixtures: settings, an app client on in-memory SQLite,
# and a repository on a file-backed SQLite database for concurrency tests.

from typing import Iterator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from memelinks.config import Settings
from memelinks.db.base import create_engine_from_url, create_session_factory, init_schema
from memelinks.main import create_app
from memelinks.repositories.link_repository import LinkRepository

API_KEY = "test-api-key"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DB_URL="sqlite://",
        API_KEY=API_KEY,
        LOG_LEVEL="WARNING",
        RATE_LIMIT_MAX_REQUESTS=10_000,
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    # Entering the context runs the lifespan (engine, schema, registry)
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def browser(client: TestClient) -> TestClient:
    """Client that has loaded the form page and holds a session cookie."""
    response = client.get("/")
    assert response.status_code == 200
    return client


@pytest_asyncio.fixture
async def repository(tmp_path):
    engine = create_engine_from_url(f"sqlite:///{tmp_path / 'links.db'}")
    await init_schema(engine)
    yield LinkRepository(create_session_factory(engine))
    await engine.dispose()
