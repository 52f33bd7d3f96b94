"""Shared test fixtures."""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from specforge.config import Settings
from specforge.db.base import Base
# Import all models to register with Base.metadata
import specforge.db.models  # noqa: F401
from specforge.integrations.base import PackagePublisher, PublishResult, TextGenerator

FIXTURES_DIR = Path(__file__).parent / "fixtures"
JWT_SECRET = "test-jwt-secret"
OWNER = "user_owner"
STRANGER = "user_stranger"

GENERATED_REPLY = (
    "Here is your client:\n"
    "```javascript\n"
    "// version 1.0.0\n"
    "export async function listPets(baseUrl) {\n"
    "  return fetch(`${baseUrl}/pets`);\n"
    "}\n"
    "```\n"
)


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def make_token(sub: str) -> str:
    return jwt.encode({"sub": sub, "email": f"{sub}@example.com"}, JWT_SECRET, algorithm="HS256")


class FakeGenerator(TextGenerator):
    """Records prompts and answers with a canned completion."""

    generator_type = "fake"

    def __init__(self, reply: str = GENERATED_REPLY):
        self.reply = reply
        self.error: Exception | None = None
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


class FakePublisher(PackagePublisher):
    """Records publish calls instead of touching a registry."""

    publisher_type = "fake"

    def __init__(self):
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def publish(self, manifest, module_body, context=None):
        self.calls.append({"manifest": manifest, "module_body": module_body, "context": context})
        if self.error:
            raise self.error
        return PublishResult(
            publisher=self.publisher_type,
            package_name=manifest["name"],
            version=manifest["version"],
            output=f"+ {manifest['name']}@{manifest['version']}",
        )


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///",
        jwt_secret=JWT_SECRET,
        gemini_api_key="test-gemini-key",
        npm_token="test-npm-token",
        auto_generate=False,
        json_logs=False,
        log_level="warning",
    )


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(db_engine, settings, generator, publisher):
    """Create a test application instance with in-memory DB and fake collaborators."""
    from specforge.main import create_app

    _app = create_app(settings)
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    _app.state.generator = generator
    _app.state.publisher = publisher
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token(OWNER)}"}


@pytest.fixture
def stranger_headers():
    return {"Authorization": f"Bearer {make_token(STRANGER)}"}


@pytest.fixture
async def project(client, auth_headers):
    """A project owned by ``OWNER`` with npm settings configured."""
    response = await client.post("/api/v1/projects", json={"name": "Petstore"}, headers=auth_headers)
    assert response.status_code == 201
    body = response.json()
    response = await client.put(
        f"/api/v1/projects/{body['project_id']}/npm-config",
        json={"package_name": "petstore-client", "description": "Petstore client", "author": "Pet Team"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    return body
