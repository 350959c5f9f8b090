"""
Shared fixtures: a throwaway SQLite database per test, the FastAPI app with
its dependencies pointed at that database, and a scripted provider adapter.
"""

import os

# Must be set before the application settings are first imported
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENCRYPTION_KEY"] = "0123456789abcdef" * 4
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from codesensei.database import Base, get_db, get_session_factory, set_sqlite_pragma
from codesensei.main import app
from codesensei.schemas.chat import ChatCompletion, Usage
from codesensei.schemas.user import UserRegister
from codesensei.services.auth_service import AuthService
from codesensei.services.llm_factory import create_api_client, get_client_factory
from codesensei.utils.security import create_access_token
import codesensei.models  # noqa: F401


PROVIDER_ENV = (
    "DEFAULT_AI_PROVIDER",
    "DEEPSEEK_API_KEY",
    "QWEN_API_KEY",
    "DOUBAO_API_KEY",
    "OPENAI_API_KEY",
)


class FakeAdapter:
    """
    Scripted stand-in for the provider adapter.

    ``chat_stream`` yields ``fragments`` and, when ``error`` is set, raises it
    before the fragment at index ``fail_at`` (or after the last one).
    """

    def __init__(self):
        self.fragments = ["Hel", "lo!"]
        self.content = "Hello!"
        self.error = None
        self.fail_at = None
        self.models = [{"id": "fake-model", "owned_by": "test", "created": None}]
        self.requests = []
        self.stream_closed = False

    async def chat(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return ChatCompletion(
            id="chat-test",
            content=self.content,
            model="fake-model",
            finish_reason="stop",
            usage=Usage(prompt_tokens=3, completion_tokens=2, total_tokens=5)
        )

    async def chat_stream(self, request):
        self.requests.append(request)
        try:
            for index, fragment in enumerate(self.fragments):
                if self.error is not None and self.fail_at == index:
                    raise self.error
                yield fragment
            if self.error is not None and (self.fail_at is None or self.fail_at >= len(self.fragments)):
                raise self.error
        finally:
            self.stream_closed = True

    async def list_models(self):
        return self.models


class FakeFactory:
    """Runs the real configuration checks, then hands out the fake adapter."""

    def __init__(self, adapter: FakeAdapter):
        self.adapter = adapter
        self.configs = []

    def __call__(self, config):
        self.configs.append(config)
        create_api_client(config)
        return self.adapter


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch):
    for name in PROVIDER_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'codesensei-test.db'}")
    event.listen(engine.sync_engine, "connect", set_sqlite_pragma)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def fake_factory(fake_adapter):
    return FakeFactory(fake_adapter)


@pytest.fixture
async def client(session_factory, fake_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_client_factory] = lambda: fake_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()


async def make_user(session_factory, username: str):
    async with session_factory() as session:
        return await AuthService(session).register(UserRegister(
            username=username,
            email=f"{username}@example.com",
            password="secret123",
            full_name=username.title()
        ))


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user.id), "username": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def user(session_factory):
    return await make_user(session_factory, "alice")


@pytest.fixture
async def other_user(session_factory):
    return await make_user(session_factory, "bob")


@pytest.fixture
def headers(user):
    return auth_headers(user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)
