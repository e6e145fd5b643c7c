"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from feedback_app.core.config import settings
from feedback_app.db.base import Base
from feedback_app.db.init_db import seed_form
from feedback_app.db.session import get_db
from feedback_app.main import app
from feedback_app.models.form import Form, Question
from feedback_app.rules.assessment import EngineConfig
from feedback_app.rules.loader import load_form_definition
from feedback_app.rules.models import QuestionMeta, Rule
from feedback_app.services.forms import FormService

# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FORM_FILE = "isp-feedback-v1.yaml"


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture(scope="function")
def client(async_session: AsyncSession) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with overridden dependencies."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(async_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client on the test event loop, for tests that also query the database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def engine_config() -> EngineConfig:
    """Engine configuration from default settings."""
    return EngineConfig.from_settings(settings)


@pytest.fixture
async def seeded_form(async_session: AsyncSession) -> Form:
    """Seed the default feedback form."""
    form = await seed_form(async_session, FORM_FILE)
    assert form is not None
    return form


@pytest.fixture
async def form_questions(async_session: AsyncSession, seeded_form: Form) -> list[Question]:
    """Stored questions of the seeded form, in display order."""
    return await FormService(async_session).get_questions(seeded_form.id)


@pytest.fixture
def question_ids(form_questions: list[Question]) -> dict[str, str]:
    """Map definition keys (entry, whatsapp, ...) to stored question ids."""
    definition, _ = load_form_definition(FORM_FILE)
    keys = [q["key"] for q in definition["questions"]]
    return dict(zip(keys, (q.id for q in form_questions)))


@pytest.fixture
def question_meta_payload(form_questions: list[Question]) -> list[dict]:
    """Question metadata as the client sends it with a submission."""
    return [
        {
            "id": q.id,
            "question_type": q.question_type,
            "category_tag": q.category_tag,
        }
        for q in form_questions
    ]


def definition_questions(filename: str = FORM_FILE) -> list[QuestionMeta]:
    """Engine questions straight from a definition file, keyed by definition key."""
    definition, _ = load_form_definition(filename)
    return [
        QuestionMeta(
            id=q["key"],
            question_type=q["type"],
            category_tag=q.get("category"),
            required=q.get("required", False),
        )
        for q in definition["questions"]
    ]


def definition_rules(filename: str = FORM_FILE) -> list[Rule]:
    """Engine rules straight from a definition file, keyed by definition key."""
    definition, _ = load_form_definition(filename)
    return [
        Rule.from_dict(
            {
                "id": r["id"],
                "source_question_id": r["source"],
                "depends_on_question_id": r["depends_on"],
                "operator": r["operator"],
                "match_value": r.get("value", ""),
                "action": r["action"],
                "flag_kind": r.get("flag_kind"),
            }
        )
        for r in definition["rules"]
    ]


@pytest.fixture
def form_questions_meta() -> list[QuestionMeta]:
    """Default form questions without a database."""
    return definition_questions()


@pytest.fixture
def form_rules() -> list[Rule]:
    """Default form rules without a database."""
    return definition_rules()
