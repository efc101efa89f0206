import os

# Keep bcrypt cheap and never touch a real database file while testing
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest

from forms_api import schemas
from forms_api.auth import AuthGate
from forms_api.database import build_engine, build_session_factory, create_db_and_tables
from forms_api.service import FormService

TEST_SECRET = "test-secret-key-long-enough-for-hs256-signatures"
PASSWORD = "pw12345678"


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:", echo=False)
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def auth_gate():
    return AuthGate(secret_key=TEST_SECRET, bcrypt_rounds=4)


@pytest.fixture
def service(engine, auth_gate):
    return FormService(build_session_factory(engine), auth_gate)


@pytest.fixture
def make_user(service):
    """Registers and logs in a user, returns the resolved Identity."""

    async def _make_user(email="alice@x.com", name="Alice", password=PASSWORD):
        registered = await service.register(email, password, name)
        assert registered.ok, registered
        session = await service.login(email, password)
        assert session.ok, session
        return service.resolve_identity(session.data.token)

    return _make_user


@pytest.fixture
def make_form(service):
    """Creates a form with shorttext questions, returns (form, [question, ...])."""

    async def _make_form(identity, title="Survey", questions=("Q1", "Q2", "Q3")):
        created = await service.create_form(identity, title)
        assert created.ok, created
        form = created.data
        created_questions = []
        for text in questions:
            result = await service.create_question(
                identity, form.id, schemas.QuestionCreate(text=text, type="shorttext")
            )
            assert result.ok, result
            created_questions.append(result.data)
        return form, created_questions

    return _make_form


async def positions(service, identity, form_id):
    """{question_id: position} as currently stored."""
    listed = await service.questions(identity, form_id)
    assert listed.ok, listed
    return {q.id: q.position for q in listed.data.questions}
