from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from schoolhub.core.context import RequestContext, Role


@pytest.fixture
def test_db():
    from schoolhub.core.database import Base
    from schoolhub.models import Answer, Question, QuestionAnswer, Quiz, QuizSubmission  # noqa: F401

    # One shared in-memory database for the whole test
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def teacher_context():
    return RequestContext(user_id="teacher-1", role=Role.TEACHER, email="teacher@example.com")


@pytest.fixture
def other_teacher_context():
    return RequestContext(user_id="teacher-2", role=Role.TEACHER)


@pytest.fixture
def student_context():
    return RequestContext(user_id="student-1", role=Role.STUDENT, email="student@example.com")


@pytest.fixture
def quiz_payload():
    now = datetime.now(timezone.utc)
    return {
        "title": "Midterm",
        "description": "Chapters 1-4",
        "date_open": (now - timedelta(hours=1)).isoformat(),
        "date_close": (now + timedelta(days=3)).isoformat(),
        "duration": 45,
    }


@pytest.fixture
def identification_question():
    return {
        "title": "2+2?",
        "type": "Identification",
        "points": 5,
        "options": [{"answer": "4", "is_correct": True}],
    }


@pytest.fixture
def multiple_choice_question():
    return {
        "title": "Which of these are primary colors?",
        "type": "Multiple Choice",
        "points": 2,
        "options": [
            {"answer": "Red", "is_correct": True},
            {"answer": "Green", "is_correct": False},
            {"answer": "Blue", "is_correct": True},
        ],
    }


@pytest.fixture
def true_false_question():
    return {
        "title": "The sun is a star.",
        "type": "True or False",
        "points": 1,
        "options": [
            {"answer": "True", "is_correct": True},
            {"answer": "False", "is_correct": False},
        ],
    }


@pytest.fixture
def acting_as(teacher_context):
    """Mutable holder for the identity the API client sends requests as."""
    return {"context": teacher_context}


@pytest.fixture
async def async_client(test_db, acting_as):
    from httpx import AsyncClient, ASGITransport
    from schoolhub.main import app
    from schoolhub.core.database import get_db
    from schoolhub.api.dependencies import get_request_context

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_request_context] = lambda: acting_as["context"]

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
