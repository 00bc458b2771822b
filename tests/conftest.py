import asyncio
import json
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="interview-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["OPENAI_API_KEY"] = ""
os.environ["VAPI_WORKFLOW_ID"] = "workflow-test"
os.environ["PROJECT_URL"] = "http://testserver.local"

import pytest
from fastapi.testclient import TestClient

from app import models  # noqa: F401
from app.core.cache import question_cache
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.repositories.interview_repository import InterviewRepository
from app.services.openai_service import get_openai_service, get_optional_openai_service
from main import app

FEEDBACK_PAYLOAD = {
    "totalScore": 72,
    "categoryScores": [
        {"name": "Communication Skills", "score": 80, "comment": "Clear and structured."},
        {"name": "Technical Knowledge", "score": 70, "comment": "Solid on React basics."},
        {"name": "Problem Solving", "score": 65, "comment": "Needed prompting on edge cases."},
        {"name": "Cultural Fit", "score": 75, "comment": "Collaborative attitude."},
        {"name": "Confidence and Clarity", "score": 70, "comment": "Hesitant at times."},
    ],
    "strengths": ["Explains trade-offs"],
    "areasForImprovement": ["Go deeper on testing"],
    "finalAssessment": "A promising candidate who should practise system design.",
}


def event_loop_running():
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class FakeOpenAIService:
    """Stands in for the model client; replies are scripted per test."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.prompts = []
        self.calls_on_event_loop = []

    def generate_text(self, prompt, system_prompt=None, temperature=0.5):
        self.prompts.append(prompt)
        self.calls_on_event_loop.append(event_loop_running())
        if not self.responses:
            raise RuntimeError("no scripted model response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    question_cache.clear()
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_openai():
    return FakeOpenAIService()


@pytest.fixture
def feedback_json():
    return json.dumps(FEEDBACK_PAYLOAD)


@pytest.fixture
def client(fake_openai):
    app.dependency_overrides[get_openai_service] = lambda: fake_openai
    app.dependency_overrides[get_optional_openai_service] = lambda: fake_openai
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def interview(db_session):
    return InterviewRepository(db_session).create(
        role="Frontend Developer",
        interview_type="technical",
        level="junior",
        techstack=["React", "TypeScript"],
        questions=["What is a React hook?", "How does TypeScript narrow types?"],
        cover_image="/covers/adobe.png",
        user_id="user-1",
    )
