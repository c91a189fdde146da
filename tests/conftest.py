import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["PERPLEXITY_API_KEY"] = "test-key"

import json

import pytest
from fastapi.testclient import TestClient

from quizlearn import models  # noqa: F401
from quizlearn.db import Base, SessionLocal, engine
from quizlearn.llm_client import get_completion_client
from quizlearn.main import app


def make_question(n=0, correct=0, options=None, **extra):
    q = {
        "question": f"Question {n}?",
        "options": options if options is not None else [f"q{n}-a", f"q{n}-b", f"q{n}-c", f"q{n}-d"],
        "correctAnswer": correct,
        "explanation": f"Because {n}.",
        "difficulty": "intermediate",
        "category": "python",
    }
    q.update(extra)
    return q


def completion_for(questions, prose=True):
    body = json.dumps(questions, indent=2)
    if prose:
        return f"Here are your questions:\n```json\n{body}\n```\nGood luck!"
    return body


class FakeCompletionClient:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def complete(self, messages, *, temperature=0.8, max_tokens=None):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.content

    async def aclose(self):
        pass


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_llm():
    return FakeCompletionClient(content=completion_for([make_question(i) for i in range(5)]))


@pytest.fixture
def client(fake_llm):
    app.dependency_overrides[get_completion_client] = lambda: fake_llm
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    r = client.post(
        "/api/auth/register",
        json={"fullName": "Ada Lovelace", "email": "Ada@Example.com", "password": "analytical"},
    )
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}
