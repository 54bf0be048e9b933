# File: tests/conftest.py

"""
Shared fixtures.

Tests run against an in-memory SQLite database swapped in through
``app.dependency_overrides[get_db]``; the OpenAI client is replaced by
``FakeLlmClient`` through ``get_llm_client``.
"""

import base64
import copy

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.config import settings
from app.core.roles import Group
from app.core.security import hash_password
from app.main import app
from app.models.base import Base
from app.models.llm_key import LLMProvider
from app.models.user import User
from app.services.auth_service import issue_session_token
from app.services.llm_client import LlmError, get_llm_client
from app.services.llm_keys import upsert_llm_key

TEST_PASSWORD = "secret123"
TEST_ENCRYPTION_KEY = base64.b64encode(bytes(range(32))).decode("ascii")

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


SAMPLE_REPORT = {
    "part1": {
        "syntheseIdentite": [
            "Acme est une agence de conseil.",
            "Fondée en 2010 à Lyon.",
            "Elle accompagne les PME.",
        ],
        "nuageMots": [
            {"mot": "conseil", "poids": 90},
            {"mot": "PME", "poids": 70},
        ],
        "sentimentGlobal": {
            "evaluation": "Positive",
            "justification": "Avis clients favorables.",
        },
        "forces": ["Réactivité"],
        "faiblesses": ["Visibilité en ligne"],
        "sujets": ["Transformation numérique"],
        "recommandations": [
            {"faiblesse": "Visibilité en ligne", "action": "Publier des études de cas"},
        ],
    },
    "part3": {
        "generation": {
            "questions": [
                {"question": "Quelle agence de conseil choisir à Lyon ?"},
                {"question": "Acme est-elle fiable ?"},
            ],
        },
        "visibilite": {
            "analyses": [
                {
                    "question": "Quelle agence de conseil choisir à Lyon ?",
                    "mentionProbable": "Oui",
                    "justification": "Forte notoriété locale.",
                    "concurrents": ["Globex", "Initech"],
                },
                {
                    "question": "Acme est-elle fiable ?",
                    "mentionProbable": "Non",
                    "justification": "Peu d'avis publiés.",
                    "concurrents": ["Globex"],
                },
            ],
        },
    },
    "notice": "Ce rapport est une synthèse générée par une IA.",
}


class FakeLlmClient:
    """
    Stands in for LlmClient. Queue replies (strings / dicts, or exceptions to
    raise) in ``chat_replies`` and ``responses_replies``; calls are recorded.
    """

    def __init__(self):
        self.api_key = None
        self.chat_replies = []
        self.responses_replies = []
        self.chat_calls = []
        self.responses_calls = []

    def bind(self, api_key):
        self.api_key = api_key
        return self

    @staticmethod
    def _next(replies):
        if not replies:
            raise LlmError("no reply queued")
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def chat(self, model, messages, temperature=0.2, timeout=None, json_mode=False, max_tokens=None):
        self.chat_calls.append({"model": model, "messages": messages, "json_mode": json_mode})
        return self._next(self.chat_replies)

    def responses(self, body, timeout=None):
        self.responses_calls.append(body)
        return self._next(self.responses_replies)


@pytest.fixture(autouse=True)
def encryption_key(monkeypatch):
    monkeypatch.setattr(settings, "encryption_key_base64", TEST_ENCRYPTION_KEY)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_llm():
    return FakeLlmClient()


@pytest.fixture
def client(db, fake_llm):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_client] = lambda: fake_llm.bind
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(email="user@example.com", group=Group.UTILISATEUR, name="", password=TEST_PASSWORD):
        user = User(email=email, name=name, password_hash=hash_password(password), group=group)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user("owner@example.com")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", group=Group.ADMINISTRATEUR)


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {issue_session_token(user)}"}

    return _headers


@pytest.fixture
def openai_key(db):
    return upsert_llm_key(db, LLMProvider.OPENAI, "sk-test-abcd1234")


@pytest.fixture
def sample_report():
    return copy.deepcopy(SAMPLE_REPORT)
