import os

os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("GOOGLE_API_KEY", "test-key")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("GITHUB_CLIENT_ID", "test-github-id")
os.environ.setdefault("GITHUB_CLIENT_SECRET", "test-github-secret")

import pytest
from fastapi.testclient import TestClient

from travel_chatbot.__main__ import app
from travel_chatbot.auth import storage as auth_storage
from travel_chatbot.auth.jwt_auth import generate_token
from travel_chatbot.db import configure_database
from travel_chatbot.db.chat_store import ConversationStore
from travel_chatbot.routes.chatbot.route import get_completion_proxy


class ScriptedProxy:
    """Completion proxy that replays a fixed list of events."""

    def __init__(self, events=()):
        self.events = list(events)
        self.calls = []

    async def stream_completion(self, history):
        self.calls.append(list(history))
        for event in self.events:
            yield event


@pytest.fixture
def database(tmp_path):
    configure_database(f"sqlite:///{tmp_path / 'test.db'}")
    yield


@pytest.fixture
def store(database):
    return ConversationStore()


def make_user(email: str) -> dict:
    return auth_storage.create_user({"email": email, "password_hash": None})


@pytest.fixture
def user_a(database):
    return make_user("a@example.com")


@pytest.fixture
def user_b(database):
    return make_user("b@example.com")


@pytest.fixture
def proxy():
    return ScriptedProxy()


@pytest.fixture
def api_client(database, proxy):
    app.dependency_overrides[get_completion_proxy] = lambda: proxy
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user: dict) -> dict:
    return {"Authorization": f"Bearer {generate_token(user['id'], user['email'])}"}
