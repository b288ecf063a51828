import json
import logging
from types import SimpleNamespace

import pytest

from studymate import create_app
from studymate.config import Config


class FakeCompletions:
    """Stands in for ``client.chat.completions``; replies are consumed in order."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.replies:
            raise AssertionError("unexpected model call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, (dict, list)):
            reply = json.dumps(reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeClient:
    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)

    def reply(self, *replies):
        self.completions.replies.extend(replies)

    @property
    def calls(self):
        return self.completions.calls


def make_question(i=0, correct=1):
    return {
        "questionText": f"Question {i + 1} about photosynthesis?",
        "options": ["Oxygen", "Glucose", "Nitrogen", "Helium"],
        "correctAnswerIndex": correct,
        "explanation": "Plants make glucose from light, water and CO2.",
        "difficulty": "Easy",
    }


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def cfg(tmp_path):
    return Config(str(tmp_path), overrides={
        "DATA_DIR": str(tmp_path / "data"),
        "LOG_DIR": str(tmp_path / "logs"),
        "GROQ_API_KEY": "test-key",
        "LLM_TIMEOUT_S": "5",
    })


@pytest.fixture
def app(cfg, fake_client):
    app = create_app(cfg, client=fake_client)
    app.config["TESTING"] = True
    yield app
    app.extensions["studymate"]["ai"].shutdown()
    package_logger = logging.getLogger("studymate")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def services(app):
    return app.extensions["studymate"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    resp = client.post("/auth/register", json={"email": "ada@example.com", "password": "secret-pass"})
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}
