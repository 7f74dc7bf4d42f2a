import json
import os
import random
import tempfile

# must be set before quizsim.settings is imported
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MOCK_MODE"] = "1"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="quizsim-test-")

import pytest
from fastapi.testclient import TestClient

from quizsim.deps import get_manager, get_source, get_store
from quizsim.main import app
from quizsim.services.generator import QuestionSource
from quizsim.services.sessions import InMemorySessionStore, SessionManager
from quizsim.services.store import QuestionStore


class FakeSource(QuestionSource):
    """Deterministic backend: question N has correctAnswer N % 4."""

    def __init__(self, fail: bool = False):
        super().__init__(complete=self._reply, base_url="http://backend.invalid/v1")
        self.fail = fail
        self.calls = 0

    async def _reply(self, messages, **kw):
        self.calls += 1
        n = self.calls
        if self.fail:
            raise RuntimeError("backend down")
        return "```json\n" + json.dumps({
            "question": f"Generated question {n}?",
            "options": ["a", "b", "c", "d"],
            "correctAnswer": n % 4,
            "explanation": f"answer is {n % 4}",
        }) + "\n```"


@pytest.fixture
def store(tmp_path):
    return QuestionStore(tmp_path / "questions")


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def manager(store, source):
    return SessionManager(InMemorySessionStore(), store, source, rng=random.Random(7))


@pytest.fixture
def client(manager, store, source):
    app.dependency_overrides[get_manager] = lambda: manager
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_source] = lambda: source
    yield TestClient(app)
    app.dependency_overrides.clear()
