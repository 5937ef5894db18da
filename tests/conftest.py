import inspect

import pytest
from fastapi.testclient import TestClient

from jobcook.app.api.dependencies import get_backend, get_registry, get_retry_policy
from jobcook.app.core.config import Settings, get_settings
from jobcook.app.core.sessions import SessionRegistry
from jobcook.app.llm.backend import GenerationRequest, GenerationResult
from jobcook.app.llm.retry import RetryPolicy
from jobcook.app.main import create_app


class ScriptedBackend:
    """Generation backend that replays scripted responses and records requests.

    Each scripted item is a response text, an exception to raise, or a
    callable taking the request and returning (or awaiting to) a text.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.requests: list[GenerationRequest] = []

    def push(self, *responses):
        self.responses.extend(responses)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("No scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            item = item(request)
            if inspect.isawaitable(item):
                item = await item
        return GenerationResult(text=item)


@pytest.fixture
def make_backend():
    """Factory fixture building a ScriptedBackend from response items."""

    def _make(*responses):
        return ScriptedBackend(responses)

    return _make


@pytest.fixture
def fast_policy():
    """Default retry budget with no waiting."""
    return RetryPolicy(max_retries=5, initial_delay_ms=0, backoff_factor=1.5)


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, GEMINI_API_KEY="test-key")


@pytest.fixture
def backend():
    return ScriptedBackend()


@pytest.fixture
def client(backend, fast_policy, test_settings):
    """TestClient wired to a scripted backend and a fresh session registry."""
    app = create_app()
    registry = SessionRegistry()
    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_retry_policy] = lambda: fast_policy
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        test_client.headers["X-Session-Id"] = "test-session"
        yield test_client
    app.dependency_overrides.clear()
