import dataclasses

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.settings import Settings
from api.state import build_memory_services


class FakeProvider:
    name = "fake"

    def __init__(self, response_text: str = "[]", configured: bool = True, error: Exception = None):
        self._response_text = response_text
        self._configured = configured
        self._error = error
        self.calls = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    def generate(self, *, system: str, user: str, model=None, temperature=0.3, max_tokens=1000) -> str:
        self.calls.append({
            "system": system,
            "user": user,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self._error is not None:
            raise self._error
        return self._response_text


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str = "[]", **kwargs):
        return FakeProvider(response_text, **kwargs)
    return _make


@pytest.fixture
def settings():
    return Settings(storage_backend="memory", llm_provider="cohere", jwt_secret="test-secret")


@pytest.fixture
def make_client(settings):
    """Build a TestClient over in-memory services driven by the given provider."""
    def _make(provider, **overrides):
        s = dataclasses.replace(settings, **overrides)
        services = build_memory_services(s, provider=provider)
        client = TestClient(create_app(services=services))
        client.services = services
        return client
    return _make


@pytest.fixture
def register():
    def _register(client, email="user@example.com", password="secret123", name="Test User"):
        r = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
        assert r.status_code == 201, r.text
        body = r.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]
    return _register
