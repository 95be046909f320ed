"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from promptforge.api.deps import get_factory
from promptforge.core.config import Settings, get_settings
from promptforge.interfaces.gateway import BaseModelGateway, GatewayError, ModelInfo
from promptforge.main import create_app


class FakeGateway(BaseModelGateway):
    """Gateway that records prompts and returns a canned reply."""

    def __init__(self, provider: str, reply: str = "", error: GatewayError | None = None):
        self._provider = provider
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def complete(self, prompt: str, model: str | None = None) -> str:
        self.calls.append((prompt, model))
        if self.error is not None:
            raise self.error
        return self.reply

    async def list_models(self) -> list[ModelInfo]:
        if self.error is not None:
            raise self.error
        return [ModelInfo(id=f"{self._provider}-model", display_name="Fake Model", provider=self._provider)]

    @property
    def provider(self) -> str:
        return self._provider


class FakeFactory:
    """Stands in for ComponentFactory; a key is still required."""

    def __init__(self, reply: str = "Enhanced text", error: GatewayError | None = None):
        self.reply = reply
        self.error = error
        self.gateways: list[FakeGateway] = []
        self.keys: list[str | None] = []

    def get_gateway(self, provider=None, api_key=None) -> FakeGateway:
        provider = getattr(provider, "value", provider) or "google"
        self.keys.append(api_key)
        if not api_key:
            raise ValueError(f"API key is required for provider '{provider}'")
        gateway = FakeGateway(provider, reply=self.reply, error=self.error)
        self.gateways.append(gateway)
        return gateway


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        log_dir=tmp_path / "logs",
        cors_origins=["http://localhost:8501"],
        google_api_key=None,
        anthropic_api_key=None,
        openai_api_key=None,
        deepseek_api_key=None,
        openrouter_api_key=None,
    )


@pytest.fixture
def fake_factory() -> FakeFactory:
    """A gateway factory that never leaves the process."""
    return FakeFactory()


@pytest.fixture
def client(settings, fake_factory):
    """TestClient with the database and gateway dependencies overridden."""
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_factory] = lambda: fake_factory
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_template(client):
    """Create a template through the API and return its JSON."""

    def _make(**overrides):
        payload = {"name": "Sample", "content": "Hello {{name}}"}
        payload.update(overrides)
        response = client.post("/api/templates", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
