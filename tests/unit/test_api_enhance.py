"""Unit tests for the enhancement API routes."""

from promptforge.interfaces.gateway import GatewayError
from promptforge.strategies.template_engine import (
    CLOSING_DIRECTIVE,
    DEFAULT_INSTRUCTION_TABLES,
    Methodology,
    RoleType,
)


class TestEnhanceProxy:
    """Test suite for POST /api/enhance."""

    def test_proxies_prompt(self, client, fake_factory):
        """Test that the prompt goes upstream unchanged."""
        fake_factory.reply = "A much better prompt"

        response = client.post(
            "/api/enhance",
            json={"prompt": "make this better", "provider": "deepseek"},
            headers={"X-API-Key": "ds-key"},
        )

        assert response.status_code == 200
        assert response.json() == {"enhanced_prompt": "A much better prompt"}
        gateway = fake_factory.gateways[-1]
        assert gateway.provider == "deepseek"
        assert gateway.calls == [("make this better", None)]
        assert fake_factory.keys[-1] == "ds-key"

    def test_blank_header_counts_as_missing(self, client):
        """Test that a whitespace key is not sent upstream."""
        response = client.post(
            "/api/enhance",
            json={"prompt": "p", "provider": "google"},
            headers={"X-API-Key": "   "},
        )
        assert response.status_code == 401

    def test_missing_key_is_401(self, client):
        """Test that a request without any key is refused."""
        response = client.post("/api/enhance", json={"prompt": "p", "provider": "openai"})

        assert response.status_code == 401
        assert "API key is required" in response.json()["detail"]

    def test_unknown_provider_is_422(self, client):
        """Test that providers are validated."""
        response = client.post(
            "/api/enhance",
            json={"prompt": "p", "provider": "cohere"},
            headers={"X-API-Key": "k"},
        )
        assert response.status_code == 422

    def test_empty_prompt_is_422(self, client):
        """Test that an empty prompt is rejected."""
        response = client.post("/api/enhance", json={"prompt": ""}, headers={"X-API-Key": "k"})
        assert response.status_code == 422

    def test_upstream_error_is_502(self, client, fake_factory):
        """Test that upstream failures become bad gateway."""
        fake_factory.error = GatewayError("anthropic", "overloaded", status_code=529)

        response = client.post(
            "/api/enhance",
            json={"prompt": "p", "provider": "anthropic"},
            headers={"X-API-Key": "k"},
        )

        assert response.status_code == 502
        assert "overloaded" in response.json()["detail"]


class TestComposeInstruction:
    """Test suite for POST /api/enhance/instruction."""

    def test_compose_with_prompt(self, client):
        """Test instruction composition and the wrapped outbound prompt."""
        response = client.post(
            "/api/enhance/instruction",
            json={
                "attributes": {
                    "domain": "Code",
                    "provider_type": "Deepseek",
                    "model_type": "Deepseek-Coder",
                    "role_type": "Tester",
                    "methodologies": ["TDD"],
                },
                "custom_instruction": "Prefer pytest.",
                "prompt": "Test {{module}}",
            },
        )

        assert response.status_code == 200
        body = response.json()
        tables = DEFAULT_INSTRUCTION_TABLES
        assert body["instruction"].endswith(
            f"{tables.roles[RoleType.TESTER]} {tables.methodologies[Methodology.TDD]} "
            f"Prefer pytest.\n\n{CLOSING_DIRECTIVE}"
        )
        assert body["enhancement_prompt"].startswith(
            "Please enhance the following prompt while maintaining its core intent and purpose: "
            "Original Prompt: Test {{module}} Enhancement Instructions: "
        )

    def test_compose_defaults_without_prompt(self, client):
        """Test that default attributes compose and no wrapper is returned."""
        body = client.post("/api/enhance/instruction", json={}).json()

        assert body["enhancement_prompt"] is None
        assert body["instruction"].endswith(CLOSING_DIRECTIVE)

    def test_overrides_applied(self, client):
        """Test that a full customized category is used."""
        response = client.post(
            "/api/enhance/instruction",
            json={
                "attributes": {"role_type": "Architect"},
                "instruction_overrides": {
                    "roles": {"Architect": "Draw boxes.", "Developer": "Write code.", "Tester": "Break it."}
                },
            },
        )

        assert response.status_code == 200
        assert "Draw boxes." in response.json()["instruction"]

    def test_incomplete_overrides_are_422(self, client):
        """Test that partial categories are refused."""
        response = client.post(
            "/api/enhance/instruction",
            json={"instruction_overrides": {"methodologies": {}}},
        )
        assert response.status_code == 422

    def test_unknown_attribute_is_422(self, client):
        """Test that attribute values are validated."""
        response = client.post("/api/enhance/instruction", json={"attributes": {"domain": "Astrology"}})
        assert response.status_code == 422


class TestInstructionDefaultsAndModels:
    """Test suite for the read-only enhancement endpoints."""

    def test_default_tables(self, client):
        """Test that the built-in tables are served by enum value."""
        response = client.get("/api/enhance/instructions/defaults")

        assert response.status_code == 200
        assert response.json() == DEFAULT_INSTRUCTION_TABLES.to_dict()

    def test_list_models(self, client, fake_factory):
        """Test model listing for a provider."""
        response = client.get(
            "/api/enhance/models",
            params={"provider": "openai"},
            headers={"X-API-Key": "sk-1"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "provider": "openai",
            "models": [{"id": "openai-model", "display_name": "Fake Model"}],
        }

    def test_list_models_requires_key(self, client):
        """Test that listing needs a key."""
        response = client.get("/api/enhance/models", params={"provider": "google"})
        assert response.status_code == 401

    def test_list_models_upstream_error(self, client, fake_factory):
        """Test that listing failures are bad gateway."""
        fake_factory.error = GatewayError("google", "forbidden", status_code=403)
        response = client.get(
            "/api/enhance/models",
            params={"provider": "google"},
            headers={"X-API-Key": "k"},
        )
        assert response.status_code == 502
