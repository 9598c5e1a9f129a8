"""Shared pytest fixtures."""

import asyncio
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, ChairmanConfig, ModelConfig, PromptsConfig, load_config
from council.models import InlineDocument, ModelResponse, Persona
from council.personas import PersonaRegistry
from council.providers.base import AIProvider
from council.providers.gateway import ModelGateway

SAMPLE_QUERY = "Should a startup build or buy its data pipeline?"


class FakeGateway(ModelGateway):
    """Test double gateway that records every call.

    The responder receives the call dict and may return a string, raise, or
    be a coroutine function (for tests that need to block or delay).
    """

    def __init__(self, responder: Callable[[dict[str, Any]], Any] | None = None) -> None:
        super().__init__({})
        self.calls: list[dict[str, Any]] = []
        self._responder = responder or (lambda call: f"Response from {call['model_id']}")

    async def invoke(
        self,
        model_id: str,
        instruction: str,
        prompt: str,
        document: InlineDocument | None = None,
        options: dict | None = None,
    ) -> str:
        call = {
            "model_id": model_id,
            "instruction": instruction,
            "prompt": prompt,
            "document": document,
            "options": options,
        }
        self.calls.append(call)
        result = self._responder(call)
        if asyncio.iscoroutine(result):
            result = await result
        return result


def persona_responder(registry: PersonaRegistry) -> Callable[[dict[str, Any]], str]:
    """Responder giving each persona a recognisable opinion and review."""
    by_instruction = {p.instruction: p for p in registry}

    def respond(call: dict[str, Any]) -> str:
        persona = by_instruction.get(call["instruction"])
        if persona is None:
            return "## Ruling\nBuy first, build later."
        if call["prompt"].startswith("Original Query"):
            return f"[{persona.id} review]"
        return f"[{persona.id} opinion]"

    return respond


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "Mock response") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate is defined in the class body below.
        self.generate = AsyncMock(  # type: ignore[assignment]
            return_value=ModelResponse(
                provider=provider_name,
                model="mock-model",
                content=response_content,
                latency_sec=0.1,
                token_count=10,
            )
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate(  # type: ignore[override]
        self,
        instruction: str,
        prompt: str,
        document: InlineDocument | None = None,
        options: dict | None = None,
    ) -> ModelResponse:
        """Default implementation; replaced by AsyncMock in __init__."""
        return ModelResponse(self._name, "mock-model", self._response_content, 0.1, 10)


@pytest.fixture
def app_config() -> AppConfig:
    return load_config()


@pytest.fixture
def registry(app_config: AppConfig) -> PersonaRegistry:
    return PersonaRegistry.from_config(app_config.personas)


@pytest.fixture
def chairman(app_config: AppConfig) -> ChairmanConfig:
    return app_config.chairman


@pytest.fixture
def prompts(app_config: AppConfig) -> PromptsConfig:
    return app_config.prompts


@pytest.fixture
def council_gateway(registry: PersonaRegistry) -> FakeGateway:
    return FakeGateway(persona_responder(registry))


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test-model",
        sdk="gemini",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
    )


@pytest.fixture
def sample_persona() -> Persona:
    return Persona(
        id="tester",
        name="The Tester",
        style="Thorough.",
        model="test-model",
        instruction="You are The Tester.",
    )


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
