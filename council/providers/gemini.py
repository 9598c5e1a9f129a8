"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import os
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ModelConfig
from council.models import InlineDocument, ModelResponse
from council.providers.base import AIProvider, ProviderError, resolve_thinking_budget

logger = logging.getLogger(__name__)


class GeminiProvider(AIProvider):
    """Google Gemini provider via google-genai SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    def _contents(self, prompt: str, document: InlineDocument | None):
        if document is None:
            return prompt
        return [
            genai_types.Part.from_bytes(data=document.data, mime_type=document.mime_type),
            genai_types.Part.from_text(text=prompt),
        ]

    def _generate_config(
        self, instruction: str, options: dict | None = None
    ) -> genai_types.GenerateContentConfig:
        thinking = None
        budget = resolve_thinking_budget(self._config.thinking_budget, options)
        if budget:
            thinking = genai_types.ThinkingConfig(thinking_budget=budget)
        return genai_types.GenerateContentConfig(
            system_instruction=instruction,
            max_output_tokens=self._config.max_tokens,
            thinking_config=thinking,
        )

    async def generate(
        self,
        instruction: str,
        prompt: str,
        document: InlineDocument | None = None,
        options: dict | None = None,
    ) -> ModelResponse:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=self._contents(prompt, document),
                    config=self._generate_config(instruction, options),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info("Gemini %s: %.2fs, %s tokens", self._config.model, latency, token_count)

        return ModelResponse(
            provider="gemini",
            model=self._config.model,
            content=response.text or "",
            latency_sec=latency,
            token_count=token_count,
        )
