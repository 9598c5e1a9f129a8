"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import base64
import logging
import os
import time

import anthropic as anthropic_sdk

from config.config_loader import ModelConfig
from council.models import InlineDocument, ModelResponse
from council.providers.base import AIProvider, ProviderError, resolve_thinking_budget

logger = logging.getLogger(__name__)


def _user_content(prompt: str, document: InlineDocument | None) -> str | list[dict]:
    if document is None:
        return prompt
    return [
        {
            "type": "document",
            "source": {
                "type": "base64",
                "media_type": document.mime_type,
                "data": base64.b64encode(document.data).decode("ascii"),
            },
        },
        {"type": "text", "text": prompt},
    ]


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider via anthropic SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate(
        self,
        instruction: str,
        prompt: str,
        document: InlineDocument | None = None,
        options: dict | None = None,
    ) -> ModelResponse:
        extra: dict = {}
        budget = resolve_thinking_budget(self._config.thinking_budget, options)
        if budget:
            extra["thinking"] = {"type": "enabled", "budget_tokens": budget}

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens,
                    system=instruction,
                    messages=[{"role": "user", "content": _user_content(prompt, document)}],
                    **extra,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        # thinking blocks are dropped; only the answer text is kept
        text_blocks = [b.text for b in response.content or [] if b.type == "text"]

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info("Anthropic %s: %.2fs, %s tokens", self._config.model, latency, token_count)

        return ModelResponse(
            provider="anthropic",
            model=self._config.model,
            content="\n".join(text_blocks),
            latency_sec=latency,
            token_count=token_count,
        )
