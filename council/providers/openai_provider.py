"""OpenAI provider using openai SDK with native async.

Also covers OpenAI-compatible endpoints (xAI, DeepSeek) through base_url.
"""

import asyncio
import base64
import logging
import os
import time

from openai import AsyncOpenAI

from config.config_loader import ModelConfig
from council.models import InlineDocument, ModelResponse
from council.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


def _user_content(prompt: str, document: InlineDocument | None) -> str | list[dict]:
    if document is None:
        return prompt
    encoded = base64.b64encode(document.data).decode("ascii")
    return [
        {
            "type": "file",
            "file": {
                "filename": "attachment.pdf",
                "file_data": f"data:{document.mime_type};base64,{encoded}",
            },
        },
        {"type": "text", "text": prompt},
    ]


class OpenAIProvider(AIProvider):
    """OpenAI provider via openai SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        if config.base_url:
            self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)
        else:
            self._client = AsyncOpenAI(api_key=api_key)

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
        # chat completions has no thinking budget; options are accepted and ignored
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._config.model,
                    messages=[
                        {"role": "system", "content": instruction},
                        {"role": "user", "content": _user_content(prompt, document)},
                    ],
                    max_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if choice is None:
            raise ProviderError(self._config.name, "No choices in response")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        logger.info("OpenAI %s: %.2fs, %s tokens", self._config.model, latency, token_count)

        return ModelResponse(
            provider="openai",
            model=self._config.model,
            content=choice.message.content or "",
            latency_sec=latency,
            token_count=token_count,
        )
