"""Route remote model calls by model key to the provider that serves it."""

import logging

from config.config_loader import AppConfig
from council.models import InlineDocument
from council.providers.anthropic import AnthropicProvider
from council.providers.base import AIProvider, ProviderError
from council.providers.gemini import GeminiProvider
from council.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "gemini": GeminiProvider,
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


class ModelGateway:
    """The single request/response boundary the council stages talk to."""

    def __init__(self, providers: dict[str, AIProvider]) -> None:
        self._providers = dict(providers)

    @property
    def providers(self) -> dict[str, AIProvider]:
        return dict(self._providers)

    async def invoke(
        self,
        model_id: str,
        instruction: str,
        prompt: str,
        document: InlineDocument | None = None,
        options: dict | None = None,
    ) -> str:
        """Call model_id and return its response text.

        options is passed through to the provider unchanged.

        Raises:
            ProviderError: Unknown model, or any transport/API failure.
        """
        provider = self._providers.get(model_id)
        if provider is None:
            raise ProviderError(model_id, "Model not available (missing API key or unknown sdk)")
        response = await provider.generate(instruction, prompt, document, options)
        return response.content


def build_gateway(config: AppConfig) -> ModelGateway:
    """Instantiate a provider for every model whose API key is present."""
    providers: dict[str, AIProvider] = {}
    for name in sorted(config.available_models):
        model_cfg = config.models[name]
        provider_cls = PROVIDER_CLASSES.get(model_cfg.sdk)
        if provider_cls is None:
            logger.warning("Model '%s' uses unknown sdk '%s', skipping", name, model_cfg.sdk)
            continue
        try:
            providers[name] = provider_cls(model_cfg)
        except Exception as exc:
            logger.warning("Failed to instantiate provider for '%s': %s", name, exc)
    return ModelGateway(providers)
