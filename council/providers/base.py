"""Abstract base for all AI model providers."""

from abc import ABC, abstractmethod

from council.models import InlineDocument, ModelResponse


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


def resolve_thinking_budget(default: int | None, options: dict | None) -> int | None:
    """Per-call thinking budget from options, else the model's configured one."""
    if options and "thinking_budget" in options:
        return options["thinking_budget"]
    return default


class AIProvider(ABC):
    """Abstract base for all AI model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the configured model key (e.g. 'gemini-2.5-flash')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(
        self,
        instruction: str,
        prompt: str,
        document: InlineDocument | None = None,
        options: dict | None = None,
    ) -> ModelResponse:
        """Generate a response for the given prompt.

        Args:
            instruction: System instruction (persona or chairman role).
            prompt: The full user-turn text to send.
            document: Optional inline document sent alongside the prompt.
            options: Optional per-call settings. Recognised key:
                "thinking_budget" (overrides the model's configured budget).

        Returns:
            ModelResponse dataclass with content and metadata.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...
