"""Load settings.yaml into typed dataclasses. Validates API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from council.models import Persona

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None
    thinking_budget: int | None = None


@dataclass
class ChairmanConfig:
    name: str
    model: str
    instruction: str
    simplify_directive: str
    failure_message: str
    thinking_budget: int | None = None


@dataclass
class PromptsConfig:
    review: str
    chairman: str
    structured_task: str
    simplify_task: str


@dataclass
class DefaultsConfig:
    simplify: bool
    output_dir: Path


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    chairman: ChairmanConfig
    prompts: PromptsConfig
    personas: list[Persona] = field(default_factory=list)
    available_models: set[str] = field(default_factory=set)


def _load_personas(personas_raw: list[dict]) -> list[Persona]:
    return [
        Persona(
            id=str(p["id"]),
            name=str(p["name"]),
            style=str(p.get("style", "")),
            model=str(p["model"]),
            instruction=str(p["instruction"]).strip(),
            color=str(p.get("color", "white")),
        )
        for p in personas_raw
    ]


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if the
    chairman or a persona points at a model that is not configured.
    Logs missing API keys but does not raise; callers check
    available_models.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw.get("defaults", {})
    defaults = DefaultsConfig(
        simplify=bool(defaults_raw.get("simplify", False)),
        output_dir=Path(defaults_raw.get("output_dir", "./output")),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        review=prompts_raw["review"],
        chairman=prompts_raw["chairman"],
        structured_task=prompts_raw["structured_task"].strip(),
        simplify_task=prompts_raw["simplify_task"].strip(),
    )

    chairman_raw = raw["chairman"]
    chairman = ChairmanConfig(
        name=str(chairman_raw.get("name", "The Chairman")),
        model=str(chairman_raw["model"]),
        instruction=str(chairman_raw["instruction"]).strip(),
        simplify_directive=str(chairman_raw["simplify_directive"]).strip(),
        failure_message=str(chairman_raw["failure_message"]).strip(),
        thinking_budget=chairman_raw.get("thinking_budget"),
    )

    personas = _load_personas(raw.get("personas", []))

    models: dict[str, ModelConfig] = {}
    available_models: set[str] = set()

    for model_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=model_name,
            sdk=model_raw["sdk"],
            model=model_raw.get("model", model_name),
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
            thinking_budget=model_raw.get("thinking_budget"),
        )
        models[model_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_models.add(model_name)
            logger.info("Model available: %s", model_name)
        else:
            logger.info(
                "Model skipped (no API key): %s — set %s in .env",
                model_name,
                model_raw["api_key_env"],
            )

    if chairman.model not in models:
        raise ValueError(f"Chairman model not configured: {chairman.model}")
    for persona in personas:
        if persona.model not in models:
            raise ValueError(f"Persona {persona.id!r} uses unconfigured model: {persona.model}")

    return AppConfig(
        defaults=defaults,
        models=models,
        chairman=chairman,
        prompts=prompts,
        personas=personas,
        available_models=available_models,
    )
