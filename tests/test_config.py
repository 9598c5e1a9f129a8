"""Tests for config/config_loader.py."""

from pathlib import Path

import pytest
import yaml

from config.config_loader import AppConfig, ChairmanConfig, ModelConfig, PromptsConfig, load_config


def _settings(**overrides) -> dict:
    settings = {
        "defaults": {"simplify": True, "output_dir": "./transcripts"},
        "models": {
            "flash": {
                "sdk": "gemini",
                "model": "gemini-2.5-flash",
                "api_key_env": "TEST_GEMINI_KEY",
                "timeout_sec": 60,
                "max_tokens": 4096,
            },
            "pro": {
                "sdk": "gemini",
                "model": "gemini-3-pro-preview",
                "api_key_env": "TEST_GEMINI_KEY",
                "timeout_sec": 120,
                "max_tokens": 8192,
                "thinking_budget": 1024,
            },
        },
        "personas": [
            {"id": "logic", "name": "The Analyst", "model": "flash", "instruction": "Be logical."},
        ],
        "chairman": {
            "model": "pro",
            "instruction": "Synthesize.",
            "simplify_directive": "Keep it simple.",
            "failure_message": "Chairman unavailable.",
        },
        "prompts": {
            "review": "{query} {other_opinions} {member_name}",
            "chairman": "{query} {opinions} {reviews} {task}",
            "structured_task": "Use Markdown.",
            "simplify_task": "Use analogies.",
        },
    }
    settings.update(overrides)
    return settings


@pytest.fixture
def minimal_settings(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(_settings()), encoding="utf-8")
    return path


def test_load_config_returns_app_config(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config, AppConfig)
    assert isinstance(config.prompts, PromptsConfig)
    assert isinstance(config.chairman, ChairmanConfig)


def test_load_config_defaults(minimal_settings):
    config = load_config(minimal_settings)
    assert config.defaults.simplify is True
    assert config.defaults.output_dir == Path("./transcripts")


def test_load_config_models(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config.models["flash"], ModelConfig)
    assert config.models["flash"].model == "gemini-2.5-flash"
    assert config.models["flash"].base_url is None
    assert config.models["flash"].thinking_budget is None
    assert config.models["pro"].thinking_budget == 1024


def test_load_config_model_string_defaults_to_key(tmp_path: Path):
    settings = _settings()
    del settings["models"]["flash"]["model"]
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    assert load_config(path).models["flash"].model == "flash"


def test_load_config_personas(minimal_settings):
    config = load_config(minimal_settings)
    assert len(config.personas) == 1
    persona = config.personas[0]
    assert persona.id == "logic"
    assert persona.instruction == "Be logical."
    assert persona.color == "white"


def test_load_config_available_models_with_key(minimal_settings, monkeypatch):
    monkeypatch.setenv("TEST_GEMINI_KEY", "test-key")
    config = load_config(minimal_settings)
    assert config.available_models == {"flash", "pro"}


def test_load_config_no_available_models_without_key(minimal_settings, monkeypatch):
    monkeypatch.delenv("TEST_GEMINI_KEY", raising=False)
    config = load_config(minimal_settings)
    assert config.available_models == set()


def test_load_config_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config(Path("/nonexistent/settings.yaml"))


def test_load_config_rejects_unknown_chairman_model(tmp_path: Path):
    settings = _settings()
    settings["chairman"]["model"] = "ultra"
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    with pytest.raises(ValueError, match="Chairman model"):
        load_config(path)


def test_load_config_rejects_unknown_persona_model(tmp_path: Path):
    settings = _settings(
        personas=[{"id": "logic", "name": "The Analyst", "model": "nano", "instruction": "x"}]
    )
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    with pytest.raises(ValueError, match="logic"):
        load_config(path)


def test_load_config_personas_empty_when_missing(tmp_path: Path):
    settings = _settings()
    del settings["personas"]
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    assert load_config(path).personas == []


def test_shipped_settings_define_full_council():
    config = load_config()
    assert [p.id for p in config.personas] == ["logic", "creative", "skeptic", "pragmatist"]
    assert config.chairman.model not in {p.model for p in config.personas}
    assert "{other_opinions}" in config.prompts.review
    assert "{task}" in config.prompts.chairman
    assert config.chairman.thinking_budget == 1024
