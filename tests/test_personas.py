"""Tests for council/personas.py."""

import pytest

from council.models import Persona
from council.personas import DEFAULT_PERSONAS, PersonaRegistry


def test_default_registry_order():
    registry = PersonaRegistry()
    assert registry.ids() == ["logic", "creative", "skeptic", "pragmatist"]
    assert len(registry) == 4


def test_default_personas_share_one_model():
    assert len({p.model for p in DEFAULT_PERSONAS}) == 1


def test_get_and_contains():
    registry = PersonaRegistry()
    assert registry.get("skeptic").name == "The Skeptic"
    assert "logic" in registry
    assert "chairman" not in registry
    with pytest.raises(KeyError):
        registry.get("chairman")


def test_display_name_falls_back_to_key():
    registry = PersonaRegistry()
    assert registry.display_name("pragmatist") == "The Pragmatist"
    assert registry.display_name("ghost") == "ghost"


def test_duplicate_ids_rejected(sample_persona):
    with pytest.raises(ValueError, match="unique"):
        PersonaRegistry([sample_persona, sample_persona])


def test_from_config_uses_configured_personas(sample_persona):
    registry = PersonaRegistry.from_config([sample_persona])
    assert registry.ids() == ["tester"]


def test_from_config_empty_falls_back_to_defaults():
    assert PersonaRegistry.from_config([]).ids() == [p.id for p in DEFAULT_PERSONAS]


def test_personas_are_immutable():
    persona = PersonaRegistry().get("logic")
    with pytest.raises(AttributeError):
        persona.name = "Someone else"  # type: ignore[misc]


def test_configured_personas_match_builtin_ids(registry):
    assert registry.ids() == [p.id for p in DEFAULT_PERSONAS]
    assert all(isinstance(p, Persona) for p in registry)
