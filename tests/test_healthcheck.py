"""Tests for council/healthcheck.py, using a recording gateway."""

import asyncio
from dataclasses import replace

from council.healthcheck import check_council, council_models
from council.models import Persona
from council.personas import PersonaRegistry
from council.providers.base import ProviderError
from council.providers.gateway import ModelGateway

from tests.conftest import FakeGateway, MockProvider


def _failing(*model_ids: str):
    def respond(call):
        if call["model_id"] in model_ids:
            raise ProviderError(call["model_id"], "403 Forbidden")
        return "OK"

    return respond


def test_council_models_persona_order_then_chairman(registry, chairman):
    assert council_models(registry, chairman) == ["gemini-2.5-flash", chairman.model]


def test_council_models_deduplicates_shared_chairman_model(registry, chairman):
    shared = replace(chairman, model="gemini-2.5-flash")
    assert council_models(registry, shared) == ["gemini-2.5-flash"]


async def test_each_needed_model_pinged_once(registry, chairman):
    gateway = FakeGateway(lambda call: "OK")
    readiness = await check_council(gateway, registry, chairman)

    assert sorted(c["model_id"] for c in gateway.calls) == sorted(council_models(registry, chairman))
    assert readiness.ready
    assert readiness.placeholder_personas == ()
    assert readiness.warnings(registry, chairman) == []


async def test_chairman_failure_predicts_fallback_ruling(registry, chairman):
    readiness = await check_council(FakeGateway(_failing(chairman.model)), registry, chairman)

    assert readiness.chairman_ok is False
    assert readiness.placeholder_personas == ()
    assert readiness.usable and not readiness.ready
    assert "403" in readiness.checks[chairman.model].error
    (warning,) = readiness.warnings(registry, chairman)
    assert chairman.failure_message in warning


async def test_persona_failures_reported_by_persona(chairman):
    registry = PersonaRegistry(
        (
            Persona("logic", "The Analyst", "", "flash", "Be logical."),
            Persona("creative", "The Visionary", "", "claude", "Be bold."),
            Persona("skeptic", "The Skeptic", "", "claude", "Doubt."),
        )
    )
    readiness = await check_council(FakeGateway(_failing("claude")), registry, chairman)

    assert readiness.placeholder_personas == ("creative", "skeptic")
    assert readiness.chairman_ok is True
    warnings = readiness.warnings(registry, chairman)
    assert warnings == [
        "The Visionary will answer with error placeholders",
        "The Skeptic will answer with error placeholders",
    ]


async def test_model_missing_from_gateway_counts_as_failure(registry, chairman):
    gateway = ModelGateway({"gemini-2.5-flash": MockProvider("gemini-2.5-flash")})
    readiness = await check_council(gateway, registry, chairman)

    assert readiness.placeholder_personas == ()
    assert readiness.chairman_ok is False
    assert "not available" in readiness.checks[chairman.model].error


async def test_nothing_reachable_is_not_usable(registry, chairman):
    def respond(call):
        raise RuntimeError()

    readiness = await check_council(FakeGateway(respond), registry, chairman)

    assert not readiness.usable
    assert readiness.placeholder_personas == tuple(registry.ids())
    assert all(c.error == "RuntimeError" for c in readiness.checks.values())


async def test_timeout_counts_as_failure(registry, chairman, monkeypatch):
    """A model that hangs past the timeout is marked as failed."""
    import council.healthcheck as hc

    async def respond(call):
        if call["model_id"] == chairman.model:
            await asyncio.sleep(9999)
        return "OK"

    monkeypatch.setattr(hc, "_TIMEOUT_SEC", 0.05)
    readiness = await check_council(FakeGateway(respond), registry, chairman)

    assert readiness.chairman_ok is False
    assert readiness.checks[chairman.model].error
