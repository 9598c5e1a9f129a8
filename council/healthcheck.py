"""Council readiness: ping the models the personas and the chairman depend on.

A failing persona model means that member will answer with error
placeholders; a failing chairman model means every ruling will be the
chairman's failure message.
"""

import asyncio
import logging
from dataclasses import dataclass

from config.config_loader import ChairmanConfig
from council.personas import PersonaRegistry
from council.providers.gateway import ModelGateway

logger = logging.getLogger(__name__)

_PING_INSTRUCTION = "You are a connectivity check."
_PING_PROMPT = "Reply with the word OK only."
_TIMEOUT_SEC = 15.0


@dataclass(frozen=True)
class ModelCheck:
    model_id: str
    ok: bool
    error: str = ""


@dataclass(frozen=True)
class CouncilReadiness:
    checks: dict[str, ModelCheck]
    placeholder_personas: tuple[str, ...]
    chairman_ok: bool

    @property
    def ready(self) -> bool:
        """Every member and the chairman can be reached."""
        return self.chairman_ok and not self.placeholder_personas

    @property
    def usable(self) -> bool:
        return any(c.ok for c in self.checks.values())

    def warnings(self, registry: PersonaRegistry, chairman: ChairmanConfig) -> list[str]:
        lines = [
            f"{registry.display_name(pid)} will answer with error placeholders"
            for pid in self.placeholder_personas
        ]
        if not self.chairman_ok:
            lines.append(f"{chairman.name} is unreachable; rulings will read: {chairman.failure_message}")
        return lines


def council_models(registry: PersonaRegistry, chairman: ChairmanConfig) -> list[str]:
    """Model keys the council calls, in persona order, chairman last, no repeats."""
    return list(dict.fromkeys([p.model for p in registry] + [chairman.model]))


async def _ping(gateway: ModelGateway, model_id: str) -> ModelCheck:
    try:
        await asyncio.wait_for(
            gateway.invoke(model_id, _PING_INSTRUCTION, _PING_PROMPT),
            timeout=_TIMEOUT_SEC,
        )
    except Exception as exc:
        logger.debug("Health check failed for %s: %s", model_id, exc)
        return ModelCheck(model_id, False, str(exc) or type(exc).__name__)
    return ModelCheck(model_id, True)


async def check_council(
    gateway: ModelGateway,
    registry: PersonaRegistry,
    chairman: ChairmanConfig,
) -> CouncilReadiness:
    """Ping each model the council needs, in parallel, through the gateway.

    Models the gateway cannot serve count as failures, so a missing API key
    shows up here the same way a rejected one does.
    """
    results = await asyncio.gather(*(_ping(gateway, m) for m in council_models(registry, chairman)))
    checks = {c.model_id: c for c in results}
    return CouncilReadiness(
        checks=checks,
        placeholder_personas=tuple(p.id for p in registry if not checks[p.model].ok),
        chairman_ok=checks[chairman.model].ok,
    )
