"""Council stages 1 and 2: parallel opinions, then anonymised peer reviews."""

import asyncio
import logging

from config.config_loader import PromptsConfig
from council.cancellation import CancellationToken, check
from council.models import InlineDocument, Opinion, Persona, Review
from council.personas import PersonaRegistry
from council.providers.base import ProviderError
from council.providers.gateway import ModelGateway

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated."


def _clean(text: str | None) -> str:
    return (text or "").strip() or NO_RESPONSE


def _placeholder(kind: str, persona: Persona) -> str:
    return f"[Error: Failed to retrieve {kind} from {persona.name}]"


async def _ask_persona(
    gateway: ModelGateway,
    persona: Persona,
    prompt: str,
    kind: str,
    document: InlineDocument | None,
    token: CancellationToken | None,
) -> str:
    """Call one persona's model.

    Never raises on remote failure; returns a placeholder naming the persona
    instead. Raises TurnCancelled if the token is cancelled before the call
    is issued or by the time it returns.
    """
    check(token)
    try:
        text = await gateway.invoke(persona.model, persona.instruction, prompt, document)
    except ProviderError as exc:
        logger.warning("%s failed to produce %s: %s", persona.name, kind, exc)
        text = None
    except Exception as exc:
        logger.warning("%s unexpected failure producing %s: %s", persona.name, kind, exc)
        text = None
    check(token)
    if text is None:
        return _placeholder(kind, persona)
    return _clean(text)


async def gather_opinions(
    query: str,
    gateway: ModelGateway,
    registry: PersonaRegistry,
    document: InlineDocument | None = None,
    token: CancellationToken | None = None,
) -> list[Opinion]:
    """Ask every persona for an independent opinion, all at once.

    Returns exactly one Opinion per persona, in registry order.
    """
    logger.info("Gathering opinions from %d personas", len(registry))
    contents = await asyncio.gather(
        *(_ask_persona(gateway, p, query, "opinion", document, token) for p in registry)
    )
    return [Opinion(persona_id=p.id, content=c) for p, c in zip(registry, contents)]


def build_review_prompt(
    query: str,
    reviewer: Persona,
    opinions: list[Opinion],
    template: str,
) -> str:
    """Review prompt showing every opinion except the reviewer's own, unattributed."""
    others = [o for o in opinions if o.persona_id != reviewer.id]
    other_opinions = "\n\n---\n\n".join(
        f"Opinion {i}: {o.content}" for i, o in enumerate(others, start=1)
    )
    return template.format(query=query, other_opinions=other_opinions, member_name=reviewer.name)


async def gather_reviews(
    query: str,
    opinions: list[Opinion],
    gateway: ModelGateway,
    registry: PersonaRegistry,
    prompts: PromptsConfig,
    document: InlineDocument | None = None,
    token: CancellationToken | None = None,
) -> list[Review]:
    """Have every persona critique the others' opinions, all at once.

    Returns exactly one Review per persona, in registry order.
    """
    logger.info("Gathering peer reviews over %d opinions", len(opinions))
    review_prompts = {p.id: build_review_prompt(query, p, opinions, prompts.review) for p in registry}
    contents = await asyncio.gather(
        *(_ask_persona(gateway, p, review_prompts[p.id], "review", document, token) for p in registry)
    )
    return [Review(reviewer_id=p.id, content=c) for p, c in zip(registry, contents)]
