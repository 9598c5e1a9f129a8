"""Stage 3: the chairman merges opinions and reviews into one answer."""

import logging

from config.config_loader import ChairmanConfig, PromptsConfig
from council.cancellation import CancellationToken, check
from council.debate import NO_RESPONSE
from council.models import InlineDocument, Opinion, Review
from council.personas import PersonaRegistry
from council.providers.gateway import ModelGateway

logger = logging.getLogger(__name__)


def _format_opinions(opinions: list[Opinion], registry: PersonaRegistry) -> str:
    return "\n\n".join(
        f"Member ({registry.display_name(o.persona_id)}): {o.content}" for o in opinions
    )


def _format_reviews(reviews: list[Review], registry: PersonaRegistry) -> str:
    return "\n\n".join(
        f"Review by ({registry.display_name(r.reviewer_id)}): {r.content}" for r in reviews
    )


def chairman_instruction(chairman: ChairmanConfig, simplify: bool) -> str:
    if simplify:
        return f"{chairman.instruction} {chairman.simplify_directive}"
    return chairman.instruction


def build_chairman_prompt(
    query: str,
    opinions: list[Opinion],
    reviews: list[Review],
    registry: PersonaRegistry,
    prompts: PromptsConfig,
    simplify: bool = False,
) -> str:
    return prompts.chairman.format(
        query=query,
        opinions=_format_opinions(opinions, registry),
        reviews=_format_reviews(reviews, registry),
        task=prompts.simplify_task if simplify else prompts.structured_task,
    )


async def synthesize(
    query: str,
    opinions: list[Opinion],
    reviews: list[Review],
    gateway: ModelGateway,
    registry: PersonaRegistry,
    chairman: ChairmanConfig,
    prompts: PromptsConfig,
    document: InlineDocument | None = None,
    simplify: bool = False,
    token: CancellationToken | None = None,
) -> str:
    """Run the chairman's synthesis and return the final answer text.

    Never raises on remote failure; returns chairman.failure_message instead.
    Raises TurnCancelled if the token is cancelled around the call.
    """
    prompt = build_chairman_prompt(query, opinions, reviews, registry, prompts, simplify)
    instruction = chairman_instruction(chairman, simplify)

    logger.info("Running synthesis via %s (simplify=%s)", chairman.model, simplify)

    options = {"thinking_budget": chairman.thinking_budget} if chairman.thinking_budget else None

    check(token)
    try:
        text = await gateway.invoke(chairman.model, instruction, prompt, document, options)
    except Exception:
        logger.exception("Chairman synthesis failed")
        text = None
    check(token)

    if text is None:
        return chairman.failure_message
    return text.strip() or NO_RESPONSE
