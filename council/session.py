"""Session controller: drives one council turn at a time through the three stages."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from config.config_loader import ChairmanConfig, PromptsConfig
from council.attachments import build_request
from council.cancellation import CancellationToken, TurnCancelled
from council.debate import gather_opinions, gather_reviews
from council.models import (
    CRITICAL_FAILURE,
    HALTED_BY_USER,
    Attachment,
    CouncilRequest,
    CouncilTurn,
    Stage,
)
from council.personas import PersonaRegistry
from council.providers.gateway import ModelGateway
from council.synthesis import synthesize

logger = logging.getLogger(__name__)

OnUpdate = Callable[[CouncilTurn], None]


@dataclass
class TurnHandle:
    """Owned handle for the in-flight turn. Once its token is cancelled it can no longer write."""

    turn: CouncilTurn
    request: CouncilRequest
    token: CancellationToken = field(default_factory=CancellationToken)
    task: asyncio.Task | None = None


class CouncilSession:
    """One conversation: a list of turns, at most one of them in flight."""

    def __init__(
        self,
        gateway: ModelGateway,
        registry: PersonaRegistry,
        chairman: ChairmanConfig,
        prompts: PromptsConfig,
        on_update: OnUpdate | None = None,
    ) -> None:
        self._gateway = gateway
        self._registry = registry
        self._chairman = chairman
        self._prompts = prompts
        self._on_update = on_update
        self._active: TurnHandle | None = None
        self.turns: list[CouncilTurn] = []

    @property
    def busy(self) -> bool:
        return self._active is not None and not self._active.turn.finished

    async def submit(
        self,
        query_text: str,
        attachment: Attachment | None = None,
        simplify: bool = False,
    ) -> CouncilTurn:
        """Run a full deliberation for a new user submission.

        Any turn still in flight is superseded first: it is finished as halted
        and nothing it produces afterwards is applied.

        Raises:
            ValueError: If there is neither query text nor an attachment.
        """
        request = build_request(query_text, attachment)
        if self.cancel():
            logger.info("Previous turn superseded by new submission")

        turn = CouncilTurn(query=request.display_prompt, simplify=simplify)
        self.turns.append(turn)
        handle = TurnHandle(turn=turn, request=request)
        self._active = handle
        self._publish(handle)

        handle.task = asyncio.create_task(self._deliberate(handle))
        try:
            await handle.task
        except asyncio.CancelledError:
            if not handle.token.cancelled:
                raise
        finally:
            if self._active is handle:
                self._active = None
        return turn

    def cancel(self) -> bool:
        """Halt the in-flight turn, if any. Returns True if a turn was halted."""
        handle = self._active
        if handle is None or handle.turn.finished:
            return False
        self._finish(handle, error=HALTED_BY_USER)
        handle.token.cancel()
        if handle.task is not None and not handle.task.done():
            handle.task.cancel()
        self._active = None
        logger.info("Turn %s halted by user", handle.turn.id[:8])
        return True

    async def _deliberate(self, handle: TurnHandle) -> None:
        request = handle.request
        turn = handle.turn
        try:
            self._update(handle, stage=Stage.GATHERING_OPINIONS)
            opinions = await gather_opinions(
                request.prompt, self._gateway, self._registry, request.document, handle.token
            )
            self._update(handle, opinions=tuple(opinions))

            self._update(handle, stage=Stage.GATHERING_REVIEWS)
            reviews = await gather_reviews(
                request.prompt,
                opinions,
                self._gateway,
                self._registry,
                self._prompts,
                request.document,
                handle.token,
            )
            self._update(handle, reviews=tuple(reviews))

            self._update(handle, stage=Stage.SYNTHESIZING)
            final_text = await synthesize(
                request.prompt,
                opinions,
                reviews,
                self._gateway,
                self._registry,
                self._chairman,
                self._prompts,
                document=request.document,
                simplify=turn.simplify,
                token=handle.token,
            )
            self._update(handle, final_text=final_text, stage=Stage.FINISHED)
            logger.info("Turn %s finished", turn.id[:8])
        except TurnCancelled:
            logger.debug("Turn %s stopped after cancellation", turn.id[:8])
        except asyncio.CancelledError:
            if not handle.token.cancelled:
                self._finish(handle, error=HALTED_BY_USER)
            raise
        except Exception:
            if handle.token.cancelled:
                return
            logger.exception("Council deliberation failed for turn %s", turn.id[:8])
            self._finish(handle, error=CRITICAL_FAILURE)

    def _update(self, handle: TurnHandle, **changes) -> None:
        handle.token.raise_if_cancelled()
        turn = handle.turn
        new_stage = changes.get("stage")
        if new_stage is not None and new_stage.order < turn.stage.order:
            raise RuntimeError(f"Stage cannot move back from {turn.stage.value} to {new_stage.value}")
        for key, value in changes.items():
            setattr(turn, key, value)
        if new_stage is not None:
            logger.debug("Turn %s -> %s", turn.id[:8], new_stage.value)
        self._publish(handle)

    def _finish(self, handle: TurnHandle, error: str) -> None:
        turn = handle.turn
        if turn.finished:
            return
        turn.stage = Stage.FINISHED
        turn.error = error
        self._publish(handle)

    def _publish(self, handle: TurnHandle) -> None:
        if self._on_update is not None:
            self._on_update(handle.turn.snapshot())
