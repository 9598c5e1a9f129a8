"""Dataclasses for the council deliberation pipeline. No logic beyond snapshots."""

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum

HALTED_BY_USER = "DELIBERATION_HALTED_BY_USER"
CRITICAL_FAILURE = "CRITICAL_SYSTEM_FAILURE: DELIBERATION_ABORTED"


class Stage(str, Enum):
    NOT_STARTED = "not_started"
    GATHERING_OPINIONS = "gathering_opinions"
    GATHERING_REVIEWS = "gathering_reviews"
    SYNTHESIZING = "synthesizing"
    FINISHED = "finished"

    @property
    def order(self) -> int:
        return list(Stage).index(self)


class AttachmentKind(str, Enum):
    TEXT = "text"
    BINARY = "binary"  # base64 payload, sent inline to the model


@dataclass(frozen=True)
class Persona:
    id: str
    name: str
    style: str
    model: str
    instruction: str
    color: str = "white"


@dataclass(frozen=True)
class Opinion:
    persona_id: str
    content: str


@dataclass(frozen=True)
class Review:
    reviewer_id: str
    content: str


@dataclass(frozen=True)
class Attachment:
    name: str
    content: str
    kind: AttachmentKind


@dataclass(frozen=True)
class InlineDocument:
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class CouncilRequest:
    prompt: str            # text actually sent to every stage
    display_prompt: str    # what the chat shows for the user message
    document: InlineDocument | None = None


@dataclass
class ModelResponse:
    provider: str          # "gemini", "anthropic", "openai"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None


@dataclass
class CouncilTurn:
    query: str
    simplify: bool = False
    stage: Stage = Stage.NOT_STARTED
    opinions: tuple[Opinion, ...] = ()
    reviews: tuple[Review, ...] = ()
    final_text: str = ""
    error: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)

    @property
    def finished(self) -> bool:
        return self.stage is Stage.FINISHED

    def snapshot(self) -> "CouncilTurn":
        """Independent copy handed to the presentation layer."""
        return replace(self)
