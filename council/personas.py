"""Fixed, ordered table of council personas."""

from collections.abc import Iterable, Iterator

from council.models import Persona

_FORMAT_RULES = (
    "Format your response cleanly using Markdown. "
    "Do not use emojis, decorative symbols, or non-standard punctuation."
)

DEFAULT_PERSONAS: tuple[Persona, ...] = (
    Persona(
        id="logic",
        name="The Analyst",
        style="Analytical, data-driven, and precise.",
        model="gemini-2.5-flash",
        color="blue",
        instruction=(
            "You are The Analyst. Your goal is to provide a strictly logical, fact-based answer. "
            "Focus on structure, data, and correctness. " + _FORMAT_RULES
        ),
    ),
    Persona(
        id="creative",
        name="The Visionary",
        style="Creative, abstract, and out-of-the-box.",
        model="gemini-2.5-flash",
        color="magenta",
        instruction=(
            "You are The Visionary. Your goal is to think laterally. Provide creative solutions, "
            'metaphors, and explore the "what if". ' + _FORMAT_RULES + " Avoid excessive fluff."
        ),
    ),
    Persona(
        id="skeptic",
        name="The Skeptic",
        style="Critical, cautious, and risk-aware.",
        model="gemini-2.5-flash",
        color="dark_orange",
        instruction=(
            "You are The Skeptic. Your goal is to find flaws, risks, and edge cases. "
            "Challenge assumptions. Play devil's advocate against the user's premise if necessary. "
            + _FORMAT_RULES
        ),
    ),
    Persona(
        id="pragmatist",
        name="The Pragmatist",
        style="Practical, realistic, and solution-oriented.",
        model="gemini-2.5-flash",
        color="green",
        instruction=(
            "You are The Pragmatist. Your goal is to focus on feasibility, real-world implementation, "
            "and compromise. What actually works in practice? Avoid overly theoretical or idealistic "
            "solutions. " + _FORMAT_RULES
        ),
    ),
)


class PersonaRegistry:
    """Read-only, ordered lookup of personas by key."""

    def __init__(self, personas: Iterable[Persona] = DEFAULT_PERSONAS) -> None:
        self._personas = tuple(personas)
        self._by_id = {p.id: p for p in self._personas}
        if len(self._by_id) != len(self._personas):
            raise ValueError("Persona ids must be unique")

    def __iter__(self) -> Iterator[Persona]:
        return iter(self._personas)

    def __len__(self) -> int:
        return len(self._personas)

    def __contains__(self, persona_id: object) -> bool:
        return persona_id in self._by_id

    def get(self, persona_id: str) -> Persona:
        return self._by_id[persona_id]

    def ids(self) -> list[str]:
        return [p.id for p in self._personas]

    def display_name(self, persona_id: str) -> str:
        persona = self._by_id.get(persona_id)
        return persona.name if persona else persona_id

    @classmethod
    def from_config(cls, personas: list[Persona]) -> "PersonaRegistry":
        """Registry from configured personas, falling back to the built-in four."""
        return cls(personas) if personas else cls()
