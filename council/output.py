"""Rich console rendering of council turns and markdown transcript export."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from council.models import CouncilTurn, Stage
from council.personas import PersonaRegistry

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_STAGE_LABELS = {
    Stage.GATHERING_OPINIONS: "Stage 1: gathering council opinions...",
    Stage.GATHERING_REVIEWS: "Stage 2: council members reviewing each other...",
    Stage.SYNTHESIZING: "Stage 3: the Chairman is deliberating...",
}


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len] or "council"


def _preview(content: str, words: int = 80) -> str:
    """Return first N words of a response."""
    all_words = content.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


class TurnPresenter:
    """Progressively renders turn snapshots as the session publishes them.

    Each section (opinions, reviews, ruling) is printed once, the first time
    a snapshot carries it.
    """

    def __init__(self, registry: PersonaRegistry, out: Console = console, full: bool = False) -> None:
        self._registry = registry
        self._console = out
        self._full = full
        self._printed: dict[str, set[str]] = {}

    def _once(self, turn_id: str, section: str) -> bool:
        done = self._printed.setdefault(turn_id, set())
        if section in done:
            return False
        done.add(section)
        return True

    def on_update(self, turn: CouncilTurn) -> None:
        label = _STAGE_LABELS.get(turn.stage)
        if label and self._once(turn.id, turn.stage.value):
            self._console.print(Text(label, style="dim"))
        if turn.opinions and self._once(turn.id, "opinions"):
            self.print_opinions(turn)
        if turn.reviews and self._once(turn.id, "reviews"):
            self.print_reviews(turn)
        if turn.finished and self._once(turn.id, "finished"):
            self.print_outcome(turn)

    def _body(self, content: str):
        return Markdown(content) if self._full else Text(_preview(content))

    def print_opinions(self, turn: CouncilTurn) -> None:
        self._console.print(Rule("[bold cyan]Council Opinions[/bold cyan]"))
        for opinion in turn.opinions:
            persona = self._registry.get(opinion.persona_id)
            self._console.print(
                Panel(
                    self._body(opinion.content),
                    title=f"[bold {persona.color}]{persona.name}[/bold {persona.color}]",
                    subtitle=persona.style,
                    border_style=persona.color,
                )
            )

    def print_reviews(self, turn: CouncilTurn) -> None:
        self._console.print(Rule("[bold cyan]Peer Reviews[/bold cyan]"))
        for review in turn.reviews:
            persona = self._registry.get(review.reviewer_id)
            self._console.print(
                Panel(
                    self._body(review.content),
                    title=f"Review by [bold]{persona.name}[/bold]",
                    border_style="dim",
                )
            )

    def print_outcome(self, turn: CouncilTurn) -> None:
        if turn.error:
            self._console.print(f"[bold red]{turn.error}[/bold red]")
            return
        title = "Chairman's Ruling (simplified)" if turn.simplify else "Chairman's Ruling"
        self._console.print(Rule(f"[bold green]{title}[/bold green]"))
        self._console.print(Markdown(turn.final_text))


def render_transcript(turn: CouncilTurn, registry: PersonaRegistry) -> str:
    """Format a turn as a markdown document."""
    lines: list[str] = [
        f"# AI Council: {turn.query[:80]}",
        "",
        f"**Date:** {datetime.fromtimestamp(turn.created_at).strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Council:** {', '.join(p.name for p in registry)}",
        f"**Mode:** {'simplified' if turn.simplify else 'standard'}",
        f"**Status:** {turn.error or turn.stage.value}",
        "",
        "---",
        "",
        "## Query",
        "",
        turn.query,
        "",
    ]

    if turn.opinions:
        lines += ["## Stage 1: Opinions", ""]
        for opinion in turn.opinions:
            lines += [f"### {registry.display_name(opinion.persona_id)}", "", opinion.content, ""]

    if turn.reviews:
        lines += ["## Stage 2: Peer Reviews", ""]
        for review in turn.reviews:
            lines += [f"### Review by {registry.display_name(review.reviewer_id)}", "", review.content, ""]

    if turn.final_text:
        lines += ["## Stage 3: Chairman's Ruling", "", turn.final_text, ""]

    return "\n".join(lines)


def save_to_file(turn: CouncilTurn, registry: PersonaRegistry, output_dir: Path) -> Path:
    """Save the turn transcript as a markdown file. Returns the saved path."""
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = output_dir / f"{timestamp}_{_slug(turn.query)}.md"
    filepath.write_text(render_transcript(turn, registry), encoding="utf-8")
    logger.info("Transcript saved to: %s", filepath)
    return filepath
