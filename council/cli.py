"""Click CLI — terminal chat front end for the council session."""

import asyncio
import logging
import signal
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from config.config_loader import AppConfig, load_config
from council.attachments import load_attachment
from council.healthcheck import check_council, council_models
from council.models import Attachment, CouncilTurn
from council.output import TurnPresenter, console, save_to_file
from council.personas import PersonaRegistry
from council.providers.gateway import ModelGateway, build_gateway
from council.session import CouncilSession

logger = logging.getLogger(__name__)


@dataclass
class ChatState:
    simplify: bool = False
    attachment: Attachment | None = None
    quit: bool = False


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _missing_models(config: AppConfig, registry: PersonaRegistry, gateway: ModelGateway) -> list[str]:
    """Model keys the council needs but the gateway cannot serve."""
    available = gateway.providers
    return sorted(m for m in council_models(registry, config.chairman) if m not in available)


def _check_council(
    runner: asyncio.Runner,
    gateway: ModelGateway,
    registry: PersonaRegistry,
    config: AppConfig,
) -> None:
    """Ping the council's models, print results, and ask the user what to do on failures."""
    console.print("\n[bold]Checking council models...[/bold]")
    readiness = runner.run(check_council(gateway, registry, config.chairman))

    for model_id in sorted(readiness.checks):
        check = readiness.checks[model_id]
        if check.ok:
            console.print(f"  [green]OK  [/green] {model_id}")
        else:
            short_err = check.error.splitlines()[0][:120] if check.error else "unknown error"
            console.print(f"  [red]FAIL[/red] {model_id}: {short_err}")

    if readiness.ready:
        console.print()
        return

    if not readiness.usable:
        console.print("\n[bold red]Error:[/bold red] None of the council's models passed the health check.")
        sys.exit(1)

    for warning in readiness.warnings(registry, config.chairman):
        console.print(f"[yellow]{warning}[/yellow]")
    if not click.confirm("Continue anyway?", default=True):
        sys.exit(0)
    console.print()


def _save_dir(config: AppConfig, save: bool, output_path: str | None) -> Path | None:
    """Where finished turns are written, or None when saving is off."""
    if output_path:
        return Path(output_path)
    return config.defaults.output_dir if save else None


def _apply_command(line: str, state: ChatState) -> str:
    """Handle a /command typed at the chat prompt. Returns the message to show."""
    command, _, arg = line.strip().partition(" ")
    arg = arg.strip()
    if command in ("/quit", "/exit"):
        state.quit = True
        return "Council adjourned."
    if command == "/simple":
        state.simplify = not state.simplify
        return f"Simplified answers {'on' if state.simplify else 'off'}."
    if command == "/attach":
        if not arg:
            return "Usage: /attach PATH"
        try:
            state.attachment = load_attachment(Path(arg).expanduser())
        except (FileNotFoundError, OSError) as exc:
            return f"Could not attach file: {exc}"
        return f"Attached {state.attachment.name} ({state.attachment.kind.value})."
    if command == "/detach":
        state.attachment = None
        return "Attachment removed."
    return f"Unknown command: {command} (try /simple, /attach PATH, /detach, /quit)"


async def _run_turn(
    session: CouncilSession,
    question: str,
    attachment: Attachment | None,
    simplify: bool,
) -> CouncilTurn:
    """Submit one question; Ctrl-C while it runs halts the deliberation."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, session.cancel)
        installed = True
    except (NotImplementedError, RuntimeError):
        installed = False
    try:
        return await session.submit(question, attachment=attachment, simplify=simplify)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _chat(
    runner: asyncio.Runner,
    session: CouncilSession,
    registry: PersonaRegistry,
    state: ChatState,
    save_dir: Path | None,
) -> None:
    """Interactive loop. Every question runs on the same event loop."""
    console.print("[dim]Type a question, or /simple, /attach PATH, /detach, /quit.[/dim]")
    while not state.quit:
        try:
            line = click.prompt("\nYou", default="", show_default=False)
        except (click.Abort, EOFError):
            break
        if line.strip().startswith("/"):
            console.print(f"[dim]{_apply_command(line, state)}[/dim]")
            continue
        if not line.strip() and state.attachment is None:
            continue
        turn = runner.run(_run_turn(session, line, state.attachment, state.simplify))
        state.attachment = None
        if save_dir is not None:
            console.print(f"[dim]Saved to: {save_to_file(turn, registry, save_dir)}[/dim]")


@click.command()
@click.argument("question", required=False)
@click.option("--attach", "attach_path", type=click.Path(exists=True, dir_okay=False),
              help="Attach a text or PDF file to the (first) question")
@click.option("--simple", "simplify", is_flag=True, default=None,
              help="Ask the Chairman for a simplified, jargon-free answer")
@click.option("--save", is_flag=True, help="Save each finished turn as markdown (to defaults.output_dir)")
@click.option("--output", "output_path", default=None, help="Save transcripts to this directory instead")
@click.option("--full", "full_text", is_flag=True, help="Show full opinions and reviews instead of previews")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def main(
    question: str | None,
    attach_path: str | None,
    simplify: bool | None,
    save: bool,
    output_path: str | None,
    full_text: bool,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """AI Council -- four personas debate, a Chairman rules.

    \b
    Examples:
      ai-council "Should a startup build or buy its data pipeline?"
      ai-council "Summarise the risks" --attach report.pdf --simple
      ai-council            # interactive chat
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    registry = PersonaRegistry.from_config(config.personas)
    gateway = build_gateway(config)
    if not gateway.providers:
        console.print("[bold red]Error:[/bold red] No models available. Check API keys in .env.")
        sys.exit(1)

    state = ChatState(simplify=config.defaults.simplify if simplify is None else simplify)
    if attach_path:
        state.attachment = load_attachment(Path(attach_path))
    effective_save = _save_dir(config, save, output_path)

    with asyncio.Runner() as runner:
        if not skip_health_check:
            _check_council(runner, gateway, registry, config)
        else:
            missing = _missing_models(config, registry, gateway)
            if missing:
                console.print(f"[yellow]Unavailable models:[/yellow] {', '.join(missing)}")

        presenter = TurnPresenter(registry, full=full_text)
        session = CouncilSession(
            gateway, registry, config.chairman, config.prompts, on_update=presenter.on_update
        )

        console.print(f"\n[bold cyan]AI Council[/bold cyan] — {', '.join(p.name for p in registry)}")
        console.print(f"Chairman: {config.chairman.name} ({config.chairman.model})\n")

        if question is None and state.attachment is None:
            _chat(runner, session, registry, state, effective_save)
            return

        turn = runner.run(_run_turn(session, question or "", state.attachment, state.simplify))

    if effective_save is not None:
        console.print(f"\n[dim]Saved to: {save_to_file(turn, registry, effective_save)}[/dim]")
    if turn.error:
        sys.exit(1)


if __name__ == "__main__":
    main()
