"""safechat CLI — a terminal front-end for the safety-gated chat."""

import asyncio
import logging

import click
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from safechat import __version__
from safechat.config import AppConfig, ConfigError, SafetyConfig, load_config
from safechat.conversation import (
    ConversationOrchestrator,
    ErrorKind,
    OrchestrationError,
    Role,
)
from safechat.llm import CONVERSATION_STARTERS, LLMClient
from safechat.safety import SafetyCheckError, SafetyGate, describe_block

console = Console()

SAFETY_ERROR_MESSAGE = "Error checking message safety. Please try again."
COMPLETION_ERROR_MESSAGE = "An error occurred. Please try again."

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML config file (environment variables take precedence)",
)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """safechat — chat with an assistant behind a content-safety gate.

    Every message is screened for prompt-injection attempts and harmful
    content before it is sent to the model.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ── Wiring ───────────────────────────────────────────────────────────


def _load(config_path: str | None) -> AppConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))


def _build_gate(config: SafetyConfig) -> SafetyGate:
    return SafetyGate(config)


def _build_orchestrator(config: AppConfig) -> ConversationOrchestrator:
    try:
        engine = LLMClient(config.completion)
    except ConfigError as e:
        raise click.ClickException(str(e))
    return ConversationOrchestrator(_build_gate(config.safety), engine)


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@_config_option
def check(text: str, config_path: str | None):
    """Run only the safety gate over TEXT and show the verdict."""
    if not text.strip():
        raise click.BadParameter("must not be blank", param_hint="TEXT")
    gate = _build_gate(_load(config_path).safety)

    try:
        decision = asyncio.run(gate.evaluate(text))
    except SafetyCheckError as e:
        console.print(f"[red]{SAFETY_ERROR_MESSAGE}[/] ({e.reason.value})")
        raise SystemExit(1)

    table = Table(title="Safety check")
    table.add_column("Check", style="cyan")
    table.add_column("Result", justify="right")
    table.add_row("Prompt shield", "[red]attack[/]" if decision.attack_detected else "[green]clear[/]")
    for category, severity in decision.category_severities.items():
        style = "red" if severity > 0 else "green"
        table.add_row(category.value, f"[{style}]{severity}[/]")
    console.print(table)

    if decision.blocked:
        console.print(f"[yellow]{describe_block(decision.reasons)}[/]")
        raise SystemExit(2)
    console.print("[green]Message allowed.[/]")


# ── Chat ─────────────────────────────────────────────────────────────


@main.command()
@_config_option
def chat(config_path: str | None):
    """Start an interactive chat session.

    Commands: /starter N, /history, /delete N, /quit.

    /starter N adds a conversation starter to the draft shown in the next
    prompt; press Enter to send it or type a replacement.
    """
    orchestrator = _build_orchestrator(_load(config_path))
    asyncio.run(_chat_loop(orchestrator))


def _print_starters() -> None:
    console.print("[dim]Try one of these (type /starter N):[/]")
    for i, starter in enumerate(CONVERSATION_STARTERS, start=1):
        console.print(f"  [cyan]{i}[/] {starter}")


def _print_history(orchestrator: ConversationOrchestrator) -> None:
    transcript = orchestrator.transcript
    if not transcript:
        console.print("[dim]No messages yet.[/]")
        return
    for i, message in enumerate(transcript):
        who = "[bold green]You[/]" if message.role is Role.USER else "[bold blue]Assistant[/]"
        console.print(f"[dim]{i}[/] {who}")
        console.print(Markdown(message.content))


async def _send(orchestrator: ConversationOrchestrator, text: str) -> None:
    try:
        result = await orchestrator.submit(text)
    except OrchestrationError as e:
        if e.kind is ErrorKind.SAFETY_UNAVAILABLE:
            console.print(f"[red]{SAFETY_ERROR_MESSAGE}[/]")
        else:
            console.print(f"[red]{COMPLETION_ERROR_MESSAGE}[/]")
        return
    if result is None:
        return
    if result.blocked:
        console.print(Panel(describe_block(result.reasons), title="Blocked", border_style="yellow"))
        return

    console.print("[bold blue]Assistant[/]")
    try:
        with Live(console=console, refresh_per_second=12) as live:
            async for transcript in result.updates:
                live.update(Markdown(transcript[-1].content))
    except OrchestrationError as e:
        if e.kind is ErrorKind.COMPLETION_FAILURE:
            console.print(f"[red]{COMPLETION_ERROR_MESSAGE}[/]")
        else:
            raise


async def _chat_loop(orchestrator: ConversationOrchestrator) -> None:
    console.print(f"\n[bold blue]safechat[/] {__version__}\n")
    _print_starters()
    draft = ""

    while True:
        try:
            line = click.prompt("You", prompt_suffix="> ", default=draft, show_default=bool(draft))
        except click.Abort:
            break
        command, _, arg = line.strip().partition(" ")

        if command == "/quit":
            break
        if command == "/history":
            _print_history(orchestrator)
            continue
        if command == "/delete":
            try:
                removed = orchestrator.delete(int(arg))
            except (ValueError, IndexError):
                console.print(f"[red]No message at position:[/] {arg}")
                continue
            console.print(f"[dim]Deleted {removed.role.value} message.[/]")
            continue
        if command == "/starter":
            index = int(arg) if arg.isdigit() else 0
            if not 1 <= index <= len(CONVERSATION_STARTERS):
                console.print(f"[red]Unknown starter:[/] {arg}")
                continue
            draft = f"{draft} {CONVERSATION_STARTERS[index - 1]}".strip()
            console.print("[dim]Press Enter to send the draft, or type a new message.[/]")
            continue

        draft = ""
        if not line.strip():
            continue
        await _send(orchestrator, line)
