"""Rich display helpers for CLI output."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from somnium.engine.messages import GameMessage, MessageKind
from somnium.world.commands import Command, ObjectReference, ParseResult


# Shared console instance
console = Console()

MESSAGE_STYLES: dict[MessageKind, str] = {
    MessageKind.NARRATIVE: "",
    MessageKind.ERROR: "bold red",
    MessageKind.SYSTEM: "dim",
    MessageKind.ACHIEVEMENT: "bold yellow",
    MessageKind.HINT: "italic cyan",
}


def configure_logging(level: str = "WARNING", debug: bool = False) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level="DEBUG" if debug else level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=debug)],
        force=True,
    )


def display_welcome(title: str) -> None:
    """Display the world title in a banner."""
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", style="cyan"))
    console.print()


def display_message(message: GameMessage) -> None:
    """Display one engine message styled by its kind.

    Args:
        message: Message to display.
    """
    style = MESSAGE_STYLES.get(message.kind, "")
    if message.kind == MessageKind.ACHIEVEMENT:
        console.print(Panel(message.text, border_style="yellow", expand=False))
    elif style:
        console.print(message.text, style=style, markup=False, highlight=False)
    else:
        console.print(message.text, markup=False, highlight=False)


def display_messages(messages: list[GameMessage]) -> None:
    for message in messages:
        display_message(message)


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def display_success(message: str) -> None:
    console.print(f"[bold green]{message}[/bold green]")


def display_info(message: str) -> None:
    console.print(f"[dim]{message}[/dim]")


def _reference_text(reference: ObjectReference | None) -> str:
    return str(reference) if reference is not None else "-"


def display_command(command: Command) -> None:
    """Show the structured form of a parsed command."""
    table = Table(title="Command", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("verb", command.verb)
    table.add_row("direct object", _reference_text(command.direct_object))
    table.add_row("preposition", command.preposition or "-")
    table.add_row("indirect object", _reference_text(command.indirect_object))
    table.add_row("modifiers", ", ".join(command.modifiers) or "-")
    console.print(table)


def display_parse_result(result: ParseResult) -> None:
    if result.success and result.command is not None:
        display_command(result.command)
        return
    kind = result.error.value if result.error else "error"
    display_error(f"[{kind}] {result.message}")
    if result.candidates:
        display_info("Candidates: " + ", ".join(f"{c.name} ({c.id})" for c in result.candidates))


def display_world_summary(summary: dict) -> None:
    """Display counts of everything a world defines.

    Args:
        summary: Output of ``summarize_world``.
    """
    table = Table(title=summary.get("title", "World"))
    table.add_column("Section", style="cyan")
    table.add_column("Count", justify="right")
    for key in ("rooms", "objects", "items", "npcs", "events", "puzzles", "achievements", "endings"):
        table.add_row(key, str(summary.get(key, 0)))
    table.add_row("max score", str(summary.get("max_score", 0)))
    console.print(table)

    if summary.get("unknown_actions"):
        console.print(
            f"[yellow]{summary['unknown_actions']} action(s) are not understood and will be skipped.[/yellow]"
        )


def prompt_input(prompt: str = "> ") -> str:
    """Get input from user with styled prompt.

    Args:
        prompt: Prompt string.

    Returns:
        User input.
    """
    return console.input(f"[bold cyan]{prompt}[/bold cyan]")
