"""Main CLI application for the somnium engine."""

import json
from pathlib import Path
from typing import Optional

import typer

from somnium.cli.display import (
    configure_logging,
    display_error,
    display_info,
    display_messages,
    display_parse_result,
    display_success,
    display_welcome,
    display_world_summary,
    prompt_input,
)
from somnium.config import get_settings
from somnium.engine.game_engine import GameEngine
from somnium.parser.command_parser import CommandParser
from somnium.services.world_loader import (
    WorldLoadError,
    load_bundled_world,
    load_world,
    summarize_world,
)
from somnium.world.schemas import WorldTemplate
from somnium.world.state import WorldState

app = typer.Typer(
    name="somnium",
    help="A text-adventure engine: parse commands, run scripted worlds",
    add_completion=True,
)

DEFAULT_SAVE_FILE = Path("somnium_save.json")


def _load(world: Optional[Path]) -> WorldTemplate:
    """Load the given world, the configured one, or the bundled tutorial."""
    path = world or (Path(get_settings().world_file) if get_settings().world_file else None)
    try:
        if path is None:
            return load_bundled_world("tutorial")
        return load_world(path)
    except (WorldLoadError, FileNotFoundError) as e:
        display_error(str(e))
        raise typer.Exit(1)


@app.command()
def play(
    world: Optional[Path] = typer.Option(None, "--world", "-w", help="World file (.yaml/.json)"),
    save_file: Path = typer.Option(DEFAULT_SAVE_FILE, "--save-file", help="Where SAVE and LOAD keep the game"),
) -> None:
    """Play a world interactively."""
    template = _load(world)
    engine = GameEngine(template)

    display_welcome(template.metadata.title)
    display_info("Type HELP for commands, QUIT to leave.")
    display_messages(engine.start())

    while True:
        display_messages(engine.tick())
        try:
            text = prompt_input()
        except (EOFError, KeyboardInterrupt):
            display_info("Goodbye.")
            break
        if not text.strip():
            continue

        turn = engine.process_input(text)
        display_messages(turn.messages)

        if turn.request == "quit":
            display_info("Thanks for playing!")
            break
        elif turn.request == "restart":
            engine = GameEngine(template)
            display_info("Restarting game...")
            display_messages(engine.start())
        elif turn.request == "save":
            save_file.write_text(json.dumps(engine.snapshot().model_dump(mode="json"), indent=2), encoding="utf-8")
            display_success(f"Game saved to {save_file}.")
        elif turn.request == "load":
            if not save_file.exists():
                display_error(f"No saved game at {save_file}")
                continue
            engine.restore(json.loads(save_file.read_text(encoding="utf-8")))
            display_success("Game restored.")
            display_messages(engine.start())

        if turn.ending is not None:
            display_info("Type RESTART to play again or QUIT to leave.")


@app.command()
def parse(
    text: str = typer.Argument(..., help="Command text to parse"),
    world: Optional[Path] = typer.Option(None, "--world", "-w", help="World file for object resolution"),
) -> None:
    """Show the structured command for a line of input, resolved in the start room."""
    template = _load(world)
    scene = WorldState(template).scene()
    result, _ = CommandParser().parse(text, scene)
    display_parse_result(result)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def check(
    world: Path = typer.Argument(..., help="World file to validate"),
) -> None:
    """Load a world file and summarize what it defines."""
    template = _load(world)
    display_world_summary(summarize_world(template))
    display_success("World is valid.")


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Show debug logging"),
) -> None:
    """Somnium - a text-adventure engine.

    Use 'somnium play' to start the bundled tutorial.
    """
    settings = get_settings()
    configure_logging(settings.log_level, debug or settings.debug)


if __name__ == "__main__":
    app()
