"""World loader service for reading worlds from YAML/JSON files.

This service parses a world file, validates it against ``WorldTemplate``
and reports what it contains. Individual malformed actions do not fail a
load; they become ``UnknownAction`` entries that are skipped at run time.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from somnium.world.actions import ActionBase, ScheduleAction, UnknownAction
from somnium.world.schemas import EventDefinition, WorldTemplate

logger = logging.getLogger(__name__)

BUNDLED_WORLDS_PACKAGE = "somnium.data"


class WorldLoadError(Exception):
    """Error during world loading."""

    pass


def parse_world_data(data: Any, source: str = "<data>") -> WorldTemplate:
    """Validate already-parsed world data.

    Raises:
        WorldLoadError: If the data does not describe a valid world.
    """
    if not isinstance(data, dict):
        raise WorldLoadError(f"{source}: expected a mapping at the top level")
    try:
        template = WorldTemplate.model_validate(data)
    except ValidationError as e:
        raise WorldLoadError(f"Invalid world template in {source}: {e}") from e

    unknown = count_unknown_actions(template)
    if unknown:
        logger.warning(f"{source}: {unknown} action(s) could not be understood and will be skipped")
    return template


def load_world(file_path: Path | str) -> WorldTemplate:
    """Load a world from a YAML or JSON file.

    Args:
        file_path: Path to a .yaml, .yml or .json file.

    Returns:
        The validated world template.

    Raises:
        WorldLoadError: If the file cannot be read, parsed or validated.
        FileNotFoundError: If the file does not exist.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"World file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in (".yaml", ".yml", ".json"):
        raise WorldLoadError(f"Unsupported file format: {suffix}. Use .yaml, .yml, or .json")

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise WorldLoadError(f"Failed to parse {file_path}: {e}") from e

    template = parse_world_data(data, source=str(file_path))
    logger.info(f"Loaded world '{template.metadata.title}' from {file_path}")
    return template


def load_bundled_world(name: str = "tutorial") -> WorldTemplate:
    """Load a world shipped inside the package (``somnium/data/<name>.yaml``)."""
    resource = resources.files(BUNDLED_WORLDS_PACKAGE).joinpath(f"{name}.yaml")
    if not resource.is_file():
        raise WorldLoadError(f"No bundled world named '{name}'")
    try:
        data = yaml.safe_load(resource.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise WorldLoadError(f"Failed to parse bundled world '{name}': {e}") from e
    return parse_world_data(data, source=f"bundled:{name}")


def _all_events(template: WorldTemplate) -> list[EventDefinition]:
    events = list(template.global_events)
    for room in template.rooms:
        events.extend(room.events)
    for thing in (*template.objects, *template.items, *template.npcs):
        events.extend(thing.events)
    return events


def count_unknown_actions(template: WorldTemplate) -> int:
    """Number of actions that were coerced to ``UnknownAction``."""
    action_lists = [event.actions for event in _all_events(template)]
    for puzzle in template.puzzles:
        action_lists.extend([puzzle.reward, puzzle.failure_consequence, puzzle.reset_actions])
        action_lists.extend(step.reward for step in puzzle.steps)
    return sum(_count_unknown(actions) for actions in action_lists)


def _count_unknown(actions: list[ActionBase]) -> int:
    count = 0
    for action in actions:
        if isinstance(action, ScheduleAction):
            count += _count_unknown([action.action])
        elif isinstance(action, UnknownAction):
            count += 1
    return count


def summarize_world(template: WorldTemplate) -> dict[str, Any]:
    """Counts of everything a world defines."""
    return {
        "title": template.metadata.title,
        "author": template.metadata.author,
        "start_room": template.start_room,
        "rooms": len(template.rooms),
        "objects": len(template.objects),
        "items": len(template.items),
        "npcs": len(template.npcs),
        "events": len(_all_events(template)),
        "puzzles": len(template.puzzles),
        "achievements": len(template.achievements),
        "endings": len(template.endings),
        "max_score": template.progression.max_score,
        "unknown_actions": count_unknown_actions(template),
    }
