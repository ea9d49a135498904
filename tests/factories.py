"""Factory functions for building test worlds with sensible defaults."""

from copy import deepcopy
from typing import Any

from somnium.world.schemas import WorldTemplate


SAMPLE_WORLD: dict[str, Any] = {
    "metadata": {"title": "Test Manor", "author": "Tests"},
    "start_room": "hall",
    "initial_flags": {"gate_open": False},
    "rooms": [
        {
            "id": "hall",
            "name": "Great Hall",
            "description": "A vast hall with a cold fireplace.",
            "exits": {
                "north": "library",
                "east": {"room": "vault", "locked": True, "locked_message": "The vault door is locked."},
                "west": {"room": "garden", "condition": "gate_open", "blocked_message": "The gate is shut."},
                "up": {"room": "attic", "requires_item": "lamp", "item_message": "It's too dark to climb."},
                "down": {"room": "cellar", "enabled": False},
            },
            "objects": ["desk", "painting", "vault_door"],
            "items": ["rk1", "bk1", "lamp"],
            "npcs": ["guard"],
            "events": [
                {
                    "id": "ring_bell",
                    "trigger": {"verb": "push", "object": "desk"},
                    "response": "A bell rings somewhere.",
                    "actions": [{"type": "SET_FLAG", "flag": "bell_rung", "value": True}],
                },
            ],
        },
        {
            "id": "library",
            "name": "Library",
            "description": "Dusty shelves reach the ceiling.",
            "exits": {"south": "hall"},
            "objects": ["bookshelf"],
            "events": [
                {
                    "name": "enter_room",
                    "actions": [{"type": "SHOW_MESSAGE", "text": "Books whisper as you enter."}],
                },
            ],
        },
        {"id": "vault", "name": "Vault", "description": "Gold everywhere.", "exits": {"west": "hall"}},
        {
            "id": "garden",
            "name": "Garden",
            "description": "Overgrown roses.",
            "exits": {"east": "hall", "north": "maze"},
        },
        {
            "id": "maze",
            "name": "Hedge Maze",
            "description": "Green walls in every direction.",
            "secret": True,
            "entry_condition": "has_map",
            "entry_blocked_message": "You'd get lost without a map.",
            "exits": {"south": "garden"},
        },
        {"id": "attic", "name": "Attic", "description": "Cobwebs.", "exits": {"down": "hall"}},
        {"id": "cellar", "name": "Cellar", "description": "Damp.", "exits": {"up": "hall"}},
    ],
    "objects": [
        {"id": "desk", "name": "oak desk", "description": "A heavy oak desk."},
        {
            "id": "painting",
            "name": "old painting",
            "description": "A portrait of a stern lady.",
            "events": [
                {
                    "id": "study_painting",
                    "trigger": {"verb": "examine", "object": "painting"},
                    "condition": "not saw_painting",
                    "response": "Her eyes seem to follow you.",
                    "actions": [{"type": "SET_FLAG", "flag": "saw_painting", "value": True}],
                },
            ],
        },
        {"id": "vault_door", "name": "vault door", "description": "Steel, with a keyhole."},
        {"id": "bookshelf", "name": "tall bookshelf", "description": "Full of atlases."},
    ],
    "items": [
        {"id": "rk1", "name": "red key", "description": "A small red key.", "points": 5},
        {"id": "bk1", "name": "blue key", "description": "A small blue key."},
        {"id": "lamp", "name": "brass lamp", "description": "An old lamp."},
        {"id": "map", "name": "treasure map", "description": "X marks the spot."},
    ],
    "npcs": [
        {
            "id": "guard",
            "name": "old guard",
            "description": "He looks tired.",
            "events": [
                {
                    "id": "guard_talk",
                    "trigger": {"verb": "talk", "object": "guard"},
                    "response": "The guard grunts.",
                },
            ],
        },
    ],
    "global_events": [
        {
            "id": "yell_echo",
            "trigger": {"verb": "yell"},
            "response": "Your voice echoes through the manor.",
            "actions": [{"type": "SET_FLAG", "flag": "guard_angry", "value": True}],
        },
        {
            "name": "puzzle_completed",
            "actions": [{"type": "SHOW_MESSAGE", "text": "A distant chime sounds."}],
        },
    ],
    "puzzles": [
        {
            "id": "vault_lock",
            "name": "The Vault Lock",
            "trigger": {"verb": "use", "item": "rk1"},
            "solution": {"verb": "use", "item": "rk1", "target": "vault_door"},
            "hints": ["The door has a keyhole."],
            "points": 30,
            "completion_flag": "vault_open",
            "success_message": "The lock clicks open.",
            "reward": [{"type": "ENABLE_EXIT", "room_id": "hall", "direction": "east"}],
        },
        {
            "id": "safe",
            "name": "The Safe",
            "solution": {"value": "1234"},
            "hints": ["h1", "h2", "h3"],
            "max_attempts": 3,
            "points": 50,
            "completion_flag": "safe_open",
            "reward": [{"type": "REVEAL_ITEM", "item_id": "map"}],
            "failure_consequence": [{"type": "SET_FLAG", "flag": "alarm", "value": True}],
        },
        {
            "id": "two_step",
            "name": "Hidden Passage",
            "steps": [
                {"solution": {"verb": "push", "item": "desk"}, "hints": ["s1a", "s1b"]},
                {
                    "solution": {"verb": "pull", "item": "painting"},
                    "hint": "Now the painting.",
                    "hints": ["s2a"],
                    "success_message": "The painting swings aside.",
                },
            ],
            "points": 20,
            "completion_flag": "secret_found",
        },
    ],
    "achievements": [
        {"id": "score_100", "name": "Centurion", "description": "Reach 100 points."},
        {"id": "score_250", "name": "High Roller"},
        {"id": "first_steps", "name": "First Steps", "points": 10},
        {"id": "happy_end", "name": "Happy End"},
        {"id": "secret_finder", "name": "Secret Finder"},
        {"id": "par_moves", "name": "Speedrunner"},
        {"id": "perfect_score", "name": "Perfect", "hidden": True},
        {"id": "reader", "name": "Bookworm", "progressive": True, "target": 3, "points": 5},
    ],
    "endings": [
        {
            "id": "good",
            "name": "Rich and Happy",
            "text": "You leave the manor a wealthy soul.",
            "priority": 10,
            "achievement": "happy_end",
            "conditions": ["treasure_found", {"type": "score", "operator": ">=", "value": 50}],
        },
        {
            "id": "plain",
            "name": "Treasure Hunter",
            "text": "You found the treasure.",
            "priority": 5,
            "conditions": ["treasure_found"],
        },
        {
            "id": "also_plain",
            "name": "Lucky Find",
            "priority": 5,
            "conditions": ["treasure_found"],
        },
    ],
    "progression": {
        "max_score": 300,
        "win_condition": "treasure_found",
        "failure_conditions": ["guard_angry and caught"],
        "par_moves": 3,
    },
}


def world_data(**overrides: Any) -> dict[str, Any]:
    """A deep copy of the sample world data with top-level overrides."""
    data = deepcopy(SAMPLE_WORLD)
    data.update(overrides)
    return data


def build_world(**overrides: Any) -> WorldTemplate:
    """Create a validated sample world.

    Args:
        **overrides: Top-level sections to replace (``rooms``, ``puzzles``, ...).
    """
    return WorldTemplate.model_validate(world_data(**overrides))


class FakeClock:
    """Manually advanced clock, callable like ``time.monotonic``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now
