"""Serializable snapshot of a game session.

Holds everything needed to resume play: flags, world state, puzzle
progress, progression, the scheduled-action queue and the parser context.
Presentation state is not part of it.
"""

from typing import Any

from pydantic import BaseModel, Field

from somnium.world.actions import FlagValue

SNAPSHOT_VERSION = 1


class EngineSnapshot(BaseModel):
    """Plain structured snapshot; ``model_dump()`` gives a JSON-ready dict."""

    version: int = SNAPSHOT_VERSION
    world_title: str = ""
    flags: dict[str, FlagValue] = Field(default_factory=dict)
    world: dict[str, Any] = Field(default_factory=dict)
    puzzles: dict[str, Any] = Field(default_factory=dict)
    progression: dict[str, Any] = Field(default_factory=dict)
    scheduled: list[dict[str, Any]] = Field(
        default_factory=list, description="Pending actions with their remaining delay"
    )
    parser_context: dict[str, Any] = Field(default_factory=dict)
