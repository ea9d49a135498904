"""Pydantic schemas for world definitions.

This module contains the static data a world file declares:
- Rooms, exits, objects, items and NPCs
- Scripted events (trigger pattern, condition, actions, response)
- Puzzles (single solution or ordered steps)
- Achievements, endings and progression settings

Conditions are kept as raw data (a flag expression string or a typed
mapping); ``ConditionEvaluator`` interprets them at run time. Actions are
coerced into typed models at load time, with anything unrecognized becoming
``UnknownAction``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, SerializeAsAny, field_validator, model_validator

from somnium.world.actions import ActionBase, FlagValue, coerce_actions

# A flag expression ("has_lamp and not door_open") or a typed mapping
# ({"type": "score", "operator": ">=", "value": 100}).
Condition = str | dict[str, Any]


# =============================================================================
# Events
# =============================================================================


class TriggerPattern(BaseModel):
    """Command template for an event. Absent fields match anything."""

    verb: str | None = None
    object: str | None = None
    preposition: str | None = None
    indirect_object: str | None = None


class EventDefinition(BaseModel):
    """A scripted event attached to a room, an object, or the world."""

    id: str | None = None
    name: str | None = Field(
        default=None, description="Named events fire via trigger_event(name)"
    )
    trigger: TriggerPattern | None = None
    condition: Condition | None = None
    actions: list[SerializeAsAny[ActionBase]] = Field(default_factory=list)
    response: str | None = None

    @field_validator("actions", mode="before")
    @classmethod
    def _coerce_actions(cls, value: Any) -> list[ActionBase]:
        return coerce_actions(value)


# =============================================================================
# Rooms and things
# =============================================================================


class ExitDefinition(BaseModel):
    """An exit from one room to another."""

    room: str
    enabled: bool = True
    locked: bool = False
    locked_message: str | None = None
    condition: Condition | None = None
    blocked_message: str | None = None
    requires_item: str | None = None
    item_message: str | None = None


class ThingDefinition(BaseModel):
    """Common fields for anything the player can refer to."""

    id: str
    name: str
    description: str = ""
    events: list[EventDefinition] = Field(default_factory=list)


class ObjectDefinition(ThingDefinition):
    """Scenery fixed in a room (doors, desks, statues)."""


class ItemDefinition(ThingDefinition):
    """Something that can be carried."""

    points: int = 0  # Awarded the first time the item is picked up


class NPCDefinition(ThingDefinition):
    """A character present in a room."""


class RoomDefinition(BaseModel):
    """A location in the world."""

    id: str
    name: str
    description: str = ""
    exits: dict[str, ExitDefinition] = Field(default_factory=dict)
    objects: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)
    npcs: list[str] = Field(default_factory=list)
    events: list[EventDefinition] = Field(default_factory=list)
    entry_condition: Condition | None = None
    entry_blocked_message: str | None = None
    secret: bool = False

    @field_validator("exits", mode="before")
    @classmethod
    def _expand_exit_shorthand(cls, value: Any) -> Any:
        """Allow ``north: hall`` as shorthand for ``north: {room: hall}``."""
        if not isinstance(value, dict):
            return value
        return {
            direction: {"room": target} if isinstance(target, str) else target
            for direction, target in value.items()
        }


# =============================================================================
# Puzzles
# =============================================================================


class SolutionSpec(BaseModel):
    """Expected solution. Only present fields are compared."""

    verb: str | None = None
    item: str | None = None
    target: str | None = None
    value: Any = None
    sequence: list[Any] | None = None


class PuzzleTrigger(BaseModel):
    """Command conditions under which a puzzle attempt happens."""

    verb: str | None = None
    item: str | None = None
    target: str | None = None
    location: str | None = None
    conditions: list[Condition] = Field(default_factory=list)


class PuzzleStep(BaseModel):
    """One stage of a multi-step puzzle."""

    solution: SolutionSpec
    trigger: PuzzleTrigger | None = None
    hints: list[str] = Field(default_factory=list)
    hint: str | None = None  # Shown when this step becomes current
    success_message: str | None = None
    failure_message: str | None = None
    reward: list[SerializeAsAny[ActionBase]] = Field(default_factory=list)

    @field_validator("reward", mode="before")
    @classmethod
    def _coerce_reward(cls, value: Any) -> list[ActionBase]:
        return coerce_actions(value)


class PuzzleDefinition(BaseModel):
    """A puzzle with either one solution or an ordered list of steps."""

    id: str
    name: str = ""
    trigger: PuzzleTrigger | None = None
    solution: SolutionSpec | None = None
    steps: list[PuzzleStep] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)
    max_attempts: int | None = Field(default=None, ge=1)
    points: int = 0
    completion_flag: str | None = None
    no_reset: bool = False
    flags: dict[str, FlagValue] = Field(
        default_factory=dict, description="Default flag values seeded at load"
    )
    reward: list[SerializeAsAny[ActionBase]] = Field(default_factory=list)
    failure_consequence: list[SerializeAsAny[ActionBase]] = Field(default_factory=list)
    reset_actions: list[SerializeAsAny[ActionBase]] = Field(default_factory=list)
    success_message: str | None = None
    failure_message: str | None = None
    completed_message: str | None = None
    permanent_failure_message: str | None = None

    @field_validator("reward", "failure_consequence", "reset_actions", mode="before")
    @classmethod
    def _coerce_action_lists(cls, value: Any) -> list[ActionBase]:
        return coerce_actions(value)

    @property
    def is_multi_step(self) -> bool:
        return bool(self.steps)


# =============================================================================
# Progression
# =============================================================================


class AchievementDefinition(BaseModel):
    """An achievement the player can unlock once."""

    id: str
    name: str
    description: str = ""
    points: int = 0
    progressive: bool = False
    target: int | None = Field(default=None, ge=1)
    hidden: bool = False

    @model_validator(mode="after")
    def _progressive_needs_target(self) -> "AchievementDefinition":
        if self.progressive and self.target is None:
            raise ValueError(f"Progressive achievement '{self.id}' needs a target")
        return self


class EndingDefinition(BaseModel):
    """A terminal outcome, chosen by priority among satisfied endings."""

    id: str
    name: str = ""
    text: str = ""
    conditions: list[Condition] = Field(default_factory=list)
    priority: int = 0
    achievement: str | None = None


class ProgressionConfig(BaseModel):
    """World-wide scoring and completion settings."""

    max_score: int = 0
    win_condition: Condition | None = None
    failure_conditions: list[Condition] = Field(default_factory=list)
    par_moves: int | None = None
    total_rooms: int | None = None


class WorldMetadata(BaseModel):
    title: str = "Untitled"
    author: str = ""
    description: str = ""
    version: str = "1.0"


# =============================================================================
# World
# =============================================================================


class WorldTemplate(BaseModel):
    """Complete static definition of a playable world."""

    metadata: WorldMetadata = Field(default_factory=WorldMetadata)
    start_room: str
    rooms: list[RoomDefinition]
    objects: list[ObjectDefinition] = Field(default_factory=list)
    items: list[ItemDefinition] = Field(default_factory=list)
    npcs: list[NPCDefinition] = Field(default_factory=list)
    global_events: list[EventDefinition] = Field(default_factory=list)
    puzzles: list[PuzzleDefinition] = Field(default_factory=list)
    achievements: list[AchievementDefinition] = Field(default_factory=list)
    endings: list[EndingDefinition] = Field(default_factory=list)
    progression: ProgressionConfig = Field(default_factory=ProgressionConfig)
    initial_flags: dict[str, FlagValue] = Field(default_factory=dict)
    starting_inventory: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> "WorldTemplate":
        """Reject duplicate ids and references to things that do not exist."""
        for label, records in (
            ("room", self.rooms),
            ("object", self.objects),
            ("item", self.items),
            ("npc", self.npcs),
            ("puzzle", self.puzzles),
            ("achievement", self.achievements),
            ("ending", self.endings),
        ):
            seen: set[str] = set()
            for record in records:
                if record.id in seen:
                    raise ValueError(f"Duplicate {label} id '{record.id}'")
                seen.add(record.id)

        room_ids = {room.id for room in self.rooms}
        object_ids = {obj.id for obj in self.objects}
        item_ids = {item.id for item in self.items}
        npc_ids = {npc.id for npc in self.npcs}

        if self.start_room not in room_ids:
            raise ValueError(f"Start room '{self.start_room}' is not defined")

        for room in self.rooms:
            for direction, exit_def in room.exits.items():
                if exit_def.room not in room_ids:
                    raise ValueError(
                        f"Exit '{direction}' of room '{room.id}' leads to unknown room '{exit_def.room}'"
                    )
            for ref_ids, known, label in (
                (room.objects, object_ids, "object"),
                (room.items, item_ids, "item"),
                (room.npcs, npc_ids, "npc"),
            ):
                for ref in ref_ids:
                    if ref not in known:
                        raise ValueError(f"Room '{room.id}' references unknown {label} '{ref}'")

        for item_id in self.starting_inventory:
            if item_id not in item_ids:
                raise ValueError(f"Starting inventory references unknown item '{item_id}'")
        return self
