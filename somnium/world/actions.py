"""Typed world-mutating actions.

Actions are the only way scripted content changes the world. The set is
closed: every tag in ``ActionType`` has one model here and one branch in
``ActionExecutor``. Data that names an unknown tag, or a known tag with
missing fields, is coerced into ``UnknownAction`` so that a single bad entry
never prevents a world from loading.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, ValidationError, field_validator

logger = logging.getLogger(__name__)

FlagValue = bool | int | float | str


class ActionType(str, Enum):
    """Tags for every action the executor understands."""

    SET_FLAG = "SET_FLAG"
    GIVE_ITEM = "GIVE_ITEM"
    REMOVE_ITEM = "REMOVE_ITEM"
    UPDATE_SCORE = "UPDATE_SCORE"
    CHANGE_ROOM = "CHANGE_ROOM"
    ENABLE_EXIT = "ENABLE_EXIT"
    DISABLE_EXIT = "DISABLE_EXIT"
    SCHEDULE = "SCHEDULE"
    END_GAME = "END_GAME"
    SHOW_MESSAGE = "SHOW_MESSAGE"
    REVEAL_ITEM = "REVEAL_ITEM"
    REMOVE_OBJECT = "REMOVE_OBJECT"
    TRIGGER_EVENT = "TRIGGER_EVENT"
    UNLOCK_ACHIEVEMENT = "UNLOCK_ACHIEVEMENT"
    UPDATE_FACTOR = "UPDATE_FACTOR"
    SET_PATH = "SET_PATH"


class ActionBase(BaseModel):
    """Fields shared by all actions."""

    model_config = ConfigDict(extra="ignore")

    type: str
    message: str | None = None  # Shown after the action succeeds


class SetFlagAction(ActionBase):
    type: ActionType = ActionType.SET_FLAG
    flag: str
    value: FlagValue = True


class GiveItemAction(ActionBase):
    type: ActionType = ActionType.GIVE_ITEM
    item_id: str


class RemoveItemAction(ActionBase):
    type: ActionType = ActionType.REMOVE_ITEM
    item_id: str


class UpdateScoreAction(ActionBase):
    type: ActionType = ActionType.UPDATE_SCORE
    points: int
    reason: str = ""


class ChangeRoomAction(ActionBase):
    type: ActionType = ActionType.CHANGE_ROOM
    room_id: str


class EnableExitAction(ActionBase):
    type: ActionType = ActionType.ENABLE_EXIT
    room_id: str
    direction: str


class DisableExitAction(ActionBase):
    type: ActionType = ActionType.DISABLE_EXIT
    room_id: str
    direction: str


class ScheduleAction(ActionBase):
    """Run ``action`` after ``delay`` seconds of game-loop time."""

    type: ActionType = ActionType.SCHEDULE
    delay: float = Field(default=0.0, ge=0.0)
    action: SerializeAsAny[ActionBase]

    @field_validator("action", mode="before")
    @classmethod
    def _coerce_nested(cls, value: Any) -> ActionBase:
        return coerce_action(value)


class EndGameAction(ActionBase):
    type: ActionType = ActionType.END_GAME
    ending: str | None = None


class ShowMessageAction(ActionBase):
    type: ActionType = ActionType.SHOW_MESSAGE
    text: str


class RevealItemAction(ActionBase):
    type: ActionType = ActionType.REVEAL_ITEM
    item_id: str
    room_id: str | None = None  # None means the current room


class RemoveObjectAction(ActionBase):
    type: ActionType = ActionType.REMOVE_OBJECT
    object_id: str
    room_id: str | None = None


class TriggerEventAction(ActionBase):
    type: ActionType = ActionType.TRIGGER_EVENT
    event: str


class UnlockAchievementAction(ActionBase):
    type: ActionType = ActionType.UNLOCK_ACHIEVEMENT
    achievement_id: str


class UpdateFactorAction(ActionBase):
    type: ActionType = ActionType.UPDATE_FACTOR
    factor: str
    value: float


class SetPathAction(ActionBase):
    type: ActionType = ActionType.SET_PATH
    path: str


class UnknownAction(ActionBase):
    """Placeholder for an action that could not be understood.

    Attributes:
        type: The tag as written in the data (may be empty).
        raw: The original mapping.
        reason: Why coercion failed.
    """

    type: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)
    reason: str = ""


ACTION_MODELS: dict[ActionType, type[ActionBase]] = {
    ActionType.SET_FLAG: SetFlagAction,
    ActionType.GIVE_ITEM: GiveItemAction,
    ActionType.REMOVE_ITEM: RemoveItemAction,
    ActionType.UPDATE_SCORE: UpdateScoreAction,
    ActionType.CHANGE_ROOM: ChangeRoomAction,
    ActionType.ENABLE_EXIT: EnableExitAction,
    ActionType.DISABLE_EXIT: DisableExitAction,
    ActionType.SCHEDULE: ScheduleAction,
    ActionType.END_GAME: EndGameAction,
    ActionType.SHOW_MESSAGE: ShowMessageAction,
    ActionType.REVEAL_ITEM: RevealItemAction,
    ActionType.REMOVE_OBJECT: RemoveObjectAction,
    ActionType.TRIGGER_EVENT: TriggerEventAction,
    ActionType.UNLOCK_ACHIEVEMENT: UnlockAchievementAction,
    ActionType.UPDATE_FACTOR: UpdateFactorAction,
    ActionType.SET_PATH: SetPathAction,
}


def coerce_action(raw: Any) -> ActionBase:
    """Convert raw action data into a typed action.

    Never raises: anything that is not a valid action becomes an
    ``UnknownAction`` carrying the reason.

    Args:
        raw: An action model or a mapping with a ``type`` tag.

    Returns:
        The typed action, or ``UnknownAction``.
    """
    if isinstance(raw, ActionBase):
        return raw
    if not isinstance(raw, dict):
        return UnknownAction(type="", reason=f"action must be a mapping, got {type(raw).__name__}")

    tag = str(raw.get("type") or "").upper()
    try:
        action_type = ActionType(tag)
    except ValueError:
        return UnknownAction(type=tag, raw=dict(raw), reason=f"unknown action type '{tag}'")

    try:
        return ACTION_MODELS[action_type].model_validate({**raw, "type": action_type})
    except ValidationError as e:
        logger.debug(f"Malformed {tag} action: {e}")
        return UnknownAction(type=tag, raw=dict(raw), reason=f"malformed {tag} action")


def coerce_actions(value: Any) -> list[ActionBase]:
    """Coerce ``None``, a single action, or a list of actions into a list."""
    if value is None:
        return []
    if isinstance(value, (dict, ActionBase)):
        return [coerce_action(value)]
    return [coerce_action(item) for item in value]
