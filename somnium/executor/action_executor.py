"""Action executor: the single place scripted actions mutate the world.

Every ``ActionType`` has one branch here, plus an explicit branch for
``UnknownAction``. An action list always runs to the end: a failing or
unknown action is logged and recorded, and the next action still runs.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from somnium.executor.scheduler import ActionScheduler
from somnium.world.actions import (
    ActionBase,
    ActionType,
    ChangeRoomAction,
    DisableExitAction,
    EnableExitAction,
    EndGameAction,
    GiveItemAction,
    RemoveItemAction,
    RemoveObjectAction,
    RevealItemAction,
    ScheduleAction,
    SetFlagAction,
    SetPathAction,
    ShowMessageAction,
    TriggerEventAction,
    UnknownAction,
    UnlockAchievementAction,
    UpdateFactorAction,
    UpdateScoreAction,
)
from somnium.world.state import WorldState, WorldStateError

logger = logging.getLogger(__name__)


class UnlockResult(Protocol):
    success: bool
    already_unlocked: bool


class EndingOutcome(Protocol):
    ending_id: str


class ProgressionTarget(Protocol):
    """Progression operations actions can invoke."""

    def update_score(self, points: int, reason: str = "") -> int: ...

    def unlock_achievement(self, achievement_id: str) -> UnlockResult: ...

    def update_factor(self, factor: str, delta: float) -> float: ...

    def set_path(self, path: str) -> None: ...

    def trigger_ending(self, ending_id: str | None = None) -> EndingOutcome: ...

    def record_room_visit(self, room_id: str) -> None: ...

    def record_item_collected(self, item_id: str) -> None: ...


@dataclass
class ActionOutcome:
    """Result of executing a single action.

    Attributes:
        action: The action that was executed.
        success: Whether it took effect.
        message: Narrative text to show the player, if any.
        error: Why it failed, for logs and tests.
        ending: Ending id chosen by an END_GAME action.
    """

    action: ActionBase
    success: bool
    message: str | None = None
    error: str | None = None
    ending: str | None = None

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{status}] {self.action.type}: {self.error or self.message or ''}"


@dataclass
class ExecutionReport:
    """Combined outcomes of one action list."""

    outcomes: list[ActionOutcome] = field(default_factory=list)
    ending: str | None = None

    @property
    def messages(self) -> list[str]:
        return [outcome.message for outcome in self.outcomes if outcome.message]

    @property
    def all_successful(self) -> bool:
        return all(outcome.success for outcome in self.outcomes)

    @property
    def has_failures(self) -> bool:
        return any(not outcome.success for outcome in self.outcomes)

    def extend(self, other: "ExecutionReport") -> None:
        self.outcomes.extend(other.outcomes)
        if other.ending is not None:
            self.ending = other.ending


class ActionExecutor:
    """Executes typed actions against the world state.

    Args:
        state: World state to mutate.
        scheduler: Queue for ``SCHEDULE`` actions.
        progression: Score, achievements, factors and endings.
            Progression actions fail when it is absent.

    The ``trigger_event`` attribute is set by the event manager so that
    ``TRIGGER_EVENT`` actions can run named events; it returns the messages
    those events produced.

    Example:
        executor = ActionExecutor(state, scheduler, progression)
        report = executor.execute_all(event.actions)
        for line in report.messages:
            log.narrate(line)
    """

    def __init__(
        self,
        state: WorldState,
        scheduler: ActionScheduler | None = None,
        progression: ProgressionTarget | None = None,
    ) -> None:
        self.state = state
        self.scheduler = scheduler or ActionScheduler()
        self.progression = progression
        self.trigger_event: Callable[[str], list[str]] | None = None

    def execute_all(self, actions: Iterable[ActionBase]) -> ExecutionReport:
        """Execute actions in order, always running the whole list."""
        report = ExecutionReport()
        for action in actions:
            outcome = self.execute(action)
            report.outcomes.append(outcome)
            if outcome.ending is not None:
                report.ending = outcome.ending
        return report

    def run_due(self, now: float) -> ExecutionReport:
        """Execute every scheduled action due at ``now``."""
        report = ExecutionReport()

        def run(action: ActionBase) -> None:
            report.extend(self.execute_all([action]))

        self.scheduler.drain(now, run)
        return report

    def execute(self, action: ActionBase) -> ActionOutcome:
        """Execute one action. Never raises for bad data or world errors."""
        try:
            outcome = self._dispatch(action)
        except WorldStateError as e:
            logger.warning(f"{action.type} failed: {e}")
            return ActionOutcome(action=action, success=False, error=str(e))

        if outcome.success and action.message:
            outcome.message = "\n".join(part for part in (outcome.message, action.message) if part)
        return outcome

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _dispatch(self, action: ActionBase) -> ActionOutcome:
        if isinstance(action, UnknownAction):
            logger.warning(f"Skipping unknown action {action.type!r}: {action.reason}")
            return ActionOutcome(action=action, success=False, error=action.reason or "unknown action")

        match action.type:
            case ActionType.SET_FLAG:
                return self._set_flag(action)
            case ActionType.GIVE_ITEM:
                return self._give_item(action)
            case ActionType.REMOVE_ITEM:
                return self._remove_item(action)
            case ActionType.UPDATE_SCORE:
                return self._update_score(action)
            case ActionType.CHANGE_ROOM:
                return self._change_room(action)
            case ActionType.ENABLE_EXIT | ActionType.DISABLE_EXIT:
                return self._set_exit(action)
            case ActionType.SCHEDULE:
                return self._schedule(action)
            case ActionType.END_GAME:
                return self._end_game(action)
            case ActionType.SHOW_MESSAGE:
                return self._show_message(action)
            case ActionType.REVEAL_ITEM:
                return self._reveal_item(action)
            case ActionType.REMOVE_OBJECT:
                return self._remove_object(action)
            case ActionType.TRIGGER_EVENT:
                return self._trigger_event(action)
            case ActionType.UNLOCK_ACHIEVEMENT:
                return self._unlock_achievement(action)
            case ActionType.UPDATE_FACTOR:
                return self._update_factor(action)
            case ActionType.SET_PATH:
                return self._set_path(action)
            case _:
                logger.warning(f"No handler for action type {action.type!r}")
                return ActionOutcome(action=action, success=False, error=f"unhandled action {action.type}")

    def _needs_progression(self, action: ActionBase) -> ActionOutcome | None:
        if self.progression is None:
            logger.warning(f"{action.type} ignored: no progression tracker")
            return ActionOutcome(action=action, success=False, error="no progression tracker")
        return None

    # =========================================================================
    # Handlers
    # =========================================================================

    def _set_flag(self, action: SetFlagAction) -> ActionOutcome:
        self.state.flags.set(action.flag, action.value)
        return ActionOutcome(action=action, success=True)

    def _give_item(self, action: GiveItemAction) -> ActionOutcome:
        added = self.state.add_item(action.item_id)
        if added and self.progression is not None:
            self.progression.record_item_collected(action.item_id)
        return ActionOutcome(action=action, success=True)

    def _remove_item(self, action: RemoveItemAction) -> ActionOutcome:
        if not self.state.remove_item(action.item_id):
            return ActionOutcome(action=action, success=False, error=f"'{action.item_id}' not carried")
        return ActionOutcome(action=action, success=True)

    def _update_score(self, action: UpdateScoreAction) -> ActionOutcome:
        if (missing := self._needs_progression(action)) is not None:
            return missing
        self.progression.update_score(action.points, action.reason)
        return ActionOutcome(action=action, success=True)

    def _change_room(self, action: ChangeRoomAction) -> ActionOutcome:
        self.state.change_room(action.room_id)
        if self.progression is not None:
            self.progression.record_room_visit(action.room_id)
        return ActionOutcome(action=action, success=True)

    def _set_exit(self, action: EnableExitAction | DisableExitAction) -> ActionOutcome:
        enabled = action.type == ActionType.ENABLE_EXIT
        if not self.state.set_exit_enabled(action.room_id, action.direction, enabled):
            return ActionOutcome(
                action=action,
                success=False,
                error=f"no exit '{action.direction}' in '{action.room_id}'",
            )
        return ActionOutcome(action=action, success=True)

    def _schedule(self, action: ScheduleAction) -> ActionOutcome:
        self.scheduler.schedule(action.action, action.delay)
        return ActionOutcome(action=action, success=True)

    def _end_game(self, action: EndGameAction) -> ActionOutcome:
        if (missing := self._needs_progression(action)) is not None:
            return missing
        result = self.progression.trigger_ending(action.ending)
        return ActionOutcome(action=action, success=True, ending=result.ending_id)

    def _show_message(self, action: ShowMessageAction) -> ActionOutcome:
        return ActionOutcome(action=action, success=True, message=action.text)

    def _reveal_item(self, action: RevealItemAction) -> ActionOutcome:
        self.state.place_item(action.item_id, action.room_id)
        return ActionOutcome(action=action, success=True)

    def _remove_object(self, action: RemoveObjectAction) -> ActionOutcome:
        if not self.state.remove_object(action.object_id, action.room_id):
            return ActionOutcome(action=action, success=False, error=f"'{action.object_id}' not present")
        return ActionOutcome(action=action, success=True)

    def _trigger_event(self, action: TriggerEventAction) -> ActionOutcome:
        if self.trigger_event is None:
            logger.warning(f"TRIGGER_EVENT '{action.event}' ignored: no event manager")
            return ActionOutcome(action=action, success=False, error="no event manager")
        messages = self.trigger_event(action.event)
        return ActionOutcome(action=action, success=True, message="\n".join(messages) or None)

    def _unlock_achievement(self, action: UnlockAchievementAction) -> ActionOutcome:
        if (missing := self._needs_progression(action)) is not None:
            return missing
        result = self.progression.unlock_achievement(action.achievement_id)
        if not result.success and not result.already_unlocked:
            return ActionOutcome(
                action=action, success=False, error=f"unknown achievement '{action.achievement_id}'"
            )
        return ActionOutcome(action=action, success=True)

    def _update_factor(self, action: UpdateFactorAction) -> ActionOutcome:
        if (missing := self._needs_progression(action)) is not None:
            return missing
        self.progression.update_factor(action.factor, action.value)
        return ActionOutcome(action=action, success=True)

    def _set_path(self, action: SetPathAction) -> ActionOutcome:
        if (missing := self._needs_progression(action)) is not None:
            return missing
        self.progression.set_path(action.path)
        return ActionOutcome(action=action, success=True)
