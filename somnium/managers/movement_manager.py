"""Movement Manager for exit gating and room transitions.

An exit is checked in this order:
1. It exists
2. It is enabled
3. It is not locked
4. Its condition holds
5. The player carries its required item
6. The target room's entry condition holds

Each refusal has its own message. Blocked moves fire the ``blocked_exit``
named event; successful moves fire ``exit_room`` in the old room and
``enter_room`` in the new one.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from somnium.conditions.evaluator import ConditionEvaluator
from somnium.world.state import WorldState

logger = logging.getLogger(__name__)


class MoveBlock(str, Enum):
    """Why a move was refused."""

    NO_EXIT = "no_exit"
    DISABLED = "disabled"
    LOCKED = "locked"
    CONDITION = "condition"
    MISSING_ITEM = "missing_item"
    ENTRY_CONDITION = "entry_condition"


class MovementProgression(Protocol):
    def record_room_visit(self, room_id: str) -> None: ...

    def increment_moves(self) -> int: ...


class NamedEvents(Protocol):
    def trigger_event(self, name: str, context: dict[str, Any] | None = None) -> Any: ...


@dataclass
class MoveCheck:
    """Whether an exit can be used right now."""

    can_move: bool
    target_room_id: str | None = None
    reason: str | None = None
    block: MoveBlock | None = None
    needs_item: str | None = None


@dataclass
class MovementResult:
    """Result of a move or navigation attempt."""

    success: bool
    message: str | None = None
    room_id: str | None = None
    block: MoveBlock | None = None
    messages: list[str] = field(default_factory=list)
    ending: str | None = None

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{status}] {self.room_id or ''} {self.message or ''}".rstrip()


class MovementManager:
    """Moves the player between rooms.

    Args:
        state: World state holding rooms, exits and the current room.
        evaluator: Checks exit and entry conditions.
        progression: Records visits and counts moves.
        events: Runs the named movement events.
    """

    def __init__(
        self,
        state: WorldState,
        evaluator: ConditionEvaluator,
        progression: MovementProgression | None = None,
        events: NamedEvents | None = None,
    ) -> None:
        self.state = state
        self.evaluator = evaluator
        self.progression = progression
        self.events = events

    def can_move(self, direction: str, from_room_id: str | None = None) -> MoveCheck:
        room_id = from_room_id or self.state.current_room_id
        exit_def = self.state.get_exit(room_id, direction)
        if exit_def is None:
            return MoveCheck(can_move=False, reason="You can't go that way.", block=MoveBlock.NO_EXIT)

        if not self.state.exit_enabled(room_id, direction):
            return MoveCheck(
                can_move=False,
                reason=exit_def.blocked_message or "You can't go that way.",
                block=MoveBlock.DISABLED,
            )
        if self.state.exit_locked(room_id, direction):
            return MoveCheck(
                can_move=False,
                reason=exit_def.locked_message or "That way is locked.",
                block=MoveBlock.LOCKED,
            )
        if exit_def.condition is not None and not self.evaluator.evaluate(exit_def.condition):
            return MoveCheck(
                can_move=False,
                reason=exit_def.blocked_message or "You can't go that way yet.",
                block=MoveBlock.CONDITION,
            )
        if exit_def.requires_item and not self.state.has_item(exit_def.requires_item):
            return MoveCheck(
                can_move=False,
                reason=exit_def.item_message or "You need something to go that way.",
                block=MoveBlock.MISSING_ITEM,
                needs_item=exit_def.requires_item,
            )

        target = self.state.get_room(exit_def.room)
        if target is not None and target.entry_condition is not None:
            if not self.evaluator.evaluate(target.entry_condition):
                return MoveCheck(
                    can_move=False,
                    reason=target.entry_blocked_message or "You can't enter there yet.",
                    block=MoveBlock.ENTRY_CONDITION,
                )

        return MoveCheck(can_move=True, target_room_id=exit_def.room)

    def move(self, direction: str) -> MovementResult:
        """Move through an exit of the current room."""
        from_room_id = self.state.current_room_id
        check = self.can_move(direction)

        if not check.can_move:
            logger.debug(f"Move {direction} from {from_room_id} blocked: {check.block}")
            result = MovementResult(success=False, message=check.reason, block=check.block)
            self._fire(
                result,
                "blocked_exit",
                {
                    "room": from_room_id,
                    "direction": direction,
                    "reason": check.reason,
                    "needs_item": check.needs_item,
                },
            )
            return result

        result = MovementResult(success=True, room_id=check.target_room_id)
        self._fire(result, "exit_room", {"from": from_room_id, "to": check.target_room_id, "direction": direction})
        self.state.change_room(check.target_room_id)
        if self.progression is not None:
            self.progression.record_room_visit(check.target_room_id)
            self.progression.increment_moves()
        self._fire(result, "enter_room", {"room": check.target_room_id, "from": from_room_id, "direction": direction})
        return result

    def find_route(self, to_room_id: str, from_room_id: str | None = None) -> list[str] | None:
        """Shortest list of room ids through currently usable exits."""
        start = from_room_id or self.state.current_room_id
        if start == to_room_id:
            return [start]

        queue = deque([[start]])
        visited = {start}
        while queue:
            path = queue.popleft()
            room = self.state.get_room(path[-1])
            if room is None:
                continue
            for direction, exit_def in room.exits.items():
                if exit_def.room in visited:
                    continue
                if not self.can_move(direction, from_room_id=room.id).can_move:
                    continue
                new_path = [*path, exit_def.room]
                if exit_def.room == to_room_id:
                    return new_path
                visited.add(exit_def.room)
                queue.append(new_path)
        return None

    def navigate(self, to_room_id: str) -> MovementResult:
        """Walk room by room along the shortest route."""
        route = self.find_route(to_room_id)
        if route is None:
            return MovementResult(success=False, message="You can't get there from here.")
        if len(route) == 1:
            return MovementResult(success=True, message="You're already there.", room_id=to_room_id)

        combined = MovementResult(success=True)
        for from_room_id, next_room_id in zip(route, route[1:]):
            room = self.state.get_room(from_room_id)
            direction = next(
                (direction for direction, exit_def in room.exits.items() if exit_def.room == next_room_id),
                None,
            )
            step = self.move(direction) if direction is not None else None
            if step is None or not step.success:
                reason = step.message if step is not None else "path broken"
                combined.success = False
                combined.message = f"Blocked at {room.name}: {reason}"
                combined.block = step.block if step is not None else None
                return combined
            combined.messages.extend(step.messages)
            combined.ending = combined.ending or step.ending
            combined.room_id = step.room_id

        combined.message = f"You arrive at {self.state.current_room.name}."
        return combined

    def _fire(self, result: MovementResult, name: str, context: dict[str, Any]) -> None:
        if self.events is None:
            return
        event = self.events.trigger_event(name, context)
        result.messages.extend(event.messages)
        result.ending = result.ending or event.ending
