"""Built-in verb handlers.

These run after scripted events and puzzle triggers have had their chance,
and before the dynamic responder. Each handler returns the messages for the
turn.
"""

import logging
from collections.abc import Callable

from somnium.engine.messages import GameMessage, MessageKind
from somnium.managers.movement_manager import MovementManager
from somnium.managers.progression_manager import ProgressionManager
from somnium.managers.puzzle_manager import PuzzleManager
from somnium.world.commands import Command, ObjectReference, ReferenceKind
from somnium.world.state import WorldState
from somnium.world.vocabulary import Vocabulary

logger = logging.getLogger(__name__)

HELP_TEXT = """Common commands:
- LOOK/L - Examine your surroundings
- EXAMINE/X [object] - Look at something closely
- TAKE/GET [object] - Pick up an item (TAKE ALL for everything)
- DROP [object] - Put down an item
- INVENTORY/I - Check what you're carrying
- GO [direction] or N/S/E/W/U/D - Move around
- USE [item] ON [object] - Use an item
- TALK TO [person] - Speak with someone
- HINT - Ask for a hint on the puzzle at hand
- SCORE - Show your score
- AGAIN/G - Repeat the last command
- SAVE/LOAD/RESTART/QUIT - Manage your game"""

Handler = Callable[[Command], list[GameMessage]]


class BuiltinVerbs:
    """Default behavior for common verbs.

    Args:
        state: World state.
        movement: Handles ``go``.
        progression: Score, item collection and statistics.
        puzzles: Source of hints.
        vocabulary: Error templates.
    """

    def __init__(
        self,
        state: WorldState,
        movement: MovementManager,
        progression: ProgressionManager,
        puzzles: PuzzleManager,
        vocabulary: Vocabulary,
    ) -> None:
        self.state = state
        self.movement = movement
        self.progression = progression
        self.puzzles = puzzles
        self.vocabulary = vocabulary
        self._handlers: dict[str, Handler] = {
            "go": self.go,
            "look": self.look,
            "examine": self.examine,
            "inventory": self.inventory,
            "take": self.take,
            "drop": self.drop,
            "score": self.score,
            "hint": self.hint,
            "wait": self.wait,
            "help": self.help,
        }

    def handles(self, verb: str) -> bool:
        return verb in self._handlers

    def handle(self, command: Command) -> list[GameMessage] | None:
        """Run the handler for the command's verb; None if there is none."""
        handler = self._handlers.get(command.verb)
        if handler is None:
            return None
        return handler(command)

    # =========================================================================
    # Movement and looking
    # =========================================================================

    def go(self, command: Command) -> list[GameMessage]:
        direction = command.direct_object.text if command.direct_object else ""
        result = self.movement.move(direction)
        if not result.success:
            messages = [GameMessage.narrative(result.message or "You can't go that way.")]
            messages.extend(GameMessage.narrative(text) for text in result.messages)
            return messages
        messages = [GameMessage.narrative(self.describe_room())]
        messages.extend(GameMessage.narrative(text) for text in result.messages)
        return messages

    def look(self, command: Command) -> list[GameMessage]:
        if command.direct_object is not None:
            return self.examine(command)
        return [GameMessage.narrative(self.describe_room())]

    def examine(self, command: Command) -> list[GameMessage]:
        if (missing := self._not_here(command.direct_object)) is not None:
            return missing
        thing = self.state.lookup(command.direct_id)
        if thing is None:
            return [GameMessage.narrative("You can't examine that.")]
        if self.state.get_npc(thing.id) is not None:
            self.progression.record_npc_met(thing.id)
        return [GameMessage.narrative(thing.description or "You see nothing special.")]

    def describe_room(self) -> str:
        room = self.state.current_room
        lines = [room.name, room.description]

        exits = [
            direction for direction in room.exits if self.state.exit_enabled(room.id, direction)
        ]
        if exits:
            lines.append(f"\nExits: {', '.join(exits)}")

        items = [self.state.get_item(item_id) for item_id in self.state.items_in_room()]
        names = [item.name for item in items if item is not None]
        if names:
            lines.append(f"\nYou can see: {', '.join(names)}.")

        npcs = [self.state.get_npc(npc_id) for npc_id in room.npcs]
        npc_names = [npc.name for npc in npcs if npc is not None]
        if npc_names:
            lines.append(f"\nPresent: {', '.join(npc_names)}.")
        return "\n".join(line for line in lines if line)

    # =========================================================================
    # Items
    # =========================================================================

    def inventory(self, command: Command) -> list[GameMessage]:
        if not self.state.inventory:
            return [GameMessage.narrative("You're not carrying anything.")]
        names = [
            item.name if (item := self.state.get_item(item_id)) is not None else item_id
            for item_id in self.state.inventory
        ]
        return [GameMessage.narrative("You are carrying:\n" + "\n".join(f"  - {name}" for name in names))]

    def take(self, command: Command) -> list[GameMessage]:
        if command.direct_object is not None and command.direct_object.is_all:
            return self._take_all()
        if (missing := self._not_here(command.direct_object)) is not None:
            return missing

        item_id = command.direct_id
        if self.state.has_item(item_id):
            return [GameMessage.narrative("You already have that.")]
        if item_id not in self.state.items_in_room():
            return [GameMessage.narrative("You can't take that.")]

        self._pick_up(item_id)
        return [GameMessage.narrative("Taken.")]

    def _take_all(self) -> list[GameMessage]:
        items = self.state.items_in_room()
        if not items:
            return [GameMessage.narrative("There's nothing here to take.")]
        for item_id in items:
            self._pick_up(item_id)
        plural = "s" if len(items) > 1 else ""
        return [GameMessage.narrative(f"You take {len(items)} item{plural}.")]

    def _pick_up(self, item_id: str) -> None:
        first_time = item_id not in self.progression.stats.items_collected
        self.state.add_item(item_id)
        item = self.state.get_item(item_id)
        if first_time and item is not None and item.points:
            self.progression.update_score(item.points, reason=f"picked up {item_id}")
        self.progression.record_item_collected(item_id)

    def drop(self, command: Command) -> list[GameMessage]:
        if command.direct_object is not None and command.direct_object.is_all:
            carried = list(self.state.inventory)
            if not carried:
                return [GameMessage.narrative("You're not carrying anything.")]
            for item_id in carried:
                self.state.drop_item(item_id)
            plural = "s" if len(carried) > 1 else ""
            return [GameMessage.narrative(f"You drop {len(carried)} item{plural}.")]

        if (missing := self._not_here(command.direct_object)) is not None:
            return missing
        if not self.state.drop_item(command.direct_id):
            return [GameMessage.narrative("You don't have that.")]
        return [GameMessage.narrative("Dropped.")]

    # =========================================================================
    # Game info
    # =========================================================================

    def score(self, command: Command) -> list[GameMessage]:
        progression = self.progression
        return [
            GameMessage.system(
                f"Score: {progression.score} of {progression.max_score} points in {progression.moves} moves."
            )
        ]

    def hint(self, command: Command) -> list[GameMessage]:
        result = self.puzzles.request_hint()
        if result is None:
            return [GameMessage.system("There are no hints available right now.")]
        if not result.success:
            return [GameMessage.system(result.message)]
        return [GameMessage(MessageKind.HINT, result.message)]

    def wait(self, command: Command) -> list[GameMessage]:
        return [GameMessage.narrative("Time passes...")]

    def help(self, command: Command) -> list[GameMessage]:
        return [GameMessage.system(HELP_TEXT)]

    def _not_here(self, reference: ObjectReference | None) -> list[GameMessage] | None:
        """Error message for a reference that does not name something in scope."""
        if reference is None or reference.kind == ReferenceKind.BOUND:
            return None
        text = reference.text or "such thing"
        return [GameMessage.error(self.vocabulary.error("object_not_found", object=text))]
