"""GameEngine: one player turn from raw text to tagged messages.

Turn pipeline:
1. Parse (with the scene of the current room and the parser context)
2. Scripted events (room, then direct object, then global)
3. Puzzle triggers
4. Built-in verbs (go, look, examine, take, drop, ...)
5. Dynamic responder for anything still unhandled

After each turn and each tick, the win and failure conditions are checked.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from somnium.conditions.evaluator import ConditionEvaluator
from somnium.config import Settings, get_settings
from somnium.engine.builtin_verbs import BuiltinVerbs
from somnium.engine.messages import GameMessage, MessageKind, MessageLog
from somnium.engine.responder import CannedResponder, DynamicResponder
from somnium.engine.snapshot import EngineSnapshot
from somnium.events.event_manager import EventManager
from somnium.executor.action_executor import ActionExecutor
from somnium.executor.scheduler import ActionScheduler
from somnium.managers.achievement_manager import AchievementManager, AchievementUnlock
from somnium.managers.hooks import CompositeHook, ProgressionHook
from somnium.managers.movement_manager import MovementManager
from somnium.managers.progression_manager import EndingResult, ProgressionManager
from somnium.managers.puzzle_manager import PuzzleManager, PuzzleResult
from somnium.parser.command_parser import CommandParser
from somnium.world.commands import Command, ParseResult, ParserContext
from somnium.world.schemas import WorldTemplate
from somnium.world.state import WorldState
from somnium.world.vocabulary import Vocabulary

logger = logging.getLogger(__name__)

# Verbs the host application handles (saving, quitting, ...)
SESSION_VERBS = frozenset({"save", "load", "quit", "restart"})


class TurnSource(str, Enum):
    """Which stage of the pipeline handled a turn."""

    PARSER = "parser"
    EVENT = "event"
    PUZZLE = "puzzle"
    BUILTIN = "builtin"
    RESPONDER = "responder"
    SESSION = "session"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """Everything one call to ``process_input`` produced.

    Attributes:
        text: The raw input.
        handled_by: Pipeline stage that handled the turn.
        parse: Parser result.
        messages: Messages for the display, in order.
        ending: Ending id if the game ended this turn.
        request: Session verb for the host ("save", "quit", ...).
    """

    text: str
    handled_by: TurnSource
    parse: ParseResult | None = None
    messages: list[GameMessage] = field(default_factory=list)
    ending: str | None = None
    request: str | None = None

    @property
    def command(self) -> Command | None:
        return self.parse.command if self.parse is not None else None

    @property
    def text_lines(self) -> list[str]:
        return [message.text for message in self.messages]


class EngineHook:
    """Turns progression notifications into queued game messages."""

    def __init__(self) -> None:
        self.pending: list[GameMessage] = []

    def on_score_changed(self, old_score: int, new_score: int, reason: str) -> None:
        pass

    def on_achievement_unlocked(self, unlock: AchievementUnlock) -> None:
        text = f"Achievement unlocked: {unlock.name}"
        if unlock.points:
            text += f" (+{unlock.points})"
        self.pending.append(GameMessage(MessageKind.ACHIEVEMENT, text))

    def on_ending(self, result: EndingResult) -> None:
        self.pending.append(GameMessage.system(f"*** {result.name or result.ending_id} ***"))
        if result.text:
            self.pending.append(GameMessage.narrative(result.text))
        stats = result.statistics
        if stats is not None:
            self.pending.append(
                GameMessage.system(
                    f"Final score: {stats.score} of {stats.max_score} points in {stats.moves} moves."
                )
            )

    def drain(self) -> list[GameMessage]:
        messages, self.pending = self.pending, []
        return messages


class GameEngine:
    """Runs a world: parses input, dispatches it and tracks the session.

    Args:
        world: World definition.
        vocabulary: Word tables (built-in defaults if omitted).
        responder: Handles unscripted commands.
        hook: Extra progression listener (popups, sounds).
        clock: Source of the current time in seconds.
        settings: Engine settings (defaults to ``get_settings()``).

    Example:
        engine = GameEngine(load_world("tutorial.yaml"))
        turn = engine.process_input("take the lamp")
        for message in turn.messages:
            display(message)
        engine.tick()
    """

    def __init__(
        self,
        world: WorldTemplate,
        vocabulary: Vocabulary | None = None,
        responder: DynamicResponder | None = None,
        hook: ProgressionHook | None = None,
        clock: Callable[[], float] = time.monotonic,
        settings: Settings | None = None,
    ) -> None:
        self.world = world
        self.settings = settings or get_settings()
        self.vocabulary = vocabulary or Vocabulary()
        self.responder: DynamicResponder = responder or CannedResponder()
        self.clock = clock
        self.log = MessageLog()

        self.state = WorldState(world)
        self.evaluator = ConditionEvaluator(self.state.flags, inventory=self.state)

        self._notifications = EngineHook()
        hooks: list[ProgressionHook] = [self._notifications]
        if hook is not None:
            hooks.append(hook)
        self.progression = ProgressionManager(
            world,
            AchievementManager(world.achievements),
            self.evaluator,
            hook=CompositeHook(hooks),
            clock=clock,
            settings=self.settings,
        )

        self.scheduler = ActionScheduler(clock)
        self.executor = ActionExecutor(self.state, self.scheduler, self.progression)
        self.events = EventManager(self.state, self.executor, self.evaluator, self.vocabulary)
        self.puzzles = PuzzleManager(
            world.puzzles,
            self.state,
            self.executor,
            self.evaluator,
            progression=self.progression,
            events=self.events,
            clock=clock,
            hint_cooldown=self.settings.hint_cooldown_seconds,
            hint_after_attempts=self.settings.hint_after_attempts,
            vocabulary=self.vocabulary,
        )
        self.movement = MovementManager(self.state, self.evaluator, self.progression, self.events)
        self.builtins = BuiltinVerbs(self.state, self.movement, self.progression, self.puzzles, self.vocabulary)
        self.parser = CommandParser(self.vocabulary, verb_window=self.settings.verb_window)
        self.context = ParserContext()

        self.progression.record_room_visit(self.state.current_room_id)
        self._notifications.drain()

    @property
    def ended(self) -> bool:
        return self.progression.ended

    def start(self) -> list[GameMessage]:
        """Opening message: the first room."""
        start = len(self.log)
        self._emit(GameMessage.narrative(self.builtins.describe_room()))
        return self.log.since(start)

    # =========================================================================
    # Turns
    # =========================================================================

    def process_input(self, text: str) -> TurnResult:
        """Handle one line of player input."""
        start = len(self.log)

        parse, self.context = self.parser.parse(text, self.state.scene(), self.context)
        if not parse.success:
            self._emit(GameMessage.error(parse.message or self.vocabulary.error("unknown_verb")))
            return TurnResult(text=text, handled_by=TurnSource.PARSER, parse=parse, messages=self.log.since(start))

        command = parse.command
        if command.verb in SESSION_VERBS:
            return TurnResult(
                text=text,
                handled_by=TurnSource.SESSION,
                parse=parse,
                request=command.verb,
            )

        if self.ended:
            self._emit(GameMessage.system("The game is over. Restart to play again."))
            return TurnResult(
                text=text,
                handled_by=TurnSource.GAME_OVER,
                parse=parse,
                messages=self.log.since(start),
            )

        logger.debug(f"Turn: {command}")
        handled_by, ending = self._dispatch(command, text)
        self._flush_notifications()
        ending = self._check_completion() or ending

        return TurnResult(
            text=text,
            handled_by=handled_by,
            parse=parse,
            messages=self.log.since(start),
            ending=ending,
        )

    def _dispatch(self, command: Command, text: str) -> tuple[TurnSource, str | None]:
        npc_id = command.direct_id
        if npc_id is not None and self.state.get_npc(npc_id) is not None:
            self.progression.record_npc_met(npc_id)

        event = self.events.execute_command(command)
        if event.scripted:
            self._narrate(event.messages)
            return TurnSource.EVENT, event.ending

        puzzle = self.puzzles.attempt_from_command(command)
        if puzzle is not None:
            self._puzzle_messages(puzzle)
            return TurnSource.PUZZLE, puzzle.ending

        builtin = self.builtins.handle(command)
        if builtin is not None:
            for message in builtin:
                self._emit(message)
            return TurnSource.BUILTIN, None

        reply = self.responder.respond(self._responder_context(text), command)
        self._emit(GameMessage.narrative(reply))
        return TurnSource.RESPONDER, None

    def _puzzle_messages(self, result: PuzzleResult) -> None:
        self._emit(GameMessage.narrative(result.message))
        self._narrate(result.messages)
        if result.hint:
            self._emit(GameMessage(MessageKind.HINT, f"Hint: {result.hint}"))

    def _responder_context(self, text: str) -> dict[str, Any]:
        room = self.state.current_room
        return {
            "room_id": room.id,
            "room_name": room.name,
            "room_description": room.description,
            "inventory": list(self.state.inventory),
            "flags": self.state.flags.as_dict(),
            "input": text,
        }

    # =========================================================================
    # Game loop
    # =========================================================================

    def tick(self, now: float | None = None) -> list[GameMessage]:
        """Run due scheduled actions and check for completion."""
        start = len(self.log)
        if self.ended:
            return []

        now = self.clock() if now is None else now
        report = self.executor.run_due(now)
        self._narrate(report.messages)
        self._flush_notifications()
        self._check_completion()
        return self.log.since(start)

    def _check_completion(self) -> str | None:
        """Trigger an ending if the win or a failure condition holds."""
        if self.ended:
            self._flush_notifications()
            return self.progression.ending_id

        check = self.progression.check_completion()
        if not check.completed:
            return None
        result = self.progression.trigger_ending(check.ending_id)
        self._flush_notifications()
        return result.ending_id if result.success else None

    # =========================================================================
    # Messages
    # =========================================================================

    def _emit(self, message: GameMessage) -> None:
        self.log.append(message)

    def _narrate(self, lines: list[str]) -> None:
        for line in lines:
            self._emit(GameMessage.narrative(line))

    def _flush_notifications(self) -> None:
        for message in self._notifications.drain():
            self._emit(message)

    # =========================================================================
    # Snapshots
    # =========================================================================

    def snapshot(self) -> EngineSnapshot:
        now = self.clock()
        return EngineSnapshot(
            world_title=self.world.metadata.title,
            flags=self.state.flags.as_dict(),
            world=self.state.to_dict(),
            puzzles=self.puzzles.to_dict(now),
            progression=self.progression.to_dict(),
            scheduled=self.scheduler.to_list(now),
            parser_context=self.context.to_dict(),
        )

    def restore(self, snapshot: EngineSnapshot | dict[str, Any]) -> None:
        """Restore a snapshot taken from a session of the same world."""
        if not isinstance(snapshot, EngineSnapshot):
            snapshot = EngineSnapshot.model_validate(snapshot)

        now = self.clock()
        self.state.flags.load(snapshot.flags)
        self.state.load_dict(snapshot.world)
        self.puzzles.load_dict(snapshot.puzzles, now)
        self.progression.load_dict(snapshot.progression)
        self.scheduler.load_list(snapshot.scheduled, now)
        self.context = ParserContext.from_dict(snapshot.parser_context) if snapshot.parser_context else ParserContext()
        logger.info(f"Restored session at room {self.state.current_room_id}")
