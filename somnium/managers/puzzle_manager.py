"""Puzzle Manager for single- and multi-step puzzles.

Puzzle lifecycle:
- Not started -> started on the first attempt
- Started -> completed when the solution (or the last step) is correct
- Started -> permanently failed once attempts reach ``max_attempts``

Completed and permanently failed are terminal. Multi-step puzzles check
only the current step; a correct step runs its reward and advances.

Hints rotate through the puzzle's (or step's) hint list, repeating the last
one, and are rate-limited by a per-puzzle or per-step cooldown. A hint
requested during the cooldown is refused with ``None``.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

from somnium.conditions.evaluator import ConditionEvaluator
from somnium.config import get_settings
from somnium.executor.action_executor import ActionExecutor
from somnium.world.actions import ActionBase
from somnium.world.commands import Command
from somnium.world.schemas import PuzzleDefinition, PuzzleStep, PuzzleTrigger, SolutionSpec
from somnium.world.state import WorldState
from somnium.world.vocabulary import Vocabulary

logger = logging.getLogger(__name__)


class PuzzleProgression(Protocol):
    """Progression operations used when puzzles are solved or hinted."""

    def update_score(self, points: int, reason: str = "") -> int: ...

    def record_puzzle_solved(self, puzzle_id: str) -> None: ...

    def record_hint(self) -> None: ...


class NamedEvents(Protocol):
    def trigger_event(self, name: str, context: dict[str, Any] | None = None) -> Any: ...


@dataclass
class PuzzleState:
    """Mutable progress of one puzzle."""

    started: bool = False
    completed: bool = False
    failed: bool = False
    permanent: bool = False
    attempts: int = 0
    current_step: int = 0
    completed_steps: list[int] = field(default_factory=list)
    completed_at: float | None = None


@dataclass
class PuzzleResult:
    """Result of a puzzle attempt, hint request or completion.

    Attributes:
        success: Whether the attempt (or step) was correct.
        puzzle_id: Puzzle concerned.
        message: Player-facing text.
        hint: Hint offered alongside a failure, if any.
        points: Points awarded on completion.
        progress: "<done>/<total>" for multi-step puzzles.
        next_hint: Hint of the step that just became current.
        permanent: The puzzle is permanently failed.
        completed: The whole puzzle is solved.
        messages: Messages from reward actions and completion events.
        ending: Ending triggered by a reward action.
    """

    success: bool
    puzzle_id: str
    message: str = ""
    hint: str | None = None
    points: int = 0
    progress: str | None = None
    next_hint: str | None = None
    permanent: bool = False
    completed: bool = False
    messages: list[str] = field(default_factory=list)
    ending: str | None = None

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{status}] {self.puzzle_id}: {self.message}"


@dataclass(frozen=True)
class PuzzleTriggerMatch:
    """A command that counts as an attempt at a puzzle."""

    puzzle: PuzzleDefinition
    step: int | None = None


class PuzzleManager:
    """Tracks puzzle state, checks solutions and hands out hints.

    Args:
        world_puzzles: Puzzle definitions.
        state: World state (current room for trigger locations).
        executor: Runs rewards, failure consequences and reset actions.
        evaluator: Checks trigger conditions.
        progression: Receives points, solved puzzles and hint counts.
        events: Runs the ``puzzle_completed`` named event.
        clock: Source of the current time in seconds.
        hint_cooldown: Seconds between hints for one puzzle or step.
        hint_after_attempts: Failed single-step attempts before hints are
            offered with the failure.
        vocabulary: Canonicalizes verbs written in triggers and solutions.
    """

    def __init__(
        self,
        world_puzzles: Iterable[PuzzleDefinition],
        state: WorldState,
        executor: ActionExecutor,
        evaluator: ConditionEvaluator,
        progression: PuzzleProgression | None = None,
        events: NamedEvents | None = None,
        clock: Callable[[], float] = time.monotonic,
        hint_cooldown: float | None = None,
        hint_after_attempts: int | None = None,
        vocabulary: Vocabulary | None = None,
    ) -> None:
        settings = get_settings()
        self.state = state
        self.executor = executor
        self.evaluator = evaluator
        self.progression = progression
        self.events = events
        self.clock = clock
        self.hint_cooldown = settings.hint_cooldown_seconds if hint_cooldown is None else hint_cooldown
        self.hint_after_attempts = (
            settings.hint_after_attempts if hint_after_attempts is None else hint_after_attempts
        )
        self.vocabulary = vocabulary or Vocabulary()

        self._puzzles: dict[str, PuzzleDefinition] = {puzzle.id: puzzle for puzzle in world_puzzles}
        self._states: dict[str, PuzzleState] = {puzzle_id: PuzzleState() for puzzle_id in self._puzzles}
        # Hint bookkeeping keyed by puzzle id or "<puzzle id>:step<n>"
        self._hint_counts: dict[str, int] = {}
        self._hint_times: dict[str, float] = {}
        self._reset_counts: dict[str, int] = {}

    def get(self, puzzle_id: str) -> PuzzleDefinition | None:
        return self._puzzles.get(puzzle_id)

    # =========================================================================
    # Triggers
    # =========================================================================

    def find_trigger(self, command: Command) -> PuzzleTriggerMatch | None:
        """Find the puzzle, or current puzzle step, a command triggers."""
        for puzzle in self._puzzles.values():
            if self._matches_trigger(command, puzzle.trigger):
                return PuzzleTriggerMatch(puzzle=puzzle)
            if puzzle.is_multi_step:
                index = self._states[puzzle.id].current_step
                if index < len(puzzle.steps) and self._matches_trigger(command, puzzle.steps[index].trigger):
                    return PuzzleTriggerMatch(puzzle=puzzle, step=index)
        return None

    def attempt_from_command(self, command: Command) -> PuzzleResult | None:
        """Treat a triggering command as an attempt. None if nothing triggers."""
        match = self.find_trigger(command)
        if match is None:
            return None

        solution: dict[str, Any] = {
            "verb": command.verb,
            "item": command.direct_id,
            "target": command.indirect_id,
        }
        if command.direct_object is not None and not command.direct_object.is_bound:
            solution["value"] = command.direct_object.text
        logger.debug(f"Command {command} triggers puzzle {match.puzzle.id}")
        return self.attempt_puzzle(match.puzzle.id, solution)

    def _matches_trigger(self, command: Command, trigger: PuzzleTrigger | None) -> bool:
        # A trigger needs at least one command field or location to match on
        if trigger is None or not (trigger.verb or trigger.item or trigger.target or trigger.location):
            return False
        if trigger.verb and self._canonical(trigger.verb) != command.verb:
            return False
        if trigger.item and trigger.item != command.direct_id:
            return False
        if trigger.target and trigger.target != command.indirect_id:
            return False
        if trigger.location and trigger.location != self.state.current_room_id:
            return False
        return self.evaluator.evaluate_all(trigger.conditions)

    def _canonical(self, verb: str) -> str:
        return self.vocabulary.canonical_verb(verb) or verb

    # =========================================================================
    # Attempts
    # =========================================================================

    def attempt_puzzle(self, puzzle_id: str, solution: dict[str, Any]) -> PuzzleResult:
        """Attempt a puzzle with a proposed solution.

        Args:
            puzzle_id: Puzzle to attempt.
            solution: Any of ``verb``, ``item``, ``target``, ``value``,
                ``sequence``.

        Returns:
            PuzzleResult. Unknown puzzles give a failure result.
        """
        puzzle = self._puzzles.get(puzzle_id)
        if puzzle is None:
            logger.warning(f"Attempt on unknown puzzle '{puzzle_id}'")
            return PuzzleResult(success=False, puzzle_id=puzzle_id, message="Unknown puzzle")

        state = self._states[puzzle_id]
        state.started = True
        state.attempts += 1

        if state.completed:
            return PuzzleResult(
                success=False,
                puzzle_id=puzzle_id,
                message=puzzle.completed_message or "You've already solved this puzzle.",
                completed=True,
            )
        if state.permanent:
            return PuzzleResult(
                success=False,
                puzzle_id=puzzle_id,
                message=puzzle.permanent_failure_message or "You've failed this puzzle too many times.",
                permanent=True,
            )

        if puzzle.is_multi_step:
            return self._attempt_step(puzzle, state, solution)

        if self._check_solution(solution, puzzle.solution):
            return self._complete(puzzle, state)

        state.failed = True
        if self._attempts_exhausted(puzzle, state):
            return self._fail_permanently(puzzle, state)

        hint = self.get_hint(puzzle_id) if state.attempts >= self.hint_after_attempts else None
        return PuzzleResult(
            success=False,
            puzzle_id=puzzle_id,
            message=puzzle.failure_message or "That doesn't work.",
            hint=hint,
        )

    def _attempt_step(self, puzzle: PuzzleDefinition, state: PuzzleState, solution: dict[str, Any]) -> PuzzleResult:
        index = state.current_step
        if index >= len(puzzle.steps):
            logger.warning(f"Puzzle {puzzle.id} has no step {index}")
            return PuzzleResult(success=False, puzzle_id=puzzle.id, message="Puzzle error - no current step")
        step = puzzle.steps[index]

        if not self._check_solution(solution, step.solution):
            state.failed = True
            if self._attempts_exhausted(puzzle, state):
                return self._fail_permanently(puzzle, state)
            return PuzzleResult(
                success=False,
                puzzle_id=puzzle.id,
                message=step.failure_message or "That doesn't work for this step.",
                hint=self.get_step_hint(puzzle.id, index),
            )

        state.completed_steps.append(index)
        messages, ending = self._run(step.reward)

        if index >= len(puzzle.steps) - 1:
            result = self._complete(puzzle, state)
            result.messages[:0] = messages
            result.ending = result.ending or ending
            if step.success_message:
                result.message = f"{step.success_message}\n{result.message}"
            return result

        state.current_step += 1
        next_step: PuzzleStep = puzzle.steps[state.current_step]
        logger.debug(f"Puzzle {puzzle.id} advanced to step {state.current_step}")
        return PuzzleResult(
            success=True,
            puzzle_id=puzzle.id,
            message=step.success_message or f"Good! {next_step.hint or 'Keep going...'}",
            next_hint=next_step.hint,
            progress=f"{state.current_step}/{len(puzzle.steps)}",
            messages=messages,
            ending=ending,
        )

    def _check_solution(self, attempted: dict[str, Any], expected: SolutionSpec | None) -> bool:
        """Every field present in the expected solution must match."""
        if expected is None:
            return False
        if expected.verb and self._canonical(expected.verb) != attempted.get("verb"):
            return False
        if expected.item and expected.item != attempted.get("item"):
            return False
        if expected.target and expected.target != attempted.get("target"):
            return False
        if expected.value is not None and not _values_equal(attempted.get("value"), expected.value):
            return False
        if expected.sequence is not None:
            sequence = attempted.get("sequence")
            if sequence is None or list(sequence) != list(expected.sequence):
                return False
        return True

    def _attempts_exhausted(self, puzzle: PuzzleDefinition, state: PuzzleState) -> bool:
        return puzzle.max_attempts is not None and state.attempts >= puzzle.max_attempts

    def _complete(self, puzzle: PuzzleDefinition, state: PuzzleState) -> PuzzleResult:
        state.completed = True
        state.completed_at = self.clock()
        logger.info(f"Puzzle completed: {puzzle.id} after {state.attempts} attempt(s)")

        messages, ending = self._run(puzzle.reward)
        if self.progression is not None:
            if puzzle.points:
                self.progression.update_score(puzzle.points, reason=f"puzzle {puzzle.id}")
            self.progression.record_puzzle_solved(puzzle.id)
        if puzzle.completion_flag:
            self.state.flags.set(puzzle.completion_flag, True)

        if self.events is not None:
            event = self.events.trigger_event(
                "puzzle_completed",
                {
                    "puzzle_id": puzzle.id,
                    "attempts": state.attempts,
                    "hints_used": self._hints_used(puzzle.id),
                },
            )
            messages.extend(event.messages)
            ending = ending or event.ending

        return PuzzleResult(
            success=True,
            puzzle_id=puzzle.id,
            message=puzzle.success_message or "You solved the puzzle!",
            points=puzzle.points,
            progress=f"{len(puzzle.steps)}/{len(puzzle.steps)}" if puzzle.is_multi_step else None,
            completed=True,
            messages=messages,
            ending=ending,
        )

    def _fail_permanently(self, puzzle: PuzzleDefinition, state: PuzzleState) -> PuzzleResult:
        state.failed = True
        state.permanent = True
        logger.info(f"Puzzle permanently failed: {puzzle.id}")
        messages, ending = self._run(puzzle.failure_consequence)
        return PuzzleResult(
            success=False,
            puzzle_id=puzzle.id,
            message=puzzle.permanent_failure_message or "You've failed this puzzle too many times.",
            permanent=True,
            messages=messages,
            ending=ending,
        )

    def _run(self, actions: list[ActionBase]) -> tuple[list[str], str | None]:
        if not actions:
            return [], None
        report = self.executor.execute_all(actions)
        return report.messages, report.ending

    # =========================================================================
    # Hints
    # =========================================================================

    def get_hint(self, puzzle_id: str) -> str | None:
        """Next hint for a puzzle, or None if it has none or is on cooldown."""
        puzzle = self._puzzles.get(puzzle_id)
        if puzzle is None or not puzzle.hints:
            return None
        return self._next_hint(puzzle_id, puzzle.hints)

    def get_step_hint(self, puzzle_id: str, step_index: int) -> str | None:
        """Next hint for one step of a multi-step puzzle."""
        puzzle = self._puzzles.get(puzzle_id)
        if puzzle is None or step_index >= len(puzzle.steps):
            return None
        hints = puzzle.steps[step_index].hints
        if not hints:
            return None
        return self._next_hint(f"{puzzle_id}:step{step_index}", hints)

    def request_hint(self) -> PuzzleResult | None:
        """Hint for the first puzzle in progress (None if nothing is active)."""
        for puzzle_id, state in self._states.items():
            if not state.started or state.completed or state.permanent:
                continue
            puzzle = self._puzzles[puzzle_id]
            step_hints = (
                puzzle.steps[state.current_step].hints
                if puzzle.is_multi_step and state.current_step < len(puzzle.steps)
                else []
            )
            if not puzzle.hints and not step_hints:
                return PuzzleResult(
                    success=False,
                    puzzle_id=puzzle_id,
                    message="There are no hints for this puzzle.",
                )
            hint = self.get_hint(puzzle_id)
            if hint is None and puzzle.is_multi_step:
                hint = self.get_step_hint(puzzle_id, state.current_step)
            if hint is None:
                return PuzzleResult(
                    success=False,
                    puzzle_id=puzzle_id,
                    message="You'll have to wait a little before another hint.",
                )
            return PuzzleResult(success=True, puzzle_id=puzzle_id, message=hint, hint=hint)
        return None

    def _next_hint(self, key: str, hints: list[str]) -> str | None:
        now = self.clock()
        last = self._hint_times.get(key)
        if last is not None and now - last < self.hint_cooldown:
            logger.debug(f"Hint for {key} on cooldown")
            return None

        count = self._hint_counts.get(key, 0)
        self._hint_counts[key] = count + 1
        self._hint_times[key] = now
        if self.progression is not None:
            self.progression.record_hint()
        return hints[min(count, len(hints) - 1)]

    def _hints_used(self, puzzle_id: str) -> int:
        return sum(
            count
            for key, count in self._hint_counts.items()
            if key == puzzle_id or key.startswith(f"{puzzle_id}:")
        )

    # =========================================================================
    # Reset and queries
    # =========================================================================

    def reset_puzzle(self, puzzle_id: str) -> bool:
        """Clear a puzzle's progress and run its reset actions.

        Returns:
            False for unknown, no-reset or permanently failed puzzles.
        """
        puzzle = self._puzzles.get(puzzle_id)
        if puzzle is None:
            logger.warning(f"Reset of unknown puzzle '{puzzle_id}'")
            return False
        if puzzle.no_reset or self._states[puzzle_id].permanent:
            return False

        self._states[puzzle_id] = PuzzleState()
        self._reset_counts[puzzle_id] = self._reset_counts.get(puzzle_id, 0) + 1
        self._run(puzzle.reset_actions)
        logger.info(f"Puzzle reset: {puzzle_id}")
        return True

    def get_puzzle_state(self, puzzle_id: str) -> dict[str, Any] | None:
        puzzle = self._puzzles.get(puzzle_id)
        if puzzle is None:
            return None
        state = self._states[puzzle_id]
        info: dict[str, Any] = {
            "id": puzzle_id,
            "name": puzzle.name,
            "started": state.started,
            "completed": state.completed,
            "failed": state.failed,
            "permanent": state.permanent,
            "attempts": state.attempts,
        }
        if puzzle.is_multi_step:
            info["multi_step"] = True
            info["current_step"] = state.current_step
            info["total_steps"] = len(puzzle.steps)
            info["completed_steps"] = len(state.completed_steps)
        return info

    def active_puzzles(self) -> list[dict[str, Any]]:
        """Puzzles started but neither solved nor permanently failed."""
        return [
            self.get_puzzle_state(puzzle_id)
            for puzzle_id, state in self._states.items()
            if state.started and not state.completed and not state.permanent
        ]

    def statistics(self) -> dict[str, Any]:
        attempted = sum(1 for state in self._states.values() if state.started)
        completed = sum(1 for state in self._states.values() if state.completed)
        return {
            "total_puzzles": len(self._puzzles),
            "attempted": attempted,
            "completed": completed,
            "completion_rate": completed / attempted if attempted else 0.0,
            "total_hints": sum(self._hint_counts.values()),
            "total_resets": sum(self._reset_counts.values()),
        }

    # =========================================================================
    # Snapshot
    # =========================================================================

    def to_dict(self, now: float | None = None) -> dict[str, Any]:
        """Puzzle states plus hint bookkeeping (cooldowns as seconds elapsed)."""
        now = self.clock() if now is None else now
        return {
            "states": {puzzle_id: asdict(state) for puzzle_id, state in self._states.items()},
            "hint_counts": dict(self._hint_counts),
            "hint_ages": {key: now - last for key, last in self._hint_times.items()},
            "reset_counts": dict(self._reset_counts),
        }

    def load_dict(self, data: dict[str, Any], now: float | None = None) -> None:
        now = self.clock() if now is None else now
        for puzzle_id, values in data.get("states", {}).items():
            if puzzle_id in self._puzzles:
                self._states[puzzle_id] = PuzzleState(**values)
        self._hint_counts = {key: int(value) for key, value in data.get("hint_counts", {}).items()}
        self._hint_times = {key: now - float(age) for key, age in data.get("hint_ages", {}).items()}
        self._reset_counts = {key: int(value) for key, value in data.get("reset_counts", {}).items()}


def _values_equal(attempted: Any, expected: Any) -> bool:
    """Compare solution values, treating typed text and numbers alike."""
    if attempted == expected:
        return True
    if isinstance(attempted, str) and not isinstance(expected, str):
        return attempted.strip().lower() == str(expected).lower()
    if isinstance(attempted, str) and isinstance(expected, str):
        return attempted.strip().lower() == expected.strip().lower()
    return False
