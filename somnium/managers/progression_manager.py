"""Progression Manager for score, achievements, statistics and endings.

Score rules:
- Score never drops below zero
- Crossing a milestone upward unlocks ``score_<milestone>`` once
- Reaching the configured maximum unlocks the perfect-score achievement
- Unlocking an achievement grants its points and re-checks the meta
  achievements (achievements for collecting achievements)

Ending rules:
- The win condition is checked first and resolves to the highest-priority
  ending that declares conditions, all of which hold (first defined wins
  a tie)
- Otherwise the first failure condition that holds ends the game with the
  generic failure ending
- No satisfied ending falls back to the default ending

Automatic achievements only unlock when the world defines them.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

from somnium.conditions.evaluator import ConditionEvaluator
from somnium.config import Settings, get_settings
from somnium.managers.achievement_manager import (
    AchievementManager,
    AchievementProgress,
    AchievementUnlock,
)
from somnium.managers.hooks import NullHook, ProgressionHook
from somnium.world.schemas import EndingDefinition, WorldTemplate

logger = logging.getLogger(__name__)


# Story path thresholds on the karma and heroism factors
PATH_THRESHOLD = 50

# Statistic count -> achievement id
EXPLORATION_ACHIEVEMENTS = {10: "explorer"}
COLLECTION_ACHIEVEMENTS = {10: "collector_bronze", 25: "collector_silver", 50: "collector_gold"}
PUZZLE_ACHIEVEMENTS = {5: "puzzle_solver", 10: "puzzle_master"}
DEATH_ACHIEVEMENTS = {10: "persistent"}

COMPLETIONIST_ACHIEVEMENT = "completionist"
SECRET_FINDER_ACHIEVEMENT = "secret_finder"

DEFAULT_ENDING_TEXT = "Your adventure has come to an end."
FAILURE_ENDING_TEXT = "Your adventure ends in failure."


@dataclass
class CompletionCheck:
    """Result of checking the win and failure conditions."""

    completed: bool
    ending_id: str | None = None
    failed: bool = False


@dataclass
class FinalStatistics:
    """Read-only summary shown when the game ends."""

    score: int
    max_score: int
    moves: int
    elapsed_seconds: float
    rooms_visited: int
    items_collected: int
    puzzles_solved: int
    npcs_met: int
    hints_used: int
    deaths: int
    achievements_unlocked: int
    achievements_total: int
    completion_percentage: float
    path: str


@dataclass
class EndingResult:
    """Result of triggering an ending."""

    success: bool
    ending_id: str
    name: str = ""
    text: str = ""
    failed: bool = False
    statistics: FinalStatistics | None = None
    message: str | None = None

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{status}] ending {self.ending_id}: {self.message or self.name}"


@dataclass
class ProgressStatistics:
    """Things the player has touched so far."""

    rooms_visited: list[str] = field(default_factory=list)
    items_collected: list[str] = field(default_factory=list)
    puzzles_solved: list[str] = field(default_factory=list)
    npcs_met: list[str] = field(default_factory=list)
    deaths: int = 0
    hints_used: int = 0


class ProgressionManager:
    """Tracks score, achievements, story factors and endings.

    Args:
        world: World definition (achievements, endings, progression config).
        achievements: Achievement ledger (built from the world if omitted).
        evaluator: Evaluates win, failure and ending conditions. If it has no
            progression view yet, this manager becomes it.
        hook: Receives score, achievement and ending notifications.
        clock: Source of the current time in seconds.
        settings: Milestones, meta thresholds and ending ids.

    Example:
        progression = ProgressionManager(world, evaluator=evaluator)
        progression.update_score(110)   # unlocks score_100 if defined
        check = progression.check_completion()
        if check.completed:
            progression.trigger_ending(check.ending_id)
    """

    def __init__(
        self,
        world: WorldTemplate,
        achievements: AchievementManager | None = None,
        evaluator: ConditionEvaluator | None = None,
        hook: ProgressionHook | None = None,
        clock: Callable[[], float] = time.monotonic,
        settings: Settings | None = None,
    ) -> None:
        self.world = world
        self.config = world.progression
        self.achievements = achievements or AchievementManager(world.achievements)
        self.evaluator = evaluator
        if evaluator is not None and evaluator.progression is None:
            evaluator.progression = self
        self.hook: ProgressionHook = hook or NullHook()
        self.clock = clock
        self.settings = settings or get_settings()

        self._endings: dict[str, EndingDefinition] = {ending.id: ending for ending in world.endings}

        self.score = 0
        self.moves = 0
        self.factors: dict[str, float] = {"karma": 0.0, "heroism": 0.0}
        self.path = "neutral"
        self.stats = ProgressStatistics()
        self.ended = False
        self.ending_id: str | None = None
        self.start_time = clock()

    @property
    def max_score(self) -> int:
        return self.config.max_score

    # =========================================================================
    # Score
    # =========================================================================

    def update_score(self, points: int, reason: str = "") -> int:
        """Add ``points`` (may be negative), clamping the total at zero.

        Returns:
            The new score.
        """
        old_score = self.score
        self.score = max(0, self.score + points)
        if self.score != old_score:
            logger.debug(f"Score {old_score} -> {self.score} ({reason or 'no reason'})")
            self.hook.on_score_changed(old_score, self.score, reason)

        self._check_milestones(old_score, self.score)
        self._check_perfect_score()
        return self.score

    def _check_milestones(self, old_score: int, new_score: int) -> None:
        for milestone in sorted(self.settings.score_milestones):
            if old_score < milestone <= new_score:
                self._auto_unlock(f"score_{milestone}")

    def _check_perfect_score(self) -> None:
        if self.max_score > 0 and self.score >= self.max_score:
            self._auto_unlock(self.settings.perfect_score_achievement)

    # =========================================================================
    # Achievements
    # =========================================================================

    def is_unlocked(self, achievement_id: str) -> bool:
        return self.achievements.is_unlocked(achievement_id)

    def unlock_achievement(self, achievement_id: str) -> AchievementUnlock:
        """Unlock an achievement, grant its points and check meta achievements.

        Idempotent: a second unlock returns ``already_unlocked`` and grants
        nothing.
        """
        result = self.achievements.unlock(achievement_id)
        if not result.success or result.already_unlocked:
            return result

        self.hook.on_achievement_unlocked(result)
        if result.points:
            self.update_score(result.points, reason=f"achievement {achievement_id}")
        self._check_meta_achievements()
        return result

    def update_progress(self, achievement_id: str, amount: int = 1) -> AchievementProgress | None:
        """Advance a progressive achievement, unlocking it at its target."""
        progress = self.achievements.add_progress(achievement_id, amount)
        if progress is not None and progress.unlocked and not self.is_unlocked(achievement_id):
            self.unlock_achievement(achievement_id)
            progress = self.achievements.get_progress(achievement_id)
        return progress

    def _check_meta_achievements(self) -> None:
        count = len(self.achievements.unlocked)
        for threshold, achievement_id in sorted(self.settings.meta_achievement_thresholds.items()):
            if count >= threshold:
                self._auto_unlock(achievement_id)

    def _auto_unlock(self, achievement_id: str) -> None:
        if self.achievements.is_defined(achievement_id) and not self.is_unlocked(achievement_id):
            self.unlock_achievement(achievement_id)

    def _check_thresholds(self, count: int, thresholds: dict[int, str]) -> None:
        for threshold, achievement_id in sorted(thresholds.items()):
            if count >= threshold:
                self._auto_unlock(achievement_id)

    # =========================================================================
    # Story factors
    # =========================================================================

    def factor(self, name: str) -> float:
        return self.factors.get(name, 0.0)

    def update_factor(self, factor: str, delta: float) -> float:
        """Adjust an ending factor and re-derive the story path."""
        self.factors[factor] = self.factors.get(factor, 0.0) + delta
        self.path = self._derive_path()
        return self.factors[factor]

    def set_path(self, path: str) -> None:
        logger.debug(f"Story path {self.path} -> {path}")
        self.path = path

    def _derive_path(self) -> str:
        karma = self.factor("karma")
        heroism = self.factor("heroism")
        if karma >= PATH_THRESHOLD and heroism >= PATH_THRESHOLD:
            return "hero"
        if karma <= -PATH_THRESHOLD:
            return "villain"
        if heroism >= PATH_THRESHOLD:
            return "champion"
        return "neutral"

    # =========================================================================
    # Statistics
    # =========================================================================

    def increment_moves(self) -> int:
        self.moves += 1
        return self.moves

    def elapsed_seconds(self) -> float:
        return max(0.0, self.clock() - self.start_time)

    def record_room_visit(self, room_id: str) -> None:
        if room_id in self.stats.rooms_visited:
            return
        self.stats.rooms_visited.append(room_id)

        room = next((room for room in self.world.rooms if room.id == room_id), None)
        if room is not None and room.secret:
            self._auto_unlock(SECRET_FINDER_ACHIEVEMENT)

        visited = len(self.stats.rooms_visited)
        self._check_thresholds(visited, EXPLORATION_ACHIEVEMENTS)
        total_rooms = self.config.total_rooms or len(self.world.rooms)
        if visited >= total_rooms:
            self._auto_unlock(COMPLETIONIST_ACHIEVEMENT)

    def record_item_collected(self, item_id: str) -> None:
        if item_id in self.stats.items_collected:
            return
        self.stats.items_collected.append(item_id)
        self._check_thresholds(len(self.stats.items_collected), COLLECTION_ACHIEVEMENTS)

    def record_puzzle_solved(self, puzzle_id: str) -> None:
        if puzzle_id in self.stats.puzzles_solved:
            return
        self.stats.puzzles_solved.append(puzzle_id)
        logger.info(f"Puzzle solved: {puzzle_id}")
        self._check_thresholds(len(self.stats.puzzles_solved), PUZZLE_ACHIEVEMENTS)

    def record_npc_met(self, npc_id: str) -> None:
        if npc_id not in self.stats.npcs_met:
            self.stats.npcs_met.append(npc_id)

    def record_death(self) -> None:
        self.stats.deaths += 1
        self._check_thresholds(self.stats.deaths, DEATH_ACHIEVEMENTS)

    def record_hint(self) -> None:
        self.stats.hints_used += 1

    def completion_percentage(self) -> float:
        """Share of the maximum score earned, 0-100."""
        if self.max_score <= 0:
            return 0.0
        return min(100.0, self.score / self.max_score * 100)

    # =========================================================================
    # Completion and endings
    # =========================================================================

    def check_completion(self) -> CompletionCheck:
        """Evaluate the win condition, then each failure condition."""
        if self.evaluator is None:
            return CompletionCheck(completed=False)

        win_condition = self.config.win_condition
        if win_condition is not None and self.evaluator.evaluate(win_condition):
            return CompletionCheck(completed=True, ending_id=self.determine_ending())

        for condition in self.config.failure_conditions:
            if self.evaluator.evaluate(condition):
                return CompletionCheck(completed=True, ending_id=self.settings.failure_ending, failed=True)

        return CompletionCheck(completed=False)

    def determine_ending(self) -> str:
        """Pick the highest-priority ending whose conditions all hold.

        Endings without conditions are only reachable by id (``END_GAME``
        or the default/failure fallbacks), never by resolution.
        """
        best: EndingDefinition | None = None
        for ending in self.world.endings:
            if not ending.conditions:
                continue
            if self.evaluator is not None and not self.evaluator.evaluate_all(ending.conditions):
                continue
            if best is None or ending.priority > best.priority:
                best = ending
        return best.id if best is not None else self.settings.default_ending

    def trigger_ending(self, ending_id: str | None = None) -> EndingResult:
        """End the game.

        Args:
            ending_id: Ending to trigger; resolved by priority if omitted.

        Returns:
            EndingResult with the final statistics. ``success`` is False for
            an unknown ending id or when the game has already ended.
        """
        if self.ended:
            return EndingResult(
                success=False,
                ending_id=self.ending_id or "",
                message="The game has already ended.",
            )

        ending_id = ending_id or self.determine_ending()
        ending = self._endings.get(ending_id)
        if ending is None:
            if ending_id == self.settings.default_ending:
                ending = EndingDefinition(id=ending_id, name="The End", text=DEFAULT_ENDING_TEXT)
            elif ending_id == self.settings.failure_ending:
                ending = EndingDefinition(id=ending_id, name="Game Over", text=FAILURE_ENDING_TEXT)
            else:
                logger.warning(f"Unknown ending '{ending_id}'")
                return EndingResult(success=False, ending_id=ending_id, message=f"Unknown ending '{ending_id}'")

        failed = ending_id == self.settings.failure_ending
        self.ended = True
        self.ending_id = ending_id

        if ending.achievement:
            self.unlock_achievement(ending.achievement)
        par_moves = self.config.par_moves
        if not failed and par_moves is not None and self.moves <= par_moves:
            self._auto_unlock(self.settings.par_moves_achievement)

        result = EndingResult(
            success=True,
            ending_id=ending_id,
            name=ending.name,
            text=ending.text,
            failed=failed,
            statistics=self.final_statistics(),
        )
        logger.info(f"Ending triggered: {ending_id}")
        self.hook.on_ending(result)
        return result

    def final_statistics(self) -> FinalStatistics:
        return FinalStatistics(
            score=self.score,
            max_score=self.max_score,
            moves=self.moves,
            elapsed_seconds=self.elapsed_seconds(),
            rooms_visited=len(self.stats.rooms_visited),
            items_collected=len(self.stats.items_collected),
            puzzles_solved=len(self.stats.puzzles_solved),
            npcs_met=len(self.stats.npcs_met),
            hints_used=self.stats.hints_used,
            deaths=self.stats.deaths,
            achievements_unlocked=len(self.achievements.unlocked),
            achievements_total=self.achievements.total,
            completion_percentage=self.completion_percentage(),
            path=self.path,
        )

    def status(self) -> dict[str, Any]:
        """Compact summary for the score command and status displays."""
        return {
            "score": self.score,
            "max_score": self.max_score,
            "moves": self.moves,
            "path": self.path,
            "achievements": f"{len(self.achievements.unlocked)}/{self.achievements.total}",
            "completion": round(self.completion_percentage(), 1),
            "ended": self.ended,
        }

    # =========================================================================
    # Snapshot
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "moves": self.moves,
            "elapsed_seconds": self.elapsed_seconds(),
            "factors": dict(self.factors),
            "path": self.path,
            "stats": asdict(self.stats),
            "ended": self.ended,
            "ending_id": self.ending_id,
            "achievements": self.achievements.to_dict(),
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.score = int(data.get("score", 0))
        self.moves = int(data.get("moves", 0))
        self.start_time = self.clock() - float(data.get("elapsed_seconds", 0.0))
        self.factors = {name: float(value) for name, value in data.get("factors", {}).items()}
        self.path = data.get("path", "neutral")
        self.stats = ProgressStatistics(**data.get("stats", {}))
        self.ended = bool(data.get("ended", False))
        self.ending_id = data.get("ending_id")
        self.achievements.load_dict(data.get("achievements", {}))
