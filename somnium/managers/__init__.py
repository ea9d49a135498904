"""Game managers.

- Achievements: definitions, unlocks and progressive counters
- Progression: score, milestones, story factors, statistics and endings
- Puzzles: single- and multi-step puzzles, hints and resets
- Movement: exit gating and room transitions
"""

from somnium.managers.achievement_manager import (
    AchievementManager,
    AchievementProgress,
    AchievementUnlock,
)
from somnium.managers.hooks import CompositeHook, NullHook, ProgressionHook
from somnium.managers.movement_manager import (
    MoveBlock,
    MoveCheck,
    MovementManager,
    MovementResult,
)
from somnium.managers.progression_manager import (
    CompletionCheck,
    EndingResult,
    FinalStatistics,
    ProgressionManager,
    ProgressStatistics,
)
from somnium.managers.puzzle_manager import (
    PuzzleManager,
    PuzzleResult,
    PuzzleState,
    PuzzleTriggerMatch,
)

__all__ = [
    # Achievements
    "AchievementManager",
    "AchievementProgress",
    "AchievementUnlock",
    # Hooks
    "CompositeHook",
    "NullHook",
    "ProgressionHook",
    # Movement
    "MoveBlock",
    "MoveCheck",
    "MovementManager",
    "MovementResult",
    # Progression
    "CompletionCheck",
    "EndingResult",
    "FinalStatistics",
    "ProgressionManager",
    "ProgressStatistics",
    # Puzzles
    "PuzzleManager",
    "PuzzleResult",
    "PuzzleState",
    "PuzzleTriggerMatch",
]
