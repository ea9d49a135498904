"""Achievement manager for tracking and unlocking achievements.

Holds the achievement definitions of a world, the append-only set of
unlocked achievements and progress toward progressive achievements.
Score awards and follow-up checks (milestones, meta achievements) are
driven by ``ProgressionManager``.
"""

import logging
from dataclasses import dataclass

from somnium.world.schemas import AchievementDefinition

logger = logging.getLogger(__name__)


@dataclass
class AchievementUnlock:
    """Result of an achievement unlock attempt.

    ``success`` is False only for unknown achievements; unlocking an
    achievement twice succeeds with ``already_unlocked`` set.
    """

    success: bool
    achievement_id: str
    name: str = ""
    points: int = 0
    already_unlocked: bool = False
    message: str | None = None


@dataclass
class AchievementProgress:
    """Current progress toward an achievement."""

    achievement_id: str
    name: str
    current: int
    target: int | None
    percentage: float
    unlocked: bool


class AchievementManager:
    """Manages achievement definitions and unlocks.

    Args:
        definitions: Achievements declared by the world.
    """

    def __init__(self, definitions: list[AchievementDefinition] | None = None) -> None:
        self._definitions: dict[str, AchievementDefinition] = {
            definition.id: definition for definition in definitions or []
        }
        # Insertion-ordered so unlock order survives snapshots
        self._unlocked: dict[str, None] = {}
        self._progress: dict[str, int] = {
            definition.id: 0 for definition in self._definitions.values() if definition.progressive
        }

    def get(self, achievement_id: str) -> AchievementDefinition | None:
        return self._definitions.get(achievement_id)

    def is_defined(self, achievement_id: str) -> bool:
        return achievement_id in self._definitions

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self._unlocked

    @property
    def unlocked(self) -> list[str]:
        """Unlocked achievement ids in unlock order."""
        return list(self._unlocked)

    @property
    def total(self) -> int:
        return len(self._definitions)

    def all(self, include_hidden: bool = True) -> list[AchievementDefinition]:
        return [
            definition
            for definition in self._definitions.values()
            if include_hidden or not definition.hidden or definition.id in self._unlocked
        ]

    def unlock(self, achievement_id: str) -> AchievementUnlock:
        """Mark an achievement unlocked. Idempotent.

        Returns:
            AchievementUnlock; ``success`` is False for unknown ids.
        """
        definition = self._definitions.get(achievement_id)
        if definition is None:
            logger.warning(f"Unknown achievement '{achievement_id}'")
            return AchievementUnlock(
                success=False,
                achievement_id=achievement_id,
                message=f"Unknown achievement '{achievement_id}'",
            )

        if achievement_id in self._unlocked:
            return AchievementUnlock(
                success=True,
                achievement_id=achievement_id,
                name=definition.name,
                points=definition.points,
                already_unlocked=True,
            )

        self._unlocked[achievement_id] = None
        if definition.progressive and definition.target is not None:
            self._progress[achievement_id] = max(self._progress.get(achievement_id, 0), definition.target)
        logger.info(f"Achievement unlocked: {achievement_id}")
        return AchievementUnlock(
            success=True,
            achievement_id=achievement_id,
            name=definition.name,
            points=definition.points,
            message=f"Achievement unlocked: {definition.name}",
        )

    def add_progress(self, achievement_id: str, amount: int = 1) -> AchievementProgress | None:
        """Add progress to a progressive achievement.

        Returns:
            Progress after the update, or None for unknown or
            non-progressive achievements. ``unlocked`` reports whether the
            target has been reached; the caller performs the unlock.
        """
        definition = self._definitions.get(achievement_id)
        if definition is None or not definition.progressive:
            logger.warning(f"'{achievement_id}' is not a progressive achievement")
            return None

        self._progress[achievement_id] = self._progress.get(achievement_id, 0) + amount
        return self.get_progress(achievement_id)

    def get_progress(self, achievement_id: str) -> AchievementProgress | None:
        definition = self._definitions.get(achievement_id)
        if definition is None:
            return None

        target = definition.target
        current = self._progress.get(achievement_id, 0)
        if target is None:
            current = 1 if achievement_id in self._unlocked else 0
        reached = target is not None and current >= target

        percentage = 0.0
        if target:
            percentage = min(100.0, (current / target) * 100)
        elif achievement_id in self._unlocked:
            percentage = 100.0

        return AchievementProgress(
            achievement_id=achievement_id,
            name=definition.name,
            current=current,
            target=target,
            percentage=percentage,
            unlocked=achievement_id in self._unlocked or reached,
        )

    # =========================================================================
    # Snapshot
    # =========================================================================

    def to_dict(self) -> dict:
        return {"unlocked": self.unlocked, "progress": dict(self._progress)}

    def load_dict(self, data: dict) -> None:
        self._unlocked = {achievement_id: None for achievement_id in data.get("unlocked", [])}
        self._progress.update({key: int(value) for key, value in data.get("progress", {}).items()})
