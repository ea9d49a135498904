"""Progression hook protocol and implementations.

The ProgressionHook protocol defines the interface for receiving score,
achievement and ending notifications. A notification collaborator (popups,
a message log, a sound cue) implements it; the managers never render
anything themselves.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from somnium.managers.achievement_manager import AchievementUnlock

if TYPE_CHECKING:
    from somnium.managers.progression_manager import EndingResult


@runtime_checkable
class ProgressionHook(Protocol):
    """Protocol for progression notifications."""

    def on_score_changed(self, old_score: int, new_score: int, reason: str) -> None:
        """Called after the score changes."""
        ...

    def on_achievement_unlocked(self, unlock: AchievementUnlock) -> None:
        """Called once per newly unlocked achievement."""
        ...

    def on_ending(self, result: "EndingResult") -> None:
        """Called when an ending is triggered."""
        ...


class NullHook:
    """No-op hook used when nobody listens for notifications."""

    def on_score_changed(self, old_score: int, new_score: int, reason: str) -> None:
        pass

    def on_achievement_unlocked(self, unlock: AchievementUnlock) -> None:
        pass

    def on_ending(self, result: "EndingResult") -> None:
        pass


class CompositeHook:
    """Dispatches notifications to several hooks in order."""

    def __init__(self, hooks: list[ProgressionHook]) -> None:
        self.hooks = hooks

    def on_score_changed(self, old_score: int, new_score: int, reason: str) -> None:
        for hook in self.hooks:
            hook.on_score_changed(old_score, new_score, reason)

    def on_achievement_unlocked(self, unlock: AchievementUnlock) -> None:
        for hook in self.hooks:
            hook.on_achievement_unlocked(unlock)

    def on_ending(self, result: "EndingResult") -> None:
        for hook in self.hooks:
            hook.on_ending(result)
