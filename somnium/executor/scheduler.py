"""Time-ordered queue of deferred actions.

Scheduled actions are drained explicitly by the game loop (``tick``) rather
than by independent timers, so their order is fully determined by their due
times and insertion order.
"""

import heapq
import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from somnium.world.actions import ActionBase, coerce_action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledAction:
    """An action waiting for its due time."""

    due: float
    sequence: int
    action: ActionBase


class ActionScheduler:
    """Min-heap of actions keyed by (due time, insertion order).

    While an action is being drained, anything it schedules is timed from
    that action's due time, so draining is re-entrant and due times never
    go backwards.

    Args:
        clock: Source of the current time in seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._heap: list[tuple[float, int, ActionBase]] = []
        self._counter = itertools.count()
        self._cursor: float | None = None

    def __len__(self) -> int:
        return len(self._heap)

    def schedule(self, action: ActionBase, delay: float, now: float | None = None) -> ScheduledAction:
        """Queue ``action`` to run ``delay`` seconds from now."""
        if now is None:
            now = self._cursor if self._cursor is not None else self.clock()
        entry = ScheduledAction(due=now + max(delay, 0.0), sequence=next(self._counter), action=action)
        heapq.heappush(self._heap, (entry.due, entry.sequence, entry.action))
        logger.debug(f"Scheduled {action.type} at {entry.due:.2f}")
        return entry

    def next_due(self) -> float | None:
        return self._heap[0][0] if self._heap else None

    def pending(self) -> list[ScheduledAction]:
        return [ScheduledAction(due, seq, action) for due, seq, action in sorted(self._heap)]

    def drain(self, now: float, run: Callable[[ActionBase], Any]) -> int:
        """Run every action due at or before ``now`` in due-time order.

        Args:
            now: Current time.
            run: Called with each due action.

        Returns:
            Number of actions run.
        """
        count = 0
        while self._heap and self._heap[0][0] <= now:
            due, _, action = heapq.heappop(self._heap)
            previous = self._cursor
            self._cursor = due
            try:
                run(action)
            finally:
                self._cursor = previous
            count += 1
        return count

    def clear(self) -> None:
        self._heap.clear()

    # =========================================================================
    # Snapshot
    # =========================================================================

    def to_list(self, now: float | None = None) -> list[dict[str, Any]]:
        """Pending actions as remaining delays, in run order."""
        now = self.clock() if now is None else now
        return [
            {"delay": max(entry.due - now, 0.0), "action": entry.action.model_dump(mode="json")}
            for entry in self.pending()
        ]

    def load_list(self, entries: list[dict[str, Any]], now: float | None = None) -> None:
        """Replace the queue with entries produced by ``to_list``."""
        now = self.clock() if now is None else now
        self.clear()
        for entry in entries:
            self.schedule(coerce_action(entry.get("action")), float(entry.get("delay", 0.0)), now=now)
