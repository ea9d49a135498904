"""Tests for ActionScheduler - the deferred action queue."""

from somnium.executor.scheduler import ActionScheduler
from somnium.world.actions import ActionBase, ShowMessageAction, coerce_action
from tests.factories import FakeClock


def message(text: str) -> ShowMessageAction:
    return ShowMessageAction(text=text)


class TestOrdering:
    """Tests for due-time ordering."""

    def test_drains_in_due_order_then_insertion_order(self, scheduler: ActionScheduler, clock: FakeClock):
        scheduler.schedule(message("late"), 20)
        scheduler.schedule(message("early"), 5)
        scheduler.schedule(message("also early"), 5)
        ran: list[str] = []

        count = scheduler.drain(clock.now + 30, lambda action: ran.append(action.text))

        assert count == 3
        assert ran == ["early", "also early", "late"]
        assert len(scheduler) == 0

    def test_only_due_actions_run(self, scheduler: ActionScheduler, clock: FakeClock):
        scheduler.schedule(message("soon"), 5)
        scheduler.schedule(message("later"), 50)

        scheduler.drain(clock.now + 10, lambda action: None)

        assert len(scheduler) == 1
        assert scheduler.next_due() == clock.now + 50

    def test_negative_delay_runs_immediately(self, scheduler: ActionScheduler, clock: FakeClock):
        entry = scheduler.schedule(message("now"), -5)

        assert entry.due == clock.now

    def test_actions_scheduled_while_draining_are_timed_from_their_parent(
        self, scheduler: ActionScheduler, clock: FakeClock
    ):
        ran: list[str] = []

        def run(action: ActionBase) -> None:
            ran.append(action.text)
            if action.text == "first":
                scheduler.schedule(message("chained"), 3)

        scheduler.schedule(message("first"), 2)
        scheduler.drain(clock.now + 10, run)

        assert ran == ["first", "chained"]


class TestSnapshot:
    def test_round_trip_keeps_remaining_delays(self, clock: FakeClock):
        scheduler = ActionScheduler(clock)
        scheduler.schedule(coerce_action({"type": "SET_FLAG", "flag": "boom"}), 60)
        clock.advance(20)

        entries = scheduler.to_list()
        restored_clock = FakeClock(start=5.0)
        restored = ActionScheduler(restored_clock)
        restored.load_list(entries)

        assert entries[0]["delay"] == 40
        assert restored.next_due() == 45.0
        assert restored.pending()[0].action.flag == "boom"
