"""Core test fixtures for somnium engine tests."""

import pytest

from somnium.conditions.evaluator import ConditionEvaluator
from somnium.config import Settings
from somnium.events.event_manager import EventManager
from somnium.executor.action_executor import ActionExecutor
from somnium.executor.scheduler import ActionScheduler
from somnium.managers.achievement_manager import AchievementManager
from somnium.managers.progression_manager import ProgressionManager
from somnium.world.schemas import WorldTemplate
from somnium.world.state import WorldState
from somnium.world.vocabulary import Vocabulary
from tests.factories import FakeClock, build_world


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only, ignoring any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def vocabulary() -> Vocabulary:
    return Vocabulary()


@pytest.fixture
def world() -> WorldTemplate:
    """The sample manor world."""
    return build_world()


@pytest.fixture
def state(world: WorldTemplate) -> WorldState:
    return WorldState(world)


@pytest.fixture
def evaluator(state: WorldState) -> ConditionEvaluator:
    return ConditionEvaluator(state.flags, inventory=state)


@pytest.fixture
def progression(
    world: WorldTemplate,
    evaluator: ConditionEvaluator,
    clock: FakeClock,
    settings: Settings,
) -> ProgressionManager:
    """Progression manager wired as the evaluator's progression view."""
    return ProgressionManager(
        world,
        AchievementManager(world.achievements),
        evaluator,
        clock=clock,
        settings=settings,
    )


@pytest.fixture
def scheduler(clock: FakeClock) -> ActionScheduler:
    return ActionScheduler(clock)


@pytest.fixture
def executor(
    state: WorldState,
    scheduler: ActionScheduler,
    progression: ProgressionManager,
) -> ActionExecutor:
    return ActionExecutor(state, scheduler, progression)


@pytest.fixture
def events(
    state: WorldState,
    executor: ActionExecutor,
    evaluator: ConditionEvaluator,
    vocabulary: Vocabulary,
) -> EventManager:
    """Event manager; also wires TRIGGER_EVENT on the executor."""
    return EventManager(state, executor, evaluator, vocabulary)
