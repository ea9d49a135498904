"""World module: static definitions and live session state.

- Schemas: rooms, things, events, puzzles, achievements, endings
- FlagStore and WorldState: everything that changes during play
- Scene: candidate pools for object resolution
- Commands and Vocabulary: the structured command grammar shared by the
  parser, resolver and validator
"""

from somnium.world.actions import (
    ActionBase,
    ActionType,
    FlagValue,
    UnknownAction,
    coerce_action,
    coerce_actions,
)
from somnium.world.commands import (
    Command,
    ObjectReference,
    ParseErrorKind,
    ParseResult,
    ParserContext,
    ReferenceKind,
)
from somnium.world.scene import Candidate, CandidateSource, Scene
from somnium.world.schemas import (
    AchievementDefinition,
    Condition,
    EndingDefinition,
    EventDefinition,
    ExitDefinition,
    ItemDefinition,
    NPCDefinition,
    ObjectDefinition,
    ProgressionConfig,
    PuzzleDefinition,
    PuzzleStep,
    PuzzleTrigger,
    RoomDefinition,
    SolutionSpec,
    TriggerPattern,
    WorldMetadata,
    WorldTemplate,
)
from somnium.world.state import (
    FlagStore,
    UnknownItemError,
    UnknownRoomError,
    WorldState,
    WorldStateError,
)
from somnium.world.vocabulary import Vocabulary

__all__ = [
    # Actions
    "ActionBase",
    "ActionType",
    "FlagValue",
    "UnknownAction",
    "coerce_action",
    "coerce_actions",
    # Commands
    "Command",
    "ObjectReference",
    "ParseErrorKind",
    "ParseResult",
    "ParserContext",
    "ReferenceKind",
    # Scene
    "Candidate",
    "CandidateSource",
    "Scene",
    # Schemas
    "AchievementDefinition",
    "Condition",
    "EndingDefinition",
    "EventDefinition",
    "ExitDefinition",
    "ItemDefinition",
    "NPCDefinition",
    "ObjectDefinition",
    "ProgressionConfig",
    "PuzzleDefinition",
    "PuzzleStep",
    "PuzzleTrigger",
    "RoomDefinition",
    "SolutionSpec",
    "TriggerPattern",
    "WorldMetadata",
    "WorldTemplate",
    # State
    "FlagStore",
    "UnknownItemError",
    "UnknownRoomError",
    "WorldState",
    "WorldStateError",
    # Vocabulary
    "Vocabulary",
]
