"""Game engine module.

- GameEngine: the turn pipeline and game-loop tick
- Messages: tagged output for the display collaborator
- Responder: fallback for unscripted commands
- Snapshot: serializable session state
"""

from somnium.engine.builtin_verbs import BuiltinVerbs
from somnium.engine.game_engine import SESSION_VERBS, GameEngine, TurnResult, TurnSource
from somnium.engine.messages import GameMessage, MessageKind, MessageLog
from somnium.engine.responder import CannedResponder, DynamicResponder
from somnium.engine.snapshot import EngineSnapshot

__all__ = [
    "BuiltinVerbs",
    "CannedResponder",
    "DynamicResponder",
    "EngineSnapshot",
    "GameEngine",
    "GameMessage",
    "MessageKind",
    "MessageLog",
    "SESSION_VERBS",
    "TurnResult",
    "TurnSource",
]
