"""Dynamic responder collaborator for unscripted commands.

When neither a scripted event, a puzzle trigger nor a built-in verb handles
a command, the engine asks a ``DynamicResponder`` for the text to show. An
AI-backed responder lives outside this package; ``CannedResponder`` is the
offline default.
"""

from typing import Any, Protocol, runtime_checkable

from somnium.world.commands import Command


@runtime_checkable
class DynamicResponder(Protocol):
    """Produces display text for a command nothing else handled."""

    def respond(self, context: dict[str, Any], command: Command) -> str:
        """Return the text to show for ``command``.

        Args:
            context: Room id/name/description, inventory, flags and the raw
                input line.
            command: The parsed command.
        """
        ...


CANNED_RESPONSES: dict[str, str] = {
    "use": "Nothing happens.",
    "open": "It won't open.",
    "close": "It won't close.",
    "read": "There's nothing to read on that.",
    "eat": "That's not edible.",
    "drink": "You can't drink that.",
    "talk": "There's no response.",
    "give": "Nobody seems interested.",
    "put": "That doesn't fit there.",
    "push": "It won't budge.",
    "pull": "It won't move.",
    "turn": "It doesn't turn.",
    "search": "You don't find anything special.",
    "yell": "You yell loudly. Your voice echoes in the distance.",
}


class CannedResponder:
    """Fixed per-verb replies."""

    def __init__(self, responses: dict[str, str] | None = None, default: str = "Nothing happens.") -> None:
        self.responses = responses if responses is not None else dict(CANNED_RESPONSES)
        self.default = default

    def respond(self, context: dict[str, Any], command: Command) -> str:
        return self.responses.get(command.verb, self.default)
