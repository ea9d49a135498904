"""Messages the engine emits for the display collaborator.

Every line shown to the player is tagged, so errors can be told apart from
narrative text without inspecting the wording.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class MessageKind(str, Enum):
    """Category of a player-facing message."""

    NARRATIVE = "narrative"
    ERROR = "error"
    SYSTEM = "system"
    ACHIEVEMENT = "achievement"
    HINT = "hint"


@dataclass(frozen=True)
class GameMessage:
    kind: MessageKind
    text: str

    @classmethod
    def narrative(cls, text: str) -> "GameMessage":
        return cls(MessageKind.NARRATIVE, text)

    @classmethod
    def error(cls, text: str) -> "GameMessage":
        return cls(MessageKind.ERROR, text)

    @classmethod
    def system(cls, text: str) -> "GameMessage":
        return cls(MessageKind.SYSTEM, text)

    @property
    def is_error(self) -> bool:
        return self.kind == MessageKind.ERROR

    def __str__(self) -> str:
        return self.text


class MessageLog:
    """Append-only log of everything the player has been shown."""

    def __init__(self) -> None:
        self._entries: list[GameMessage] = []

    def append(self, message: GameMessage) -> None:
        if message.text:
            self._entries.append(message)

    def extend(self, messages: list[GameMessage]) -> None:
        for message in messages:
            self.append(message)

    def since(self, index: int) -> list[GameMessage]:
        """Messages appended after position ``index``."""
        return list(self._entries[index:])

    @property
    def entries(self) -> list[GameMessage]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[GameMessage]:
        return iter(list(self._entries))
