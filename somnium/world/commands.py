"""Data structures for parsed commands and parser conversation context.

A ``Command`` is the structured form of one line of player input. Its object
slots hold ``ObjectReference`` values, a tagged variant describing how the
phrase resolved against the current scene.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from somnium.world.scene import Candidate, CandidateSource


class ReferenceKind(str, Enum):
    """How an object phrase resolved."""

    BOUND = "bound"  # Exactly one candidate
    AMBIGUOUS = "ambiguous"  # Several candidates, needs clarification
    UNKNOWN = "unknown"  # Nothing in scope matched
    SPECIAL = "special"  # Collective reference ("all")
    LITERAL = "literal"  # Unresolved text (directions, no scene available)


@dataclass(frozen=True)
class ObjectReference:
    """A resolved (or unresolvable) object phrase.

    Attributes:
        kind: Resolution outcome.
        id: Bound object id (``BOUND`` only).
        text: Phrase as typed, or the literal/special value.
        candidates: Matching candidates (``AMBIGUOUS`` only).
    """

    kind: ReferenceKind
    id: str | None = None
    text: str = ""
    candidates: tuple[Candidate, ...] = ()

    @classmethod
    def bound(cls, object_id: str, text: str = "") -> "ObjectReference":
        return cls(kind=ReferenceKind.BOUND, id=object_id, text=text)

    @classmethod
    def ambiguous(cls, candidates: list[Candidate] | tuple[Candidate, ...], text: str = "") -> "ObjectReference":
        return cls(kind=ReferenceKind.AMBIGUOUS, text=text, candidates=tuple(candidates))

    @classmethod
    def unknown(cls, text: str) -> "ObjectReference":
        return cls(kind=ReferenceKind.UNKNOWN, text=text)

    @classmethod
    def special(cls, value: str = "all") -> "ObjectReference":
        return cls(kind=ReferenceKind.SPECIAL, text=value)

    @classmethod
    def literal(cls, text: str) -> "ObjectReference":
        return cls(kind=ReferenceKind.LITERAL, text=text)

    @property
    def is_bound(self) -> bool:
        return self.kind == ReferenceKind.BOUND

    @property
    def is_ambiguous(self) -> bool:
        return self.kind == ReferenceKind.AMBIGUOUS

    @property
    def is_all(self) -> bool:
        return self.kind == ReferenceKind.SPECIAL and self.text == "all"

    @property
    def value(self) -> str:
        """Bound id, else the text."""
        return self.id if self.id is not None else self.text

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "text": self.text}
        if self.id is not None:
            data["id"] = self.id
        if self.candidates:
            data["candidates"] = [
                {"id": c.id, "name": c.name, "source": c.source.value} for c in self.candidates
            ]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectReference":
        return cls(
            kind=ReferenceKind(data["kind"]),
            id=data.get("id"),
            text=data.get("text", ""),
            candidates=_candidates_from_dicts(data.get("candidates", [])),
        )

    def __str__(self) -> str:
        if self.kind == ReferenceKind.BOUND:
            return f"bound({self.id})"
        if self.kind == ReferenceKind.AMBIGUOUS:
            return f"ambiguous({', '.join(c.id for c in self.candidates)})"
        return f"{self.kind.value}({self.text})"


@dataclass(frozen=True)
class Command:
    """A structured player command.

    Attributes:
        verb: Canonical verb.
        direct_object: First object slot.
        indirect_object: Object after the preposition.
        preposition: Preposition splitting the two slots.
        modifiers: Extra markers such as "all".
    """

    verb: str
    direct_object: ObjectReference | None = None
    indirect_object: ObjectReference | None = None
    preposition: str | None = None
    modifiers: tuple[str, ...] = ()

    @property
    def direct_id(self) -> str | None:
        if self.direct_object is not None and self.direct_object.is_bound:
            return self.direct_object.id
        return None

    @property
    def indirect_id(self) -> str | None:
        if self.indirect_object is not None and self.indirect_object.is_bound:
            return self.indirect_object.id
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "verb": self.verb,
            "direct_object": self.direct_object.to_dict() if self.direct_object else None,
            "indirect_object": self.indirect_object.to_dict() if self.indirect_object else None,
            "preposition": self.preposition,
            "modifiers": list(self.modifiers),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Command":
        return cls(
            verb=data["verb"],
            direct_object=_reference_from_dict(data.get("direct_object")),
            indirect_object=_reference_from_dict(data.get("indirect_object")),
            preposition=data.get("preposition"),
            modifiers=tuple(data.get("modifiers", ())),
        )

    def __str__(self) -> str:
        parts = [self.verb]
        if self.direct_object:
            parts.append(str(self.direct_object))
        if self.preposition:
            parts.append(self.preposition)
        if self.indirect_object:
            parts.append(str(self.indirect_object))
        return " ".join(parts)


class ParseErrorKind(str, Enum):
    """Categories of parse failure."""

    EMPTY_INPUT = "empty_input"
    UNKNOWN_VERB = "unknown_verb"
    MISSING_DIRECT_OBJECT = "missing_direct_object"
    MISSING_INDIRECT_OBJECT = "missing_indirect_object"
    AMBIGUOUS_OBJECT = "ambiguous_object"
    NO_PREVIOUS_COMMAND = "no_previous_command"


@dataclass
class ParseResult:
    """Outcome of parsing one line of input.

    Attributes:
        success: Whether a valid command was produced.
        command: The command (also set on validation failures, for context).
        error: Error category on failure.
        message: Player-facing error message on failure.
        candidates: Candidate list for ambiguity failures.
    """

    success: bool
    command: Command | None = None
    error: ParseErrorKind | None = None
    message: str | None = None
    candidates: tuple[Candidate, ...] = ()

    @classmethod
    def ok(cls, command: Command) -> "ParseResult":
        return cls(success=True, command=command)

    @classmethod
    def fail(
        cls,
        error: ParseErrorKind,
        message: str,
        command: Command | None = None,
        candidates: tuple[Candidate, ...] = (),
    ) -> "ParseResult":
        return cls(success=False, command=command, error=error, message=message, candidates=candidates)


@dataclass(frozen=True)
class ParserContext:
    """Conversation state carried between parse calls.

    The parser never stores this itself; each ``parse`` takes a context and
    returns the next one.

    Attributes:
        last_object: Antecedent for pronouns ("it", "them").
        last_command: Last successfully parsed command, replayed by "again".
        pending_candidates: Candidates awaiting clarification.
        pending_command: Command blocked on the ambiguity, completed by a clarification.
    """

    last_object: ObjectReference | None = None
    last_command: Command | None = None
    pending_candidates: tuple[Candidate, ...] = field(default_factory=tuple)
    pending_command: Command | None = None

    @property
    def awaiting_clarification(self) -> bool:
        return bool(self.pending_candidates)

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_object": self.last_object.to_dict() if self.last_object else None,
            "last_command": self.last_command.to_dict() if self.last_command else None,
            "pending_candidates": [
                {"id": c.id, "name": c.name, "source": c.source.value} for c in self.pending_candidates
            ],
            "pending_command": self.pending_command.to_dict() if self.pending_command else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParserContext":
        pending = data.get("pending_command")
        last_command = data.get("last_command")
        return cls(
            last_object=_reference_from_dict(data.get("last_object")),
            last_command=Command.from_dict(last_command) if last_command else None,
            pending_candidates=_candidates_from_dicts(data.get("pending_candidates", [])),
            pending_command=Command.from_dict(pending) if pending else None,
        )


def _candidates_from_dicts(raw: list[dict[str, Any]]) -> tuple[Candidate, ...]:
    return tuple(
        Candidate(id=c["id"], name=c["name"], source=CandidateSource(c.get("source", "room_object")))
        for c in raw
    )


def _reference_from_dict(raw: dict[str, Any] | None) -> ObjectReference | None:
    return ObjectReference.from_dict(raw) if raw is not None else None
