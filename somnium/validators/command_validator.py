"""Command validator: per-verb object arity rules.

Runs after object resolution and before any event or handler sees the
command. Failures carry a player-facing message built from the vocabulary's
error templates.
"""

from dataclasses import dataclass, field, replace

from somnium.world.commands import Command, ParseErrorKind, ReferenceKind
from somnium.world.scene import Candidate
from somnium.world.vocabulary import Vocabulary

# Verbs that never need an object
NO_OBJECT_VERBS = frozenset(
    {"look", "inventory", "wait", "save", "load", "quit", "help", "score", "restart", "hint"}
)

# Verbs that need a direct object
OBJECT_VERBS = frozenset({"take", "drop", "examine", "use", "open", "close", "read", "eat", "drink"})

# Verbs that need an indirect object once a preposition is given
TWO_OBJECT_VERBS = frozenset({"give", "put", "use"})

MOVEMENT_VERB = "go"


@dataclass
class ValidationResult:
    """Result of validating one command.

    Attributes:
        command: The command as validated (after normalization).
        valid: Whether the command may proceed.
        error: Failure category.
        reason: Player-facing message on failure.
        candidates: Candidates to choose from when an object is ambiguous.
    """

    command: Command
    valid: bool
    error: ParseErrorKind | None = None
    reason: str | None = None
    candidates: tuple[Candidate, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        if self.valid:
            return f"[OK] {self.command}"
        return f"[FAIL] {self.command}: {self.reason}"


def normalize_command(command: Command) -> Command:
    """Rewrite ``look at X`` so X is the direct object."""
    if (
        command.verb == "look"
        and command.preposition == "at"
        and command.indirect_object is not None
        and command.direct_object is None
    ):
        return replace(
            command,
            direct_object=command.indirect_object,
            indirect_object=None,
            preposition=None,
        )
    return command


class CommandValidator:
    """Checks that a command has the objects its verb needs.

    Example:
        validator = CommandValidator(vocabulary)
        result = validator.validate(command)
        if not result.valid:
            show_error(result.reason)
    """

    def __init__(self, vocabulary: Vocabulary | None = None) -> None:
        self.vocabulary = vocabulary or Vocabulary()

    def validate(self, command: Command) -> ValidationResult:
        command = normalize_command(command)

        for reference in (command.direct_object, command.indirect_object):
            if reference is not None and reference.is_ambiguous:
                names = ", ".join(candidate.name for candidate in reference.candidates)
                return ValidationResult(
                    command=command,
                    valid=False,
                    error=ParseErrorKind.AMBIGUOUS_OBJECT,
                    reason=self.vocabulary.error("ambiguous_object", names=names),
                    candidates=reference.candidates,
                )

        if command.verb in NO_OBJECT_VERBS:
            return ValidationResult(command=command, valid=True)

        if command.verb == MOVEMENT_VERB:
            direction = command.direct_object
            if direction is None or direction.kind != ReferenceKind.LITERAL:
                return self._fail(command, ParseErrorKind.MISSING_DIRECT_OBJECT, self.vocabulary.error("go_where"))
            return ValidationResult(command=command, valid=True)

        if command.verb in OBJECT_VERBS and command.direct_object is None:
            return self._fail(
                command,
                ParseErrorKind.MISSING_DIRECT_OBJECT,
                self.vocabulary.error("need_more_info", verb=command.verb),
            )

        if (
            command.verb in TWO_OBJECT_VERBS
            and command.direct_object is not None
            and command.preposition
            and command.indirect_object is None
        ):
            return self._fail(
                command,
                ParseErrorKind.MISSING_INDIRECT_OBJECT,
                self.vocabulary.error(
                    "need_indirect_object",
                    verb=command.verb,
                    object=command.direct_object.text or command.direct_object.value,
                    preposition=command.preposition,
                ),
            )

        return ValidationResult(command=command, valid=True)

    @staticmethod
    def _fail(command: Command, error: ParseErrorKind, reason: str) -> ValidationResult:
        return ValidationResult(command=command, valid=False, error=error, reason=reason)
