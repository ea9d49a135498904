"""Command validation module.

Enforces per-verb object arity and normalizes special phrasings
before a command reaches the event layer.
"""

from somnium.validators.command_validator import (
    MOVEMENT_VERB,
    NO_OBJECT_VERBS,
    OBJECT_VERBS,
    TWO_OBJECT_VERBS,
    CommandValidator,
    ValidationResult,
    normalize_command,
)

__all__ = [
    "CommandValidator",
    "ValidationResult",
    "normalize_command",
    "MOVEMENT_VERB",
    "NO_OBJECT_VERBS",
    "OBJECT_VERBS",
    "TWO_OBJECT_VERBS",
]
