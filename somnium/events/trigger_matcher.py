"""Matching commands against scripted event definitions.

Search order for a command:
1. Events of the current room
2. Events of the bound direct object
3. Global events

The first event whose trigger pattern matches and whose condition holds
wins. Pattern fields left out match anything; an event without a trigger
only fires by name.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from somnium.conditions.evaluator import ConditionEvaluator
from somnium.world.commands import Command, ObjectReference
from somnium.world.schemas import EventDefinition, TriggerPattern
from somnium.world.state import WorldState

logger = logging.getLogger(__name__)


class EventSource(str, Enum):
    """Where a matching event was found."""

    ROOM = "room"
    OBJECT = "object"
    GLOBAL = "global"


@dataclass(frozen=True)
class EventMatch:
    event: EventDefinition
    source: EventSource


def _reference_matches(expected: str, reference: ObjectReference | None) -> bool:
    """A pattern object matches the bound id or the phrase as typed."""
    if reference is None:
        return False
    expected_lower = expected.lower()
    if reference.id is not None and reference.id.lower() == expected_lower:
        return True
    return bool(reference.text) and reference.text.lower() == expected_lower


def matches_pattern(
    command: Command,
    pattern: TriggerPattern,
    canonicalize: Callable[[str], str] | None = None,
) -> bool:
    """Compare a command to a trigger pattern field by field.

    Args:
        command: The parsed command.
        pattern: Trigger pattern; absent fields always match.
        canonicalize: Maps the pattern verb to its canonical form, so a
            pattern written with a synonym ("get") matches "take".
    """
    if pattern.verb:
        verb = canonicalize(pattern.verb) if canonicalize else pattern.verb
        if verb != command.verb:
            return False
    if pattern.object and not _reference_matches(pattern.object, command.direct_object):
        return False
    if pattern.preposition and pattern.preposition != command.preposition:
        return False
    if pattern.indirect_object and not _reference_matches(pattern.indirect_object, command.indirect_object):
        return False
    return True


class TriggerMatcher:
    """Finds the scripted event a command should run.

    Args:
        state: World state (current room and object lookups).
        evaluator: Checks event conditions.
        canonicalize: Verb canonicalizer for pattern verbs.
    """

    def __init__(
        self,
        state: WorldState,
        evaluator: ConditionEvaluator,
        canonicalize: Callable[[str], str] | None = None,
    ) -> None:
        self.state = state
        self.evaluator = evaluator
        self.canonicalize = canonicalize

    def candidate_events(self, command: Command) -> list[tuple[EventDefinition, EventSource]]:
        """All events to consider for a command, in search order."""
        events = [(event, EventSource.ROOM) for event in self.state.current_room.events]

        if command.direct_id is not None:
            thing = self.state.lookup(command.direct_id)
            if thing is not None:
                events.extend((event, EventSource.OBJECT) for event in thing.events)

        events.extend((event, EventSource.GLOBAL) for event in self.state.world.global_events)
        return events

    def find(self, command: Command) -> EventMatch | None:
        for event, source in self.candidate_events(command):
            if event.trigger is None:
                continue
            if not matches_pattern(command, event.trigger, self.canonicalize):
                continue
            if event.condition is not None and not self.evaluator.evaluate(event.condition):
                logger.debug(f"Event {event.id or event.name} matched but condition is false")
                continue
            logger.debug(f"Command {command} matched {source.value} event {event.id or event.name}")
            return EventMatch(event=event, source=source)
        return None

    def named_events(self, name: str) -> list[EventDefinition]:
        """Events with ``name`` in the current room, then globally."""
        room_events = [event for event in self.state.current_room.events if event.name == name]
        global_events = [event for event in self.state.world.global_events if event.name == name]
        return room_events + global_events
