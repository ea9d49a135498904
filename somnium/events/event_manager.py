"""EventManager: routes commands to scripted events and runs named events.

A command either matches a scripted event, whose actions run in full and
whose response text is shown, or comes back as unscripted so the caller can
try built-in handlers and finally the dynamic responder.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from somnium.conditions.evaluator import ConditionEvaluator
from somnium.events.trigger_matcher import EventSource, TriggerMatcher
from somnium.executor.action_executor import ActionExecutor, ExecutionReport
from somnium.world.commands import Command
from somnium.world.schemas import EventDefinition
from somnium.world.state import WorldState
from somnium.world.vocabulary import Vocabulary

logger = logging.getLogger(__name__)

# Named events may trigger named events; chains deeper than this are cut.
MAX_EVENT_DEPTH = 10

EventHandler = Callable[[dict[str, Any]], str | None]


@dataclass
class EventResult:
    """Outcome of routing a command or triggering a named event.

    Attributes:
        scripted: Whether any event ran.
        events: Events that ran, in order.
        source: Where the matching command event was found.
        response: Response text of the matched event(s).
        report: Outcomes of the executed actions.
        messages: Each event's response followed by its action messages,
            event by event.
    """

    scripted: bool
    events: list[EventDefinition] = field(default_factory=list)
    source: EventSource | None = None
    response: list[str] = field(default_factory=list)
    report: ExecutionReport = field(default_factory=ExecutionReport)
    messages: list[str] = field(default_factory=list)

    @property
    def unscripted(self) -> bool:
        return not self.scripted

    @property
    def ending(self) -> str | None:
        return self.report.ending


class EventManager:
    """Executes scripted events for commands and by name.

    Example:
        events = EventManager(state, executor, evaluator)
        result = events.execute_command(command)
        if result.unscripted:
            text = responder.respond(context, command)
    """

    def __init__(
        self,
        state: WorldState,
        executor: ActionExecutor,
        evaluator: ConditionEvaluator,
        vocabulary: Vocabulary | None = None,
    ) -> None:
        self.state = state
        self.executor = executor
        self.evaluator = evaluator
        vocabulary = vocabulary or Vocabulary()
        self.matcher = TriggerMatcher(
            state,
            evaluator,
            canonicalize=lambda verb: vocabulary.canonical_verb(verb) or verb,
        )
        self._handlers: dict[str, EventHandler] = {}
        self._depth = 0
        self.executor.trigger_event = self._trigger_messages

    def execute_command(self, command: Command) -> EventResult:
        """Run the first matching scripted event, or report unscripted."""
        match = self.matcher.find(command)
        if match is None:
            return EventResult(scripted=False)

        result = self.run_event(match.event)
        result.source = match.source
        return result

    def run_event(self, event: EventDefinition) -> EventResult:
        """Run an event's actions to completion, then attach its response."""
        report = self.executor.execute_all(event.actions)
        if report.has_failures:
            failed = [str(outcome) for outcome in report.outcomes if not outcome.success]
            logger.warning(f"Event {event.id or event.name} had failing actions: {failed}")
        response = [event.response] if event.response else []
        return EventResult(
            scripted=True,
            events=[event],
            response=response,
            report=report,
            messages=[*response, *report.messages],
        )

    def register_handler(self, name: str, handler: EventHandler) -> None:
        """Register code to run whenever the named event is triggered.

        The handler receives the trigger context and may return a message.
        """
        self._handlers[name] = handler

    def trigger_event(self, name: str, context: dict[str, Any] | None = None) -> EventResult:
        """Run every named event whose condition holds, then any handler.

        Returns:
            A scripted result if anything ran.
        """
        result = EventResult(scripted=False)
        if self._depth >= MAX_EVENT_DEPTH:
            logger.warning(f"Event chain too deep, not triggering '{name}'")
            return result

        self._depth += 1
        try:
            for event in self.matcher.named_events(name):
                if not self.evaluator.evaluate(event.condition):
                    continue
                ran = self.run_event(event)
                result.scripted = True
                result.events.extend(ran.events)
                result.response.extend(ran.response)
                result.report.extend(ran.report)
                result.messages.extend(ran.messages)

            handler = self._handlers.get(name)
            if handler is not None:
                message = handler(context or {})
                result.scripted = True
                if message:
                    result.response.append(message)
                    result.messages.append(message)
        finally:
            self._depth -= 1

        if result.scripted:
            logger.debug(f"Named event '{name}' ran {len(result.events)} event(s)")
        return result

    def _trigger_messages(self, name: str) -> list[str]:
        return self.trigger_event(name).messages
