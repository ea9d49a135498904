"""Scripted event module.

- Trigger matching: room, then direct object, then global events
- Event manager: scripted/unscripted routing and named events
"""

from somnium.events.event_manager import MAX_EVENT_DEPTH, EventManager, EventResult
from somnium.events.trigger_matcher import EventMatch, EventSource, TriggerMatcher, matches_pattern

__all__ = [
    "EventManager",
    "EventMatch",
    "EventResult",
    "EventSource",
    "MAX_EVENT_DEPTH",
    "TriggerMatcher",
    "matches_pattern",
]
