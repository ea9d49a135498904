"""Condition evaluation for events, exits, puzzle triggers and endings.

A condition is either a flag expression string or a mapping with a
``type`` tag:

    "has_lamp and not door_open"
    {"type": "score", "operator": ">=", "value": 100}
    {"type": "achievement", "achievement_id": "first_steps"}
    {"type": "path", "path": "hero"}
    {"type": "factor", "factor": "karma", "operator": ">=", "value": 50}
    {"type": "time", "operator": "<", "value": 30}          # minutes
    {"type": "item", "item_id": "lamp"}                      # carried
    {"type": "flag", "flag": "level", "operator": ">", "value": 2}
    {"type": "flag", "expression": "a or b"}

Evaluation fails closed: malformed expressions, unknown types and missing
fields evaluate to False with a warning instead of raising.
"""

import logging
from collections.abc import Iterable
from typing import Any, Protocol

from somnium.conditions.expression import ConditionSyntaxError, evaluate_expression
from somnium.world.schemas import Condition
from somnium.world.state import FlagStore

logger = logging.getLogger(__name__)


class ProgressionView(Protocol):
    """Read-only progression data used by typed conditions."""

    @property
    def score(self) -> int: ...

    def is_unlocked(self, achievement_id: str) -> bool: ...

    @property
    def path(self) -> str: ...

    def factor(self, name: str) -> float: ...

    def elapsed_seconds(self) -> float: ...


class InventoryView(Protocol):
    def has_item(self, item_id: str) -> bool: ...


def compare(value: Any, operator: str | None, target: Any) -> bool:
    """Compare ``value`` against ``target``. Unknown operators are False."""
    try:
        if operator == ">=":
            return value >= target
        if operator == ">":
            return value > target
        if operator == "<=":
            return value <= target
        if operator == "<":
            return value < target
        if operator == "==":
            return value == target
        if operator == "!=":
            return value != target
    except TypeError:
        logger.warning(f"Cannot compare {value!r} {operator} {target!r}")
        return False
    logger.warning(f"Unknown comparison operator {operator!r}")
    return False


class ConditionEvaluator:
    """Evaluates conditions against the flag store and progression state.

    Args:
        flags: Flag store read by expressions.
        progression: Score, achievements, path, factors and elapsed time.
            Typed conditions needing it fail closed when it is absent.
        inventory: Used by ``item`` conditions.

    Example:
        evaluator = ConditionEvaluator(flags)
        evaluator.evaluate("a and not b")
    """

    def __init__(
        self,
        flags: FlagStore,
        progression: ProgressionView | None = None,
        inventory: InventoryView | None = None,
    ) -> None:
        self.flags = flags
        self.progression = progression
        self.inventory = inventory

    def evaluate(self, condition: Condition | None) -> bool:
        """Evaluate one condition. ``None`` and empty strings are true."""
        if condition is None:
            return True
        if isinstance(condition, str):
            if not condition.strip():
                return True
            return self._expression(condition)
        if isinstance(condition, dict):
            return self._typed(condition)
        logger.warning(f"Unsupported condition {condition!r}")
        return False

    def evaluate_all(self, conditions: Iterable[Condition]) -> bool:
        """True when every condition holds (vacuously true when empty)."""
        return all(self.evaluate(condition) for condition in conditions)

    def _expression(self, expression: str) -> bool:
        try:
            return evaluate_expression(expression, self.flags.is_set)
        except ConditionSyntaxError as e:
            logger.warning(f"Malformed condition {expression!r}: {e}")
            return False

    def _typed(self, condition: dict[str, Any]) -> bool:
        condition_type = condition.get("type")

        if condition_type in (None, "flag", "expression"):
            if "expression" in condition:
                return self._expression(str(condition["expression"]))
            flag = condition.get("flag")
            if not flag:
                logger.warning(f"Flag condition without flag: {condition!r}")
                return False
            if "operator" in condition:
                return compare(self.flags.get(flag), condition["operator"], condition.get("value"))
            if "value" in condition:
                return self.flags.get(flag) == condition["value"]
            return self.flags.is_set(flag)

        if condition_type == "item":
            item_id = condition.get("item_id") or condition.get("item")
            if self.inventory is None or not item_id:
                return False
            return self.inventory.has_item(item_id)

        if self.progression is None:
            logger.warning(f"No progression available for {condition_type!r} condition")
            return False

        if condition_type == "score":
            return compare(self.progression.score, condition.get("operator"), condition.get("value"))
        if condition_type == "achievement":
            achievement_id = condition.get("achievement_id") or condition.get("achievement")
            return bool(achievement_id) and self.progression.is_unlocked(achievement_id)
        if condition_type == "path":
            return self.progression.path == condition.get("path")
        if condition_type == "factor":
            return compare(
                self.progression.factor(condition.get("factor", "")),
                condition.get("operator"),
                condition.get("value"),
            )
        if condition_type == "time":
            value = condition.get("value")
            if not isinstance(value, (int, float)):
                logger.warning(f"Time condition needs a number of minutes: {condition!r}")
                return False
            return compare(self.progression.elapsed_seconds(), condition.get("operator"), value * 60)

        logger.warning(f"Unknown condition type {condition_type!r}")
        return False
