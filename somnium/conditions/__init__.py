"""Condition module.

- Restricted boolean expression language over flags
- Typed conditions (score, achievement, path, factor, time, item, flag)
"""

from somnium.conditions.evaluator import (
    ConditionEvaluator,
    InventoryView,
    ProgressionView,
    compare,
)
from somnium.conditions.expression import (
    ConditionSyntaxError,
    evaluate_expression,
    expression_names,
    tokenize_expression,
)

__all__ = [
    "ConditionEvaluator",
    "ConditionSyntaxError",
    "InventoryView",
    "ProgressionView",
    "compare",
    "evaluate_expression",
    "expression_names",
    "tokenize_expression",
]
