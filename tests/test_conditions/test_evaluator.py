"""Tests for ConditionEvaluator - flag expressions and typed conditions."""

import pytest

from somnium.conditions.evaluator import ConditionEvaluator, compare
from somnium.managers.progression_manager import ProgressionManager
from somnium.world.state import FlagStore, WorldState
from tests.factories import FakeClock


class TestExpressions:
    """Tests for string conditions."""

    def test_a_and_not_b(self):
        evaluator = ConditionEvaluator(FlagStore({"a": True, "b": False}))

        assert evaluator.evaluate("a and not b") is True

    def test_none_and_empty_are_true(self):
        evaluator = ConditionEvaluator(FlagStore())

        assert evaluator.evaluate(None) is True
        assert evaluator.evaluate("   ") is True

    @pytest.mark.parametrize("expression", ["a and", "a == 1", "((a)", "a; b"])
    def test_malformed_is_false(self, expression: str):
        evaluator = ConditionEvaluator(FlagStore({"a": True, "b": True}))

        assert evaluator.evaluate(expression) is False

    def test_deep_nesting_is_false(self):
        evaluator = ConditionEvaluator(FlagStore({"a": True}))

        assert evaluator.evaluate("(" * 1000 + "a") is False

    def test_evaluate_all(self):
        evaluator = ConditionEvaluator(FlagStore({"a": True}))

        assert evaluator.evaluate_all([]) is True
        assert evaluator.evaluate_all(["a", "not b"]) is True
        assert evaluator.evaluate_all(["a", "b"]) is False

    def test_unsupported_condition_type(self):
        assert ConditionEvaluator(FlagStore()).evaluate(42) is False


class TestFlagConditions:
    def test_flag_truthiness(self):
        evaluator = ConditionEvaluator(FlagStore({"door_open": True}))

        assert evaluator.evaluate({"type": "flag", "flag": "door_open"}) is True

    def test_flag_comparison(self):
        evaluator = ConditionEvaluator(FlagStore({"level": 3}))

        assert evaluator.evaluate({"type": "flag", "flag": "level", "operator": ">", "value": 2}) is True
        assert evaluator.evaluate({"type": "flag", "flag": "level", "value": 4}) is False

    def test_flag_expression_mapping(self):
        evaluator = ConditionEvaluator(FlagStore({"a": True}))

        assert evaluator.evaluate({"type": "flag", "expression": "a or b"}) is True

    def test_flag_without_name(self):
        assert ConditionEvaluator(FlagStore()).evaluate({"type": "flag"}) is False


class TestTypedConditions:
    """Tests for conditions read from progression and inventory."""

    def test_item_condition(self, state: WorldState, evaluator: ConditionEvaluator):
        condition = {"type": "item", "item_id": "lamp"}
        assert evaluator.evaluate(condition) is False

        state.add_item("lamp")

        assert evaluator.evaluate(condition) is True

    def test_score_condition(self, progression: ProgressionManager, evaluator: ConditionEvaluator):
        progression.update_score(60)

        assert evaluator.evaluate({"type": "score", "operator": ">=", "value": 50}) is True
        assert evaluator.evaluate({"type": "score", "operator": "<", "value": 50}) is False

    def test_achievement_condition(self, progression: ProgressionManager, evaluator: ConditionEvaluator):
        condition = {"type": "achievement", "achievement_id": "first_steps"}
        assert evaluator.evaluate(condition) is False

        progression.unlock_achievement("first_steps")

        assert evaluator.evaluate(condition) is True

    def test_factor_and_path(self, progression: ProgressionManager, evaluator: ConditionEvaluator):
        progression.update_factor("karma", 60)
        progression.update_factor("heroism", 55)

        assert evaluator.evaluate({"type": "factor", "factor": "karma", "operator": ">=", "value": 50})
        assert evaluator.evaluate({"type": "path", "path": "hero"})

    def test_time_condition_in_minutes(
        self,
        progression: ProgressionManager,
        evaluator: ConditionEvaluator,
        clock: FakeClock,
    ):
        condition = {"type": "time", "operator": "<", "value": 2}
        assert evaluator.evaluate(condition) is True

        clock.advance(150)

        assert evaluator.evaluate(condition) is False

    def test_time_needs_number(self, progression: ProgressionManager, evaluator: ConditionEvaluator):
        assert evaluator.evaluate({"type": "time", "operator": "<", "value": "soon"}) is False

    def test_unknown_type_is_false(self, progression: ProgressionManager, evaluator: ConditionEvaluator):
        assert evaluator.evaluate({"type": "weather", "value": "rain"}) is False

    def test_progression_conditions_fail_closed_without_progression(self):
        evaluator = ConditionEvaluator(FlagStore())

        assert evaluator.evaluate({"type": "score", "operator": ">=", "value": 0}) is False


class TestCompare:
    @pytest.mark.parametrize(
        "value, operator, target, expected",
        [
            (5, ">=", 5, True),
            (5, ">", 5, False),
            (4, "<=", 5, True),
            (4, "<", 4, False),
            ("a", "==", "a", True),
            ("a", "!=", "a", False),
            (5, "~", 5, False),
            (None, ">", 1, False),
        ],
    )
    def test_operators(self, value, operator, target, expected):
        assert compare(value, operator, target) is expected
