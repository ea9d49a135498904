"""Tests for the restricted flag expression language."""

import pytest

from somnium.conditions.expression import (
    MAX_NESTING,
    ConditionSyntaxError,
    evaluate_expression,
    expression_names,
)


def lookup_from(values: dict[str, bool]):
    return lambda name: values.get(name, False)


class TestEvaluate:
    """Tests for evaluate_expression()."""

    @pytest.mark.parametrize(
        "a, b, expected",
        [(True, False, True), (True, True, False), (False, False, False), (False, True, False)],
    )
    def test_a_and_not_b(self, a: bool, b: bool, expected: bool):
        assert evaluate_expression("a and not b", lookup_from({"a": a, "b": b})) is expected

    def test_symbolic_operators(self):
        lookup = lookup_from({"a": True, "b": False})

        assert evaluate_expression("a && !b", lookup) is True
        assert evaluate_expression("b || a", lookup) is True

    def test_precedence_not_and_or(self):
        """'or' binds loosest: a or (b and c)."""
        lookup = lookup_from({"a": True, "b": False, "c": False})

        assert evaluate_expression("a or b and c", lookup) is True
        assert evaluate_expression("(a or b) and c", lookup) is False

    def test_literals(self):
        lookup = lookup_from({})

        assert evaluate_expression("true", lookup) is True
        assert evaluate_expression("not false", lookup) is True

    def test_unknown_flag_is_false(self):
        assert evaluate_expression("missing", lookup_from({})) is False

    def test_word_operators_are_case_insensitive(self):
        assert evaluate_expression("a AND NOT b", lookup_from({"a": True})) is True


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        "expression",
        ["", "a and", "(a", "a b", "a == b", "and a", "a )"],
    )
    def test_malformed(self, expression: str):
        with pytest.raises(ConditionSyntaxError):
            evaluate_expression(expression, lookup_from({"a": True, "b": True}))

    def test_never_executes_code(self):
        with pytest.raises(ConditionSyntaxError):
            evaluate_expression("__import__('os').system('true')", lookup_from({}))

    def test_too_deeply_nested(self):
        with pytest.raises(ConditionSyntaxError, match="nested deeper"):
            evaluate_expression("(" * 1000 + "a", lookup_from({"a": True}))

    def test_long_negation_chain(self):
        with pytest.raises(ConditionSyntaxError):
            evaluate_expression("not " * (MAX_NESTING + 1) + "a", lookup_from({}))

    def test_moderate_nesting_is_fine(self):
        lookup = lookup_from({"a": True})

        assert evaluate_expression("(" * 10 + "a" + ")" * 10, lookup) is True
        assert evaluate_expression("not " * 4 + "a", lookup) is True


class TestExpressionNames:
    def test_names_in_order(self):
        assert expression_names("has_lamp and not (door_open or has_lamp) or true") == [
            "has_lamp",
            "door_open",
        ]
