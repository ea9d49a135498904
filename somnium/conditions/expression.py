"""Restricted boolean expression language over flag names.

Grammar (lowest to highest precedence):

    expr    := or
    or      := and (("or" | "||") and)*
    and     := not (("and" | "&&") not)*
    not     := ("not" | "!") not | primary
    primary := "(" expr ")" | "true" | "false" | IDENTIFIER

Identifiers are looked up through a callable and treated as booleans.
Nothing is ever handed to the host interpreter.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass


class ConditionSyntaxError(ValueError):
    """Raised when an expression does not follow the grammar."""

    pass


_TOKEN = re.compile(r"\s*(?:(&&|\|\||!|\(|\))|([A-Za-z_][A-Za-z0-9_]*))")

_WORD_OPERATORS = {"and": "&&", "or": "||", "not": "!"}

# Deepest allowed nesting of parentheses and negations
MAX_NESTING = 64


@dataclass(frozen=True)
class _Token:
    kind: str  # "op" or "name"
    text: str


def tokenize_expression(expression: str) -> list[_Token]:
    """Split an expression into operator and identifier tokens.

    Word operators are folded into their symbolic forms.

    Raises:
        ConditionSyntaxError: On any character outside the grammar.
    """
    tokens: list[_Token] = []
    position = 0
    text = expression.rstrip()
    while position < len(text):
        match = _TOKEN.match(text, position)
        if match is None:
            raise ConditionSyntaxError(f"Unexpected input at {position}: {text[position:]!r}")
        operator, name = match.groups()
        if operator:
            tokens.append(_Token("op", operator))
        elif name.lower() in _WORD_OPERATORS:
            tokens.append(_Token("op", _WORD_OPERATORS[name.lower()]))
        else:
            tokens.append(_Token("name", name))
        position = match.end()
    return tokens


class _Parser:
    """Recursive descent evaluator. Both sides of and/or are always parsed
    so that syntax errors surface regardless of short-circuiting."""

    def __init__(self, tokens: list[_Token], lookup: Callable[[str], bool]) -> None:
        self.tokens = tokens
        self.position = 0
        self.lookup = lookup
        self.depth = 0

    def _peek(self) -> _Token | None:
        return self.tokens[self.position] if self.position < len(self.tokens) else None

    def _take(self) -> _Token:
        token = self._peek()
        if token is None:
            raise ConditionSyntaxError("Unexpected end of expression")
        self.position += 1
        return token

    def parse(self) -> bool:
        if not self.tokens:
            raise ConditionSyntaxError("Empty expression")
        value = self._or()
        if self._peek() is not None:
            raise ConditionSyntaxError(f"Unexpected token {self._peek().text!r}")
        return value

    def _or(self) -> bool:
        value = self._and()
        while (token := self._peek()) is not None and token.text == "||":
            self._take()
            right = self._and()
            value = value or right
        return value

    def _and(self) -> bool:
        value = self._not()
        while (token := self._peek()) is not None and token.text == "&&":
            self._take()
            right = self._not()
            value = value and right
        return value

    def _not(self) -> bool:
        self.depth += 1
        try:
            if self.depth > MAX_NESTING:
                raise ConditionSyntaxError(f"Expression nested deeper than {MAX_NESTING} levels")
            token = self._peek()
            if token is not None and token.text == "!":
                self._take()
                return not self._not()
            return self._primary()
        finally:
            self.depth -= 1

    def _primary(self) -> bool:
        token = self._take()
        if token.kind == "op":
            if token.text != "(":
                raise ConditionSyntaxError(f"Unexpected operator {token.text!r}")
            value = self._or()
            closing = self._take()
            if closing.text != ")":
                raise ConditionSyntaxError("Missing closing parenthesis")
            return value

        lowered = token.text.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        return bool(self.lookup(token.text))


def evaluate_expression(expression: str, lookup: Callable[[str], bool]) -> bool:
    """Evaluate a flag expression.

    Args:
        expression: e.g. ``"has_lamp and not (door_open || !night)"``.
        lookup: Returns the truthiness of a flag name.

    Returns:
        The boolean result.

    Raises:
        ConditionSyntaxError: If the expression is malformed.
    """
    return _Parser(tokenize_expression(expression), lookup).parse()


def expression_names(expression: str) -> list[str]:
    """Flag names referenced by an expression, in order of appearance."""
    names: list[str] = []
    for token in tokenize_expression(expression):
        if token.kind == "name" and token.text.lower() not in ("true", "false") and token.text not in names:
            names.append(token.text)
    return names
