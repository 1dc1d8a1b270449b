"""
Recursive-descent parser for plain arithmetic.

Grammar (after normalization)::

    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/') unary)*
    unary      := ('+' | '-')* power
    power      := primary ('**' unary)?
    primary    := NUMBER | '(' expression ')'

Only float literals and these operators are understood; there is no name
lookup and nothing is ever passed to ``eval``.
"""
import math
import operator
import re
from dataclasses import dataclass
from typing import Callable, List


TOKEN_PATTERN = re.compile(r'\s*(?:(\d+\.?\d*|\.\d+)|(\*\*|[+\-*/()]))')

# Parentheses and exponents nested deeper than this are rejected
MAX_NESTING_DEPTH = 100

BINARY_OPERATORS = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.truediv,
    '**': operator.pow,
}


class ExpressionSyntaxError(ValueError):
    """Raised when the text is not a well-formed arithmetic expression."""


@dataclass(frozen=True)
class Token:
    kind: str  # 'number', 'op' or 'end'
    value: str
    position: int


def tokenize(expression: str) -> List[Token]:
    """
    Split an arithmetic expression into tokens.

    Args:
        expression: Expression text

    Returns:
        Token list terminated by an ``end`` token

    Raises:
        ExpressionSyntaxError: On any character outside the grammar
    """
    tokens: List[Token] = []
    position = 0
    stripped_length = len(expression.rstrip())

    while position < stripped_length:
        match = TOKEN_PATTERN.match(expression, position)
        if not match:
            raise ExpressionSyntaxError(
                f"Unexpected character {expression[position]!r} at position {position}"
            )
        number, op = match.groups()
        if number is not None:
            tokens.append(Token('number', number, match.start(1)))
        else:
            tokens.append(Token('op', op, match.start(2)))
        position = match.end()

    tokens.append(Token('end', '', stripped_length))
    return tokens


class ArithmeticParser:
    """Evaluate a token stream while parsing it."""

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0
        self.depth = 0

    def parse(self) -> float:
        """
        Parse and evaluate the whole expression.

        Returns:
            Finite float value

        Raises:
            ExpressionSyntaxError: Malformed expression
            ZeroDivisionError: Division by zero
            OverflowError: Result too large
            ArithmeticError: Complex or non-finite result
        """
        if self._peek().kind == 'end':
            raise ExpressionSyntaxError("Empty expression")

        value = self._expression()
        token = self._peek()
        if token.kind != 'end':
            raise ExpressionSyntaxError(
                f"Unexpected token {token.value!r} at position {token.position}"
            )
        return self._check(value)

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _accept(self, *ops: str) -> bool:
        token = self._peek()
        return token.kind == 'op' and token.value in ops

    def _expression(self) -> float:
        value = self._term()
        while self._accept('+', '-'):
            op = self._advance().value
            value = self._apply(op, value, self._term())
        return value

    def _term(self) -> float:
        value = self._unary()
        while self._accept('*', '/'):
            op = self._advance().value
            value = self._apply(op, value, self._unary())
        return value

    def _unary(self) -> float:
        negative = False
        while self._accept('+', '-'):
            if self._advance().value == '-':
                negative = not negative
        value = self._power()
        return -value if negative else value

    def _power(self) -> float:
        base = self._primary()
        if self._accept('**'):
            token = self._advance()
            # right associative: 2**3**2 == 2**9
            exponent = self._nested(self._unary, token)
            return self._apply('**', base, exponent)
        return base

    def _primary(self) -> float:
        token = self._advance()
        if token.kind == 'number':
            return float(token.value)
        if token.kind == 'op' and token.value == '(':
            value = self._nested(self._expression, token)
            closing = self._advance()
            if closing.kind != 'op' or closing.value != ')':
                raise ExpressionSyntaxError(f"Missing ')' at position {closing.position}")
            return value
        if token.kind == 'end':
            raise ExpressionSyntaxError("Unexpected end of expression")
        raise ExpressionSyntaxError(f"Unexpected token {token.value!r} at position {token.position}")

    def _nested(self, rule: Callable[[], float], token: Token) -> float:
        if self.depth >= MAX_NESTING_DEPTH:
            raise ExpressionSyntaxError(
                f"Expression nested deeper than {MAX_NESTING_DEPTH} levels at position {token.position}"
            )
        self.depth += 1
        try:
            return rule()
        finally:
            self.depth -= 1

    def _apply(self, op: str, left: float, right: float) -> float:
        return self._check(BINARY_OPERATORS[op](left, right))

    @staticmethod
    def _check(value) -> float:
        if isinstance(value, complex):
            raise ArithmeticError("Complex result")
        if not math.isfinite(value):
            raise ArithmeticError("Non-finite result")
        return value


def evaluate_arithmetic(expression: str) -> float:
    """Parse and evaluate ``expression``; see :class:`ArithmeticParser`."""
    return ArithmeticParser(expression).parse()
