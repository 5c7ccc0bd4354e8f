"""
Numeric value types supported by the expression engine.

An engine evaluates either in floating point or in integers. The choice
fixes the literal syntax, how results of built-in functions are cast, and
the meaning of ``/``, ``%`` and ``^``.
"""

from __future__ import annotations

import math
import re
from enum import StrEnum

from lrexpr.errors import EvaluationError

Number = int | float

# Growth patterns: a trailing "e" or "e+" still matches so that the lexer
# keeps extending "12.5e3" one character at a time.
_FLOAT_LITERAL_RE = re.compile(r"[0-9]+(\.[0-9]*)?([Ee][+-]?[0-9]*)?")
_INT_LITERAL_RE = re.compile(r"[0-9]+")

# Integer powers whose result would exceed this many bits are rejected
_MAX_POWER_BITS = 4096

# Longest prefix that is a complete float literal
_FLOAT_COMPLETE_RE = re.compile(r"[0-9]+(\.[0-9]*)?([Ee][+-]?[0-9]+)?")


def _trunc_div(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _trunc_mod(left: int, right: int) -> int:
    """Remainder whose sign follows the dividend."""
    return left - right * _trunc_div(left, right)


class NumericType(StrEnum):
    """Value type an engine computes in."""

    FLOAT = "float"
    INT = "int"

    @property
    def literal_pattern(self) -> re.Pattern[str]:
        if self is NumericType.FLOAT:
            return _FLOAT_LITERAL_RE
        return _INT_LITERAL_RE

    def complete_literal(self, text: str) -> str:
        """Return the longest prefix of ``text`` that converts to a number."""
        if self is NumericType.FLOAT:
            m = _FLOAT_COMPLETE_RE.match(text)
        else:
            m = _INT_LITERAL_RE.match(text)
        return m.group(0) if m else ""

    def parse_literal(self, text: str) -> Number:
        if self is NumericType.FLOAT:
            return float(text)
        return int(text)

    def cast(self, value: Number) -> Number:
        """Convert a computed value to this type (integers truncate toward zero)."""
        if self is NumericType.FLOAT:
            return float(value)
        return int(value)

    def apply(self, op: str, left: Number, right: Number) -> Number:
        """Apply a binary arithmetic operator.

        Args:
            op: One of ``+ - * / % ^``
            left: Left operand
            right: Right operand

        Returns:
            The result in this numeric type.

        Raises:
            EvaluationError: On division by zero or an unrepresentable result.
        """
        try:
            if op == "+":
                return left + right
            if op == "-":
                return left - right
            if op == "*":
                return left * right
            if op == "/":
                return self.divide(left, right)
            if op == "%":
                return self.remainder(left, right)
            if op == "^":
                return self.power(left, right)
        except (OverflowError, ValueError) as e:
            raise EvaluationError(f"Cannot evaluate {left} {op} {right}: {e}") from e

        raise EvaluationError(f"Unknown binary operator: {op}")

    def divide(self, left: Number, right: Number) -> Number:
        if right == 0:
            raise EvaluationError("Division by zero")
        if self is NumericType.FLOAT:
            return left / right
        return _trunc_div(int(left), int(right))

    def remainder(self, left: Number, right: Number) -> Number:
        """``fmod`` for floats, truncated remainder for integers."""
        if right == 0:
            raise EvaluationError("Modulo by zero")
        if self is NumericType.FLOAT:
            return math.fmod(left, right)
        return _trunc_mod(int(left), int(right))

    def power(self, base: Number, exponent: Number) -> Number:
        if self is NumericType.FLOAT:
            return math.pow(base, exponent)
        if exponent >= 0:
            base, exponent = int(base), int(exponent)
            if exponent * (abs(base).bit_length() - 1) > _MAX_POWER_BITS:
                raise EvaluationError(f"Integer power {base}^{exponent} is too large")
            return base**exponent
        if base == 0:
            raise EvaluationError("Zero raised to a negative power")
        return int(math.pow(base, exponent))
