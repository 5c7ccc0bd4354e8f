"""
Error types for lexing, parsing and evaluating expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lrexpr.tokenizer import TokenKind


class ExprError(Exception):
    """Base exception for all expression errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.message}\n{self.context.format()}"
        return self.message


@dataclass
class ErrorContext:
    """
    Location of an error inside the expression being evaluated.

    Attributes:
        expression: The full input text
        pos: 0-based offset of the offending token, if known
    """

    expression: str
    pos: int | None = None

    def format(self) -> str:
        """
        Format the expression with a marker under the error position.

        Returns:
            Two lines: the expression and a ``^`` marker
        """
        # Input ends at the first newline
        text = self.expression.split("\n", 1)[0]
        if self.pos is None:
            return f"  {text}"
        return f"  {text}\n  {' ' * self.pos}^"


class LexError(ExprError):
    """
    Raised when no token pattern matches the input.

    Examples:
    - Characters outside the expression alphabet (``@``, ``$``)
    - A lone decimal point
    - Ambiguous matches when strict lexing is enabled
    """

    def __init__(self, message: str, fragment: str, context: ErrorContext | None = None):
        self.fragment = fragment
        super().__init__(message, context)


class GrammarError(ExprError):
    """
    Raised when the parser has no transition for the current look-ahead.
    """

    def __init__(
        self,
        message: str,
        state: str,
        token: TokenKind,
        expression: str,
        context: ErrorContext | None = None,
    ):
        self.state = state
        self.token = token
        self.expression = expression
        super().__init__(message, context)


class SemanticError(ExprError):
    """
    Raised when a syntactically valid expression cannot be evaluated.
    """

    pass


class UnknownVariableError(SemanticError):
    def __init__(self, name: str, context: ErrorContext | None = None):
        self.name = name
        super().__init__(f'Unknown variable "{name}".', context)


class UnknownFunctionError(SemanticError):
    def __init__(self, name: str, arity: int, context: ErrorContext | None = None):
        self.name = name
        self.arity = arity
        plural = "argument" if arity == 1 else "arguments"
        super().__init__(f'Unknown function "{name}" taking {arity} {plural}.', context)


class AssignmentTargetError(SemanticError):
    """Left-hand side of ``=`` is not a bare variable name."""

    pass


class EvaluationError(SemanticError):
    """
    Raised when an operator or built-in function fails on its arguments.

    Examples:
    - Division or modulo by zero
    - ``sqrt(-1)``, ``log(0)``
    - Results too large for the numeric type
    """

    pass


class ParseFailure(ExprError):
    """Raised when the parser stops without accepting the input."""

    pass
