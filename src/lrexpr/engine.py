"""
Expression engine: the public entry point.

Usage:
    from lrexpr import ExprEngine

    engine = ExprEngine()
    engine.parse("r = 2")
    engine.parse("pi * r^2")   # 12.566...
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from lrexpr.automaton import _Automaton
from lrexpr.config import EngineConfig, load_config
from lrexpr.errors import ErrorContext, ParseFailure
from lrexpr.functions import FunctionRegistry, RandomSource
from lrexpr.numeric import Number, NumericType
from lrexpr.symtable import SymbolTable
from lrexpr.tokenizer import Lexer

logger = logging.getLogger(__name__)


class ExprEngine:
    """
    Parses and evaluates arithmetic expressions.

    The engine owns a variable table that persists across ``parse`` calls,
    so ``x = 5`` in one call makes ``x`` available to later calls on the
    same engine. Parser state is created fresh for every call.

    Not safe for concurrent use from several threads without external
    locking.
    """

    def __init__(
        self,
        numeric: NumericType | str | None = None,
        *,
        config: EngineConfig | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.numeric = NumericType(numeric) if numeric is not None else self.config.numeric

        if rng is None and self.config.seed is not None:
            rng = RandomSource(self.config.seed)

        self.symbols = SymbolTable(self.numeric, self.config.constants)
        self.functions = FunctionRegistry(self.numeric, rng)

    @classmethod
    def from_config(cls, path: Path) -> ExprEngine:
        return cls(config=load_config(path))

    @property
    def variables(self) -> Mapping[str, Number]:
        return self.symbols.as_dict()

    def parse(self, expression: str) -> Number:
        """Evaluate one expression.

        Args:
            expression: Expression text, e.g. ``"2 * (x + 1)"``. Input ends
                at the first newline.

        Returns:
            The value of the expression in the engine's numeric type.

        Raises:
            LexError: If the input contains characters no token matches.
            GrammarError: If the input is not a valid expression.
            SemanticError: On unknown variables or functions, invalid
                assignment targets, or failing arithmetic.
            ParseFailure: If the parser stops without accepting the input.
        """
        lexer = Lexer(expression, self.numeric, strict=self.config.strict_lexing)
        automaton = _Automaton(expression, lexer, self.symbols, self.functions, self.numeric)
        automaton.run()

        if not automaton.accepted or len(automaton.stack) != 1:
            raise ParseFailure(
                f'Could not parse expression "{expression}".', ErrorContext(expression)
            )

        result = self.symbols.resolve(automaton.stack[-1])
        logger.debug("Evaluated %r -> %r", expression, result)
        return result

    evaluate = parse

    def copy(self) -> ExprEngine:
        """New engine with the same functions and an independent copy of the variables."""
        clone = ExprEngine.__new__(ExprEngine)
        clone.config = self.config
        clone.numeric = self.numeric
        clone.symbols = self.symbols.copy()
        clone.functions = self.functions
        return clone

    __copy__ = copy
