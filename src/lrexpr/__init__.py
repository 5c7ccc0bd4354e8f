"""
lrexpr - embeddable arithmetic expression parser and evaluator.

An LR(1) parser written in recursive-ascent style evaluates expressions
with variables, assignment and built-in functions.

Usage:
    from lrexpr import ExprEngine

    engine = ExprEngine()
    engine.parse("x = 5")
    result = engine.parse("pow(x, 2) + 1")
    # result == 26.0
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .config import EngineConfig, load_config
from .engine import ExprEngine
from .errors import (
    AssignmentTargetError,
    ErrorContext,
    EvaluationError,
    ExprError,
    GrammarError,
    LexError,
    ParseFailure,
    SemanticError,
    UnknownFunctionError,
    UnknownVariableError,
)
from .functions import FunctionRegistry, RandomSource
from .numeric import NumericType
from .symbols import Name, Value
from .symtable import SymbolTable
from .tokenizer import Lexer, Token, TokenKind, tokenize


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    # In editable mode, read directly from pyproject.toml for live updates
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    # Fall back to installed metadata
    try:
        return _metadata_version("lrexpr")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "AssignmentTargetError",
    "EngineConfig",
    "ErrorContext",
    "EvaluationError",
    "ExprEngine",
    "ExprError",
    "FunctionRegistry",
    "GrammarError",
    "LexError",
    "Lexer",
    "Name",
    "NumericType",
    "ParseFailure",
    "RandomSource",
    "SemanticError",
    "SymbolTable",
    "Token",
    "TokenKind",
    "UnknownFunctionError",
    "UnknownVariableError",
    "Value",
    "load_config",
    "tokenize",
]
