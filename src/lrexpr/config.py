"""
Engine configuration.

Configuration can be built in code or read from the ``[engine]`` table of a
TOML file:

    [engine]
    numeric = "int"          # "float" (default) or "int"
    strict_lexing = false    # raise on ambiguous lexer matches
    seed = 42                # private, reproducible random source

    [engine.constants]
    e = 2.718281828459045
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from lrexpr.numeric import Number, NumericType


@dataclass
class EngineConfig:
    """Options for constructing an ``ExprEngine``."""

    numeric: NumericType = NumericType.FLOAT
    strict_lexing: bool = False  # ambiguous matches are errors instead of warnings
    seed: int | None = None  # None shares the process-wide random source
    constants: dict[str, Number] = field(default_factory=dict)


def parse_config(data: dict) -> EngineConfig:
    """Build an EngineConfig from an already-parsed TOML document."""
    engine_data = data.get("engine", {})

    numeric_name = engine_data.get("numeric", "float")
    try:
        numeric = NumericType(numeric_name)
    except ValueError:
        choices = ", ".join(t.value for t in NumericType)
        raise ValueError(
            f"Unknown numeric type {numeric_name!r} (expected one of: {choices})"
        ) from None

    return EngineConfig(
        numeric=numeric,
        strict_lexing=engine_data.get("strict_lexing", False),
        seed=engine_data.get("seed"),
        constants=dict(engine_data.get("constants", {})),
    )


def load_config(path: Path) -> EngineConfig:
    data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
    return parse_config(data)
