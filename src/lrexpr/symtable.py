"""
Variable table owned by an expression engine.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from lrexpr.errors import UnknownVariableError
from lrexpr.numeric import Number, NumericType
from lrexpr.symbols import Name, Symbol, Value

logger = logging.getLogger(__name__)


class SymbolTable:
    """
    Case-sensitive mapping from variable name to value.

    Starts out with the constant ``pi`` plus any extra constants given at
    construction. Values are stored in the table's numeric type.
    """

    def __init__(
        self,
        numeric: NumericType = NumericType.FLOAT,
        constants: Mapping[str, Number] | None = None,
    ) -> None:
        self.numeric = numeric
        self._constants: dict[str, Number] = {"pi": numeric.cast(math.pi)}
        for name, value in (constants or {}).items():
            self._constants[name] = numeric.cast(value)
        self._values: dict[str, Number] = dict(self._constants)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def get(self, name: str) -> Number:
        try:
            return self._values[name]
        except KeyError:
            raise UnknownVariableError(name) from None

    def assign(self, name: str, value: Number) -> Number:
        """Insert or overwrite a variable and return the stored value."""
        stored = self.numeric.cast(value)
        self._values[name] = stored
        logger.debug("Assigned %s = %r", name, stored)
        return stored

    def set(self, name: str, value: Number) -> None:
        """Define a variable from outside an expression."""
        self.assign(name, value)

    def resolve(self, symbol: Symbol) -> Number:
        """Turn a stack symbol into a number, reading the table for names."""
        if isinstance(symbol, Value):
            return symbol.value
        if isinstance(symbol, Name):
            return self.get(symbol.name)
        raise TypeError(f"Unknown symbol type: {type(symbol).__name__}")

    def clear(self, keep_constants: bool = True) -> None:
        """Forget assigned variables, restoring the initial constants by default."""
        self._values = dict(self._constants) if keep_constants else {}

    def as_dict(self) -> Mapping[str, Number]:
        """Read-only live view of the table."""
        return MappingProxyType(self._values)

    def copy(self) -> SymbolTable:
        clone = SymbolTable.__new__(SymbolTable)
        clone.numeric = self.numeric
        clone._constants = dict(self._constants)
        clone._values = dict(self._values)
        return clone
