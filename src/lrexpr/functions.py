"""
Built-in functions callable from expressions.

Functions are grouped by the number of arguments they take. A name may
exist in several groups (``rand()`` and ``rand(min, max)``); the call site's
argument count alone selects the group.
"""

from __future__ import annotations

import math
import random
import threading
from collections.abc import Callable, Sequence

from lrexpr.errors import EvaluationError, UnknownFunctionError
from lrexpr.numeric import Number, NumericType

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class RandomSource:
    """Random number generator that may be shared between threads."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def random(self) -> float:
        """Float in [0, 1)."""
        with self._lock:
            return self._rng.random()

    def uniform(self, low: float, high: float) -> float:
        """Float in [low, high)."""
        return low + (high - low) * self.random()

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high], both ends included."""
        with self._lock:
            return self._rng.randint(low, high)


# Process-wide source used by every engine that is not given its own
SHARED_RANDOM = RandomSource()


def _round_half_away(x: float) -> int:
    return math.floor(x + 0.5) if x >= 0 else math.ceil(x - 0.5)


_UNARY_FUNCTIONS: dict[str, Callable[[Number], Number]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "asinh": math.asinh,
    "acosh": math.acosh,
    "atanh": math.atanh,
    "sqrt": math.sqrt,
    "cbrt": math.cbrt,
    "exp": math.exp,
    "log": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "round": _round_half_away,
    "ceil": math.ceil,
    "floor": math.floor,
    "abs": abs,
    "erf": math.erf,
    "erfc": math.erfc,
}


class FunctionRegistry:
    """Read-only tables of 0-, 1- and 2-argument built-ins for one numeric type."""

    def __init__(
        self,
        numeric: NumericType = NumericType.FLOAT,
        rng: RandomSource | None = None,
    ) -> None:
        self.numeric = numeric
        self.rng = rng if rng is not None else SHARED_RANDOM
        self._tables: dict[int, dict[str, Callable[..., Number]]] = {
            0: {"rand": self._rand},
            1: dict(_UNARY_FUNCTIONS),
            2: {
                "pow": numeric.power,
                "atan2": math.atan2,
                "rand": self._rand_between,
                "mod": numeric.remainder,
            },
        }

    def _rand(self) -> Number:
        if self.numeric is NumericType.FLOAT:
            return self.rng.random()
        return self.rng.randint(_INT32_MIN, _INT32_MAX)

    def _rand_between(self, low: Number, high: Number) -> Number:
        if self.numeric is NumericType.FLOAT:
            return self.rng.uniform(low, high)
        return self.rng.randint(int(low), int(high))

    def has(self, name: str, arity: int) -> bool:
        return name in self._tables.get(arity, {})

    def names(self, arity: int) -> list[str]:
        return sorted(self._tables.get(arity, {}))

    def call(self, name: str, args: Sequence[Number]) -> Number:
        """Call the built-in ``name`` with ``args``.

        Raises:
            UnknownFunctionError: If no function of that name takes
                ``len(args)`` arguments.
            EvaluationError: If the function fails for these arguments.
        """
        arity = len(args)
        func = self._tables.get(arity, {}).get(name)
        if func is None:
            raise UnknownFunctionError(name, arity)

        try:
            return self.numeric.cast(func(*args))
        except (ValueError, OverflowError, ZeroDivisionError) as e:
            arg_list = ", ".join(str(a) for a in args)
            raise EvaluationError(f"{name}({arg_list}) failed: {e}") from e
