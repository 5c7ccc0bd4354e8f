"""
Operand stack symbols.

A symbol is either a resolved number or an identifier whose meaning is not
known yet. An identifier only becomes a value when the parser decides it is
a variable read; it stays a name when it turns out to be the target of an
assignment or the callee of a function call.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Value(BaseModel):
    """A resolved numeric value."""

    value: int | float = Field(description="The number")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.value)


class Name(BaseModel):
    """An identifier awaiting lookup, assignment or call."""

    name: str = Field(description="Identifier text")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


Symbol = Value | Name
