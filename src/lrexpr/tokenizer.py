"""
Longest-match tokenizer for arithmetic expressions.

Tokens are produced lazily, one per ``Lexer.next_token()`` call. At each
position the candidate text grows one character at a time while at least
one token family (number, identifier, punctuation) still matches; the
longest matching candidate becomes the token and scanning resumes right
after it.
"""

from __future__ import annotations

import logging
import re
from enum import StrEnum

from lrexpr.errors import ErrorContext, LexError
from lrexpr.numeric import Number, NumericType

logger = logging.getLogger(__name__)


class TokenKind(StrEnum):
    """Terminal symbols of the expression grammar."""

    NUMBER = "number"
    IDENT = "identifier"
    END = "end"
    INVALID = "invalid"

    # Tokens represented by themselves
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    CARET = "^"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    ASSIGN = "="

    def describe(self) -> str:
        """Human-readable name used in diagnostics."""
        if self in _NAMED_KINDS:
            return self.value
        return f"'{self.value}'"


_NAMED_KINDS = frozenset({TokenKind.NUMBER, TokenKind.IDENT, TokenKind.END, TokenKind.INVALID})

_PUNCTUATION = frozenset("+-*/%^(),=")

_IDENT_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*")

_BLANKS = " \t\r"


class Token:
    """A single token from the expression lexer. Read-only once created."""

    __slots__ = ("kind", "value", "text", "pos")

    kind: TokenKind
    value: Number | None
    text: str
    pos: int

    def __init__(
        self, kind: TokenKind, text: str, pos: int, value: Number | None = None
    ) -> None:
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "pos", pos)
        object.__setattr__(self, "value", value)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"Token is read-only; cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Token is read-only; cannot delete {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r}, pos={self.pos})"


class Lexer:
    """Pull-based tokenizer over a single expression string."""

    def __init__(
        self,
        text: str,
        numeric: NumericType = NumericType.FLOAT,
        strict: bool = False,
    ) -> None:
        self.text = text
        self.numeric = numeric
        self.strict = strict
        self.pos = 0
        self._at_end = False
        self._stopped = False

    def __iter__(self) -> Lexer:
        return self

    def __next__(self) -> Token:
        if self._stopped:
            raise StopIteration
        tok = self.next_token()
        if tok.kind in (TokenKind.END, TokenKind.INVALID):
            self._stopped = True
        return tok

    def matching_kinds(self, candidate: str) -> list[TokenKind]:
        """All token families matching ``candidate`` in priority order."""
        kinds: list[TokenKind] = []
        if self.numeric.literal_pattern.fullmatch(candidate):
            kinds.append(TokenKind.NUMBER)
        if _IDENT_RE.fullmatch(candidate):
            kinds.append(TokenKind.IDENT)
        if candidate in _PUNCTUATION:
            kinds.append(TokenKind(candidate))
        return kinds

    def next_token(self) -> Token:
        """Scan and return the next token.

        Returns END at end of input or at a newline, and keeps returning END
        afterwards.

        Raises:
            LexError: If the match is ambiguous and strict lexing is enabled.
        """
        text = self.text
        n = len(text)

        if self._at_end:
            return Token(TokenKind.END, "", n)

        # Blanks outside a match are skipped
        while self.pos < n and text[self.pos] in _BLANKS:
            self.pos += 1

        start = self.pos
        if start >= n or text[start] == "\n":
            self._at_end = True
            return Token(TokenKind.END, "", start)

        end = start
        longest_kinds: list[TokenKind] = []
        while end < n:
            kinds = self.matching_kinds(text[start : end + 1])
            if not kinds:
                break
            end += 1
            longest_kinds = kinds

        if not longest_kinds:
            fragment = text[start]
            self.pos = start + 1
            logger.debug("Invalid input in lexer: %r", fragment)
            return Token(TokenKind.INVALID, fragment, start)

        lexeme = text[start:end]
        if len(longest_kinds) > 1:
            if self.strict:
                raise LexError(
                    f'Ambiguous match in lexer for token "{lexeme}".',
                    lexeme,
                    ErrorContext(text, start),
                )
            logger.warning(
                'Ambiguous match in lexer for token "%s" (%s), using %s',
                lexeme,
                ", ".join(k.describe() for k in longest_kinds),
                longest_kinds[0].describe(),
            )

        kind = longest_kinds[0]
        if kind is TokenKind.NUMBER:
            # Push back a dangling exponent marker ("2e", "2e+")
            lexeme = self.numeric.complete_literal(lexeme)
            self.pos = start + len(lexeme)
            return Token(kind, lexeme, start, self.numeric.parse_literal(lexeme))

        self.pos = end
        return Token(kind, lexeme, start)


def tokenize(
    source: str, numeric: NumericType = NumericType.FLOAT, strict: bool = False
) -> list[Token]:
    """Tokenize an expression string, including the terminating END token."""
    return list(Lexer(source, numeric, strict))
