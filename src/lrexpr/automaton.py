"""
LR(1) expression parser via recursive ascent.

Each parser state is a method. A state either shifts the look-ahead token
(pushing an operand where there is one and calling the successor state) or
reduces a complete production: it pops the production's operands, runs the
semantic action, pushes the result and sets ``unwind`` to the length of the
production's right-hand side. Since the Python call stack stands in for the
LR state stack, every state method decrements a non-zero ``unwind`` when it
returns, so a reduction pops exactly that many state frames. States that
begin an expression then take the goto on ``expr`` by re-entering their
successor while ``unwind`` is zero.

Grammar (precedence low to high):
    expr → ident "=" expr
         | expr ("+" | "-") expr
         | expr ("*" | "/" | "%") expr
         | expr "^" expr                  (right-associative)
         | ("+" | "-") expr
         | "(" expr ")"
         | ident "(" ")" | ident "(" expr ")" | ident "(" expr "," expr ")"
         | number | ident

Reference for the algorithm:
    https://doi.org/10.1016/0020-0190(88)90061-0
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NoReturn

from lrexpr.errors import (
    AssignmentTargetError,
    ErrorContext,
    GrammarError,
    LexError,
    SemanticError,
)
from lrexpr.functions import FunctionRegistry
from lrexpr.numeric import Number, NumericType
from lrexpr.symbols import Name, Symbol, Value
from lrexpr.symtable import SymbolTable
from lrexpr.tokenizer import Lexer, Token, TokenKind

_ADDITIVE = frozenset({TokenKind.PLUS, TokenKind.MINUS})
_MULTIPLICATIVE = frozenset({TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT})

# Look-aheads on which each kind of production is reduced
_CLOSE = frozenset({TokenKind.RPAREN, TokenKind.COMMA, TokenKind.END})
_FOLLOW_ADDITIVE = _CLOSE | _ADDITIVE
_FOLLOW_MULTIPLICATIVE = _FOLLOW_ADDITIVE | _MULTIPLICATIVE
_FOLLOW_OPERAND = _FOLLOW_MULTIPLICATIVE | {TokenKind.CARET}


def _assignment_target(text: str, end: int) -> str:
    """Operand text ending at ``end``, back to its enclosing ``(``, ``,`` or ``=``."""
    depth = 0
    start = end
    while start > 0:
        ch = text[start - 1]
        if ch == ")":
            depth += 1
        elif ch == "(":
            if depth == 0:
                break
            depth -= 1
        elif ch in ",=" and depth == 0:
            break
        start -= 1
    return text[start:end].strip()


class _Automaton:
    """Parser state for one expression."""

    def __init__(
        self,
        text: str,
        lexer: Lexer,
        symbols: SymbolTable,
        functions: FunctionRegistry,
        numeric: NumericType,
    ) -> None:
        self.text = text
        self._lexer = lexer
        self._symbols = symbols
        self._functions = functions
        self._numeric = numeric

        self.lookahead: Token | None = None
        self.stack: list[Symbol] = []
        self.unwind = 0
        self.accepted = False

    def run(self) -> None:
        self._advance()
        self.start()

    # -- Helpers --

    @property
    def _kind(self) -> TokenKind:
        assert self.lookahead is not None
        return self.lookahead.kind

    def _advance(self) -> None:
        tok = self._lexer.next_token()
        if tok.kind is TokenKind.INVALID:
            raise LexError(
                f'Invalid input in lexer: "{tok.text}".',
                tok.text,
                ErrorContext(self.text, tok.pos),
            )
        self.lookahead = tok

    def _leave(self) -> None:
        if self.unwind > 0:
            self.unwind -= 1

    def _goto(self, state: Callable[..., None], *args: TokenKind) -> None:
        while not self.unwind and self.stack and not self.accepted:
            state(*args)

    def _resolve(self, symbol: Symbol) -> Number:
        return self._symbols.resolve(symbol)

    def _no_transition(self, state: str, operand_complete: bool = False) -> NoReturn:
        assert self.lookahead is not None
        tok = self.lookahead
        context = ErrorContext(self.text, tok.pos)

        if operand_complete and tok.kind is TokenKind.ASSIGN:
            target = _assignment_target(self.text, tok.pos)
            raise AssignmentTargetError(
                f'Assignment needs a variable identifier, got "{target}".', context
            )

        raise GrammarError(
            f"No transition from {state} and look-ahead terminal {tok.kind.describe()}."
            f' Input expression: "{self.text}".',
            state,
            tok.kind,
            self.text,
            context,
        )

    def _shift_operand(self) -> bool:
        """Shift a token that begins an expression; False if there is none."""
        kind = self._kind
        if kind in _ADDITIVE:
            self._advance()
            self.unary_operand(kind)
        elif kind is TokenKind.LPAREN:
            self._advance()
            self.bracket_operand()
        elif kind is TokenKind.NUMBER:
            assert self.lookahead is not None and self.lookahead.value is not None
            self.stack.append(Value(value=self.lookahead.value))
            self._advance()
            self.after_number()
        elif kind is TokenKind.IDENT:
            assert self.lookahead is not None
            self.stack.append(Name(name=self.lookahead.text))
            self._advance()
            self.after_ident()
        else:
            return False
        return True

    def _shift_operator(self, additive: bool = True, multiplicative: bool = True) -> bool:
        """Shift a binary operator following a complete expression."""
        kind = self._kind
        if additive and kind in _ADDITIVE:
            self._advance()
            self.additive_operand(kind)
        elif multiplicative and kind in _MULTIPLICATIVE:
            self._advance()
            self.multiplicative_operand(kind)
        elif kind is TokenKind.CARET:
            self._advance()
            self.power_operand()
        else:
            return False
        return True

    def _reduce_binary(self, op: TokenKind) -> None:
        self.unwind = 3
        right = self.stack.pop()
        left = self.stack.pop()
        # semantic rule: expr -> expr op expr.
        value = self._numeric.apply(op, self._resolve(left), self._resolve(right))
        self.stack.append(Value(value=value))

    def _reduce_call(self, arity: int, length: int) -> None:
        self.unwind = length
        args = [self.stack.pop() for _ in range(arity)][::-1]
        callee = self.stack.pop()
        # semantic rule: expr -> ident ( args ).
        if not isinstance(callee, Name):
            raise SemanticError("Function call needs an identifier.")
        values = [self._resolve(arg) for arg in args]
        self.stack.append(Value(value=self._functions.call(callee.name, values)))

    # -- States --

    def start(self) -> None:
        """start → •expr"""
        if not self._shift_operand():
            self._no_transition("start")
        self._goto(self.after_expr)
        self._leave()

    def after_expr(self) -> None:
        """start → expr•"""
        if self._shift_operator():
            pass
        elif self._kind is TokenKind.END:
            self.accepted = True
        else:
            self._no_transition("after_expr", operand_complete=True)
        self._leave()

    def unary_operand(self, op: TokenKind) -> None:
        """expr → + •expr"""
        if not self._shift_operand():
            self._no_transition("unary_operand")
        self._goto(self.after_unary, op)
        self._leave()

    def after_unary(self, op: TokenKind) -> None:
        """expr → + expr•"""
        if self._shift_operator(additive=False):
            pass
        elif self._kind in _FOLLOW_ADDITIVE:
            self.unwind = 2
            value = self._resolve(self.stack.pop())
            # semantic rule: expr -> - expr.
            if op is TokenKind.MINUS:
                value = -value
            self.stack.append(Value(value=value))
        else:
            self._no_transition("after_unary", operand_complete=True)
        self._leave()

    def additive_operand(self, op: TokenKind) -> None:
        """expr → expr + •expr"""
        if not self._shift_operand():
            self._no_transition("additive_operand")
        self._goto(self.after_additive, op)
        self._leave()

    def after_additive(self, op: TokenKind) -> None:
        """expr → expr + expr•"""
        if self._shift_operator(additive=False):
            pass
        elif self._kind in _FOLLOW_ADDITIVE:
            self._reduce_binary(op)
        else:
            self._no_transition("after_additive", operand_complete=True)
        self._leave()

    def multiplicative_operand(self, op: TokenKind) -> None:
        """expr → expr * •expr"""
        if not self._shift_operand():
            self._no_transition("multiplicative_operand")
        self._goto(self.after_multiplicative, op)
        self._leave()

    def after_multiplicative(self, op: TokenKind) -> None:
        """expr → expr * expr•"""
        if self._shift_operator(additive=False, multiplicative=False):
            pass
        elif self._kind in _FOLLOW_MULTIPLICATIVE:
            self._reduce_binary(op)
        else:
            self._no_transition("after_multiplicative", operand_complete=True)
        self._leave()

    def power_operand(self) -> None:
        """expr → expr ^ •expr"""
        if not self._shift_operand():
            self._no_transition("power_operand")
        self._goto(self.after_power)
        self._leave()

    def after_power(self) -> None:
        """expr → expr ^ expr•"""
        # Shifting another "^" makes the operator right-associative
        if self._shift_operator(additive=False, multiplicative=False):
            pass
        elif self._kind in _FOLLOW_MULTIPLICATIVE:
            self._reduce_binary(TokenKind.CARET)
        else:
            self._no_transition("after_power", operand_complete=True)
        self._leave()

    def bracket_operand(self) -> None:
        """expr → ( •expr )"""
        if not self._shift_operand():
            self._no_transition("bracket_operand")
        self._goto(self.bracket_after_expr)
        self._leave()

    def bracket_after_expr(self) -> None:
        """expr → ( expr •)"""
        if self._shift_operator():
            pass
        elif self._kind is TokenKind.RPAREN:
            self._advance()
            self.after_bracket_expr()
        else:
            self._no_transition("bracket_after_expr", operand_complete=True)
        self._leave()

    def after_bracket_expr(self) -> None:
        """expr → ( expr )•"""
        if self._kind in _FOLLOW_OPERAND:
            self.unwind = 3
            # semantic rule: expr -> ( expr ).
            value = self._resolve(self.stack.pop())
            self.stack.append(Value(value=value))
        else:
            self._no_transition("after_bracket_expr", operand_complete=True)
        self._leave()

    def after_number(self) -> None:
        """expr → number•"""
        if self._kind in _FOLLOW_OPERAND:
            # semantic rule: expr -> number.
            self.unwind = 1
        else:
            self._no_transition("after_number", operand_complete=True)
        self._leave()

    def after_ident(self) -> None:
        """expr → ident•, expr → ident •= expr, expr → ident •( … )"""
        kind = self._kind
        if kind is TokenKind.ASSIGN:
            self._advance()
            self.assign_operand()
        elif kind is TokenKind.LPAREN:
            self._advance()
            self.call_after_lparen()
        elif kind in _FOLLOW_OPERAND:
            self.unwind = 1
            # semantic rule: expr -> ident.
            value = self._resolve(self.stack.pop())
            self.stack.append(Value(value=value))
        else:
            self._no_transition("after_ident")
        self._leave()

    def assign_operand(self) -> None:
        """expr → ident = •expr"""
        if not self._shift_operand():
            self._no_transition("assign_operand")
        self._goto(self.after_assign)
        self._leave()

    def after_assign(self) -> None:
        """expr → ident = expr•"""
        if self._shift_operator():
            pass
        elif self._kind in _CLOSE:
            self.unwind = 3
            rhs = self.stack.pop()
            lhs = self.stack.pop()
            # semantic rule: expr -> ident = expr.
            if not isinstance(lhs, Name):
                raise AssignmentTargetError("Assignment needs a variable identifier.")
            value = self._symbols.assign(lhs.name, self._resolve(rhs))
            self.stack.append(Value(value=value))
        else:
            self._no_transition("after_assign", operand_complete=True)
        self._leave()

    def call_after_lparen(self) -> None:
        """expr → ident ( •), expr → ident ( •expr … )"""
        if self._shift_operand():
            pass
        elif self._kind is TokenKind.RPAREN:
            self._advance()
            self.after_call0()
        else:
            self._no_transition("call_after_lparen")
        self._goto(self.call_after_arg)
        self._leave()

    def after_call0(self) -> None:
        """expr → ident ( )•"""
        if self._kind in _FOLLOW_OPERAND:
            self._reduce_call(0, 3)
        else:
            self._no_transition("after_call0", operand_complete=True)
        self._leave()

    def call_after_arg(self) -> None:
        """expr → ident ( expr •), expr → ident ( expr •, expr )"""
        kind = self._kind
        if self._shift_operator():
            pass
        elif kind is TokenKind.COMMA:
            self._advance()
            self.call_after_comma()
        elif kind is TokenKind.RPAREN:
            self._advance()
            self.after_call1()
        else:
            self._no_transition("call_after_arg", operand_complete=True)
        self._leave()

    def after_call1(self) -> None:
        """expr → ident ( expr )•"""
        if self._kind in _FOLLOW_OPERAND:
            self._reduce_call(1, 4)
        else:
            self._no_transition("after_call1", operand_complete=True)
        self._leave()

    def call_after_comma(self) -> None:
        """expr → ident ( expr , •expr )"""
        if not self._shift_operand():
            self._no_transition("call_after_comma")
        self._goto(self.call_after_arg2)
        self._leave()

    def call_after_arg2(self) -> None:
        """expr → ident ( expr , expr •)"""
        if self._shift_operator():
            pass
        elif self._kind is TokenKind.RPAREN:
            self._advance()
            self.after_call2()
        else:
            self._no_transition("call_after_arg2", operand_complete=True)
        self._leave()

    def after_call2(self) -> None:
        """expr → ident ( expr , expr )•"""
        if self._kind in _FOLLOW_OPERAND:
            self._reduce_call(2, 6)
        else:
            self._no_transition("after_call2", operand_complete=True)
        self._leave()
