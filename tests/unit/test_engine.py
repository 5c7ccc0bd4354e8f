"""Tests for expression evaluation through ExprEngine.

Covers:
- Precedence and associativity of binary and unary operators
- Function calls by arity
- Assignment, persistence, and committed side effects on failure
- Error taxonomy for lexical, grammar and semantic failures
- Integer engines
"""

from __future__ import annotations

import copy
import logging
import math

import pytest

from lrexpr import (
    AssignmentTargetError,
    EngineConfig,
    EvaluationError,
    ExprEngine,
    GrammarError,
    LexError,
    NumericType,
    TokenKind,
    UnknownFunctionError,
    UnknownVariableError,
)

# ============================================================================
# Arithmetic
# ============================================================================


class TestPrecedence:
    """Operators bind and associate as documented."""

    def test_mul_before_add(self, engine: ExprEngine) -> None:
        assert engine.parse("2+3*4") == 14

    def test_parentheses_override_precedence(self, engine: ExprEngine) -> None:
        assert engine.parse("(2+3)*4") == 20

    def test_power_is_right_associative(self, engine: ExprEngine) -> None:
        assert engine.parse("2^3^2") == 512

    def test_power_before_mul(self, engine: ExprEngine) -> None:
        assert engine.parse("3*2^2") == 12
        assert engine.parse("2^2*3") == 12

    def test_subtraction_is_left_associative(self, engine: ExprEngine) -> None:
        assert engine.parse("10-4-3") == 3

    def test_division_is_left_associative(self, engine: ExprEngine) -> None:
        assert engine.parse("64/4/2") == 8

    def test_modulo(self, engine: ExprEngine) -> None:
        assert engine.parse("7 % 3") == 1
        assert engine.parse("2 + 7 % 3 * 2") == 4

    def test_float_modulo_follows_dividend_sign(self, engine: ExprEngine) -> None:
        assert engine.parse("(0-7) % 3") == -1

    def test_decimal_literals(self, engine: ExprEngine) -> None:
        assert engine.parse("1.5 * 2e1") == 30

    def test_whitespace_is_ignored(self, engine: ExprEngine) -> None:
        assert engine.parse("  1 +\t2  ") == 3

    def test_input_ends_at_newline(self, engine: ExprEngine) -> None:
        assert engine.parse("1+2\n this is ignored") == 3

    def test_deep_nesting(self, engine: ExprEngine) -> None:
        assert engine.parse("(" * 20 + "1" + ")" * 20) == 1

    @pytest.mark.parametrize(
        "expr",
        ["2+3*4", "2^3^2", "-3+4", "sin(pi/2) + pow(2, 3)", "1/4 - 2*(3+1)"],
    )
    def test_parentheses_round_trip(self, engine: ExprEngine, expr: str) -> None:
        assert engine.parse(f"({expr})") == engine.parse(expr)


class TestUnary:
    """Unary plus and minus."""

    def test_unary_minus_then_add(self, engine: ExprEngine) -> None:
        assert engine.parse("-3+4") == 1

    def test_unary_minus_of_group(self, engine: ExprEngine) -> None:
        assert engine.parse("-(3+4)") == -7

    def test_unary_plus(self, engine: ExprEngine) -> None:
        assert engine.parse("+5") == 5

    def test_double_negation(self, engine: ExprEngine) -> None:
        assert engine.parse("--3") == 3

    def test_unary_after_binary_operator(self, engine: ExprEngine) -> None:
        assert engine.parse("2*-3") == -6
        assert engine.parse("2^-1") == 0.5

    def test_power_binds_tighter_than_negation(self, engine: ExprEngine) -> None:
        assert engine.parse("-2^2") == -4


# ============================================================================
# Functions
# ============================================================================


class TestFunctionCalls:
    """Built-in functions are selected by name and argument count."""

    def test_two_args(self, engine: ExprEngine) -> None:
        assert engine.parse("pow(2,10)") == 1024

    def test_one_arg(self, engine: ExprEngine) -> None:
        assert engine.parse("sin(0)") == 0
        assert engine.parse("sqrt(16)") == 4

    def test_expression_arguments(self, engine: ExprEngine) -> None:
        assert engine.parse("pow(1+1, 2*5)") == 1024
        assert engine.parse("abs(3 - 10)") == 7

    def test_nested_calls(self, engine: ExprEngine) -> None:
        assert engine.parse("sqrt(pow(3, 2) + pow(4, 2))") == 5

    def test_call_result_in_expression(self, engine: ExprEngine) -> None:
        assert engine.parse("2 * floor(2.7) ^ 2") == 8

    def test_zero_args_rand(self, engine: ExprEngine) -> None:
        for _ in range(50):
            value = engine.parse("rand()")
            assert 0 <= value < 1

    def test_two_args_rand(self, engine: ExprEngine) -> None:
        for _ in range(50):
            value = engine.parse("rand(5, 10)")
            assert 5 <= value < 10

    def test_atan2(self, engine: ExprEngine) -> None:
        assert engine.parse("atan2(1, 1)") == pytest.approx(math.pi / 4)

    def test_unknown_function(self, engine: ExprEngine) -> None:
        with pytest.raises(UnknownFunctionError, match="foo") as exc_info:
            engine.parse("foo(1)")
        assert exc_info.value.name == "foo"
        assert exc_info.value.arity == 1

    def test_no_fallback_to_other_arity(self, engine: ExprEngine) -> None:
        with pytest.raises(UnknownFunctionError):
            engine.parse("sin(1, 2)")
        with pytest.raises(UnknownFunctionError):
            engine.parse("pow()")

    def test_three_arguments_rejected(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError) as exc_info:
            engine.parse("foo(1,2,3)")
        assert exc_info.value.token == TokenKind.COMMA

    def test_math_domain_error(self, engine: ExprEngine) -> None:
        with pytest.raises(EvaluationError, match="sqrt"):
            engine.parse("sqrt(-1)")


# ============================================================================
# Variables
# ============================================================================


class TestVariables:
    """Assignment and lookup against the engine's symbol table."""

    def test_pi(self, engine: ExprEngine) -> None:
        assert engine.parse("pi") == pytest.approx(math.pi)

    def test_assignment_persists(self, engine: ExprEngine) -> None:
        assert engine.parse("x=5") == 5
        assert engine.parse("x+1") == 6

    def test_fresh_engine_has_no_variables(self, engine: ExprEngine) -> None:
        engine.parse("x=5")
        with pytest.raises(UnknownVariableError):
            ExprEngine().parse("x")

    def test_assignment_rhs_is_full_expression(self, engine: ExprEngine) -> None:
        assert engine.parse("y = 2 + 3 * 4") == 14
        assert engine.variables["y"] == 14

    def test_chained_assignment(self, engine: ExprEngine) -> None:
        assert engine.parse("a = b = 4") == 4
        assert engine.variables["a"] == 4
        assert engine.variables["b"] == 4

    def test_assignment_inside_expression(self, engine: ExprEngine) -> None:
        assert engine.parse("2 * (z = 3)") == 6
        assert engine.variables["z"] == 3

    def test_reassignment(self, engine: ExprEngine) -> None:
        engine.parse("x = 1")
        engine.parse("x = x + 1")
        assert engine.parse("x") == 2

    def test_names_are_case_sensitive(self, engine: ExprEngine) -> None:
        engine.parse("Width = 3")
        with pytest.raises(UnknownVariableError):
            engine.parse("width")

    def test_non_assigning_expression_is_idempotent(self, engine: ExprEngine) -> None:
        before = dict(engine.variables)
        for _ in range(5):
            assert engine.parse("2+2") == 4
        assert dict(engine.variables) == before

    def test_unknown_variable(self, engine: ExprEngine) -> None:
        with pytest.raises(UnknownVariableError, match='"y"') as exc_info:
            engine.parse("y+1")
        assert exc_info.value.name == "y"

    def test_assignment_to_literal(self, engine: ExprEngine) -> None:
        with pytest.raises(AssignmentTargetError):
            engine.parse("5=3")

    def test_assignment_to_expression(self, engine: ExprEngine) -> None:
        engine.parse("x = 1")
        with pytest.raises(AssignmentTargetError):
            engine.parse("x+1=2")
        with pytest.raises(AssignmentTargetError):
            engine.parse("(x)=2")

    @pytest.mark.parametrize(
        ("expr", "target"),
        [
            ("5=3", "5"),
            ("2*(5=3)", "5"),
            ("x+1=2", "x+1"),
            ("pow(1, 2=3)", "2"),
            ("a = (1)=2", "(1)"),
        ],
    )
    def test_assignment_error_names_target(
        self, engine: ExprEngine, expr: str, target: str
    ) -> None:
        engine.parse("x = 1")
        with pytest.raises(AssignmentTargetError) as exc_info:
            engine.parse(expr)
        assert exc_info.value.message == (
            f'Assignment needs a variable identifier, got "{target}".'
        )

    def test_committed_assignment_survives_later_failure(self, engine: ExprEngine) -> None:
        engine.parse("x = 5")
        with pytest.raises(GrammarError):
            engine.parse("x = 1 +")
        assert engine.parse("x") == 5

    def test_assignment_reduced_before_failure_is_kept(self, engine: ExprEngine) -> None:
        with pytest.raises(UnknownVariableError):
            engine.parse("pow(x = 2, missing)")
        assert engine.variables["x"] == 2

    def test_copy_has_independent_variables(self, engine: ExprEngine) -> None:
        engine.parse("x = 1")
        clone = copy.copy(engine)
        clone.parse("x = 2")
        assert engine.parse("x") == 1
        assert clone.parse("x") == 2

    def test_logs_assignment(self, engine: ExprEngine, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="lrexpr"):
            engine.parse("x = 3")
        assert "Assigned x = 3.0" in caplog.text


# ============================================================================
# Errors
# ============================================================================


class TestErrors:
    """Lexical and grammar failures are reported with context."""

    def test_incomplete_expression(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError) as exc_info:
            engine.parse("1+")
        err = exc_info.value
        assert err.state == "additive_operand"
        assert err.token == TokenKind.END
        assert err.expression == "1+"
        assert "look-ahead terminal end" in str(err)
        assert 'Input expression: "1+"' in str(err)

    def test_empty_expression(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError) as exc_info:
            engine.parse("")
        assert exc_info.value.state == "start"

    def test_unbalanced_parentheses(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError):
            engine.parse("(1+2")
        with pytest.raises(GrammarError):
            engine.parse("1+2)")

    def test_empty_parentheses(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError) as exc_info:
            engine.parse("()")
        assert exc_info.value.token == TokenKind.RPAREN

    def test_adjacent_operands(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError, match="after_number"):
            engine.parse("2 3")

    def test_invalid_character(self, engine: ExprEngine) -> None:
        with pytest.raises(LexError, match="@") as exc_info:
            engine.parse("1 + @")
        assert exc_info.value.fragment == "@"
        assert exc_info.value.context is not None
        assert exc_info.value.context.pos == 4

    def test_division_by_zero(self, engine: ExprEngine) -> None:
        with pytest.raises(EvaluationError, match="Division by zero"):
            engine.parse("1/0")

    def test_modulo_by_zero(self, engine: ExprEngine) -> None:
        with pytest.raises(EvaluationError, match="Modulo by zero"):
            engine.parse("1%0")

    def test_error_message_marks_position(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError) as exc_info:
            engine.parse("1 + * 2")
        assert str(exc_info.value).endswith("  1 + * 2\n      ^")

    def test_error_marker_ignores_text_after_newline(self, engine: ExprEngine) -> None:
        with pytest.raises(GrammarError) as exc_info:
            engine.parse("1+\n2")
        assert exc_info.value.context is not None
        assert exc_info.value.context.format() == "  1+\n    ^"


# ============================================================================
# Integer engines
# ============================================================================


class TestIntegerEngine:
    """Integer engines truncate like C integer arithmetic."""

    def test_division_truncates_toward_zero(self, int_engine: ExprEngine) -> None:
        assert int_engine.parse("7/2") == 3
        assert int_engine.parse("(0-7)/2") == -3

    def test_remainder_follows_dividend(self, int_engine: ExprEngine) -> None:
        assert int_engine.parse("(0-7)%2") == -1
        assert int_engine.parse("7%(0-2)") == 1

    def test_results_are_ints(self, int_engine: ExprEngine) -> None:
        result = int_engine.parse("2^10")
        assert result == 1024
        assert isinstance(result, int)

    def test_pi_is_truncated(self, int_engine: ExprEngine) -> None:
        assert int_engine.parse("pi") == 3

    def test_function_results_truncate(self, int_engine: ExprEngine) -> None:
        assert int_engine.parse("sqrt(17)") == 4

    def test_fraction_literal_rejected(self, int_engine: ExprEngine) -> None:
        with pytest.raises(LexError):
            int_engine.parse("1.5")

    def test_bounded_rand_is_inclusive(self, int_engine: ExprEngine) -> None:
        seen = {int_engine.parse("rand(1, 3)") for _ in range(200)}
        assert seen == {1, 2, 3}

    def test_unbounded_rand_is_int32(self, int_engine: ExprEngine) -> None:
        for _ in range(50):
            value = int_engine.parse("rand()")
            assert isinstance(value, int)
            assert -(2**31) <= value <= 2**31 - 1

    def test_large_power(self, int_engine: ExprEngine) -> None:
        assert int_engine.parse("2^100") == 2**100

    def test_huge_power_rejected(self, int_engine: ExprEngine) -> None:
        with pytest.raises(EvaluationError, match="too large"):
            int_engine.parse("9^9^9")
        with pytest.raises(EvaluationError, match="too large"):
            int_engine.parse("pow(10, 100000)")

    def test_engine_from_string_type(self) -> None:
        assert ExprEngine("int").numeric is NumericType.INT


class TestRandomSource:
    """Engines can share or own their random source."""

    def test_seeded_engines_repeat(self) -> None:
        first = ExprEngine(config=EngineConfig(seed=7))
        second = ExprEngine(config=EngineConfig(seed=7))
        assert [first.parse("rand()") for _ in range(5)] == [
            second.parse("rand()") for _ in range(5)
        ]
