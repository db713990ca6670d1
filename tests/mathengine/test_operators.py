"""
Tests for the operator table.
"""

import math

import pytest

from mathengine import OPERATORS, ArithmeticError, Associativity
from mathengine.operators import get_operator, is_operator_symbol


class TestTable:
    """Tests for operator definitions."""

    def test_symbols(self):
        assert set(OPERATORS) == {"+", "-", "*", "/", "%", "^"}

    def test_precedence_order(self):
        assert OPERATORS["+"].precedence == OPERATORS["-"].precedence
        assert OPERATORS["*"].precedence == OPERATORS["/"].precedence == OPERATORS["%"].precedence
        assert OPERATORS["+"].precedence < OPERATORS["*"].precedence < OPERATORS["^"].precedence

    def test_only_power_is_right_associative(self):
        right = [s for s, op in OPERATORS.items() if op.associativity == Associativity.RIGHT]
        assert right == ["^"]

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            OPERATORS["&"] = OPERATORS["+"]  # type: ignore[index]

    def test_grouping_symbols_tokenize_as_operators(self):
        assert is_operator_symbol("(")
        assert is_operator_symbol("^")
        assert not is_operator_symbol(",")

    def test_get_unknown_operator_fails(self):
        with pytest.raises(KeyError):
            get_operator("&")


class TestRules:
    """Tests for operator arithmetic."""

    def test_basic_arithmetic(self):
        assert get_operator("+").evaluate(2, 3) == 5
        assert get_operator("-").evaluate(2, 3) == -1
        assert get_operator("*").evaluate(2, 3) == 6
        assert get_operator("/").evaluate(3, 2) == 1.5

    def test_modulo_truncates(self):
        assert get_operator("%").evaluate(-7.0, 3.0) == -1.0
        assert get_operator("%").evaluate(5.5, 2.0) == 1.5

    @pytest.mark.parametrize("symbol", ["/", "%"])
    def test_zero_divisor_fails(self, symbol):
        with pytest.raises(ArithmeticError):
            get_operator(symbol).evaluate(1.0, 0.0)

    def test_power(self):
        power = get_operator("^").evaluate
        assert power(2.0, 10.0) == 1024.0
        assert power(0.0, 0.0) == 1.0
        assert math.isnan(power(-8.0, 0.5))
        assert power(-10.0, 401.0) == -math.inf
        assert power(-10.0, 400.0) == math.inf

    def test_zero_to_negative_power_fails(self):
        with pytest.raises(ArithmeticError):
            get_operator("^").evaluate(0.0, -2.0)


class TestRenderRules:
    """Tests for operator typeset rules."""

    @pytest.mark.parametrize(
        "symbol, expected",
        [
            ("+", "a+b"),
            ("-", "a-b"),
            ("*", "a \\cdot b"),
            ("/", "\\frac{a}{b}"),
            ("%", "a \\bmod b"),
            ("^", "a^{b}"),
        ],
    )
    def test_render(self, symbol, expected):
        assert get_operator(symbol).render("a", "b") == expected

    def test_fraction_delimits_both_operands(self):
        assert OPERATORS["/"].groups_left and OPERATORS["/"].groups_right
        assert OPERATORS["^"].groups_right and not OPERATORS["^"].groups_left
