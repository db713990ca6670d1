"""
Operator table for the expression language.

Every binary operator is a single character with a fixed precedence,
associativity, numeric rule and typeset rule. The table is fixed at import
time; there is no runtime registration of operators.

Precedence (lowest to highest):
1. Additive: + -
2. Multiplicative: * / %
3. Implicit multiplication (a "*" inserted between adjacent operands)
4. Power: ^ (right-associative)
"""

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from .errors import ArithmeticError as ExprArithmeticError


class Associativity(Enum):
    """Operator associativity."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class OperatorDefinition:
    """Definition of a binary infix operator."""

    symbol: str
    precedence: int
    associativity: Associativity
    evaluate: Callable[[float, float], float]
    render: Callable[[str, str], str]

    groups_left: bool = False
    """The typeset form already delimits the left operand."""

    groups_right: bool = False
    """The typeset form already delimits the right operand."""


def _divide(left: float, right: float) -> float:
    if right == 0:
        raise ExprArithmeticError(f"Division by zero: {left:g}/{right:g}")
    return left / right


def _modulo(left: float, right: float) -> float:
    if right == 0:
        raise ExprArithmeticError(f"Modulo by zero: {left:g}%{right:g}")
    return math.fmod(left, right)


def _power(left: float, right: float) -> float:
    # IEEE semantics: no complex results, overflow saturates to infinity
    try:
        return math.pow(left, right)
    except ValueError:
        if left == 0:
            raise ExprArithmeticError(
                f"Zero raised to a negative power: {left:g}^{right:g}"
            )
        return math.nan
    except OverflowError:
        if left < 0 and right.is_integer() and int(right) % 2 == 1:
            return -math.inf
        return math.inf


OPERATORS: Mapping[str, OperatorDefinition] = MappingProxyType(
    {
        "+": OperatorDefinition(
            symbol="+",
            precedence=20,
            associativity=Associativity.LEFT,
            evaluate=lambda left, right: left + right,
            render=lambda left, right: f"{left}+{right}",
        ),
        "-": OperatorDefinition(
            symbol="-",
            precedence=20,
            associativity=Associativity.LEFT,
            evaluate=lambda left, right: left - right,
            render=lambda left, right: f"{left}-{right}",
        ),
        "*": OperatorDefinition(
            symbol="*",
            precedence=40,
            associativity=Associativity.LEFT,
            evaluate=lambda left, right: left * right,
            render=lambda left, right: f"{left} \\cdot {right}",
        ),
        "/": OperatorDefinition(
            symbol="/",
            precedence=40,
            associativity=Associativity.LEFT,
            evaluate=_divide,
            render=lambda left, right: f"\\frac{{{left}}}{{{right}}}",
            groups_left=True,
            groups_right=True,
        ),
        "%": OperatorDefinition(
            symbol="%",
            precedence=40,
            associativity=Associativity.LEFT,
            evaluate=_modulo,
            render=lambda left, right: f"{left} \\bmod {right}",
        ),
        "^": OperatorDefinition(
            symbol="^",
            precedence=60,
            associativity=Associativity.RIGHT,
            evaluate=_power,
            render=lambda left, right: f"{left}^{{{right}}}",
            groups_right=True,
        ),
    }
)

# Grouping symbols are tokenized like operators but have no definition
GROUPING_SYMBOLS = ("(", ")")

MULTIPLICATION = "*"

# An implicit product binds its operands before the explicit multiplicative
# operators around it: 3*4sin($x) is 3*(4*sin($x)) and 8/2$x is 8/(2*$x).
IMPLICIT_MULTIPLICATION_PRECEDENCE = 50


def is_operator_symbol(ch: str) -> bool:
    """Checks if a character is tokenized as an operator."""
    return ch in OPERATORS or ch in GROUPING_SYMBOLS


def get_operator(symbol: str) -> OperatorDefinition:
    """
    Gets the definition of a binary operator.

    Raises:
        KeyError: If the symbol is not a binary operator
    """
    return OPERATORS[symbol]
