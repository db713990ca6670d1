"""
Resource limits for expression parsing and evaluation.

These limits protect the interpreter against runaway input: very long
sources and trees nested deep enough to exhaust the stack. Summations are
unbounded unless the caller sets max_sum_iterations.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Upper bounds applied while tokenizing, parsing and summing."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum AST depth (nesting level)
    max_ast_depth: int = 512

    # Maximum number of AST nodes
    max_ast_nodes: int = 4096

    # Maximum function call arguments
    max_function_args: int = 64

    # Maximum iterations of a single sum() call, None for no bound
    max_sum_iterations: Optional[int] = None


# Default expression limits.
#
# Sized to keep parsing and evaluation inside the interpreter's recursion
# limit without rejecting hand-written expressions.
DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()

_default_limits = DEFAULT_EXPRESSION_LIMITS


def get_default_limits() -> ExpressionLimits:
    """Returns the limits used when a caller does not pass any."""
    return _default_limits


def set_default_limits(limits: Optional[ExpressionLimits]) -> None:
    """Replaces the process-wide default limits (None restores the built-in defaults)."""
    global _default_limits
    _default_limits = limits or DEFAULT_EXPRESSION_LIMITS


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Rejects sources longer than max_expression_length characters."""
    limits = limits or get_default_limits()
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length",
            limits.max_expression_length,
            len(expression),
            limits.max_expression_length,
            expression,
        )


def check_ast_depth(
    depth: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
    expression: Optional[str] = None,
) -> None:
    """Rejects nesting deeper than max_ast_depth."""
    limits = limits or get_default_limits()
    if depth > limits.max_ast_depth:
        raise LimitExceededError(
            "max_ast_depth", limits.max_ast_depth, depth, position, expression
        )


def check_ast_node_count(
    count: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
    expression: Optional[str] = None,
) -> None:
    """Rejects trees with more than max_ast_nodes nodes."""
    limits = limits or get_default_limits()
    if count > limits.max_ast_nodes:
        raise LimitExceededError(
            "max_ast_nodes", limits.max_ast_nodes, count, position, expression
        )


def check_function_arg_count(
    count: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
    expression: Optional[str] = None,
) -> None:
    """Rejects calls with more than max_function_args arguments."""
    limits = limits or get_default_limits()
    if count > limits.max_function_args:
        raise LimitExceededError(
            "max_function_args", limits.max_function_args, count, position, expression
        )


def check_sum_iterations(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates the iteration count of a summation before it starts."""
    limits = limits or get_default_limits()
    if limits.max_sum_iterations is not None and count > limits.max_sum_iterations:
        raise LimitExceededError(
            "max_sum_iterations", limits.max_sum_iterations, count
        )
