"""
Expression evaluator.

Evaluates an AST against a set of variable bindings and returns a float.

Semantics:
- Variables missing from the bindings evaluate to 0.
- Operands are evaluated left to right.
- Operator rules are the only source of operator arithmetic failures,
  reported as ArithmeticError at the operator's position.
- Functions receive unevaluated arguments. Failures escaping a function
  are reported as ArithmeticError or EvaluationError at the call position.
- Any failure aborts the whole evaluation unless a function such as
  noerr() intercepts it.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, cast

from .ast import (
    AstNode,
    CallNode,
    ConstantNode,
    NumberNode,
    OperatorNode,
    VariableNode,
)
from .builtins import CallContext
from .errors import ArithmeticError as ExprArithmeticError
from .errors import EvaluationError, ExpressionError
from .limits import ExpressionLimits, get_default_limits
from .operators import OPERATORS
from .parser import parse_expression
from .registry import DEFAULT_REGISTRY, Registry


@dataclass
class EvaluationContext:
    """Evaluation context with variable bindings."""

    bindings: Mapping[str, float] = field(default_factory=dict)
    """Variable bindings available to expressions."""

    limits: Optional[ExpressionLimits] = None
    """Expression limits."""

    source: Optional[str] = None
    """Source expression for error reporting."""

    registry: Optional[Registry] = None
    """Function registry (defaults to the process-wide registry)."""


@dataclass
class EvaluationResult:
    """Result of a non-raising evaluation."""

    value: Optional[float]
    """The evaluated value, None on failure."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[ExpressionError] = None
    """The failure if evaluation did not succeed."""


class Evaluator:
    """Evaluates an AST node and returns the result."""

    def __init__(self, context: EvaluationContext):
        # Private copy: transient bindings never leak to the caller or to
        # other evaluations
        self._bindings: Dict[str, float] = dict(context.bindings)
        self._limits = context.limits or get_default_limits()
        self._source = context.source or ""
        self._registry = context.registry or DEFAULT_REGISTRY

    def evaluate(self, node: AstNode) -> float:
        """Evaluates an AST node and returns the value."""
        node_type = node.type

        if node_type == "Number":
            return cast(NumberNode, node).value

        if node_type == "Constant":
            return cast(ConstantNode, node).value

        if node_type == "Variable":
            return self._evaluate_variable(cast(VariableNode, node))

        if node_type == "Operator":
            return self._evaluate_operator(cast(OperatorNode, node))

        if node_type == "Call":
            return self._evaluate_call(cast(CallNode, node))

        raise EvaluationError(
            f"Unknown node type: {node_type}", node.position, self._source
        )

    def _evaluate_variable(self, node: VariableNode) -> float:
        """Evaluates a variable reference; unbound names evaluate to 0."""
        value = self._bindings.get(node.name, 0.0)
        try:
            return float(value)
        except (TypeError, ValueError, OverflowError):
            raise EvaluationError(
                f"Variable {node.name} is not a number: {value!r}",
                node.position,
                self._source,
            )

    def _evaluate_operator(self, node: OperatorNode) -> float:
        """
        Evaluates a binary operation.

        The left spine is walked iteratively, so long left-associative chains
        such as 1+1+...+1 evaluate without deep recursion. Operands are still
        evaluated left to right.
        """
        spine = [node]
        leftmost = node.left
        while leftmost.type == "Operator":
            spine.append(cast(OperatorNode, leftmost))
            leftmost = spine[-1].left

        value = self.evaluate(leftmost)
        for current in reversed(spine):
            value = self._apply_operator(current, value, self.evaluate(current.right))
        return value

    def _apply_operator(self, node: OperatorNode, left: float, right: float) -> float:
        definition = OPERATORS.get(node.operator)
        if definition is None:
            raise EvaluationError(
                f"Unknown operator: {node.operator}", node.position, self._source
            )

        try:
            return definition.evaluate(left, right)
        except ExprArithmeticError as error:
            raise ExprArithmeticError(
                error.message, node.position, self._source
            ) from error
        except (ArithmeticError, ValueError) as error:
            raise ExprArithmeticError(
                f"Invalid operation {left:g}{node.operator}{right:g}: {error}",
                node.position,
                self._source,
            ) from error

    def _evaluate_call(self, node: CallNode) -> float:
        """Evaluates a function call with unevaluated arguments."""
        definition = self._registry.get_function(node.name)
        if definition is None:
            raise EvaluationError(
                f"Unknown function: {node.name}", node.position, self._source
            )
        if not definition.accepts(len(node.args)):
            raise EvaluationError(
                f"{node.name}: expected {definition.arity} argument(s), "
                f"got {len(node.args)}",
                node.position,
                self._source,
            )

        ctx = CallContext(
            evaluate=self.evaluate,
            bindings=self._bindings,
            name=node.name,
            position=node.position,
            source=self._source,
            limits=self._limits,
        )

        try:
            result = definition.evaluate(ctx, *node.args)
        except ExpressionError as error:
            if error.position is None:
                error.position = node.position
                error.expression = self._source
            raise
        except (ArithmeticError, ValueError) as error:
            raise ExprArithmeticError(
                f"{node.name}: {error}", node.position, self._source
            ) from error
        except Exception as error:
            raise EvaluationError(
                f"{node.name}: {error}", node.position, self._source
            ) from error

        try:
            return float(result)
        except (TypeError, ValueError):
            raise EvaluationError(
                f"{node.name}: returned a non-numeric value: {result!r}",
                node.position,
                self._source,
            )


def evaluate(
    ast: AstNode,
    bindings: Optional[Mapping[str, float]] = None,
    *,
    registry: Optional[Registry] = None,
    limits: Optional[ExpressionLimits] = None,
    source: Optional[str] = None,
) -> float:
    """
    Evaluates an AST against variable bindings.

    Args:
        ast: The AST to evaluate
        bindings: Variable values by name (without the '$' sigil)
        registry: Optional registry (defaults to the process-wide registry)
        limits: Optional expression limits
        source: Source expression for error reporting

    Returns:
        The evaluated value

    Raises:
        ArithmeticError: If an operation is arithmetically invalid
        EvaluationError: If evaluation fails for any other reason
    """
    context = EvaluationContext(
        bindings=bindings or {},
        limits=limits,
        source=source,
        registry=registry,
    )
    try:
        return Evaluator(context).evaluate(ast)
    except RecursionError:
        raise EvaluationError(
            "Expression is nested too deeply to evaluate", ast.position, source
        )


def parse_and_evaluate(
    source: str,
    bindings: Optional[Mapping[str, float]] = None,
    *,
    registry: Optional[Registry] = None,
    limits: Optional[ExpressionLimits] = None,
) -> float:
    """
    Tokenizes, parses and evaluates an expression string.

    Every failure, whether syntactic, name, arity, limit or arithmetic,
    is raised as an ExpressionError subclass.

    Args:
        source: The expression string
        bindings: Variable values by name (without the '$' sigil)
        registry: Optional registry (defaults to the process-wide registry)
        limits: Optional expression limits

    Returns:
        The evaluated value

    Raises:
        ExpressionError: If the expression cannot be parsed or evaluated
    """
    ast = parse_expression(source, registry, limits)
    return evaluate(ast, bindings, registry=registry, limits=limits, source=source)


def try_parse_and_evaluate(
    source: str,
    bindings: Optional[Mapping[str, float]] = None,
    *,
    registry: Optional[Registry] = None,
    limits: Optional[ExpressionLimits] = None,
) -> EvaluationResult:
    """
    Like parse_and_evaluate(), but reports failures in the result.

    Returns:
        The evaluation result with value and success status
    """
    try:
        value = parse_and_evaluate(
            source, bindings, registry=registry, limits=limits
        )
        return EvaluationResult(value=value, success=True)
    except ExpressionError as error:
        return EvaluationResult(value=None, success=False, error=error)
