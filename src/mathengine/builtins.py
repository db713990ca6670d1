"""
Built-in functions and constants for the math expression language.

Functions receive their arguments as unevaluated AST nodes together with
a CallContext. A function decides which arguments to evaluate, how many
times, and under which transient bindings. This is what lets sum() iterate
over its body and noerr() intercept failures of its argument.

Evaluation semantics:
- Results are 64-bit floats.
- Builtins never raise arithmetic failures; those originate only in the
  operator rules. Out-of-domain inputs follow IEEE semantics: sqrt(-1) is
  NaN, log of 0 is -inf, a reciprocal of zero is inf, log base 1 is inf.
"""

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    Iterator,
    Mapping,
    MutableMapping,
    Optional,
)

from .ast import AstNode, NumberNode
from .config import TrigonometricMode, get_trigonometric_mode
from .errors import EvaluationError
from .limits import ExpressionLimits, check_sum_iterations

logger = logging.getLogger("mathengine.builtins")

# Arity sentinel for functions accepting any number of arguments.
VARIADIC = -1

# Transient variable bound by sum() for each iteration.
SUM_INDEX_VARIABLE = "#i"

_MISSING = object()


class CallContext:
    """Context passed to a function's evaluator."""

    def __init__(
        self,
        evaluate: Callable[[AstNode], float],
        bindings: MutableMapping[str, float],
        name: str,
        position: int,
        source: str,
        limits: ExpressionLimits,
    ):
        self._evaluate = evaluate
        self._bindings = bindings
        self.name = name
        self.position = position
        self.source = source
        self.limits = limits

    @property
    def bindings(self) -> Mapping[str, float]:
        """Read-only view of the current binding context."""
        return MappingProxyType(self._bindings)

    def evaluate(self, node: AstNode) -> float:
        """Evaluates an argument subtree under the current bindings."""
        return self._evaluate(node)

    @contextmanager
    def bind(self, name: str, value: float) -> Iterator[None]:
        """
        Binds a transient variable for the duration of the block.

        A shadowed binding is restored (or the name removed) on exit,
        including when the block raises.
        """
        previous = self._bindings.get(name, _MISSING)
        self._bindings[name] = value
        try:
            yield
        finally:
            if previous is _MISSING:
                del self._bindings[name]
            else:
                self._bindings[name] = previous

    def error(self, message: str, node: Optional[AstNode] = None) -> EvaluationError:
        """Builds an EvaluationError prefixed with the function name."""
        position = node.position if node is not None else self.position
        return EvaluationError(f"{self.name}: {message}", position, self.source)


class RenderContext:
    """Context passed to a function's renderer."""

    def __init__(self, render: Callable[[AstNode], str], name: str):
        self._render = render
        self.name = name

    def render(self, node: AstNode) -> str:
        """Renders an argument subtree."""
        return self._render(node)

    def render_grouped(self, node: AstNode) -> str:
        """Renders an argument subtree, parenthesizing operator expressions."""
        text = self._render(node)
        if node.type == "Operator":
            return f"\\left({text}\\right)"
        return text


# Signature of a function evaluator: (ctx, *args) -> float
FunctionEvaluator = Callable[..., float]

# Signature of a function renderer: (ctx, *args) -> str
FunctionRenderer = Callable[..., str]


@dataclass(frozen=True)
class FunctionDefinition:
    """A registered function."""

    name: str
    arity: int
    """Fixed argument count, or VARIADIC."""

    evaluate: FunctionEvaluator
    render: Optional[FunctionRenderer] = None

    @property
    def is_variadic(self) -> bool:
        return self.arity == VARIADIC

    def accepts(self, count: int) -> bool:
        """Checks if a call with `count` arguments satisfies the arity."""
        return self.is_variadic or count == self.arity


@dataclass(frozen=True)
class ConstantDefinition:
    """A registered constant."""

    name: str
    value: float
    display_form: str


# ============================================================
# Helpers
# ============================================================


def _to_radians(ctx: CallContext, node: AstNode) -> float:
    value = ctx.evaluate(node)
    if get_trigonometric_mode() is TrigonometricMode.DEGREE:
        return math.radians(value)
    return value


def _ieee_divide(numerator: float, denominator: float) -> float:
    """Float division that yields ±inf or NaN for a zero denominator."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _log10(value: float) -> float:
    if value > 0:
        return math.log10(value)
    if value == 0:
        return -math.inf
    return math.nan


def _finite_or_same(fn: Callable[[float], float], value: float) -> float:
    # ceil/floor of inf or NaN raise in Python; keep the IEEE value
    if not math.isfinite(value):
        return value
    return float(fn(value))


def _wrap(command: str) -> FunctionRenderer:
    def render(ctx: RenderContext, *args: AstNode) -> str:
        inner = ", ".join(ctx.render(arg) for arg in args)
        return f"{command}\\left({inner}\\right)"

    return render


# ============================================================
# Trigonometric Functions
# ============================================================


def _sin(ctx: CallContext, x: AstNode) -> float:
    """sin(x) - honors the trigonometric mode."""
    angle = _to_radians(ctx, x)
    return math.nan if math.isinf(angle) else math.sin(angle)


def _cos(ctx: CallContext, x: AstNode) -> float:
    """cos(x) - honors the trigonometric mode."""
    angle = _to_radians(ctx, x)
    return math.nan if math.isinf(angle) else math.cos(angle)


def _tan(ctx: CallContext, x: AstNode) -> float:
    """tan(x) - honors the trigonometric mode."""
    angle = _to_radians(ctx, x)
    return math.nan if math.isinf(angle) else math.tan(angle)


def _cot(ctx: CallContext, x: AstNode) -> float:
    return _ieee_divide(1.0, _tan(ctx, x))


def _sec(ctx: CallContext, x: AstNode) -> float:
    return _ieee_divide(1.0, _cos(ctx, x))


def _csc(ctx: CallContext, x: AstNode) -> float:
    return _ieee_divide(1.0, _sin(ctx, x))


# ============================================================
# Numeric Functions
# ============================================================


def _abs(ctx: CallContext, x: AstNode) -> float:
    return abs(ctx.evaluate(x))


def _ceil(ctx: CallContext, x: AstNode) -> float:
    return _finite_or_same(math.ceil, ctx.evaluate(x))


def _floor(ctx: CallContext, x: AstNode) -> float:
    return _finite_or_same(math.floor, ctx.evaluate(x))


def _round(ctx: CallContext, x: AstNode) -> float:
    """round(x) - rounds half away from zero: round(2.5) = 3, round(-2.5) = -3."""
    value = ctx.evaluate(x)
    if not math.isfinite(value):
        return value
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _sqrt(ctx: CallContext, x: AstNode) -> float:
    """sqrt(x) - principal square root, NaN for negative input."""
    value = ctx.evaluate(x)
    return math.sqrt(value) if value >= 0 else math.nan


def _cbrt(ctx: CallContext, x: AstNode) -> float:
    return math.cbrt(ctx.evaluate(x))


def _extreme(
    ctx: CallContext, args: tuple, pick: Callable[[list], float]
) -> float:
    if not args:
        raise ctx.error("expected at least 1 argument, got 0")
    values = [ctx.evaluate(arg) for arg in args]
    # NaN anywhere wins, whatever its position
    if any(math.isnan(value) for value in values):
        return math.nan
    return pick(values)


def _max(ctx: CallContext, *args: AstNode) -> float:
    """max(a, ...) - at least one argument, NaN if any argument is NaN."""
    return _extreme(ctx, args, max)


def _min(ctx: CallContext, *args: AstNode) -> float:
    """min(a, ...) - at least one argument, NaN if any argument is NaN."""
    return _extreme(ctx, args, min)


def _log(ctx: CallContext, base: AstNode, x: AstNode) -> float:
    """log(base, x) - logarithm of x in the given base."""
    denominator = _log10(ctx.evaluate(base))
    numerator = _log10(ctx.evaluate(x))
    return _ieee_divide(numerator, denominator)


# ============================================================
# Control Functions
# ============================================================


def _noerr(ctx: CallContext, x: AstNode) -> float:
    """
    noerr(x) - evaluates x, turning any evaluation failure into 0.

    noerr(1/0) = 0
    """
    try:
        return ctx.evaluate(x)
    except EvaluationError as error:
        logger.debug(
            "noerr_absorbed_error",
            extra={"error": error.message, "position": error.position},
        )
        return 0.0


def _sum(ctx: CallContext, *args: AstNode) -> float:
    """
    sum(start, end) - adds the numbers start, start + 1, ..., up to end.
    sum(start, end, body) - binds #i to each integer from start to end and
    adds the values of body.

    The end bound must be a number literal.

    sum(1, 5) = 15
    sum(1, 5, #i^2) = 55
    """
    if len(args) not in (2, 3):
        raise ctx.error(f"expected 2 or 3 arguments, got {len(args)}")

    start_node, end_node = args[0], args[1]
    if not isinstance(end_node, NumberNode):
        raise ctx.error(
            "cannot iterate symbolically, the end bound must be a number literal",
            end_node,
        )

    start = ctx.evaluate(start_node)
    if not math.isfinite(start):
        raise ctx.error("the start bound must be finite", start_node)
    end = end_node.value

    if len(args) == 2:
        span = end - start
        if span < 0:
            return 0.0
        # Float arithmetic, so huge ranges saturate to inf instead of overflowing
        count = math.floor(span) + 1.0 if math.isfinite(span) else math.inf
        return count * start + count * (count - 1) / 2

    body = args[2]
    first, last = int(start), int(end)
    check_sum_iterations(max(0, last - first + 1), ctx.limits)

    total = 0.0
    for index in range(first, last + 1):
        with ctx.bind(SUM_INDEX_VARIABLE, float(index)):
            total += ctx.evaluate(body)
    return total


# ============================================================
# Renderers
# ============================================================


def _render_abs(ctx: RenderContext, x: AstNode) -> str:
    return f"\\left|{ctx.render(x)}\\right|"


def _render_ceil(ctx: RenderContext, x: AstNode) -> str:
    return f"\\left\\lceil {ctx.render(x)}\\right\\rceil"


def _render_floor(ctx: RenderContext, x: AstNode) -> str:
    return f"\\left\\lfloor {ctx.render(x)}\\right\\rfloor"


def _render_sqrt(ctx: RenderContext, x: AstNode) -> str:
    return f"\\sqrt{{{ctx.render(x)}}}"


def _render_cbrt(ctx: RenderContext, x: AstNode) -> str:
    return f"\\sqrt[3]{{{ctx.render(x)}}}"


def _render_noerr(ctx: RenderContext, x: AstNode) -> str:
    return ctx.render(x)


def _render_sum(ctx: RenderContext, *args: AstNode) -> str:
    start, end = ctx.render(args[0]), ctx.render(args[1])
    body = ctx.render_grouped(args[2]) if len(args) > 2 else "i"
    return f"\\sum_{{i={start}}}^{{{end}}} {body}"


def _render_log(ctx: RenderContext, base: AstNode, x: AstNode) -> str:
    return f"\\log_{{{ctx.render(base)}}}\\left({ctx.render(x)}\\right)"


# ============================================================
# Registry Seeds
# ============================================================

BUILTIN_FUNCTIONS: Dict[str, FunctionDefinition] = {
    definition.name: definition
    for definition in (
        # Trigonometric
        FunctionDefinition("sin", 1, _sin, _wrap("\\sin")),
        FunctionDefinition("cos", 1, _cos, _wrap("\\cos")),
        FunctionDefinition("tan", 1, _tan, _wrap("\\tan")),
        FunctionDefinition("cot", 1, _cot, _wrap("\\cot")),
        FunctionDefinition("sec", 1, _sec, _wrap("\\sec")),
        FunctionDefinition("csc", 1, _csc, _wrap("\\csc")),
        # Numeric
        FunctionDefinition("abs", 1, _abs, _render_abs),
        FunctionDefinition("ceil", 1, _ceil, _render_ceil),
        FunctionDefinition("floor", 1, _floor, _render_floor),
        FunctionDefinition("round", 1, _round, _wrap("\\operatorname{round}")),
        FunctionDefinition("sqrt", 1, _sqrt, _render_sqrt),
        FunctionDefinition("cbrt", 1, _cbrt, _render_cbrt),
        FunctionDefinition("max", VARIADIC, _max, _wrap("\\max")),
        FunctionDefinition("min", VARIADIC, _min, _wrap("\\min")),
        FunctionDefinition("log", 2, _log, _render_log),
        # Control
        FunctionDefinition("noerr", 1, _noerr, _render_noerr),
        FunctionDefinition("sum", VARIADIC, _sum, _render_sum),
    )
}

BUILTIN_CONSTANTS: Dict[str, ConstantDefinition] = {
    definition.name: definition
    for definition in (
        ConstantDefinition("pi", math.pi, "\\pi"),
        ConstantDefinition("e", math.e, "e"),
        ConstantDefinition("infty", math.inf, "\\infty"),
    )
}
