"""
Typeset (LaTeX-style) renderer.

Turns an AST into display text without evaluating it. Operator renderers
receive the already-rendered operand strings; function renderers receive
the raw argument nodes so they can pick their own notation (fractions,
radicals, summations).

Rendering is best effort and never raises: a missing renderer, an unknown
operator or function, or a renderer failure yields an empty string.
"""

import logging
from typing import Optional, cast

from .ast import AstNode, CallNode, ConstantNode, NumberNode, OperatorNode, VariableNode
from .builtins import RenderContext
from .operators import OPERATORS, Associativity, OperatorDefinition
from .registry import DEFAULT_REGISTRY, Registry

logger = logging.getLogger("mathengine.renderer")


def _group(text: str) -> str:
    return f"\\left({text}\\right)"


class Renderer:
    """Renders an AST node as typeset text."""

    def __init__(self, registry: Optional[Registry] = None):
        self._registry = registry or DEFAULT_REGISTRY

    def render(self, node: AstNode) -> str:
        """Renders an AST node."""
        node_type = node.type

        if node_type == "Number":
            return cast(NumberNode, node).source_text

        if node_type == "Constant":
            return cast(ConstantNode, node).display_form

        if node_type == "Variable":
            return cast(VariableNode, node).name.lstrip("#")

        if node_type == "Operator":
            return self._render_operator(cast(OperatorNode, node))

        if node_type == "Call":
            return self._render_call(cast(CallNode, node))

        return ""

    def _render_operator(self, node: OperatorNode) -> str:
        # Left spine is walked iteratively, like the evaluator does
        spine = [node]
        leftmost = node.left
        while leftmost.type == "Operator":
            spine.append(cast(OperatorNode, leftmost))
            leftmost = spine[-1].left

        text = self.render(leftmost)
        for current in reversed(spine):
            text = self._combine(current, text)
        return text

    def _combine(self, node: OperatorNode, left: str) -> str:
        """Applies one operator's typeset rule to its rendered left operand."""
        definition = OPERATORS.get(node.operator)
        if definition is None:
            logger.debug("render_unknown_operator", extra={"operator": node.operator})
            return ""

        right = self.render(node.right)

        if not definition.groups_left and self._needs_group(
            node.left, definition, Associativity.RIGHT
        ):
            left = _group(left)
        if not definition.groups_right and self._needs_group(
            node.right, definition, Associativity.LEFT
        ):
            right = _group(right)

        try:
            return definition.render(left, right)
        except Exception as error:
            logger.debug(
                "render_operator_failed",
                extra={"operator": node.operator, "error": str(error)},
            )
            return ""

    def _needs_group(
        self,
        child: AstNode,
        parent: OperatorDefinition,
        regrouping_associativity: Associativity,
    ) -> bool:
        """
        Checks if an operand must be parenthesized: it binds looser than the
        parent, or equally tight on the side the parent does not associate to.
        """
        if child.type != "Operator":
            return False
        child_definition = OPERATORS.get(cast(OperatorNode, child).operator)
        if child_definition is None:
            return False
        if child_definition.precedence != parent.precedence:
            return child_definition.precedence < parent.precedence
        return parent.associativity == regrouping_associativity

    def _render_call(self, node: CallNode) -> str:
        definition = self._registry.get_function(node.name)
        if definition is None or definition.render is None:
            logger.debug("render_fallback", extra={"function": node.name})
            return ""

        ctx = RenderContext(self.render, node.name)
        try:
            return definition.render(ctx, *node.args)
        except Exception as error:
            logger.debug(
                "render_function_failed",
                extra={"function": node.name, "error": str(error)},
            )
            return ""


def render(ast: AstNode, registry: Optional[Registry] = None) -> str:
    """
    Renders an AST as a typeset string.

    Args:
        ast: The AST to render
        registry: Optional registry (defaults to the process-wide registry)

    Returns:
        The typeset text; parts that cannot be rendered are empty
    """
    try:
        return Renderer(registry).render(ast)
    except RecursionError:
        logger.debug("render_too_deep", extra={"position": ast.position})
        return ""
