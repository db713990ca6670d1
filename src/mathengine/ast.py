"""
Expression tree node types for the math expression language.

The tree is produced by the parser and consumed by the evaluator and the
renderer. Nodes are immutable and every subtree has exactly one owner.
"""

from abc import ABC
from dataclasses import dataclass
from typing import List, Literal, Sequence, Tuple, Union

# ============================================================
# AST Node Types
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: int
    """Position in source expression (for error reporting)."""


@dataclass(frozen=True)
class NumberNode(AstNodeBase):
    """
    Number literal node.

    source_text keeps the literal as written (digit separators removed) so
    the renderer can reproduce it exactly. The zero synthesized for unary
    negation has an empty source_text.
    """

    value: float
    source_text: str

    @property
    def type(self) -> Literal["Number"]:
        return "Number"


@dataclass(frozen=True)
class ConstantNode(AstNodeBase):
    """Registry constant resolved at parse time."""

    name: str
    value: float
    display_form: str

    @property
    def type(self) -> Literal["Constant"]:
        return "Constant"


@dataclass(frozen=True)
class VariableNode(AstNodeBase):
    """Variable looked up in the binding context at evaluation time."""

    name: str

    @property
    def type(self) -> Literal["Variable"]:
        return "Variable"


@dataclass(frozen=True)
class OperatorNode(AstNodeBase):
    """Binary operator node."""

    operator: str
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["Operator"]:
        return "Operator"


@dataclass(frozen=True)
class CallNode(AstNodeBase):
    """Function call node. Arguments are kept unevaluated."""

    name: str
    args: Sequence["AstNode"]

    @property
    def type(self) -> Literal["Call"]:
        return "Call"


# Union type for all AST nodes
AstNode = Union[
    NumberNode,
    ConstantNode,
    VariableNode,
    OperatorNode,
    CallNode,
]


# ============================================================
# AST Utilities
# ============================================================


def _children(node: AstNode) -> Sequence[AstNode]:
    if node.type == "Operator":
        node = node  # type: OperatorNode
        return (node.left, node.right)

    if node.type == "Call":
        node = node  # type: CallNode
        return node.args

    return ()


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    count = 0
    stack: List[AstNode] = [node]
    while stack:
        current = stack.pop()
        count += 1
        stack.extend(_children(current))
    return count


def calculate_ast_depth(node: AstNode) -> int:
    """
    Calculates the maximum depth of an AST.

    Iterative, so long left-leaning chains such as 1+1+...+1 do not hit
    the interpreter's recursion limit.
    """
    max_depth = 0
    stack: List[Tuple[AstNode, int]] = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        max_depth = max(max_depth, depth)
        for child in _children(current):
            stack.append((child, depth + 1))
    return max_depth


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    prefix = "  " * indent

    if node.type == "Number":
        node = node  # type: NumberNode
        return f"{prefix}Number: {node.source_text or node.value}"

    if node.type == "Constant":
        node = node  # type: ConstantNode
        return f"{prefix}Constant: {node.name}={node.value}"

    if node.type == "Variable":
        node = node  # type: VariableNode
        return f"{prefix}Variable: {node.name}"

    if node.type == "Operator":
        node = node  # type: OperatorNode
        return (
            f"{prefix}Operator: {node.operator}\n"
            f"{ast_to_string(node.left, indent + 1)}\n"
            f"{ast_to_string(node.right, indent + 1)}"
        )

    if node.type == "Call":
        node = node  # type: CallNode
        if not node.args:
            return f"{prefix}Call: {node.name}"
        args_str = "\n".join(ast_to_string(a, indent + 1) for a in node.args)
        return f"{prefix}Call: {node.name}\n{args_str}"

    return f"{prefix}Unknown: {node}"
