"""
Tests for AST nodes and utilities.
"""

import dataclasses

import pytest

from mathengine import (
    NumberNode,
    ast_to_string,
    calculate_ast_depth,
    count_ast_nodes,
    parse_expression,
)


class TestNodes:
    """Tests for node types."""

    def test_node_types(self):
        ast = parse_expression("1 + pi * $x - max(2)")
        assert ast.type == "Operator"
        assert ast.right.type == "Call"
        assert ast.left.right.left.type == "Constant"
        assert ast.left.right.right.type == "Variable"

    def test_nodes_are_immutable(self):
        node = NumberNode(position=0, value=1.0, source_text="1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.value = 2.0  # type: ignore[misc]

    def test_call_arguments_are_a_tuple(self):
        assert isinstance(parse_expression("max(1, 2)").args, tuple)


class TestUtilities:
    """Tests for tree utilities."""

    def test_count_nodes(self):
        assert count_ast_nodes(parse_expression("1")) == 1
        assert count_ast_nodes(parse_expression("1+2*3")) == 5
        assert count_ast_nodes(parse_expression("max(1, 2, 3)")) == 4

    def test_unary_minus_counts_synthetic_zero(self):
        assert count_ast_nodes(parse_expression("-1")) == 3

    def test_depth(self):
        assert calculate_ast_depth(parse_expression("1")) == 1
        assert calculate_ast_depth(parse_expression("1+2*3")) == 3
        assert calculate_ast_depth(parse_expression("sin(cos(1))")) == 3

    def test_depth_of_long_chain(self):
        node = NumberNode(position=0, value=1.0, source_text="1")
        for _ in range(5000):
            node = dataclasses.replace(
                parse_expression("1+1"), left=node
            )
        assert calculate_ast_depth(node) == 5001
        assert count_ast_nodes(node) == 10001

    def test_ast_to_string(self):
        text = ast_to_string(parse_expression("2*sin($x)+pi"))
        assert text == "\n".join(
            [
                "Operator: +",
                "  Operator: *",
                "    Number: 2",
                "    Call: sin",
                "      Variable: x",
                "  Constant: pi=3.141592653589793",
            ]
        )

    def test_ast_to_string_synthetic_zero(self):
        text = ast_to_string(parse_expression("-1"))
        assert text.splitlines()[1] == "  Number: 0.0"
