"""
Parser for the math expression language.

Parses a stream of tokens into an expression tree using precedence
climbing over the operator table.

Precedence (lowest to highest):
1. Additive: + -
2. Multiplicative: * / %
3. Implicit multiplication
4. Power: ^ (right-associative)
5. Unary minus
6. Primary: literals, constants, variables, calls, parentheses

Implicit multiplication: when a complete operand is directly followed by
'(', an identifier, a literal or a variable, a '*' is inserted, so
"4sin($x)" parses as "4*sin($x)" and "2(1+3)" as "2*(1+3)". The inserted
product binds tighter than explicit * / %, so "3*4sin($x)" parses as
"3*(4*sin($x))".
"""

import math
from typing import List, Optional, Sequence

from .ast import (
    AstNode,
    CallNode,
    ConstantNode,
    NumberNode,
    OperatorNode,
    VariableNode,
    calculate_ast_depth,
    count_ast_nodes,
)
from .errors import ArityError, ParseError, UnknownNameError
from .limits import (
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_function_arg_count,
    get_default_limits,
)
from .operators import (
    IMPLICIT_MULTIPLICATION_PRECEDENCE,
    MULTIPLICATION,
    OPERATORS,
    Associativity,
)
from .registry import DEFAULT_REGISTRY, Registry
from .tokenizer import Token, TokenKind, tokenize


class Parser:
    """Parser for tokenized expressions."""

    def __init__(
        self,
        tokens: Sequence[Token],
        source: str,
        registry: Optional[Registry] = None,
        limits: Optional[ExpressionLimits] = None,
    ):
        self._tokens = tokens
        self._source = source
        self._registry = registry or DEFAULT_REGISTRY
        self._limits = limits or get_default_limits()
        self._current = 0
        self._depth = 0

    def parse(self) -> AstNode:
        """Parses the token stream into an AST covering the whole input."""
        if not self._tokens:
            raise ParseError("Empty expression", 0, self._source)

        try:
            ast = self._parse_expression(0)
        except RecursionError:
            raise ParseError(
                "Expression is nested too deeply to parse",
                self._error_position(),
                self._source,
            )

        if not self._is_at_end():
            token = self._peek()
            raise ParseError(
                f"Unexpected token: {token.text}", token.position, self._source
            )

        # Validate AST limits
        check_ast_node_count(
            count_ast_nodes(ast), self._limits, ast.position, self._source
        )
        check_ast_depth(
            calculate_ast_depth(ast), self._limits, ast.position, self._source
        )

        return ast

    # ============================================================
    # Token Helpers
    # ============================================================

    def _is_at_end(self) -> bool:
        return self._current >= len(self._tokens)

    def _peek(self) -> Optional[Token]:
        if self._is_at_end():
            return None
        return self._tokens[self._current]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _check_operator(self, symbol: str) -> bool:
        token = self._peek()
        return (
            token is not None
            and token.kind == TokenKind.OPERATOR
            and token.text == symbol
        )

    def _match_operator(self, symbol: str) -> bool:
        if self._check_operator(symbol):
            self._advance()
            return True
        return False

    def _consume_operator(self, symbol: str, message: str) -> Token:
        if self._check_operator(symbol):
            return self._advance()
        raise ParseError(message, self._error_position(), self._source)

    def _error_position(self) -> int:
        token = self._peek()
        return token.position if token is not None else len(self._source)

    def _starts_operand(self, token: Token) -> bool:
        """Checks if a token can begin an implicitly multiplied operand."""
        if token.kind in (TokenKind.LITERAL, TokenKind.IDENTIFIER, TokenKind.VARIABLE):
            return True
        return token.kind == TokenKind.OPERATOR and token.text == "("

    def _enter(self) -> None:
        self._depth += 1
        check_ast_depth(
            self._depth, self._limits, self._error_position(), self._source
        )

    def _leave(self) -> None:
        self._depth -= 1

    # ============================================================
    # Expression Parsing
    # ============================================================

    def _parse_expression(self, min_precedence: int) -> AstNode:
        """Parses binary operators binding at least as tight as min_precedence."""
        self._enter()
        try:
            node = self._parse_unary()

            while True:
                token = self._peek()
                if token is None:
                    break

                if token.kind == TokenKind.OPERATOR and token.text in OPERATORS:
                    definition = OPERATORS[token.text]
                    precedence = definition.precedence
                    implicit = False
                elif self._starts_operand(token):
                    definition = OPERATORS[MULTIPLICATION]
                    precedence = IMPLICIT_MULTIPLICATION_PRECEDENCE
                    implicit = True
                else:
                    break

                if precedence < min_precedence:
                    break

                if not implicit:
                    self._advance()

                if definition.associativity == Associativity.LEFT:
                    next_precedence = precedence + 1
                else:
                    next_precedence = precedence

                right = self._parse_expression(next_precedence)
                node = OperatorNode(
                    position=token.position,
                    operator=definition.symbol,
                    left=node,
                    right=right,
                )

            return node
        finally:
            self._leave()

    def _parse_unary(self) -> AstNode:
        """Parses unary minus, represented as 0 - operand."""
        if self._match_operator("-"):
            position = self._previous().position
            self._enter()
            try:
                operand = self._parse_unary()
            finally:
                self._leave()
            return OperatorNode(
                position=position,
                operator="-",
                left=NumberNode(position=position, value=0.0, source_text=""),
                right=operand,
            )

        return self._parse_primary()

    def _parse_primary(self) -> AstNode:
        """Parses literals, variables, constants, calls and parentheses."""
        token = self._peek()

        if token is None:
            raise ParseError(
                "Unexpected end of expression", len(self._source), self._source
            )

        position = token.position

        if token.kind == TokenKind.LITERAL:
            self._advance()
            return self._parse_number(token)

        if token.kind == TokenKind.VARIABLE:
            self._advance()
            name = token.text[1:] if token.text.startswith("$") else token.text
            return VariableNode(position=position, name=name)

        if token.kind == TokenKind.IDENTIFIER:
            self._advance()
            if self._check_operator("("):
                return self._parse_call(token)
            return self._parse_constant(token)

        if self._match_operator("("):
            expr = self._parse_expression(0)
            self._consume_operator(")", "Expected ')' after expression")
            return expr

        raise ParseError(f"Unexpected token: {token.text}", position, self._source)

    def _parse_number(self, token: Token) -> NumberNode:
        try:
            value = float(token.text)
        except ValueError:
            raise ParseError(
                f"Invalid number: {token.text}", token.position, self._source
            )
        if not math.isfinite(value):
            raise ParseError(
                f"Number out of range: {token.text}", token.position, self._source
            )
        return NumberNode(position=token.position, value=value, source_text=token.text)

    def _parse_constant(self, token: Token) -> ConstantNode:
        definition = self._registry.get_constant(token.text)
        if definition is None:
            raise UnknownNameError(token.text, "constant", token.position, self._source)
        return ConstantNode(
            position=token.position,
            name=definition.name,
            value=definition.value,
            display_form=definition.display_form,
        )

    def _parse_call(self, name_token: Token) -> CallNode:
        definition = self._registry.get_function(name_token.text)
        if definition is None:
            raise UnknownNameError(
                name_token.text, "function", name_token.position, self._source
            )

        self._consume_operator("(", "Expected '(' after function name")
        args = self._parse_argument_list()
        check_function_arg_count(
            len(args), self._limits, name_token.position, self._source
        )

        if not definition.accepts(len(args)):
            raise ArityError(
                definition.name,
                definition.arity,
                len(args),
                name_token.position,
                self._source,
            )

        return CallNode(position=name_token.position, name=definition.name, args=tuple(args))

    def _parse_argument_list(self) -> List[AstNode]:
        """Parses function argument list (already consumed opening paren)."""
        args: List[AstNode] = []

        if not self._check_operator(")"):
            args.append(self._parse_expression(0))
            while self._match_comma():
                args.append(self._parse_expression(0))

        self._consume_operator(")", "Expected ')' after function arguments")
        return args

    def _match_comma(self) -> bool:
        token = self._peek()
        if token is not None and token.kind == TokenKind.COMMA:
            self._advance()
            return True
        return False


def parse(
    tokens: Sequence[Token],
    source: str,
    registry: Optional[Registry] = None,
    limits: Optional[ExpressionLimits] = None,
) -> AstNode:
    """
    Parses a token sequence into an AST.

    Args:
        tokens: Tokens produced by tokenize()
        source: The source expression string (for error reporting)
        registry: Optional registry (defaults to the process-wide registry)
        limits: Optional expression limits

    Returns:
        The parsed AST

    Raises:
        ParseError: If the tokens do not form a complete expression
        UnknownNameError: If a function or constant is not registered
        ArityError: If a call has the wrong number of arguments
        LimitExceededError: If the expression is too large or too deep
    """
    parser = Parser(tokens, source, registry, limits)
    return parser.parse()


def parse_expression(
    source: str,
    registry: Optional[Registry] = None,
    limits: Optional[ExpressionLimits] = None,
) -> AstNode:
    """
    Tokenizes and parses an expression string into an AST.

    Raises:
        TokenizerError: If tokenization fails
        ParseError: If parsing fails
    """
    tokens = tokenize(source, limits)
    return parse(tokens, source, registry, limits)
