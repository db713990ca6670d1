"""
Math expression engine.

Tokenizes arithmetic strings, parses them into an expression tree with
operator precedence and implicit multiplication, evaluates the tree
against variable bindings, and renders it as typeset text. Functions and
constants are extensible through a process-wide registry.
"""

# Core types and utilities
from .ast import (
    AstNode,
    AstNodeBase,
    CallNode,
    ConstantNode,
    NumberNode,
    OperatorNode,
    VariableNode,
    ast_to_string,
    calculate_ast_depth,
    count_ast_nodes,
)

# Builtins
from .builtins import (
    BUILTIN_CONSTANTS,
    BUILTIN_FUNCTIONS,
    SUM_INDEX_VARIABLE,
    VARIADIC,
    CallContext,
    ConstantDefinition,
    FunctionDefinition,
    FunctionEvaluator,
    FunctionRenderer,
    RenderContext,
)

# Configuration
from .config import (
    EngineConfig,
    TrigonometricMode,
    configure,
    get_trigonometric_mode,
    set_trigonometric_mode,
)
from .errors import (
    ArithmeticError,
    ArityError,
    DuplicateNameError,
    EvaluationError,
    ExpressionError,
    InvalidArgumentError,
    LimitExceededError,
    ParseError,
    RegistrationError,
    SyntaxError,
    TokenizerError,
    UnknownNameError,
)

# Evaluator
from .evaluator import (
    EvaluationContext,
    EvaluationResult,
    Evaluator,
    evaluate,
    parse_and_evaluate,
    try_parse_and_evaluate,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    get_default_limits,
    set_default_limits,
)

# Operators
from .operators import (
    OPERATORS,
    Associativity,
    OperatorDefinition,
)

# Parser
from .parser import (
    Parser,
    parse,
    parse_expression,
)

# Registry
from .registry import (
    DEFAULT_REGISTRY,
    Registry,
    create_default_registry,
    register_constant,
    register_function,
)

# Renderer
from .renderer import (
    Renderer,
    render,
)

# Tokenizer
from .tokenizer import (
    Token,
    Tokenizer,
    TokenKind,
    tokenize,
)

__all__ = [
    # AST types
    "AstNode",
    "AstNodeBase",
    "NumberNode",
    "ConstantNode",
    "VariableNode",
    "OperatorNode",
    "CallNode",
    "count_ast_nodes",
    "calculate_ast_depth",
    "ast_to_string",
    # Errors
    "ExpressionError",
    "SyntaxError",
    "TokenizerError",
    "ParseError",
    "UnknownNameError",
    "ArityError",
    "EvaluationError",
    "ArithmeticError",
    "RegistrationError",
    "DuplicateNameError",
    "InvalidArgumentError",
    "LimitExceededError",
    # Limits
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    "get_default_limits",
    "set_default_limits",
    # Configuration
    "EngineConfig",
    "TrigonometricMode",
    "configure",
    "get_trigonometric_mode",
    "set_trigonometric_mode",
    # Operators
    "OPERATORS",
    "Associativity",
    "OperatorDefinition",
    # Tokenizer
    "Token",
    "TokenKind",
    "Tokenizer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    "parse_expression",
    # Evaluator
    "EvaluationContext",
    "EvaluationResult",
    "Evaluator",
    "evaluate",
    "parse_and_evaluate",
    "try_parse_and_evaluate",
    # Renderer
    "Renderer",
    "render",
    # Builtins
    "VARIADIC",
    "SUM_INDEX_VARIABLE",
    "CallContext",
    "RenderContext",
    "FunctionEvaluator",
    "FunctionRenderer",
    "FunctionDefinition",
    "ConstantDefinition",
    "BUILTIN_FUNCTIONS",
    "BUILTIN_CONSTANTS",
    # Registry
    "Registry",
    "DEFAULT_REGISTRY",
    "create_default_registry",
    "register_function",
    "register_constant",
]
