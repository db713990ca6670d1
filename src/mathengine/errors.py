"""
Error types for the math expression engine.

All engine errors extend ExpressionError for consistent handling.

Note: SyntaxError and ArithmeticError intentionally reuse the builtin
names; import them under an alias where the builtin is also needed.
"""

from typing import Optional


class ExpressionError(Exception):
    """
    Base error class for all expression-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with a caret under the offending
        position of the source expression.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class SyntaxError(ExpressionError):
    """
    Error thrown when the source text cannot be tokenized or parsed.
    """

    pass


class TokenizerError(SyntaxError):
    """
    Error thrown during tokenization (lexical analysis).
    """

    pass


class ParseError(SyntaxError):
    """
    Error thrown during parsing (syntax analysis).
    """

    pass


class UnknownNameError(ParseError):
    """
    Error thrown when an identifier is neither a registered function
    nor a registered constant.
    """

    def __init__(
        self,
        name: str,
        kind: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Unknown {kind}: {name}", position, expression)
        self.name = name
        self.kind = kind


class ArityError(ParseError):
    """
    Error thrown when a function call has the wrong number of arguments.
    """

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        message = (
            f"{function_name}: expected {expected} argument(s), got {actual}"
        )
        super().__init__(message, position, expression)
        self.function_name = function_name
        self.expected = expected
        self.actual = actual


class EvaluationError(ExpressionError):
    """
    Error thrown during evaluation (runtime error).
    """

    pass


class ArithmeticError(EvaluationError):
    """
    Error thrown for an invalid arithmetic operation, such as a division
    by zero.
    """

    pass


class RegistrationError(ExpressionError):
    """
    Error thrown when a function or constant cannot be registered.
    """

    def __init__(self, name: str, message: str):
        super().__init__(f"{name or '<empty>'}: {message}")
        self.name = name


class DuplicateNameError(RegistrationError):
    """
    Error thrown when registering a name that already exists.
    """

    def __init__(self, name: str, kind: str):
        super().__init__(name, f"{kind} is already registered")
        self.kind = kind


class InvalidArgumentError(RegistrationError):
    """
    Error thrown when a registration call has an invalid name, arity or value.
    """

    pass


class LimitExceededError(ExpressionError):
    """
    Error thrown when expression limits are exceeded.
    """

    def __init__(
        self,
        limit_name: str,
        limit: int,
        actual: int,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message, position, expression)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual
