"""
Tokenizer (lexer) for the math expression language.

Splits an arithmetic string into operators, numeric literals, identifiers,
commas and sigil variables, each tagged with its source offset.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .errors import TokenizerError
from .limits import ExpressionLimits, check_expression_length
from .operators import is_operator_symbol


class TokenKind(Enum):
    """Token kinds produced by the tokenizer."""

    OPERATOR = "OPERATOR"
    LITERAL = "LITERAL"
    IDENTIFIER = "IDENTIFIER"
    COMMA = "COMMA"
    VARIABLE = "VARIABLE"


@dataclass(frozen=True)
class Token:
    """A lexeme with its kind and source offset."""

    kind: TokenKind
    text: str
    position: int


# Sigils introducing a single-character variable name. '$' names come from
# the caller's bindings, '#' names are injected by functions such as sum().
VARIABLE_SIGILS = ("$", "#")

_WHITESPACE = (" ", "\t", "\n", "\v", "\f", "\r")


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_letter(ch: str) -> bool:
    """Checks if a character is an ASCII letter."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_whitespace(ch: str) -> bool:
    """Checks if a character is whitespace."""
    return ch in _WHITESPACE


class Tokenizer:
    """Single-pass scanner over an arithmetic string."""

    def __init__(self, source: str, limits: Optional[ExpressionLimits] = None):
        self._source = source
        self._limits = limits
        self._position = 0
        self._tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Scans the whole source and returns its tokens in order."""
        check_expression_length(self._source, self._limits)

        while not self._is_at_end():
            self._scan_token()

        return self._tokens

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _peek(self, offset: int = 0) -> str:
        index = self._position + offset
        if index >= len(self._source):
            return "\0"
        return self._source[index]

    def _advance(self) -> str:
        ch = self._source[self._position]
        self._position += 1
        return ch

    def _add_token(self, kind: TokenKind, text: str, position: int) -> None:
        self._tokens.append(Token(kind, text, position))

    def _scan_token(self) -> None:
        start_position = self._position
        ch = self._advance()

        if _is_whitespace(ch):
            return

        if is_operator_symbol(ch):
            self._add_token(TokenKind.OPERATOR, ch, start_position)
            return

        if _is_digit(ch):
            self._scan_number(start_position)
            return

        if ch == ",":
            self._add_token(TokenKind.COMMA, ch, start_position)
            return

        if ch in VARIABLE_SIGILS:
            self._scan_variable(ch, start_position)
            return

        if _is_letter(ch):
            self._scan_identifier(start_position)
            return

        raise TokenizerError(
            f"Unexpected character: '{ch}'", start_position, self._source
        )

    def _starts_exponent(self) -> bool:
        """Checks if the 'e' at the current position introduces an exponent."""
        if _is_digit(self._peek(1)):
            return True
        return self._peek(1) in ("+", "-") and _is_digit(self._peek(2))

    def _scan_number(self, start_position: int) -> None:
        # Back up to include the first digit
        self._position -= 1

        while True:
            ch = self._peek()
            if _is_digit(ch) or ch in (".", "_"):
                self._advance()
            elif ch == "e" and self._starts_exponent():
                self._advance()
                if self._peek() in ("+", "-"):
                    self._advance()
            else:
                break

        text = self._source[start_position : self._position].replace("_", "")
        self._add_token(TokenKind.LITERAL, text, start_position)

    def _scan_variable(self, sigil: str, start_position: int) -> None:
        if self._is_at_end() or _is_whitespace(self._peek()):
            raise TokenizerError(
                f"Expected a variable name after '{sigil}'",
                self._position,
                self._source,
            )
        name = self._advance()
        self._add_token(TokenKind.VARIABLE, sigil + name, start_position)

    def _scan_identifier(self, start_position: int) -> None:
        while _is_letter(self._peek()) or _is_digit(self._peek()):
            self._advance()

        self._add_token(
            TokenKind.IDENTIFIER,
            self._source[start_position : self._position],
            start_position,
        )


def tokenize(source: str, limits: Optional[ExpressionLimits] = None) -> List[Token]:
    """
    Tokenizes an expression string into tokens.

    Args:
        source: Arithmetic string, e.g. "4sin($x)+1"
        limits: Optional expression limits

    Returns:
        List of tokens (empty for blank input)

    Raises:
        TokenizerError: If the expression contains invalid characters
        LimitExceededError: If the expression is too long
    """
    tokenizer = Tokenizer(source, limits)
    return tokenizer.tokenize()
