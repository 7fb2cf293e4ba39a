"""
Bassil Tokens and Classification Tables
=======================================

This module defines the token kinds produced by the scanner, the immutable
Token value, and the static lookup tables the scanner consults to decide
where one lexeme ends and the next begins.

Token Categories
----------------
- Identifiers: variable and command names
- Type keywords: int, char, float, string
- Literals: integers (42), floats (3.14), strings ("...")
- Operators: + - * / % = == != < > <= >= ! && ||
- Punctuation: ; ( ) { } ,
- Unknown: any single character the language does not recognise

Every token carries its exact lexeme as a string. The keyword/identifier
distinction lives only in the token kind.
"""

from dataclasses import dataclass
from enum import Enum
import string


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    Token kinds for the Bassil language.

    Member values are the display names written by the token serializer.
    """

    # === Identifiers ===
    IDENTIFIER = "Identifier"

    # === Reserved type keywords ===
    TYPE_INTEGER = "TypeInteger"    # int
    TYPE_CHAR = "TypeChar"          # char
    TYPE_FLOAT = "TypeFloat"        # float
    TYPE_STRING = "TypeString"      # string

    # === Literals ===
    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"

    # === Operators ===
    MATH_OPERATOR = "MathOperator"              # + - * / %
    EQUALS_SIGN = "EqualsSign"                  # =
    COMPARISON_OPERATOR = "ComparisonOperator"  # == != < > <= >=
    LOGICAL_OPERATOR = "LogicalOperator"        # ! && ||

    # === Punctuation ===
    OPEN_PAREN = "OpenParen"        # (
    CLOSE_PAREN = "CloseParen"      # )
    OPEN_BRACE = "OpenBrace"        # {
    CLOSE_BRACE = "CloseBrace"      # }
    COMMA = "Comma"                 # ,
    SEMICOLON = "Semicolon"         # ;

    # === Recovery ===
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Classification Tables
# =============================================================================

# Reserved type keywords
KEYWORDS: dict[str, TokenKind] = {
    "int": TokenKind.TYPE_INTEGER,
    "char": TokenKind.TYPE_CHAR,
    "float": TokenKind.TYPE_FLOAT,
    "string": TokenKind.TYPE_STRING,
}

# Two-character operators are always tried before the one-character table
TWO_CHAR_OPERATORS: dict[str, TokenKind] = {
    "==": TokenKind.COMPARISON_OPERATOR,
    "!=": TokenKind.COMPARISON_OPERATOR,
    "<=": TokenKind.COMPARISON_OPERATOR,
    ">=": TokenKind.COMPARISON_OPERATOR,
    "&&": TokenKind.LOGICAL_OPERATOR,
    "||": TokenKind.LOGICAL_OPERATOR,
}

ONE_CHAR_OPERATORS: dict[str, TokenKind] = {
    "+": TokenKind.MATH_OPERATOR,
    "-": TokenKind.MATH_OPERATOR,
    "*": TokenKind.MATH_OPERATOR,
    "/": TokenKind.MATH_OPERATOR,
    "%": TokenKind.MATH_OPERATOR,
    "=": TokenKind.EQUALS_SIGN,
    "<": TokenKind.COMPARISON_OPERATOR,
    ">": TokenKind.COMPARISON_OPERATOR,
    "!": TokenKind.LOGICAL_OPERATOR,
}

PUNCTUATION: dict[str, TokenKind] = {
    ";": TokenKind.SEMICOLON,
    "(": TokenKind.OPEN_PAREN,
    ")": TokenKind.CLOSE_PAREN,
    "{": TokenKind.OPEN_BRACE,
    "}": TokenKind.CLOSE_BRACE,
    ",": TokenKind.COMMA,
}

# Character classes
IDENT_START = frozenset(string.ascii_letters + "_")
IDENT_CHARS = frozenset(string.ascii_letters + string.digits + "_")
DIGITS = frozenset(string.digits)
WHITESPACE = frozenset(" \n")

TYPE_KEYWORD_KINDS = frozenset(KEYWORDS.values())


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A classified, located lexeme.

    Attributes:
        kind: The TokenKind classification
        value: The exact lexeme text (string literals keep their quotes)
        line: Line number in source (1-indexed)
        start_column: Column of the first character (1-indexed)
        end_column: Column of the last character (1-indexed, inclusive)
    """
    kind: TokenKind
    value: str
    line: int
    start_column: int
    end_column: int

    def __repr__(self) -> str:
        return (
            f"Token({self.kind.name}, {self.value!r}, "
            f"{self.line}:{self.start_column}-{self.end_column})"
        )

    def is_type_keyword(self) -> bool:
        """Return True if this token is a reserved type keyword."""
        return self.kind in TYPE_KEYWORD_KINDS

    def to_dict(self) -> dict:
        """Return the record written by the token serializer."""
        return {
            "line": self.line,
            "start_column": self.start_column,
            "end_column": self.end_column,
            "type": self.kind.value,
            "value": self.value,
        }
