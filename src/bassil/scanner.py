"""
Bassil Scanner (Tokenizer)
==========================

This module implements the single-pass scanner for the Bassil scripting
language. It converts source text into an ordered list of tokens, each
tagged with its line and column span.

Classification Order
--------------------
Each iteration looks at the current character and tries, in order:

1. Whitespace (space, newline) - consumed, no token
2. Identifier or type keyword - ``[A-Za-z_][A-Za-z0-9_]*``
3. Number - digits with at most one '.'
4. String - ``"..."`` with backslash escapes
5. Operator - two-character match first, then one character
6. Punctuation - ``; ( ) { } ,``
7. Unknown - any other single character

Error Handling
--------------
Unknown characters and numbers with a second '.' are recoverable: the
scanner records a LexicalAnomaly and carries on. A string literal that
reaches the end of input is fatal and raises UnterminatedStringError,
which keeps the tokens produced before the failure.

Position Tracking
-----------------
Every consumed character moves the column forward by one, except newline,
which moves to column 1 of the next line. A token's end column is worked
out from its lexeme once the lexeme has been consumed.

Observers
---------
Tracing is done through a ScanObserver rather than log calls in the scan
loop. Attach LoggingObserver to get per-character and per-token DEBUG
records on the ``bassil.scanner`` logger.

Example Usage
-------------
>>> from bassil.scanner import scan
>>> for token in scan("x = 5;"):
...     print(token)
Token(IDENTIFIER, 'x', 1:1-1)
Token(EQUALS_SIGN, '=', 1:3-3)
Token(INTEGER, '5', 1:5-5)
Token(SEMICOLON, ';', 1:6-6)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterator, Optional, Union
import logging

from bassil.errors import SourceLocation, UnterminatedStringError
from bassil.tokens import (
    DIGITS,
    IDENT_CHARS,
    IDENT_START,
    KEYWORDS,
    ONE_CHAR_OPERATORS,
    PUNCTUATION,
    TWO_CHAR_OPERATORS,
    WHITESPACE,
    Token,
    TokenKind,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Anomalies
# =============================================================================

class AnomalyKind(Enum):
    """Recoverable lexical problems."""
    UNKNOWN_CHARACTER = auto()
    MALFORMED_NUMBER = auto()


@dataclass(frozen=True)
class LexicalAnomaly:
    """
    A lexical problem that did not stop the scan.

    Attributes:
        kind: What went wrong
        message: Human-readable description
        line: Line of the offending character (1-indexed)
        column: Column of the offending character (1-indexed)
        lexeme: The offending text (the unknown character, or the
            extra '.' that cut a number short)
    """
    kind: AnomalyKind
    message: str
    line: int
    column: int
    lexeme: str


# =============================================================================
# Observer Hook
# =============================================================================

class ScanObserver:
    """
    Receives scanner events. All methods are no-ops; override what you need.
    """

    def on_char(self, char: str, line: int, column: int) -> None:
        """Called for every consumed character, with its position."""

    def on_token(self, token: Token) -> None:
        """Called once for every emitted token."""

    def on_anomaly(self, anomaly: LexicalAnomaly) -> None:
        """Called when a recoverable anomaly is recorded."""

    def on_fatal(self, error: UnterminatedStringError) -> None:
        """Called just before a fatal error is raised."""


class LoggingObserver(ScanObserver):
    """Forwards scanner events to a logger."""

    def __init__(self, log: Optional[logging.Logger] = None, trace_chars: bool = False):
        self.log = log or logger
        self.trace_chars = trace_chars

    def on_char(self, char: str, line: int, column: int) -> None:
        if self.trace_chars:
            self.log.debug("[scan] char %r at %d:%d", char, line, column)

    def on_token(self, token: Token) -> None:
        self.log.debug(
            "[scan] %s %r at line %d, columns %d-%d",
            token.kind.value, token.value, token.line,
            token.start_column, token.end_column,
        )

    def on_anomaly(self, anomaly: LexicalAnomaly) -> None:
        self.log.warning(
            "[scan] %s at %d:%d", anomaly.message, anomaly.line, anomaly.column
        )

    def on_fatal(self, error: UnterminatedStringError) -> None:
        self.log.warning("[scan] aborted: %s", error.message)


# =============================================================================
# Scan Result
# =============================================================================

@dataclass
class ScanResult:
    """
    Output of a completed scan.

    Iterating over a ScanResult yields its tokens.

    Attributes:
        tokens: Tokens in source order
        anomalies: Recoverable anomalies in source order
    """
    tokens: list[Token] = field(default_factory=list)
    anomalies: list[LexicalAnomaly] = field(default_factory=list)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index):
        return self.tokens[index]

    @property
    def has_anomalies(self) -> bool:
        return len(self.anomalies) > 0


# =============================================================================
# Scanner Implementation
# =============================================================================

class Scanner:
    """
    Tokenizes Bassil source code in a single left-to-right pass.

    Usage:
        scanner = Scanner(source_text, filename)
        tokens = list(scanner.tokenize())
        problems = scanner.anomalies

    Attributes:
        source: The source text being tokenized
        filename: Name of the source file (for error locations)
        observer: Receives character, token and anomaly events
        anomalies: Recoverable anomalies recorded so far
    """

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        observer: Optional[ScanObserver] = None,
    ):
        self.source = source
        self.filename = filename
        self.observer = observer or ScanObserver()
        self.anomalies: list[LexicalAnomaly] = []

        # Position tracker: cursor, line and column move together
        self._pos = 0
        self._line = 1
        self._column = 1

        # Tokens emitted so far, handed to the error on a fatal abort
        self._emitted: list[Token] = []

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source text.

        Yields:
            Token objects in source order

        Raises:
            UnterminatedStringError: If a string literal is not closed
        """
        while not self._at_end():
            char = self._peek()

            if char in WHITESPACE:
                self._advance()
                continue

            token = self._scan_token()
            self._emitted.append(token)
            self.observer.on_token(token)
            yield token

    # =========================================================================
    # Character Access and Position Tracking
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at the character at current position + offset.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume the current character and update line/column."""
        char = self.source[self._pos]
        self.observer.on_char(char, self._line, self._column)
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token and Anomaly Creation
    # =========================================================================

    def _make_token(
        self,
        kind: TokenKind,
        start_pos: int,
        start_line: int,
        start_column: int,
    ) -> Token:
        """Build a token from everything consumed since start_pos."""
        lexeme = self.source[start_pos:self._pos]
        return Token(
            kind=kind,
            value=lexeme,
            line=start_line,
            start_column=start_column,
            end_column=start_column + len(lexeme) - 1,
        )

    def _record_anomaly(
        self,
        kind: AnomalyKind,
        message: str,
        line: int,
        column: int,
        lexeme: str,
    ) -> None:
        anomaly = LexicalAnomaly(kind, message, line, column, lexeme)
        self.anomalies.append(anomaly)
        self.observer.on_anomaly(anomaly)

    def _line_text(self, pos: int) -> str:
        """Return the text of the line containing pos."""
        line_start = self.source.rfind("\n", 0, pos) + 1
        line_end = self.source.find("\n", pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[line_start:line_end]

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start_pos = self._pos
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in IDENT_START:
            return self._scan_identifier(start_pos, start_line, start_column)

        if char in DIGITS:
            return self._scan_number(start_pos, start_line, start_column)

        if char == '"':
            return self._scan_string(start_pos, start_line, start_column)

        return self._scan_operator(start_pos, start_line, start_column)

    def _scan_identifier(self, start_pos: int, start_line: int, start_column: int) -> Token:
        """Scan an identifier or a reserved type keyword."""
        while self._peek() and self._peek() in IDENT_CHARS:
            self._advance()

        name = self.source[start_pos:self._pos]
        kind = KEYWORDS.get(name, TokenKind.IDENTIFIER)
        return self._make_token(kind, start_pos, start_line, start_column)

    def _scan_number(self, start_pos: int, start_line: int, start_column: int) -> Token:
        """
        Scan a numeric literal.

        A second '.' ends the number without being consumed; it is then
        scanned on its own as the next token.
        """
        seen_dot = False
        while True:
            char = self._peek()
            if char and char in DIGITS:
                self._advance()
            elif char == "." and not seen_dot:
                seen_dot = True
                self._advance()
            elif char == "." and seen_dot:
                number = self.source[start_pos:self._pos]
                self._record_anomaly(
                    AnomalyKind.MALFORMED_NUMBER,
                    f"second '.' after '{number}'; number ends before it",
                    self._line,
                    self._column,
                    char,
                )
                break
            else:
                break

        kind = TokenKind.FLOAT if seen_dot else TokenKind.INTEGER
        return self._make_token(kind, start_pos, start_line, start_column)

    def _scan_string(self, start_pos: int, start_line: int, start_column: int) -> Token:
        """
        Scan a double-quoted string literal.

        A backslash consumes the following character, so an escaped quote
        does not close the string. Escapes are kept verbatim in the lexeme.
        """
        self._advance()  # opening "

        while not self._at_end():
            char = self._advance()

            if char == '"':
                return self._make_token(TokenKind.STRING, start_pos, start_line, start_column)

            if char == "\\" and not self._at_end():
                self._advance()

        error = UnterminatedStringError(
            SourceLocation(self.filename, start_line, start_column),
            source_line=self._line_text(start_pos),
            partial_tokens=self._emitted,
        )
        self.observer.on_fatal(error)
        raise error

    def _scan_operator(self, start_pos: int, start_line: int, start_column: int) -> Token:
        """
        Scan an operator, punctuation or unknown character.

        The two-character table is checked first so that '==' is never
        split into two '=' tokens.
        """
        pair = self.source[self._pos:self._pos + 2]
        if pair in TWO_CHAR_OPERATORS:
            self._advance()
            self._advance()
            return self._make_token(TWO_CHAR_OPERATORS[pair], start_pos, start_line, start_column)

        char = self._advance()

        if char in ONE_CHAR_OPERATORS:
            return self._make_token(ONE_CHAR_OPERATORS[char], start_pos, start_line, start_column)

        if char in PUNCTUATION:
            return self._make_token(PUNCTUATION[char], start_pos, start_line, start_column)

        self._record_anomaly(
            AnomalyKind.UNKNOWN_CHARACTER,
            f"unknown character {char!r}",
            start_line,
            start_column,
            char,
        )
        return self._make_token(TokenKind.UNKNOWN, start_pos, start_line, start_column)


# =============================================================================
# Convenience Functions
# =============================================================================

def scan(
    source: str,
    *,
    filename: str = "<input>",
    observer: Optional[ScanObserver] = None,
) -> ScanResult:
    """
    Scan source text into tokens.

    Args:
        source: Source text, already loaded into memory
        filename: Name used in error locations
        observer: Optional event receiver (e.g. LoggingObserver)

    Returns:
        ScanResult with the tokens and any recoverable anomalies

    Raises:
        UnterminatedStringError: If a string literal is not closed. The
            tokens produced before it are on ``error.partial_tokens``.
    """
    scanner = Scanner(source, filename, observer)
    tokens = list(scanner.tokenize())
    return ScanResult(tokens=tokens, anomalies=list(scanner.anomalies))


def scan_file(
    path: Union[str, Path],
    encoding: str = "utf-8",
    observer: Optional[ScanObserver] = None,
) -> ScanResult:
    """Read a source file wholesale and scan it."""
    path = Path(path)
    source = path.read_text(encoding=encoding)
    logger.debug("Scanning %s (%d characters)", path, len(source))
    return scan(source, filename=str(path), observer=observer)
