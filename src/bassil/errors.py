"""
Bassil Error Hierarchy
======================

This module defines the exception hierarchy for the Bassil toolchain.
All exceptions inherit from BassilError, allowing callers to catch all
Bassil-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
BassilError (base)
├── ScanError (lexer-related)
│   └── UnterminatedStringError - string literal runs off the end of input
└── DiagnosticError (diagnostic rendering)
    ├── InvalidSpanError - start column after end column (caller bug)
    └── SourceLineError - file or line cannot be read

Recoverable lexical anomalies (unknown characters, malformed numbers) are
not exceptions: the scanner records them and keeps going. Only conditions
that stop a scan or a render are raised.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class BassilError(Exception):
    """
    Base exception for all Bassil errors.

        try:
            result = scan(source)
        except BassilError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source text.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Scanner Exceptions
# =============================================================================

class ScanError(BassilError):
    """
    Base exception for errors that stop a scan.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            main.bsl:3:9: error: unterminated string literal
                name = "bassil
                       ^
            hint: add a closing '"' to complete the string
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class UnterminatedStringError(ScanError):
    """
    String literal not closed before end of input.

    This is the one fatal lexical condition. Tokens produced before the
    opening quote are kept on the exception so callers can inspect them,
    but they must not be treated as a complete scan.

    Attributes:
        partial_tokens: Tokens emitted before the failure, in order
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        partial_tokens: tuple = (),
    ):
        self.partial_tokens = tuple(partial_tokens)
        super().__init__(
            "unterminated string literal",
            location=location,
            hint="add a closing '\"' to complete the string",
            source_line=source_line,
        )


# =============================================================================
# Diagnostic Exceptions
# =============================================================================

class DiagnosticError(BassilError):
    """Base exception for diagnostic rendering errors."""
    pass


class InvalidSpanError(DiagnosticError, ValueError):
    """
    Diagnostic span is malformed.

    Raised when start_column > end_column or line_number < 1. This is a
    bug in the caller, so it is raised before anything is written.
    """

    def __init__(self, line_number: int, start_column: int, end_column: int):
        self.line_number = line_number
        self.start_column = start_column
        self.end_column = end_column
        if line_number < 1:
            message = f"line number must be >= 1 (got {line_number})"
        else:
            message = (
                f"start column {start_column} is after end column {end_column}"
            )
        super().__init__(message)


class SourceLineError(DiagnosticError):
    """
    The requested source line could not be read.

    Raised when the file cannot be opened or the line number is past the
    last line of the file.
    """

    def __init__(self, source: str, line_number: int, reason: str):
        self.source = source
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"cannot read line {line_number} of '{source}': {reason}")
