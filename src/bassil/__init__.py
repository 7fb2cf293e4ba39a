"""
Bassil - Scanner and Diagnostics for the Bassil Scripting Language
==================================================================

This package provides the lexical front end of the Bassil shell language:
a single-pass scanner that turns source text into located tokens, and a
diagnostic renderer that points at a span of a source line with a caret
underline.

Main Components
---------------
- **tokens**: token kinds, the Token value and the classification tables
- **scanner**: the tokenizer, its anomaly records and observer hook
- **diagnostics**: caret-underlined error reports, styled or plain
- **output**: token listing and JSON serialization
- **cli**: the ``bassil`` command

Quick Start
-----------
Scan some source:
    >>> from bassil import scan
    >>> [t.value for t in scan("x = 5;")]
    ['x', '=', '5', ';']

Render a diagnostic:
    >>> from bassil import render
    >>> render("main.src", 5, 10, 14, "Unknown token '=', expected ;")

Or use the command-line tool:
    $ bassil lex main.src -o tokens.json
    $ bassil report main.src 5 10 14 "Unknown token '='"
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from bassil.errors import (
    BassilError,
    SourceLocation,
    ScanError,
    UnterminatedStringError,
    DiagnosticError,
    InvalidSpanError,
    SourceLineError,
)
from bassil.tokens import (
    Token,
    TokenKind,
    KEYWORDS,
    TWO_CHAR_OPERATORS,
    ONE_CHAR_OPERATORS,
    PUNCTUATION,
)
from bassil.scanner import (
    AnomalyKind,
    LexicalAnomaly,
    LoggingObserver,
    ScanObserver,
    ScanResult,
    Scanner,
    scan,
    scan_file,
)
from bassil.diagnostics import (
    Diagnostic,
    DiagnosticRenderer,
    StylingCapability,
    default_capability,
    read_source_line,
    render,
)
from bassil.output import (
    display_tokens,
    format_tokens,
    save_tokens,
    tokens_to_json,
)
from bassil.config import BassilConfig

__all__ = [
    "__version__",
    # Errors
    "BassilError",
    "SourceLocation",
    "ScanError",
    "UnterminatedStringError",
    "DiagnosticError",
    "InvalidSpanError",
    "SourceLineError",
    # Tokens
    "Token",
    "TokenKind",
    "KEYWORDS",
    "TWO_CHAR_OPERATORS",
    "ONE_CHAR_OPERATORS",
    "PUNCTUATION",
    # Scanner
    "AnomalyKind",
    "LexicalAnomaly",
    "LoggingObserver",
    "ScanObserver",
    "ScanResult",
    "Scanner",
    "scan",
    "scan_file",
    # Diagnostics
    "Diagnostic",
    "DiagnosticRenderer",
    "StylingCapability",
    "default_capability",
    "read_source_line",
    "render",
    # Output
    "display_tokens",
    "format_tokens",
    "save_tokens",
    "tokens_to_json",
    # Configuration
    "BassilConfig",
]
