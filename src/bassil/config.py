"""
Bassil Configuration
====================

Settings shared by the scanner front end and the diagnostic renderer.
Configuration can come from:
- Default values (defined here)
- Environment variables (BassilConfig.from_env)
- Command-line options, which the CLI applies on top

Environment variables (all optional):
    BASSIL_LOG_LEVEL: Logging level name (e.g. "DEBUG", "INFO")
    BASSIL_LOG_FILE: File to write log records to
    BASSIL_TOKEN_OUTPUT: File the token JSON is appended to
    BASSIL_COLOR: "auto", "always" or "never"
    BASSIL_MARKER: Underline marker character
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO
import logging
import os

from bassil.diagnostics import StylingCapability

COLOR_MODES = ("auto", "always", "never")


@dataclass
class BassilConfig:
    """
    Runtime configuration.

    Attributes:
        log_level: Level for the root logger (default: WARNING)
        log_file: Where log records are also written (cleared on each run)
        token_output: Where scanned tokens are saved as JSON (None = don't save)
        append_tokens: Append to token_output instead of overwriting it
        color: Styling policy for diagnostics ("auto", "always", "never")
        marker: Character used to underline diagnostic spans
        fill: Character used to pad the underline up to the span
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # LOGGING
    # ═══════════════════════════════════════════════════════════════════════════

    log_level: int = logging.WARNING
    log_file: Optional[Path] = None

    # ═══════════════════════════════════════════════════════════════════════════
    # TOKEN OUTPUT
    # ═══════════════════════════════════════════════════════════════════════════

    token_output: Optional[Path] = None
    append_tokens: bool = True

    # ═══════════════════════════════════════════════════════════════════════════
    # DIAGNOSTICS
    # ═══════════════════════════════════════════════════════════════════════════

    color: str = "auto"
    marker: str = "^"
    fill: str = " "

    @classmethod
    def from_env(cls) -> "BassilConfig":
        """
        Create a BassilConfig from environment variables.

        Invalid values are ignored and the default is kept.
        """
        config = cls()

        if level_name := os.environ.get("BASSIL_LOG_LEVEL"):
            level = logging.getLevelName(level_name.upper())
            if isinstance(level, int):
                config.log_level = level

        if log_file := os.environ.get("BASSIL_LOG_FILE"):
            config.log_file = Path(log_file)

        if token_output := os.environ.get("BASSIL_TOKEN_OUTPUT"):
            config.token_output = Path(token_output)

        if color := os.environ.get("BASSIL_COLOR"):
            if color.lower() in COLOR_MODES:
                config.color = color.lower()

        if marker := os.environ.get("BASSIL_MARKER"):
            if len(marker) == 1:
                config.marker = marker

        return config

    def make_capability(self, stream: Optional[TextIO] = None) -> StylingCapability:
        """Build the styling capability this configuration asks for."""
        if self.color == "always":
            return StylingCapability.fixed(True)
        if self.color == "never":
            return StylingCapability.fixed(False)
        return StylingCapability.for_stream(stream)
