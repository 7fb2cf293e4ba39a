"""
Bassil Diagnostic Renderer
==========================

Turns a source location and a message into a caret-underlined report.

Output Layout
-------------
    Error in main.src on line 5, columns 10-14:
    int x = 5 = 6;
             ^^^^
    Unknown token '=', expected ; at pos:9

The underline is ``start_column - 1`` fill characters followed by
``end_column - start_column`` markers. A zero-width span still gets one
marker so the pointer is always visible.

Styled and Plain Output
-----------------------
When the output device supports ANSI escape sequences, the header, source
line, underline and message are styled with click. Otherwise the same
layout is written with no escape bytes at all. Whether styling is used is
decided once by a StylingCapability and then cached; the renderer takes one
as a constructor argument so tests can pick either path.

Example Usage
-------------
>>> from bassil.diagnostics import DiagnosticRenderer, StylingCapability
>>> renderer = DiagnosticRenderer(capability=StylingCapability.fixed(False))
>>> renderer.render("main.src", 5, 10, 14, "Unknown token '='")
True
"""

from dataclasses import dataclass
from typing import Callable, Optional, TextIO, Union
import logging
import os
import sys

import click

from bassil.errors import InvalidSpanError, SourceLineError

logger = logging.getLogger(__name__)

# Windows console mode flag that turns on ANSI escape handling
ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004
STD_OUTPUT_HANDLE = -11

SourceRef = Union[str, "os.PathLike[str]", TextIO]


# =============================================================================
# Diagnostic Value
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """
    One reportable, location-anchored problem.

    Attributes:
        file_path: Source file the problem is in
        line_number: Line number (1-indexed)
        start_column: First column of the span (1-indexed)
        end_column: Column the span ends at (>= start_column)
        source_line: Text of the line, without its newline
        message: Description of the problem
    """
    file_path: str
    line_number: int
    start_column: int
    end_column: int
    source_line: str
    message: str

    def __post_init__(self) -> None:
        check_span(self.line_number, self.start_column, self.end_column)

    @property
    def marker_count(self) -> int:
        """Number of markers in the underline (at least one)."""
        return max(1, self.end_column - self.start_column)


def check_span(line_number: int, start_column: int, end_column: int) -> None:
    """Raise InvalidSpanError unless the span is well-formed."""
    if line_number < 1 or start_column > end_column:
        raise InvalidSpanError(line_number, start_column, end_column)


# =============================================================================
# Styling Capability
# =============================================================================

def _enable_windows_vt_mode() -> bool:
    """Ask the Windows console to interpret ANSI escape sequences."""
    import ctypes

    kernel32 = ctypes.windll.kernel32
    handle = kernel32.GetStdHandle(STD_OUTPUT_HANDLE)
    mode = ctypes.c_uint32()
    if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
        return False
    if mode.value & ENABLE_VIRTUAL_TERMINAL_PROCESSING:
        return True
    return bool(
        kernel32.SetConsoleMode(handle, mode.value | ENABLE_VIRTUAL_TERMINAL_PROCESSING)
    )


def enable_terminal_styling(stream: Optional[TextIO] = None) -> bool:
    """
    Try to enable ANSI styling on an output stream.

    Styling is refused when NO_COLOR is set, the stream is not a terminal,
    or TERM is "dumb". On Windows the console is switched into virtual
    terminal mode.

    Returns:
        True if styled output can be written to the stream
    """
    if stream is None:
        stream = sys.stdout

    if os.environ.get("NO_COLOR"):
        return False

    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty():
        return False

    if os.name == "nt":
        return _enable_windows_vt_mode()

    return os.environ.get("TERM") != "dumb"


class StylingCapability:
    """
    Whether the output device accepts ANSI styling.

    The state starts unknown (None). The first call to resolve() runs the
    enabler exactly once and caches the answer for the lifetime of this
    object. A failed attempt logs a single notice and plain output is used
    from then on.

    Attributes:
        state: None until resolved, then True or False
    """

    def __init__(
        self,
        enabler: Optional[Callable[[], bool]] = None,
        state: Optional[bool] = None,
    ):
        self._enabler = enabler or enable_terminal_styling
        self.state = state

    @classmethod
    def fixed(cls, enabled: bool) -> "StylingCapability":
        """A capability that is already decided."""
        return cls(state=enabled)

    @classmethod
    def for_stream(cls, stream: Optional[TextIO]) -> "StylingCapability":
        """A capability probed against stream (stdout when None)."""
        return cls(enabler=lambda: enable_terminal_styling(stream))

    @property
    def resolved(self) -> bool:
        return self.state is not None

    def resolve(self) -> bool:
        """Return the cached answer, probing the device on first use."""
        if self.state is None:
            try:
                enabled = bool(self._enabler())
            except (OSError, AttributeError) as e:
                logger.debug("Styling probe failed: %s", e)
                enabled = False

            self.state = enabled
            if not enabled:
                logger.info("Styling unavailable, falling back to plain output")

        return self.state


_default_capability: Optional[StylingCapability] = None


def default_capability() -> StylingCapability:
    """Return the process-wide capability for stdout, creating it lazily."""
    global _default_capability
    if _default_capability is None:
        _default_capability = StylingCapability.for_stream(None)
    return _default_capability


# =============================================================================
# Source Line Extraction
# =============================================================================

def _extract_line(handle: TextIO, line_number: int, name: str) -> str:
    count = 0
    while True:
        text = handle.readline()
        if not text:
            break
        count += 1
        if count == line_number:
            return text.rstrip("\r\n")

    raise SourceLineError(name, line_number, f"file has only {count} lines")


def read_source_line(source: SourceRef, line_number: int) -> str:
    """
    Read one line (1-indexed) from a file path or an open text handle.

    A path is opened and closed here. An open handle belongs to the caller:
    its read position is saved before reading and put back afterwards,
    whether or not the line was found.

    Raises:
        SourceLineError: If the file cannot be read or has too few lines
    """
    if isinstance(source, (str, os.PathLike)):
        name = os.fspath(source)
        try:
            with open(name, encoding="utf-8") as handle:
                return _extract_line(handle, line_number, name)
        except OSError as e:
            raise SourceLineError(name, line_number, e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise SourceLineError(name, line_number, f"not valid UTF-8 ({e.reason})") from e

    name = str(getattr(source, "name", "<stream>"))
    try:
        saved_position = source.tell()
    except OSError as e:
        raise SourceLineError(name, line_number, str(e)) from e

    failed = True
    try:
        source.seek(0)
        text = _extract_line(source, line_number, name)
        failed = False
    except OSError as e:
        raise SourceLineError(name, line_number, str(e)) from e
    except UnicodeDecodeError as e:
        raise SourceLineError(name, line_number, f"not valid UTF-8 ({e.reason})") from e
    finally:
        try:
            source.seek(saved_position)
        except OSError as e:
            # A read failure already in flight takes precedence
            if not failed:
                raise SourceLineError(name, line_number, f"cannot restore position: {e}") from e
            logger.debug("Could not restore position of %s: %s", name, e)

    return text


# =============================================================================
# Renderer
# =============================================================================

class DiagnosticRenderer:
    """
    Writes caret-underlined diagnostics to an output sink.

    Usage:
        renderer = DiagnosticRenderer()
        if not renderer.render("main.src", 5, 10, 14, "bad token"):
            ...  # file or line could not be read

    Attributes:
        sink: Text stream to write to (stdout when None)
        capability: Decides between styled and plain output
        marker: Character used to underline the span
        fill: Character used to pad up to the span
    """

    def __init__(
        self,
        sink: Optional[TextIO] = None,
        capability: Optional[StylingCapability] = None,
        marker: str = "^",
        fill: str = " ",
    ):
        if len(marker) != 1 or len(fill) != 1:
            raise ValueError("marker and fill must be single characters")

        self.sink = sink
        if capability is None:
            capability = (
                StylingCapability.for_stream(sink) if sink is not None
                else default_capability()
            )
        self.capability = capability
        self.marker = marker
        self.fill = fill

    def underline(self, diagnostic: Diagnostic) -> str:
        """Return the fill + marker line that sits under the source line."""
        return (
            self.fill * (diagnostic.start_column - 1)
            + self.marker * diagnostic.marker_count
        )

    def format(self, diagnostic: Diagnostic, styled: bool) -> str:
        """
        Lay out a diagnostic as text.

        Both layouts have the same four lines; the styled one only adds
        escape sequences around each field, never inside the padding.
        """
        d = diagnostic
        location = f"on line {d.line_number}, columns {d.start_column}-{d.end_column}:"

        if not styled:
            return "\n".join([
                f"Error in {d.file_path} {location}",
                d.source_line,
                self.underline(d),
                d.message,
            ])

        padding = self.fill * (d.start_column - 1)
        markers = self.marker * d.marker_count

        header = (
            click.style("Error in", fg="red", bold=True)
            + " "
            + click.style(d.file_path, italic=True)
            + " "
            + click.style(location, bold=True)
        )
        return "\n".join([
            header,
            click.style(d.source_line, fg="cyan"),
            padding + click.style(markers, fg="red", bold=True),
            click.style(d.message, fg="yellow"),
        ])

    def render_diagnostic(self, diagnostic: Diagnostic) -> None:
        """Write an already-built diagnostic to the sink."""
        styled = self.capability.resolve()
        click.echo(self.format(diagnostic, styled), file=self.sink, color=styled)

    def render(
        self,
        file_path: SourceRef,
        line_number: int,
        start_column: int,
        end_column: int,
        message: str,
    ) -> bool:
        """
        Render a diagnostic for one line of a file.

        Args:
            file_path: Path to the source, or an open text handle
            line_number: Line to show (1-indexed)
            start_column: First column of the span
            end_column: Column the span ends at
            message: Description of the problem

        Returns:
            True if the diagnostic was written, False if the file or line
            could not be read (nothing is written in that case)

        Raises:
            InvalidSpanError: If start_column > end_column or line_number < 1.
                Raised before anything is read or written.
        """
        check_span(line_number, start_column, end_column)

        try:
            source_line = read_source_line(file_path, line_number)
        except SourceLineError as e:
            logger.debug("Diagnostic not rendered: %s", e)
            return False

        name = (
            os.fspath(file_path) if isinstance(file_path, (str, os.PathLike))
            else str(getattr(file_path, "name", "<stream>"))
        )
        self.render_diagnostic(Diagnostic(
            file_path=name,
            line_number=line_number,
            start_column=start_column,
            end_column=end_column,
            source_line=source_line,
            message=message,
        ))
        return True


def render(
    file_path: SourceRef,
    line_number: int,
    start_column: int,
    end_column: int,
    message: str,
) -> bool:
    """Render a diagnostic to stdout using the process-wide capability."""
    renderer = DiagnosticRenderer(capability=default_capability())
    return renderer.render(file_path, line_number, start_column, end_column, message)
