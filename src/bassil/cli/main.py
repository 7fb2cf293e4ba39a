"""
bassil - Scanner and Diagnostic Command-Line Interface
======================================================

Usage Examples
--------------
List the tokens of a source file:
    $ bassil lex main.src

Save the tokens as JSON (appended to the file):
    $ bassil lex main.src -o after_lex.json

Start the JSON file afresh:
    $ bassil lex main.src -o after_lex.json --overwrite

Render a diagnostic:
    $ bassil report main.src 5 10 14 "Unknown token '=', expected ;"

Trace the scanner into a log file:
    $ bassil -v --log-file logs.txt lex main.src

Exit Codes
----------
0 - Success
1 - Unterminated string, or diagnostic line could not be read
2 - Invalid arguments (including a start column after the end column,
    or a source file that is not valid UTF-8)
3 - Internal error
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

import click

from bassil import __version__
from bassil.cli.errors import ExitCode, handle_cli_exception
from bassil.config import BassilConfig
from bassil.diagnostics import DiagnosticRenderer
from bassil.errors import InvalidSpanError, UnterminatedStringError
from bassil.output import clear_token_file, display_tokens, save_tokens
from bassil.scanner import LexicalAnomaly, LoggingObserver, scan_file

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# =============================================================================
# CLI Context
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Holds the configuration (environment first, then command-line options)
    and the verbosity flag.
    """

    def __init__(self) -> None:
        self.config = BassilConfig.from_env()
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity and the log file setting."""
        level = logging.DEBUG if self.verbose else self.config.log_level
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )
        logging.getLogger().setLevel(level)

        package_logger = logging.getLogger("bassil")
        for stale in [h for h in package_logger.handlers if isinstance(h, logging.FileHandler)]:
            _close_handler(package_logger, stale)

        if self.config.log_file is not None:
            log_file = Path(self.config.log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            # Mode "w" clears the previous run's log
            handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler.setLevel(level)
            package_logger.addHandler(handler)

            click_ctx = click.get_current_context(silent=True)
            if click_ctx is not None:
                click_ctx.call_on_close(lambda: _close_handler(package_logger, handler))

    def make_renderer(self, sink: Optional[TextIO] = None) -> DiagnosticRenderer:
        """Build a renderer for sink using the configured colour policy."""
        return DiagnosticRenderer(
            sink=sink,
            capability=self.config.make_capability(sink),
            marker=self.config.marker,
            fill=self.config.fill,
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def _close_handler(log: logging.Logger, handler: logging.Handler) -> None:
    log.removeHandler(handler)
    handler.close()


def render_anomaly(
    renderer: DiagnosticRenderer,
    source: Path,
    anomaly: LexicalAnomaly,
) -> None:
    """Render a recoverable anomaly, falling back to a one-line warning."""
    rendered = renderer.render(
        source,
        anomaly.line,
        anomaly.column,
        anomaly.column + len(anomaly.lexeme),
        f"warning: {anomaly.message}",
    )
    if not rendered:
        click.echo(
            f"{source}:{anomaly.line}:{anomaly.column}: warning: {anomaly.message}",
            err=True,
        )


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output and scanner tracing",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log records to this file (cleared on each run)",
)
@click.option(
    "--color/--no-color",
    default=None,
    help="Force styled or plain diagnostics (default: detect terminal)",
)
@click.version_option(version=__version__, prog_name="bassil")
@pass_context
def main(
    ctx: Context,
    verbose: bool,
    log_file: Optional[Path],
    color: Optional[bool],
) -> None:
    """
    Scan Bassil source files and render source diagnostics.

    Use 'bassil lex FILE' to tokenize a file and 'bassil report' to
    point at a span of a file with a message.
    """
    ctx.verbose = verbose
    if log_file is not None:
        ctx.config.log_file = log_file
    if color is not None:
        ctx.config.color = "always" if color else "never"
    ctx.setup_logging()


# =============================================================================
# Lex Command
# =============================================================================

@main.command()
@click.argument(
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save tokens as JSON to this file",
)
@click.option(
    "--append/--overwrite",
    default=None,
    help="Append to the output file (default) or start it afresh",
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Don't print the token listing",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with an error if any lexical anomaly was found",
)
@pass_context
def lex(
    ctx: Context,
    source: Path,
    output: Optional[Path],
    append: Optional[bool],
    quiet: bool,
    strict: bool,
) -> None:
    """
    Tokenize a source file.

    SOURCE is the file to scan. Each token is listed with its line,
    columns, kind and text. Unknown characters and malformed numbers are
    reported as warnings; an unterminated string stops the scan.

    \b
    Examples:
        bassil lex main.src
        bassil lex main.src -o tokens.json
        bassil lex main.src -o tokens.json --overwrite
    """
    config = ctx.config
    output = output or config.token_output
    append = config.append_tokens if append is None else append

    observer = LoggingObserver(trace_chars=True) if ctx.verbose else None
    renderer = ctx.make_renderer(sys.stderr)

    if output is not None and not append:
        clear_token_file(output)

    try:
        result = scan_file(source, observer=observer)

    except UnterminatedStringError as e:
        if not quiet and e.partial_tokens:
            display_tokens(e.partial_tokens)
        location = e.location
        rendered = location is not None and renderer.render(
            source, location.line, location.column, location.column + 1, e.message
        )
        if not rendered:
            click.echo(str(e), err=True)
        click.echo(f"Scan aborted: {e.message}", err=True)
        sys.exit(ExitCode.LEX_ERROR)

    except (OSError, UnicodeDecodeError) as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    if not quiet:
        display_tokens(result.tokens)

    for anomaly in result.anomalies:
        render_anomaly(renderer, source, anomaly)

    if output is not None:
        count = save_tokens(result.tokens, output)
        if ctx.verbose:
            click.echo(f"Saved {count} tokens to {output}")

    if strict and result.has_anomalies:
        click.echo(f"{len(result.anomalies)} lexical anomalies found", err=True)
        sys.exit(ExitCode.LEX_ERROR)


# =============================================================================
# Report Command
# =============================================================================

@main.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("start", type=click.IntRange(min=1))
@click.argument("end", type=click.IntRange(min=1))
@click.argument("message")
@pass_context
def report(
    ctx: Context,
    file: Path,
    line: int,
    start: int,
    end: int,
    message: str,
) -> None:
    """
    Render a diagnostic for one line of a file.

    FILE is the source file, LINE the line number (1-based), START and
    END the column span to underline, and MESSAGE the text shown below.

    \b
    Example:
        bassil report main.src 5 10 14 "Unknown token '=', expected ;"
    """
    renderer = ctx.make_renderer(sys.stdout)

    try:
        rendered = renderer.render(file, line, start, end, message)
    except InvalidSpanError as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    if not rendered:
        click.echo(f"Error: cannot read line {line} of {file}", err=True)
        sys.exit(ExitCode.LEX_ERROR)


if __name__ == "__main__":
    main()
