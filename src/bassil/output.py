"""
Token Output
============

Consumers of the scanner's token list: a human-readable listing and a
JSON serializer that appends the token array to a file.

Serialized Format
-----------------
Each scan is written as one JSON array of records, in token order:

    [
      {
        "line": 1,
        "start_column": 1,
        "end_column": 1,
        "type": "Identifier",
        "value": "x"
      },
      ...
    ]

The destination is append-only: successive scans add successive arrays.
clear_token_file() empties it, which the CLI does when asked to overwrite.
"""

from pathlib import Path
from typing import Iterable, Optional, TextIO, Union
import json
import logging

import click

from bassil.tokens import Token

logger = logging.getLogger(__name__)


def format_token(token: Token) -> str:
    """Format one token as a listing line."""
    return (
        f"Token at line {token.line}, columns "
        f"{token.start_column}-{token.end_column}: "
        f"{token.kind.value}: {token.value}"
    )


def format_tokens(tokens: Iterable[Token]) -> str:
    """Format tokens as a listing, one per line."""
    return "\n".join(format_token(token) for token in tokens)


def display_tokens(tokens: Iterable[Token], sink: Optional[TextIO] = None) -> None:
    """Write the token listing to sink (stdout when None)."""
    tokens = list(tokens)
    if not tokens:
        click.echo("No tokens.", file=sink)
        return
    click.echo(format_tokens(tokens), file=sink)


def tokens_to_json(tokens: Iterable[Token]) -> str:
    """Serialize tokens as a JSON array of records."""
    return json.dumps([token.to_dict() for token in tokens], indent=2)


def save_tokens(tokens: Iterable[Token], path: Union[str, Path]) -> int:
    """
    Append the tokens to path as one JSON array.

    Parent directories are created as needed.

    Returns:
        The number of tokens written
    """
    tokens = list(tokens)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("a", encoding="utf-8") as f:
        f.write(tokens_to_json(tokens))
        f.write("\n")

    logger.debug("Saved %d tokens to %s", len(tokens), path)
    return len(tokens)


def clear_token_file(path: Union[str, Path]) -> None:
    """Truncate the token destination, creating it if missing."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")
