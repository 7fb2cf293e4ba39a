"""
Bassil Command-Line Interface
=============================

This package provides the ``bassil`` command:

- **bassil lex**: scan a source file, list and optionally save its tokens
- **bassil report**: render one caret-underlined diagnostic

The tool is a Click group with shared options for verbosity, log file and
colour handling.
"""

__all__ = ["main"]
