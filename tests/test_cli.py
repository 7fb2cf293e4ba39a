"""
Tests for the bassil command-line interface
===========================================

These tests drive the Click group through CliRunner and check both the
output and the exit codes.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from bassil.cli.errors import ExitCode
from bassil.cli.main import main


@pytest.fixture
def runner(monkeypatch):
    for name in ("BASSIL_LOG_LEVEL", "BASSIL_LOG_FILE", "BASSIL_TOKEN_OUTPUT",
                 "BASSIL_COLOR", "BASSIL_MARKER"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "main.src"
    path.write_text("int x = 5;\nfloat y = x * 2.5;\n")
    return path


# =============================================================================
# General Options
# =============================================================================

class TestGeneral:
    """Help and version output."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "lex" in result.output
        assert "report" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output


# =============================================================================
# Lex Command
# =============================================================================

class TestLex:
    """Tests for 'bassil lex'."""

    def test_lists_tokens(self, runner, source_file):
        result = runner.invoke(main, ["lex", str(source_file)])
        assert result.exit_code == 0
        assert "Token at line 1, columns 1-3: TypeInteger: int" in result.output
        assert "Token at line 2, columns 15-17: Float: 2.5" in result.output

    def test_quiet(self, runner, source_file):
        result = runner.invoke(main, ["lex", "-q", str(source_file)])
        assert result.exit_code == 0
        assert "Token at" not in result.output

    def test_saves_json(self, runner, source_file, tmp_path):
        output = tmp_path / "tokens.json"
        result = runner.invoke(main, ["lex", "-q", str(source_file), "-o", str(output)])
        assert result.exit_code == 0
        records = json.loads(output.read_text())
        assert len(records) == 12
        assert records[0]["type"] == "TypeInteger"

    def test_appends_by_default(self, runner, source_file, tmp_path):
        output = tmp_path / "tokens.json"
        runner.invoke(main, ["lex", "-q", str(source_file), "-o", str(output)])
        runner.invoke(main, ["lex", "-q", str(source_file), "-o", str(output)])
        assert output.read_text().count("[\n") == 2

    def test_overwrite(self, runner, source_file, tmp_path):
        output = tmp_path / "tokens.json"
        runner.invoke(main, ["lex", "-q", str(source_file), "-o", str(output)])
        runner.invoke(main, ["lex", "-q", str(source_file), "-o", str(output), "--overwrite"])
        assert len(json.loads(output.read_text())) == 12

    def test_token_output_from_env(self, runner, source_file, tmp_path, monkeypatch):
        output = tmp_path / "env_tokens.json"
        monkeypatch.setenv("BASSIL_TOKEN_OUTPUT", str(output))
        result = runner.invoke(main, ["lex", "-q", str(source_file)])
        assert result.exit_code == 0
        assert output.exists()

    def test_anomalies_reported(self, runner, tmp_path):
        path = tmp_path / "odd.src"
        path.write_text("x = 1 @ 2;\n")
        result = runner.invoke(main, ["--no-color", "lex", "-q", str(path)])
        assert result.exit_code == 0
        assert "warning: unknown character '@'" in result.output
        assert "      ^" in result.output

    def test_strict_fails_on_anomalies(self, runner, tmp_path):
        path = tmp_path / "odd.src"
        path.write_text("v = 1.2.3;\n")
        result = runner.invoke(main, ["lex", "-q", "--strict", str(path)])
        assert result.exit_code == ExitCode.LEX_ERROR

    def test_unterminated_string(self, runner, tmp_path):
        path = tmp_path / "bad.src"
        path.write_text('a = 1;\nb = "never closed\n')
        result = runner.invoke(main, ["--no-color", "lex", str(path)])
        assert result.exit_code == ExitCode.LEX_ERROR
        assert "Scan aborted: unterminated string literal" in result.output
        # Tokens before the string are still listed
        assert "Identifier: a" in result.output
        assert "Identifier: b" in result.output

    def test_source_not_utf8(self, runner, tmp_path):
        """An undecodable source is bad input, not an internal error."""
        path = tmp_path / "latin.src"
        path.write_bytes(b"x = 1;\ny = \xff;\n")
        result = runner.invoke(main, ["lex", str(path)])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "cannot decode input as utf-8" in result.output
        assert "Internal error" not in result.output

    def test_missing_source(self, runner, tmp_path):
        result = runner.invoke(main, ["lex", str(tmp_path / "missing.src")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_verbose_log_file(self, runner, source_file, tmp_path):
        log_file = tmp_path / "logs.txt"
        try:
            result = runner.invoke(
                main, ["-v", "--log-file", str(log_file), "lex", "-q", str(source_file)]
            )
            assert result.exit_code == 0
            assert "[scan]" in log_file.read_text()
        finally:
            logging.getLogger().setLevel(logging.WARNING)

    def test_log_file_handler_closed_after_run(self, runner, source_file, tmp_path):
        """Repeated runs leave no file handlers behind on the package logger."""
        try:
            for name in ("first.log", "second.log"):
                log_file = tmp_path / name
                result = runner.invoke(
                    main, ["--log-file", str(log_file), "lex", "-q", str(source_file)]
                )
                assert result.exit_code == 0

            handlers = logging.getLogger("bassil").handlers
            assert not [h for h in handlers if isinstance(h, logging.FileHandler)]
        finally:
            logging.getLogger().setLevel(logging.WARNING)


# =============================================================================
# Report Command
# =============================================================================

class TestReport:
    """Tests for 'bassil report'."""

    def test_renders_diagnostic(self, runner, tmp_path):
        path = tmp_path / "main.src"
        path.write_text("a\nb\nc\nd\nint x = 5 = 6 + total;\n")
        result = runner.invoke(
            main, ["--no-color", "report", str(path), "5", "10", "14", "Unknown token '='"]
        )
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "int x = 5 = 6 + total;" in lines
        assert " " * 9 + "^" * 4 in lines
        assert "Unknown token '='" in lines

    def test_color(self, runner, source_file):
        result = runner.invoke(main, ["--color", "report", str(source_file), "1", "1", "3", "m"])
        assert result.exit_code == 0
        assert "\x1b[" in result.output

    def test_no_color(self, runner, source_file):
        result = runner.invoke(main, ["--no-color", "report", str(source_file), "1", "1", "3", "m"])
        assert result.exit_code == 0
        assert "\x1b" not in result.output

    def test_reversed_span(self, runner, source_file):
        result = runner.invoke(main, ["report", str(source_file), "1", "15", "10", "m"])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "invalid span" in result.output
        assert "^" not in result.output

    def test_line_past_end(self, runner, source_file):
        result = runner.invoke(main, ["report", str(source_file), "9", "1", "2", "m"])
        assert result.exit_code == ExitCode.LEX_ERROR
        assert "cannot read line 9" in result.output

    def test_file_not_utf8(self, runner, tmp_path):
        path = tmp_path / "latin.src"
        path.write_bytes(b"ok line\n\xff\xfe bad bytes here\n")
        result = runner.invoke(main, ["report", str(path), "2", "1", "3", "m"])
        assert result.exit_code == ExitCode.LEX_ERROR
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "cannot read line 2" in result.output

    def test_line_zero_rejected(self, runner, source_file):
        result = runner.invoke(main, ["report", str(source_file), "0", "1", "2", "m"])
        assert result.exit_code == ExitCode.INVALID_ARGS
