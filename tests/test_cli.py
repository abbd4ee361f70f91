"""
Tests for the wamp command-line interface
=========================================

These tests drive the click command through CliRunner inside an isolated
filesystem and check outputs and exit codes.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from wamp import __version__
from wamp.cli.errors import ExitCode
from wamp.cli.wamp import main
from wamp.config import MEMORY_SIZE_ENV


MAIN_SOURCE = """\
(module $main
  (func $start (export "start") (result i32)
    (LET $p "hello")
    (i32.load8_u $p)))
"""

LIB_SOURCE = """\
(module $lib
  (func $twice (param $x i32) (result i32)
    (i32.mul $x 2)))
"""


@pytest.fixture
def runner():
    return CliRunner()


# =============================================================================
# Basic Invocation
# =============================================================================

class TestInvocation:
    """Help, version and argument handling."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Transpile wamp source" in result.output
        assert "--memory-size" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_inputs(self, runner):
        result = runner.invoke(main, [])
        assert result.exit_code == 2

    def test_missing_file(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["nope.wam"])
            assert result.exit_code == 2


# =============================================================================
# Output
# =============================================================================

class TestOutput:
    """Where the transpiled module goes."""

    def test_stdout(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["main.wam"])

            assert result.exit_code == 0, result.output
            assert result.output.startswith("(module $main\n")
            assert "(global $S_STRING_0  i32 (i32.const 4))" in result.output

    def test_output_file(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["main.wam", "-o", "main.wat"])

            assert result.exit_code == 0, result.output
            text = Path("main.wat").read_text()
            assert text.startswith("(module $main\n")
            assert text.endswith("\n)")
            assert "(module $main" not in result.output

    def test_merge_in_argument_order(self, runner):
        with runner.isolated_filesystem():
            Path("lib.wam").write_text(LIB_SOURCE)
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["lib.wam", "main.wam", "-o", "out.wat"])

            assert result.exit_code == 0, result.output
            text = Path("out.wat").read_text()
            assert text.startswith("(module $lib__main\n")
            assert text.index(";; module $lib") < text.index(";; module $main")

    def test_memory_size(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["-m", "1024", "main.wam", "-o", "out.wat"])

            assert result.exit_code == 0, result.output
            assert '(import "env" "memory" (memory 1024))' in Path("out.wat").read_text()

    def test_memory_size_from_env(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(
                main, ["main.wam", "-o", "out.wat"], env={MEMORY_SIZE_ENV: "64"}
            )

            assert result.exit_code == 0, result.output
            assert "(memory 64))" in Path("out.wat").read_text()

    def test_symbols_file(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(
                main, ["main.wam", "-o", "out.wat", "-s", "out.sym"]
            )

            assert result.exit_code == 0, result.output
            listing = Path("out.sym").read_text()
            assert "$S_STRING_0" in listing
            assert "$S_STRING_END" in listing

    def test_verbose_summary(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["-v", "main.wam", "-o", "out.wat"])

            assert result.exit_code == 0, result.output
            assert "Transpile complete: 1 files, 1 data slots" in result.output


# =============================================================================
# Failures
# =============================================================================

class TestFailures:
    """Errors are reported with the right exit code and no output."""

    def test_syntax_error(self, runner):
        with runner.isolated_filesystem():
            Path("bad.wam").write_text("(module $bad\n  (func $f)\n")
            result = runner.invoke(main, ["bad.wam", "-o", "out.wat"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "Transpile failed" in result.output
            assert "bad.wam:1:1: error:" in result.output
            assert not Path("out.wat").exists()

    def test_macro_error(self, runner):
        with runner.isolated_filesystem():
            Path("bad.wam").write_text('(module $bad (func (CHR "AB")))')
            result = runner.invoke(main, ["bad.wam", "-o", "out.wat", "-s", "out.sym"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "CHR" in result.output
            assert not Path("out.wat").exists()
            assert not Path("out.sym").exists()

    def test_error_in_second_file_writes_nothing(self, runner):
        with runner.isolated_filesystem():
            Path("lib.wam").write_text(LIB_SOURCE)
            Path("bad.wam").write_text("(module $bad))")
            result = runner.invoke(main, ["lib.wam", "bad.wam", "-o", "out.wat"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert not Path("out.wat").exists()

    def test_unwritable_symbols_file_writes_nothing(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(
                main, ["main.wam", "-o", "out.wat", "-s", "nodir/out.sym"]
            )

            assert result.exit_code == ExitCode.INVALID_ARGS
            assert not Path("out.wat").exists()
            assert not Path("nodir").exists()

    def test_unwritable_symbols_file_prints_nothing(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["main.wam", "-s", "nodir/out.sym"])

            assert result.exit_code == ExitCode.INVALID_ARGS
            assert "(module $main" not in result.output

    @pytest.mark.parametrize("size", ["0", "70000"])
    def test_memory_size_out_of_range(self, runner, size):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["-m", size, "main.wam"])

            assert result.exit_code == ExitCode.INVALID_ARGS
            assert "memory size" in result.output

    def test_memory_size_not_a_number(self, runner):
        with runner.isolated_filesystem():
            Path("main.wam").write_text(MAIN_SOURCE)
            result = runner.invoke(main, ["-m", "lots", "main.wam"])
            assert result.exit_code == 2

    def test_not_utf8(self, runner):
        with runner.isolated_filesystem():
            Path("bin.wam").write_bytes(b"(module $m \xff\xfe)")
            result = runner.invoke(main, ["bin.wam"])
            assert result.exit_code == ExitCode.INVALID_ARGS
