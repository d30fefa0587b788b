"""Tests for CommandRunner."""

import sys

import pytest

from nitfgen.command_runner import (
    EXIT_CANNOT_EXECUTE,
    EXIT_COMMAND_NOT_FOUND,
    EXIT_TIMED_OUT,
    CommandResult,
    CommandRunner,
)


def python_command(code):
    return [sys.executable, '-c', code]


class TestCommandResult:
    """Tests for CommandResult."""

    def test_succeeded(self):
        """Test success requires exit code zero."""
        assert CommandResult(0, '').succeeded
        assert not CommandResult(1, '').succeeded

    def test_timed_out_never_succeeds(self):
        """Test that a timed out result is a failure."""
        assert not CommandResult(0, '', timed_out=True).succeeded


class TestCommandRunner:
    """Tests for CommandRunner."""

    def test_success_output(self):
        """Test capturing the output of a successful command."""
        runner = CommandRunner(timeout=30)

        result = runner.run(python_command('print("hello")'))

        assert result.exit_code == 0
        assert result.output == 'hello'
        assert result.succeeded

    def test_stderr_merged_into_output(self):
        """Test that stderr is part of the output."""
        runner = CommandRunner(timeout=30)

        result = runner.run(python_command(
            'import sys; print("out"); sys.stdout.flush(); print("err", file=sys.stderr)'
        ))

        assert 'out' in result.output
        assert 'err' in result.output

    def test_failure_exit_code(self):
        """Test that a failing command reports its exit code and output."""
        runner = CommandRunner(timeout=30)

        result = runner.run(python_command(
            'import sys; print("bad input", file=sys.stderr); sys.exit(3)'
        ))

        assert result.exit_code == 3
        assert 'bad input' in result.output
        assert not result.succeeded
        assert not result.timed_out

    def test_arguments_are_not_split(self):
        """Test arguments with spaces reach the program unchanged."""
        runner = CommandRunner(timeout=30)

        result = runner.run(python_command('import sys; print(sys.argv[1])') + ['a b  c'])

        assert result.output == 'a b  c'

    def test_command_not_found(self):
        """Test a program that does not exist."""
        runner = CommandRunner(timeout=30)

        result = runner.run(['nitfgen-no-such-tool', '-stats', 'x.ntf'])

        assert result.exit_code == EXIT_COMMAND_NOT_FOUND
        assert 'command not found' in result.output
        assert not result.succeeded

    def test_executable_with_bad_format(self, tmp_path):
        """Test a program that is found but cannot be executed."""
        tool = tmp_path / 'gdal_translate'
        tool.write_bytes(b'\x00\x01\x02 not a program')
        tool.chmod(0o755)
        runner = CommandRunner(timeout=30)

        result = runner.run([str(tool), '-of', 'JPEG'])

        assert result.exit_code == EXIT_CANNOT_EXECUTE
        assert 'cannot execute' in result.output
        assert not result.succeeded

    def test_timeout_kills_process(self):
        """Test that a slow command is killed."""
        runner = CommandRunner(timeout=0.5)

        result = runner.run(python_command('import time; time.sleep(30)'))

        assert result.timed_out
        assert result.exit_code == EXIT_TIMED_OUT
        assert not result.succeeded

    def test_large_output_drained(self):
        """Test a command writing more than a pipe buffer."""
        runner = CommandRunner(timeout=30)

        result = runner.run(python_command('print("x" * 200000)'))

        assert result.succeeded
        assert len(result.output) == 200000

    def test_logs_command(self, caplog):
        """Test the command line is logged at debug."""
        runner = CommandRunner(timeout=30)

        with caplog.at_level('DEBUG', logger='nitfgen.command_runner'):
            runner.run(python_command('pass'))

        assert "-c pass" in caplog.text
