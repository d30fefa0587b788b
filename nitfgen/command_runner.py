"""
CommandRunner - Runs external command-line tools.

The renderers only need "run this argv, give me the combined output and
the exit code", so that is all this module exposes. Tests substitute a
fake runner instead of spawning processes.
"""

import logging
import shlex
from dataclasses import dataclass
from typing import List, Optional

import sh


# Conventional shell exit codes for the failure modes we synthesize
EXIT_COMMAND_NOT_FOUND = 127
EXIT_TIMED_OUT = 124
EXIT_CANNOT_EXECUTE = 126


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of running an external command.

    Attributes:
        exit_code: Process exit code (127 if the tool was not found)
        output: Combined stdout and stderr
        timed_out: True if the process was killed after the timeout
    """
    exit_code: int
    output: str
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


class CommandRunner:
    """
    Runs a command with stderr merged into stdout.

    The output is fully drained before the exit status is collected and a
    process that outlives ``timeout`` seconds is killed.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize command runner.

        Args:
            timeout: Seconds before the child is killed (None for no limit)
            logger: Optional logger instance
        """
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def run(self, command: List[str]) -> CommandResult:
        """
        Run command[0] with the remaining items as its arguments.

        Never raises for tool failures; they are reported in the result.
        """
        self.logger.debug(shlex.join(command))

        try:
            program = sh.Command(command[0])
        except sh.CommandNotFound:
            return CommandResult(
                EXIT_COMMAND_NOT_FOUND, f"{command[0]}: command not found"
            )

        try:
            proc = program(
                *command[1:],
                _err_to_out=True,
                _tty_out=False,
                _timeout=self.timeout,
                _return_cmd=True,
            )
            result = CommandResult(proc.exit_code, self._decode(proc.stdout))
        except sh.TimeoutException:
            result = CommandResult(
                EXIT_TIMED_OUT,
                f"{command[0]} killed after {self.timeout}s timeout",
                timed_out=True,
            )
        except sh.ErrorReturnCode as e:
            result = CommandResult(e.exit_code, self._decode(e.stdout))
        except (sh.ForkException, OSError) as e:
            # found but not runnable: bad format, no permission
            result = CommandResult(
                EXIT_CANNOT_EXECUTE, f"{command[0]}: cannot execute: {e}"
            )

        self.logger.debug(result.output)
        return result

    @staticmethod
    def _decode(output: Optional[bytes]) -> str:
        if not output:
            return ''
        return output.decode('utf-8', errors='replace').strip()
