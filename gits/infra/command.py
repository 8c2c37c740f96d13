"""
Command execution infrastructure for gits.

Every external program gits runs (git, mkdir) goes through a CommandPort,
which makes the calls:
- Easy to replace with a simulation for --dryrun
- Consistent in error handling
- Isolated from business logic

RealCommandPort spawns the program. SimulatedCommandPort never spawns
anything and reports success with a fixed placeholder output.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..exit_codes import CommandFailedError

logger = logging.getLogger(__name__)

DRY_RUN_OUTPUT = "Dry run output"


@dataclass(frozen=True)
class CommandResult:
    """
    Result of running an external program.

    Callers may rely on exit_success only; stderr is kept for diagnostics.
    """
    stdout: str
    exit_success: bool
    stderr: str = ""


def format_command(program: str, args: Sequence[str]) -> str:
    """Render a command line for logs and error messages."""
    return shlex.join([program, *args])


class CommandPort:
    """
    Abstraction over running an external program.

    Subclasses implement execute(); succeeds() and run() are built on it.
    """

    def execute(self, program: str, args: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
        """
        Run program with args and wait for it to exit.

        Args:
            program: Executable name or path
            args: Argument vector (not passed through a shell)
            cwd: Working directory (default: current directory)

        Returns:
            CommandResult with captured stdout and success flag
        """
        raise NotImplementedError

    def succeeds(self, program: str, args: Sequence[str], cwd: Optional[str] = None) -> bool:
        """Check whether the command exits successfully."""
        return self.execute(program, args, cwd=cwd).exit_success

    def run(self, program: str, args: Sequence[str], cwd: Optional[str] = None) -> str:
        """
        Run a command whose output is required.

        Returns:
            Captured stdout

        Raises:
            CommandFailedError: If the command did not succeed
        """
        result = self.execute(program, args, cwd=cwd)
        if not result.exit_success:
            raise CommandFailedError(format_command(program, args), result.stderr)
        return result.stdout


class RealCommandPort(CommandPort):
    """Runs commands with subprocess. No timeout is applied."""

    def execute(self, program: str, args: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
        cmd_str = format_command(program, args)
        logger.debug(f"Running command in '{cwd or '.'}': {cmd_str}")
        try:
            result = subprocess.run(
                [program, *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
        except OSError as e:
            logger.error(f"Could not start command: {cmd_str} - {e}")
            return CommandResult(stdout="", exit_success=False, stderr=str(e))

        if result.returncode != 0:
            logger.debug(f"Command exited with {result.returncode}: {cmd_str}")
            if result.stderr and result.stderr.strip():
                logger.debug(result.stderr.strip())

        return CommandResult(
            stdout=result.stdout or "",
            exit_success=result.returncode == 0,
            stderr=result.stderr or "",
        )


class SimulatedCommandPort(CommandPort):
    """
    Dry-run command port.

    Never spawns a process; every command "succeeds" with DRY_RUN_OUTPUT.
    Calls are recorded in `calls` as (program, args, cwd) tuples.
    """

    def __init__(self, output: str = DRY_RUN_OUTPUT):
        self.output = output
        self.calls: List[Tuple[str, Tuple[str, ...], Optional[str]]] = []

    def execute(self, program: str, args: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
        self.calls.append((program, tuple(args), cwd))
        logger.info(f"[Dry Run] Would run command in '{cwd or '.'}': {format_command(program, args)}")
        return CommandResult(stdout=self.output, exit_success=True)


def create_command_port(dry_run: bool = False) -> CommandPort:
    """Pick the command port for the --dryrun flag."""
    return SimulatedCommandPort() if dry_run else RealCommandPort()
