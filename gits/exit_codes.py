"""
Standard exit codes and error types for gits commands.

Following Unix/POSIX conventions for command-line tools. Every error the
core can raise is a CommandError subclass carrying the exit code the CLI
should terminate with.
"""
from typing import Optional, Sequence

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Settings or inventory file error
NETWORK_ERROR = 68       # Transport failure or non-success HTTP status
DATA_ERROR = 70          # Malformed clone URL or timestamp
PARTIAL_SUCCESS = 71     # Some hosts synced, some failed
NO_TRUNK = 72            # Neither main nor master exists locally
DIVERGED = 73            # Remote trunk moved past the local merge-base
IO_ERROR = 74            # Inventory write or rename failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


def exit_with_code(code: int, message: Optional[str] = None):
    """
    Exit with a specific code and optional message.

    Args:
        code: Exit code
        message: Optional message to print to stderr
    """
    import sys
    if message:
        print(message, file=sys.stderr)
    sys.exit(code)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised when settings or an inventory file are missing or malformed."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class NetworkError(CommandError):
    """Raised when a remote host cannot be reached or rejects a request."""
    def __init__(self, message: str, host: Optional[str] = None):
        super().__init__(message, NETWORK_ERROR)
        self.host = host


class ParseError(CommandError):
    """Raised for a malformed clone URL or timestamp."""
    def __init__(self, message: str, value: str = ""):
        super().__init__(message, DATA_ERROR)
        self.value = value


class NoTrunkFound(CommandError):
    """Raised when none of the trunk candidates has a local branch."""
    def __init__(self, candidates: Sequence[str]):
        self.candidates = tuple(candidates)
        super().__init__(
            f"No trunk branch found (tried {', '.join(self.candidates)}). "
            f"Assuming the remote is origin and exactly one of them is trunk.",
            NO_TRUNK,
        )


class Divergence(CommandError):
    """
    Raised when the remote trunk has commits the local branch lacks.

    This is an expected outcome rather than a bug: it blocks the commit and
    carries both compared commit ids so the user can rebase first.
    """
    def __init__(self, trunk: str, merge_base: str, remote_tip: str):
        self.trunk = trunk
        self.merge_base = merge_base
        self.remote_tip = remote_tip
        super().__init__(
            f"origin/{trunk} has moved: merge-base {merge_base or '<none>'} "
            f"!= origin/{trunk} {remote_tip or '<none>'}",
            DIVERGED,
        )


class InventoryIOError(CommandError):
    """Raised when an inventory file cannot be written or replaced."""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, IO_ERROR)
        self.path = path


class CommandFailedError(CommandError):
    """Raised when an external command whose output is required fails."""
    def __init__(self, command: str, stderr: str = ""):
        self.command = command
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(f"Command failed: {command}{detail}", GENERAL_ERROR)


class PartialSuccessError(CommandError):
    """Raised when some operations succeed and some fail."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed
