"""Error taxonomy of the Core.

Every failure is fatal: the Core raises, `cli.main.run` prints the message
and exits with `exit_code`. Nothing is retried or rolled back.
"""

from __future__ import annotations

from typing import Sequence


EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1


class ManageError(Exception):
    """Base class for errors that end the run with an exit code."""

    exit_code: int = EXIT_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UsageError(ManageError):
    """Invalid invocation: missing `-e`, unknown flag or subcommand."""


class MissingParameterError(UsageError):
    """A handler was called with an empty required parameter."""

    def __init__(self, operation: str, parameter: str) -> None:
        super().__init__(f"{operation}: missing required parameter '{parameter}'.")
        self.operation = operation
        self.parameter = parameter


class ConfigurationError(ManageError):
    """The environment cannot support the requested work (missing tool, setting)."""


class ExternalCommandError(ManageError):
    """A delegated command or request failed."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode
