"""Shared exception types for the cmdrunner harness."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .models import CapturedOutput


class CmdRunnerError(RuntimeError):
    """Base error for cmdrunner harness operations."""


class UnknownCommandError(CmdRunnerError):
    """Raised when a command name has no registered entry point."""

    def __init__(self, name: str | None) -> None:
        """Initialise the error with the unresolved command name."""
        if name is None:
            message = "No command given and the runner has no default command."
        else:
            message = f"Command {name!r} is not registered."
        super().__init__(message)
        self.name = name


class DuplicateBindingError(CmdRunnerError):
    """Raised when attempting to bind a command name twice."""

    def __init__(self, name: str) -> None:
        """Initialise the error with the duplicate name."""
        super().__init__(f"Command {name!r} is already registered.")
        self.name = name


class InvalidBindingError(CmdRunnerError):
    """Raised when an entry point cannot be bound."""


class ReentrancyViolationError(CmdRunnerError):
    """Raised when an invocation starts while the standard streams are held."""

    def __init__(self, detail: str) -> None:
        """Initialise the error with the conflicting invocation."""
        super().__init__(
            f"Cannot redirect standard streams: {detail}. "
            "Invocations must run one at a time."
        )


class EntryPointFailedError(CmdRunnerError):
    """Raised when a caller asks for a failed invocation to be re-raised."""

    def __init__(self, output: CapturedOutput) -> None:
        """Initialise the error from the captured invocation result."""
        failure = output.failure
        if failure is not None:
            message = f"{failure.kind}: {failure.message}"
        else:
            message = f"exited with status {output.exit_code}"
        super().__init__(f"Entry point failed ({message})")
        self.output = output


class ManifestError(CmdRunnerError):
    """Raised when a registry manifest cannot be loaded."""


class ConfigError(CmdRunnerError):
    """Raised when runner configuration values are invalid."""
