"""Data structures describing a single command invocation."""

from __future__ import annotations

import builtins
import dataclasses
import enum
import shlex
import traceback as tb

from .errors import EntryPointFailedError

GENERIC_FAILURE_STATUS = 1


class InvocationState(enum.Enum):
    """Lifecycle of one invocation."""

    IDLE = "idle"
    REDIRECTING = "redirecting"
    INVOKING = "invoking"
    RESTORING = "restoring"
    DONE = "done"


def exception_kind(error: BaseException) -> str:
    """Return a readable classification for an exception type."""
    error_type = type(error)
    if error_type.__module__ == builtins.__name__:
        return error_type.__qualname__
    return f"{error_type.__module__}.{error_type.__qualname__}"


@dataclasses.dataclass(frozen=True, slots=True)
class InvocationRequest:
    """One command invocation as a shell would have handed it to `main`."""

    command: str | None
    arguments: tuple[str, ...] = ()
    stdin: str | None = None

    @property
    def command_line(self) -> str:
        """Render the invocation as a shell-quoted line for diagnostics."""
        parts = [self.command] if self.command else []
        return shlex.join([*parts, *self.arguments])


@dataclasses.dataclass(frozen=True, slots=True)
class Failure:
    """An entry point terminated by raising instead of returning."""

    message: str
    kind: str
    exit_code: int = GENERIC_FAILURE_STATUS
    traceback: str = dataclasses.field(default="", compare=False, repr=False)

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        *,
        include_traceback: bool = True,
    ) -> Failure:
        """Describe an exception without keeping a reference to it."""
        formatted = "".join(tb.format_exception(error)) if include_traceback else ""
        if isinstance(error, SystemExit):
            code = error.code
            if isinstance(code, int):
                return cls(
                    message=f"exited with status {code}",
                    kind=exception_kind(error),
                    exit_code=code,
                    traceback=formatted,
                )
            return cls(
                message=str(code),
                kind=exception_kind(error),
                traceback=formatted,
            )
        return cls(
            message=str(error),
            kind=exception_kind(error),
            traceback=formatted,
        )

    def render(self) -> str:
        """Return a one-line summary of the failure."""
        return f"{self.kind}: {self.message}" if self.message else self.kind


@dataclasses.dataclass(frozen=True, slots=True)
class CapturedOutput:
    """Everything one invocation wrote, plus how it terminated."""

    stdout: str
    stderr: str
    failure: Failure | None = None
    exit_code: int = 0

    @property
    def succeeded(self) -> bool:
        """Return True when the entry point returned with status zero."""
        return self.failure is None and self.exit_code == 0

    def raise_for_failure(self) -> CapturedOutput:
        """Raise `EntryPointFailedError` unless the invocation succeeded."""
        if not self.succeeded:
            raise EntryPointFailedError(self)
        return self

    def render(self) -> str:
        """Summarise the outcome for terminal display."""
        if self.failure is not None:
            return f"failed with status {self.exit_code}: {self.failure.render()}"
        return f"exited with status {self.exit_code}"
