"""Run command-line entry points in-process and capture what they print.

`CommandLineRunner` emulates launching a program from a shell: the argument
vector is handed to the entry point verbatim, the standard streams are
redirected to fresh buffers for the duration of the call, and the outcome is
normalized into an immutable `CapturedOutput`. Failures raised by the entry
point become data on that result; only harness problems propagate.
"""

from __future__ import annotations

import logging
import typing as typ

from .config import RunnerOptions
from .errors import EntryPointFailedError, ReentrancyViolationError, UnknownCommandError
from .models import (
    CapturedOutput,
    Failure,
    InvocationRequest,
    InvocationState,
)
from .registry import EntryPointRegistry
from .streams import REDIRECT_GUARD, capture_streams

if typ.TYPE_CHECKING:
    from .registry import EntryPoint, EntryPointBinding

_logger = logging.getLogger(__name__)

ERROR_ARGUMENT_TYPE = "Command arguments must be strings, got {value!r}."

_TRANSITIONS: dict[InvocationState, frozenset[InvocationState]] = {
    InvocationState.IDLE: frozenset({InvocationState.REDIRECTING}),
    InvocationState.REDIRECTING: frozenset(
        {InvocationState.INVOKING, InvocationState.RESTORING}
    ),
    InvocationState.INVOKING: frozenset({InvocationState.RESTORING}),
    InvocationState.RESTORING: frozenset({InvocationState.DONE}),
    InvocationState.DONE: frozenset(),
}


class _Invocation:
    """Per-call state machine; never reused."""

    def __init__(self, request: InvocationRequest, binding: EntryPointBinding) -> None:
        self.request = request
        self.binding = binding
        self.state = InvocationState.IDLE

    def advance(self, state: InvocationState) -> None:
        if state not in _TRANSITIONS[self.state]:
            msg = f"invalid invocation transition {self.state.value} -> {state.value}"
            raise RuntimeError(msg)
        _logger.debug(
            "%s: %s -> %s",
            self.binding.display_name,
            self.state.value,
            state.value,
        )
        self.state = state


class CommandLineRunner:
    """Invoke registered entry points as isolated, observable units."""

    def __init__(
        self,
        registry: EntryPointRegistry | None = None,
        *,
        default_command: str | None = None,
        options: RunnerOptions | None = None,
    ) -> None:
        """Create a runner over `registry`, optionally pre-bound to a command."""
        self.registry = registry if registry is not None else EntryPointRegistry()
        self.default_command = default_command
        self.options = options or RunnerOptions()
        self._last_state = InvocationState.IDLE

    @classmethod
    def for_entry_point(
        cls,
        invoke: EntryPoint,
        *,
        name: str = "main",
        alias: str | None = None,
        options: RunnerOptions | None = None,
    ) -> CommandLineRunner:
        """Return a runner bound to a single entry point."""
        registry = EntryPointRegistry()
        registry.register(name, invoke, alias=alias)
        return cls(registry, default_command=name, options=options)

    @property
    def last_state(self) -> InvocationState:
        """Return the final state reached by the most recent invocation."""
        return self._last_state

    def run(
        self,
        *arguments: str,
        command: str | None = None,
        stdin: str | None = None,
    ) -> CapturedOutput:
        """Run `command` (or the default command) with `arguments`."""
        return self.execute(
            InvocationRequest(command=command, arguments=arguments, stdin=stdin)
        )

    def invoke(
        self,
        command: str,
        *arguments: str,
        stdin: str | None = None,
    ) -> CapturedOutput:
        """Run the named command with `arguments`."""
        return self.run(*arguments, command=command, stdin=stdin)

    def execute(self, request: InvocationRequest) -> CapturedOutput:
        """Perform one invocation and return its captured output.

        Unknown commands and reentrant invocations raise before or after the
        streams are touched respectively; everything the entry point raises is
        reported through `CapturedOutput.failure` unless `options.reraise` is
        set.
        """
        for argument in request.arguments:
            if not isinstance(argument, str):
                raise TypeError(ERROR_ARGUMENT_TYPE.format(value=argument))
        binding = self._resolve(request.command)
        invocation = _Invocation(request, binding)
        _logger.info(
            "running %s: %s",
            binding.display_name,
            request.command_line or "<no arguments>",
        )
        try:
            with REDIRECT_GUARD.hold(self.options.lock_timeout):
                return self._invoke(invocation)
        finally:
            self._last_state = invocation.state

    def _resolve(self, command: str | None) -> EntryPointBinding:
        name = command if command is not None else self.default_command
        if name is None:
            raise UnknownCommandError(None)
        return self.registry.binding(name)

    def _invoke(self, invocation: _Invocation) -> CapturedOutput:
        invocation.advance(InvocationState.REDIRECTING)
        try:
            with capture_streams(stdin=invocation.request.stdin) as buffers:
                invocation.advance(InvocationState.INVOKING)
                returned, raised = _call_entry_point(invocation)
        finally:
            invocation.advance(InvocationState.RESTORING)
        stdout, stderr = buffers.drain()
        output = self._build_output(stdout, stderr, returned, raised)
        invocation.advance(InvocationState.DONE)
        if output.failure is not None:
            _logger.debug(
                "%s failed: %s",
                invocation.binding.display_name,
                output.failure.render(),
            )
        if self.options.reraise and not output.succeeded:
            raise EntryPointFailedError(output) from raised
        return output

    def _build_output(
        self,
        stdout: str,
        stderr: str,
        returned: object,
        raised: BaseException | None,
    ) -> CapturedOutput:
        if raised is None:
            return CapturedOutput(
                stdout=stdout,
                stderr=stderr,
                exit_code=_exit_status(returned),
            )
        if isinstance(raised, SystemExit) and raised.code in (None, 0):
            return CapturedOutput(stdout=stdout, stderr=stderr)
        failure = Failure.from_exception(
            raised,
            include_traceback=self.options.capture_traceback,
        )
        if self.options.failure_to_stderr:
            stderr = _append_line(stderr, failure.render())
        return CapturedOutput(
            stdout=stdout,
            stderr=stderr,
            failure=failure,
            exit_code=failure.exit_code,
        )


def _call_entry_point(
    invocation: _Invocation,
) -> tuple[object, BaseException | None]:
    """Call the entry point, returning its result or the failure it raised."""
    try:
        return invocation.binding.invoke(list(invocation.request.arguments)), None
    except ReentrancyViolationError:
        raise
    except (Exception, SystemExit) as error:
        return None, error


def _exit_status(returned: object) -> int:
    if returned is None:
        return 0
    if isinstance(returned, int):
        return int(returned)
    _logger.debug("ignoring non-integer entry point result %r", returned)
    return 0


def _append_line(text: str, line: str) -> str:
    if text and not text.endswith("\n"):
        text += "\n"
    return f"{text}{line}\n"
