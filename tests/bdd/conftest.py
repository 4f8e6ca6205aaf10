"""Shared fixtures and steps for behaviour-driven runner tests."""

from __future__ import annotations

import re
import shlex
import typing as typ

import pytest
from pytest_bdd import given, parsers, then, when

from cmdrunner import CapturedOutput, CmdRunnerError, CommandLineRunner
from cmdrunner.streams import REDIRECT_GUARD, StreamSnapshot

if typ.TYPE_CHECKING:
    from cmdrunner import EntryPointRegistry


@pytest.fixture
def cli_invocation() -> dict[str, typ.Any]:
    """Collect the results of running commands within a scenario."""
    return {}


@given("the sample commands are registered", target_fixture="scenario_runner")
def given_sample_commands(
    sample_registry: EntryPointRegistry,
    cli_invocation: dict[str, typ.Any],
) -> CommandLineRunner:
    """Build a runner over the sample programs and record the real streams."""
    cli_invocation["snapshot"] = StreamSnapshot.take()
    return CommandLineRunner(sample_registry)


def _record(cli_invocation: dict[str, typ.Any], output: CapturedOutput) -> None:
    cli_invocation.setdefault("history", []).append(output)
    cli_invocation["result"] = output


@when(parsers.cfparse('I run "{command:w}"'))
def when_run_command(
    scenario_runner: CommandLineRunner,
    cli_invocation: dict[str, typ.Any],
    command: str,
) -> None:
    """Run a command without arguments."""
    _record(cli_invocation, scenario_runner.invoke(command))


@when(parsers.cfparse('I run "{command:w}" with arguments "{arguments}"'))
def when_run_command_with_arguments(
    scenario_runner: CommandLineRunner,
    cli_invocation: dict[str, typ.Any],
    command: str,
    arguments: str,
) -> None:
    """Run a command with shell-split arguments."""
    output = scenario_runner.invoke(command, *shlex.split(arguments))
    _record(cli_invocation, output)


@when(parsers.cfparse('I run "{command:w}" expecting a harness error'))
def when_run_expecting_error(
    scenario_runner: CommandLineRunner,
    cli_invocation: dict[str, typ.Any],
    command: str,
) -> None:
    """Run a command that the harness itself should reject."""
    with pytest.raises(CmdRunnerError) as excinfo:
        scenario_runner.invoke(command)
    cli_invocation["error"] = excinfo.value


def _result(cli_invocation: dict[str, typ.Any]) -> CapturedOutput:
    return typ.cast("CapturedOutput", cli_invocation["result"])


@then(parsers.cfparse('stdout is "{text}"'))
def then_stdout_is(cli_invocation: dict[str, typ.Any], text: str) -> None:
    """Assert the exact captured stdout."""
    assert _result(cli_invocation).stdout == text


@then(parsers.cfparse('stdout contains "{text}"'))
def then_stdout_contains(cli_invocation: dict[str, typ.Any], text: str) -> None:
    """Assert the captured stdout contains a substring."""
    assert text in _result(cli_invocation).stdout


@then(parsers.cfparse('stdout does not contain "{text}"'))
def then_stdout_lacks(cli_invocation: dict[str, typ.Any], text: str) -> None:
    """Assert the captured stdout lacks a substring."""
    assert text not in _result(cli_invocation).stdout


@then(parsers.cfparse('stdout matches "{pattern}"'))
def then_stdout_matches(cli_invocation: dict[str, typ.Any], pattern: str) -> None:
    """Assert the captured stdout matches a regular expression."""
    assert re.search(pattern, _result(cli_invocation).stdout)


@then(parsers.cfparse('stderr contains "{text}"'))
def then_stderr_contains(cli_invocation: dict[str, typ.Any], text: str) -> None:
    """Assert the captured stderr contains a substring."""
    assert text in _result(cli_invocation).stderr


@then("stderr is empty")
def then_stderr_empty(cli_invocation: dict[str, typ.Any]) -> None:
    """Assert nothing was written to stderr."""
    assert _result(cli_invocation).stderr == ""


@then("no failure is reported")
def then_no_failure(cli_invocation: dict[str, typ.Any]) -> None:
    """Assert the invocation succeeded."""
    result = _result(cli_invocation)
    assert result.failure is None
    assert result.succeeded


@then(parsers.cfparse('the failure message is "{message}"'))
def then_failure_message(cli_invocation: dict[str, typ.Any], message: str) -> None:
    """Assert the invocation failed with a specific message."""
    failure = _result(cli_invocation).failure
    assert failure is not None
    assert failure.message == message


@then(parsers.parse("the command exits with code {code:d}"))
def then_command_exit(cli_invocation: dict[str, typ.Any], code: int) -> None:
    """Assert the invocation finished with the expected status."""
    assert _result(cli_invocation).exit_code == code


@then(parsers.cfparse('the harness error is "{name:w}"'))
def then_harness_error(cli_invocation: dict[str, typ.Any], name: str) -> None:
    """Assert the harness raised the named error type."""
    assert type(cli_invocation["error"]).__name__ == name


@then("the standard streams are restored")
def then_streams_restored(cli_invocation: dict[str, typ.Any]) -> None:
    """Assert sys streams match the snapshot taken before running."""
    snapshot = typ.cast("StreamSnapshot", cli_invocation["snapshot"])
    assert snapshot.matches_current()
    assert not REDIRECT_GUARD.active
