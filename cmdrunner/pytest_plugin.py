"""pytest fixtures exposing the command invocation runner.

Enable with `pytest_plugins = ["cmdrunner.pytest_plugin"]` in a conftest.
"""

from __future__ import annotations

import typing as typ

import pytest

from .registry import EntryPointRegistry
from .runner import CommandLineRunner
from .streams import REDIRECT_GUARD

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture
def command_registry() -> EntryPointRegistry:
    """Provide an empty registry for the test to populate."""
    return EntryPointRegistry()


@pytest.fixture
def command_runner(
    command_registry: EntryPointRegistry,
) -> cabc.Iterator[CommandLineRunner]:
    """Provide a runner over `command_registry` with default options."""
    runner = CommandLineRunner(command_registry)
    yield runner
    assert not REDIRECT_GUARD.active, "standard streams still redirected after test"
