"""Shared pytest fixtures for cmdrunner tests."""

from __future__ import annotations

import typing as typ

import pytest

from cmdrunner import CommandLineRunner, EntryPointRegistry
from cmdrunner.config import (
    ENV_CAPTURE_TRACEBACK,
    ENV_FAILURE_TO_STDERR,
    ENV_LOCK_TIMEOUT,
    ENV_MANIFEST,
    ENV_RERAISE,
)
from tests.helpers import samples

if typ.TYPE_CHECKING:
    from pathlib import Path

pytest_plugins = ["cmdrunner.pytest_plugin"]

SAMPLE_COMMANDS = {
    "echo": samples.echo,
    "fail": samples.fail,
    "partial": samples.partial,
    "exit": samples.exit_with,
    "status": samples.status,
    "args": samples.show_args,
    "stdin": samples.read_stdin,
    "chatty": samples.chatty,
    "raw": samples.raw_bytes,
    "listInfoTypes": samples.list_info_types,
    "deidMask": samples.deid_mask,
}


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point cmdrunner at an empty config home and clear its variables."""
    config_home = tmp_path / "xdg-config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    for variable in (
        ENV_RERAISE,
        ENV_FAILURE_TO_STDERR,
        ENV_CAPTURE_TRACEBACK,
        ENV_LOCK_TIMEOUT,
        ENV_MANIFEST,
    ):
        monkeypatch.delenv(variable, raising=False)
    return config_home


@pytest.fixture
def sample_registry() -> EntryPointRegistry:
    """Provide a registry populated with the sample programs."""
    return EntryPointRegistry.from_mapping(SAMPLE_COMMANDS)


@pytest.fixture
def runner(sample_registry: EntryPointRegistry) -> CommandLineRunner:
    """Provide a runner over the sample programs."""
    return CommandLineRunner(sample_registry)
