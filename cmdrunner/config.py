"""Runner configuration loaded from YAML and the environment."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path

from cyclopts import config as cyclopts_config
from ruamel.yaml import YAML

from .errors import ConfigError

CONFIG_FILENAME = "config.yaml"
RUNNER_SECTION = "runner"
ENV_RERAISE = "CMDRUNNER_RERAISE"
ENV_FAILURE_TO_STDERR = "CMDRUNNER_FAILURE_TO_STDERR"
ENV_CAPTURE_TRACEBACK = "CMDRUNNER_CAPTURE_TRACEBACK"
ENV_LOCK_TIMEOUT = "CMDRUNNER_LOCK_TIMEOUT"
ENV_MANIFEST = "CMDRUNNER_MANIFEST"
TRUE_VALUES = frozenset({"1", "true", "yes", "on"})

ERROR_LOCK_TIMEOUT = "lock_timeout must be a non-negative number, got {value!r}."

_yaml = YAML(typ="safe")
_yaml.default_flow_style = False


class _YamlConfig(cyclopts_config.ConfigFromFile):
    """Cyclopts config provider backed by ruamel.yaml."""

    def _load_config(self, path: Path) -> dict[str, typ.Any]:
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as handle:
            contents = _yaml.load(handle) or {}
        return dict(contents) if isinstance(contents, dict) else {}


@dataclasses.dataclass(frozen=True, slots=True)
class RunnerOptions:
    """Behaviour switches for `CommandLineRunner`."""

    reraise: bool = False
    failure_to_stderr: bool = False
    lock_timeout: float = 0.0
    capture_traceback: bool = True
    manifest: Path | None = None

    def __post_init__(self) -> None:
        """Reject negative lock timeouts."""
        if self.lock_timeout < 0:
            raise ConfigError(ERROR_LOCK_TIMEOUT.format(value=self.lock_timeout))


def default_config_path() -> Path:
    """Return the path to the cmdrunner configuration file."""
    root = os.environ.get("XDG_CONFIG_HOME")
    base = Path(root).expanduser() if root else Path.home() / ".config"
    return base / "cmdrunner" / CONFIG_FILENAME


def load_options(config_path: Path | None = None) -> RunnerOptions:
    """Build runner options from the config file, then environment overrides."""
    section = _load_section(config_path)
    reraise = _flag(ENV_RERAISE, section.get("reraise", False))
    failure_to_stderr = _flag(
        ENV_FAILURE_TO_STDERR,
        section.get("failure_to_stderr", False),
    )
    capture_traceback = _flag(
        ENV_CAPTURE_TRACEBACK,
        section.get("capture_traceback", True),
    )
    lock_timeout = _parse_timeout(
        os.getenv(ENV_LOCK_TIMEOUT, section.get("lock_timeout", 0.0))
    )
    manifest_value = os.getenv(ENV_MANIFEST) or section.get("manifest")
    manifest = Path(str(manifest_value)).expanduser() if manifest_value else None
    return RunnerOptions(
        reraise=reraise,
        failure_to_stderr=failure_to_stderr,
        lock_timeout=lock_timeout,
        capture_traceback=capture_traceback,
        manifest=manifest,
    )


def _load_section(config_path: Path | None) -> dict[str, typ.Any]:
    path = config_path or default_config_path()
    provider = _YamlConfig(path=str(path), must_exist=False)
    raw = provider.config or {}
    section = raw.get(RUNNER_SECTION, {}) if isinstance(raw, dict) else {}
    return dict(section) if isinstance(section, dict) else {}


def _flag(name: str, default: object) -> bool:
    value = os.getenv(name)
    if value is None:
        if isinstance(default, str):
            return default.strip().lower() in TRUE_VALUES
        return bool(default)
    return value.strip().lower() in TRUE_VALUES


def _parse_timeout(value: object) -> float:
    try:
        timeout = float(typ.cast("str | float", value))
    except (TypeError, ValueError) as error:
        raise ConfigError(ERROR_LOCK_TIMEOUT.format(value=value)) from error
    if timeout < 0:
        raise ConfigError(ERROR_LOCK_TIMEOUT.format(value=value))
    return timeout
