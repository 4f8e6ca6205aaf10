"""Build entry point registries from YAML manifests.

A manifest maps command names to import targets::

    schema_version: 1
    commands:
      listInfoTypes: dlp_samples.cli:main
      deidMask:
        target: dlp_samples.cli:main
        alias: De-identify with masking
        argv: true
        prog: dlp

The short form binds a callable that accepts the argument list. Setting
`argv: true` wraps a zero-argument `main` that reads `sys.argv` instead.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .adapters import import_entry_point, sys_argv_entry_point
from .errors import InvalidBindingError, ManifestError
from .registry import EntryPointRegistry

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .registry import EntryPoint

MANIFEST_SCHEMA_VERSION = 1
COMMANDS_KEY = "commands"

_yaml = YAML(typ="safe")
_yaml.version = (1, 2)
_yaml.default_flow_style = False


@dataclasses.dataclass(frozen=True, slots=True)
class ManifestEntry:
    """One command declared in a manifest."""

    name: str
    target: str
    alias: str | None = None
    argv: bool = False
    prog: str | None = None

    @classmethod
    def parse(cls, name: object, payload: object, path: Path) -> ManifestEntry:
        """Validate a raw manifest entry."""
        if not isinstance(name, str) or not name:
            raise ManifestError(f"Invalid command name {name!r} in {path}")
        if isinstance(payload, str):
            return cls(name=name, target=payload.strip())
        if not isinstance(payload, dict):
            raise ManifestError(f"Command {name!r} in {path} must be a string or mapping")
        target = str(payload.get("target", "")).strip()
        if not target:
            raise ManifestError(f"Command {name!r} in {path} is missing a target")
        alias = payload.get("alias")
        prog = payload.get("prog")
        return cls(
            name=name,
            target=target,
            alias=str(alias) if alias is not None else None,
            argv=bool(payload.get("argv", False)),
            prog=str(prog) if prog is not None else None,
        )

    def load(self) -> EntryPoint:
        """Import the target and wrap it as an entry point."""
        invoke = import_entry_point(self.target)
        if self.argv:
            return sys_argv_entry_point(
                typ.cast("typ.Callable[[], object]", invoke),
                self.prog or self.name,
            )
        return invoke


def read_manifest(path: Path) -> list[ManifestEntry]:
    """Parse the manifest at `path` without importing any targets."""
    if not path.exists():
        raise ManifestError(f"Manifest {path} does not exist")
    try:
        loaded = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as error:
        raise ManifestError(f"Invalid YAML in manifest {path}: {error}") from error
    if not isinstance(loaded, dict):
        raise ManifestError(f"Invalid manifest at {path}")
    raw_version = loaded.get("schema_version", MANIFEST_SCHEMA_VERSION)
    try:
        schema_version = int(raw_version)
    except (TypeError, ValueError) as error:
        raise ManifestError(
            f"Invalid manifest schema_version={raw_version!r} at {path}"
        ) from error
    if schema_version > MANIFEST_SCHEMA_VERSION:
        raise ManifestError(
            f"Unsupported manifest schema_version={schema_version} at {path}; "
            f"maximum supported schema_version is {MANIFEST_SCHEMA_VERSION}"
        )
    commands = loaded.get(COMMANDS_KEY, {})
    if not isinstance(commands, dict):
        raise ManifestError(f"'{COMMANDS_KEY}' in {path} must be a mapping")
    return [
        ManifestEntry.parse(name, payload, path) for name, payload in commands.items()
    ]


def load_registry(path: Path) -> EntryPointRegistry:
    """Import every command in the manifest and return a registry."""
    registry = EntryPointRegistry()
    for entry in read_manifest(path):
        try:
            invoke = entry.load()
        except InvalidBindingError as error:
            raise ManifestError(f"Command {entry.name!r} in {path}: {error}") from error
        registry.register(entry.name, invoke, alias=entry.alias)
    return registry
