"""Command line entry points for the cmdrunner harness."""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

from cyclopts import App

from .adapters import import_entry_point
from .config import load_options
from .errors import CmdRunnerError, ManifestError
from .manifest import load_registry
from .registry import EntryPointRegistry
from .runner import CommandLineRunner

app = App(name="cmdrunner")

DEFAULT_MANIFEST = Path("cmdrunner.yaml")
ERROR_NO_MANIFEST = (
    "No manifest found. Pass --manifest, set CMDRUNNER_MANIFEST, or create "
    f"{DEFAULT_MANIFEST} in the working directory."
)
ERROR_EMPTY_MANIFEST = "Manifest {path} does not declare any commands."


def _resolve_manifest(explicit: Path | None, configured: Path | None) -> Path:
    if explicit is not None:
        return explicit
    if configured is not None:
        return configured
    if DEFAULT_MANIFEST.exists():
        return DEFAULT_MANIFEST
    raise ManifestError(ERROR_NO_MANIFEST)


def _replay(stream: typ.TextIO, content: str) -> None:
    if content:
        stream.write(content)
        stream.flush()


@app.command()
def run(
    target: str,
    *arguments: str,
    manifest: Path | None = None,
    stdin: str | None = None,
) -> int:
    """Run a command in-process and replay what it printed.

    TARGET is either a command name from the manifest or an import string
    such as `package.module:main`. Separate entry point flags with `--`.
    """
    options = load_options()
    if ":" in target:
        registry = EntryPointRegistry()
        registry.register(target, import_entry_point(target))
    else:
        registry = load_registry(_resolve_manifest(manifest, options.manifest))
    runner = CommandLineRunner(registry, default_command=target, options=options)
    output = runner.run(*arguments, stdin=stdin)
    _replay(sys.stdout, output.stdout)
    _replay(sys.stderr, output.stderr)
    if output.failure is not None:
        print(f"cmdrunner: {target} {output.render()}", file=sys.stderr)
    return output.exit_code


@app.command(name="ls")
def list_commands(*, manifest: Path | None = None) -> None:
    """List the commands declared in a manifest."""
    options = load_options()
    path = _resolve_manifest(manifest, options.manifest)
    registry = load_registry(path)
    if not len(registry):
        raise ManifestError(ERROR_EMPTY_MANIFEST.format(path=path))
    for binding in registry:
        print(f"{binding.name}\t{binding.display_name}")


def main(argv: list[str] | tuple[str, ...] | None = None) -> int:
    """Entry point for the cmdrunner CLI."""
    try:
        result = app(argv)
    except CmdRunnerError as error:
        print(f"cmdrunner: {error}", file=sys.stderr)
        return 1
    return int(result or 0)


if __name__ == "__main__":
    raise SystemExit(main())
