"""Adapters that turn common CLI shapes into entry points."""

from __future__ import annotations

import collections.abc as cabc
import functools
import importlib
import sys
import typing as typ

from .errors import InvalidBindingError

if typ.TYPE_CHECKING:
    from cyclopts import App

    from .registry import EntryPoint

ERROR_TARGET_FORMAT = "Entry point target {target!r} must look like 'package.module:attr'."
ERROR_TARGET_IMPORT = "Cannot import {module!r} for entry point {target!r}: {detail}"
ERROR_TARGET_ATTRIBUTE = "Module {module!r} has no attribute {attr!r}."
ERROR_TARGET_CALLABLE = "Entry point target {target!r} is not callable."


def cyclopts_entry_point(app: App) -> EntryPoint:
    """Wrap a cyclopts application so parse errors raise instead of exiting."""

    def invoke(argv: cabc.Sequence[str]) -> object:
        return app(list(argv), exit_on_error=False, print_error=False)

    return invoke


def sys_argv_entry_point(
    func: typ.Callable[[], object],
    prog: str | None = None,
) -> EntryPoint:
    """Wrap a zero-argument `main` that reads its arguments from `sys.argv`.

    `sys.argv` is replaced with `[prog, *argv]` for the call and restored
    afterwards. The name of the wrapped function is used when `prog` is
    omitted.
    """
    program = prog or getattr(func, "__name__", "main")

    @functools.wraps(func)
    def invoke(argv: cabc.Sequence[str]) -> object:
        previous = sys.argv
        sys.argv = [program, *argv]
        try:
            return func()
        finally:
            sys.argv = previous

    return invoke


def import_entry_point(target: str) -> EntryPoint:
    """Import a callable from a `package.module:attr` target string."""
    module_name, separator, attr_path = target.partition(":")
    if not separator or not module_name or not attr_path:
        raise InvalidBindingError(ERROR_TARGET_FORMAT.format(target=target))
    try:
        module = importlib.import_module(module_name)
    except ImportError as error:
        raise InvalidBindingError(
            ERROR_TARGET_IMPORT.format(module=module_name, target=target, detail=error)
        ) from error
    value: object = module
    for attr in attr_path.split("."):
        try:
            value = getattr(value, attr)
        except AttributeError as error:
            raise InvalidBindingError(
                ERROR_TARGET_ATTRIBUTE.format(module=module_name, attr=attr_path)
            ) from error
    if not callable(value):
        raise InvalidBindingError(ERROR_TARGET_CALLABLE.format(target=target))
    return typ.cast("EntryPoint", value)
