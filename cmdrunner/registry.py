"""Bindings between command names and the entry points they invoke."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import typing as typ

from .errors import DuplicateBindingError, InvalidBindingError, UnknownCommandError

EntryPoint = typ.Callable[[cabc.Sequence[str]], object]

ERROR_EMPTY_NAME = "Command names must be non-empty strings."
ERROR_NOT_CALLABLE = "Entry point for {name!r} is not callable: {value!r}"


@dataclasses.dataclass(frozen=True, slots=True)
class EntryPointBinding:
    """A command name bound to the callable that implements it."""

    name: str
    invoke: EntryPoint
    alias: str | None = None

    @property
    def display_name(self) -> str:
        """Return the alias when present, otherwise the command name."""
        return self.alias or self.name


class EntryPointRegistry:
    """Fixed mapping of command names to entry points.

    Bindings are added while the registry is being built and never replaced:
    registering a name twice raises `DuplicateBindingError` rather than
    overwriting the earlier binding.
    """

    def __init__(self, bindings: cabc.Iterable[EntryPointBinding] = ()) -> None:
        """Create a registry seeded with the provided bindings."""
        self._bindings: dict[str, EntryPointBinding] = {}
        for binding in bindings:
            self._add(binding)

    @classmethod
    def from_mapping(
        cls,
        entry_points: cabc.Mapping[str, EntryPoint],
    ) -> EntryPointRegistry:
        """Build a registry from a name to callable mapping."""
        registry = cls()
        for name, invoke in entry_points.items():
            registry.register(name, invoke)
        return registry

    def register(
        self,
        name: str,
        invoke: EntryPoint,
        *,
        alias: str | None = None,
    ) -> EntryPointBinding:
        """Bind `name` to `invoke` and return the new binding."""
        binding = EntryPointBinding(name=name, invoke=invoke, alias=alias)
        self._add(binding)
        return binding

    def resolve(self, name: str) -> EntryPoint:
        """Return the entry point bound to `name`."""
        return self.binding(name).invoke

    def binding(self, name: str) -> EntryPointBinding:
        """Return the full binding for `name`."""
        try:
            return self._bindings[name]
        except KeyError:
            raise UnknownCommandError(name) from None

    def names(self) -> list[str]:
        """Return the registered command names in sorted order."""
        return sorted(self._bindings)

    def __contains__(self, name: object) -> bool:
        """Return True when `name` has a binding."""
        return name in self._bindings

    def __len__(self) -> int:
        """Return the number of bindings."""
        return len(self._bindings)

    def __iter__(self) -> cabc.Iterator[EntryPointBinding]:
        """Iterate over bindings sorted by name."""
        return iter([self._bindings[name] for name in self.names()])

    def _add(self, binding: EntryPointBinding) -> None:
        if not isinstance(binding.name, str) or not binding.name:
            raise InvalidBindingError(ERROR_EMPTY_NAME)
        if not callable(binding.invoke):
            raise InvalidBindingError(
                ERROR_NOT_CALLABLE.format(name=binding.name, value=binding.invoke)
            )
        if binding.name in self._bindings:
            raise DuplicateBindingError(binding.name)
        self._bindings[binding.name] = binding
