"""In-process command invocation harness."""

from .adapters import cyclopts_entry_point, import_entry_point, sys_argv_entry_point
from .config import RunnerOptions, load_options
from .errors import (
    CmdRunnerError,
    ConfigError,
    DuplicateBindingError,
    EntryPointFailedError,
    InvalidBindingError,
    ManifestError,
    ReentrancyViolationError,
    UnknownCommandError,
)
from .manifest import load_registry
from .models import CapturedOutput, Failure, InvocationRequest, InvocationState
from .registry import EntryPoint, EntryPointBinding, EntryPointRegistry
from .runner import CommandLineRunner

__all__ = [
    "CapturedOutput",
    "CmdRunnerError",
    "CommandLineRunner",
    "ConfigError",
    "DuplicateBindingError",
    "EntryPoint",
    "EntryPointBinding",
    "EntryPointFailedError",
    "EntryPointRegistry",
    "Failure",
    "InvalidBindingError",
    "InvocationRequest",
    "InvocationState",
    "ManifestError",
    "ReentrancyViolationError",
    "RunnerOptions",
    "UnknownCommandError",
    "cyclopts_entry_point",
    "import_entry_point",
    "load_options",
    "load_registry",
    "sys_argv_entry_point",
]
