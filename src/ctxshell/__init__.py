"""ctxshell - framework for context-aware interactive command shells."""

from .cancel import CancelScope
from .commands import Command, CommandFactory, HandlerFactory, command
from .config import ShellConfig, load_config
from .contexts import ContextManager, ExecutionContext
from .engine import Engine, LineReader
from .errors import (
    AppError,
    ConfigError,
    ExtensionError,
    MissingValueError,
    NavigationError,
    OperationCancelled,
    ParseError,
    RegistrationError,
    ResolutionError,
    SpecError,
    UsageError,
)
from .legacy import LegacyAdapter, LegacyCommand
from .middleware import Middleware, compose, recovery_middleware, timing_middleware
from .output import OutputChannel, OutputLevel
from .parser import ArgsParser, ParsedArgs, parse_args
from .registry import CommandEntry, CommandRegistry, RegistryWriter
from .results import (
    CommandError,
    CommandInput,
    CommandResult,
    CommandStatus,
    OutputMessage,
    Severity,
)
from .runtime import CommandRuntime
from .specs import ArgKind, ArgSpec, CommandSpec, ContextSpec, Example, FlagSpec
from .tasks import TaskHandle, TaskManager, TaskStatus
from .values import Value, ValueKind, ValueSet

__version__ = "0.1.0"

__all__ = [
    "AppError",
    "ArgKind",
    "ArgSpec",
    "ArgsParser",
    "CancelScope",
    "Command",
    "CommandEntry",
    "CommandError",
    "CommandFactory",
    "CommandInput",
    "CommandRegistry",
    "CommandResult",
    "CommandRuntime",
    "CommandSpec",
    "CommandStatus",
    "ConfigError",
    "ContextManager",
    "ContextSpec",
    "Engine",
    "Example",
    "ExecutionContext",
    "ExtensionError",
    "FlagSpec",
    "HandlerFactory",
    "LegacyAdapter",
    "LegacyCommand",
    "LineReader",
    "Middleware",
    "MissingValueError",
    "NavigationError",
    "OperationCancelled",
    "OutputChannel",
    "OutputLevel",
    "OutputMessage",
    "ParseError",
    "ParsedArgs",
    "RegistrationError",
    "RegistryWriter",
    "ResolutionError",
    "Severity",
    "ShellConfig",
    "SpecError",
    "TaskHandle",
    "TaskManager",
    "TaskStatus",
    "UsageError",
    "Value",
    "ValueKind",
    "ValueSet",
    "command",
    "compose",
    "load_config",
    "parse_args",
    "recovery_middleware",
    "timing_middleware",
]
