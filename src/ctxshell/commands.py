"""Command contracts and the function-backed command factory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol, Union

from .results import CommandInput, CommandResult, OutputMessage, Severity
from .specs import CommandSpec

if TYPE_CHECKING:
    from .runtime import CommandRuntime


HandlerReturn = Union[CommandResult, str, None]
CommandHandlerFunc = Callable[["CommandRuntime", CommandInput], HandlerReturn]


class Command(Protocol):
    """An executable command instance, created fresh for each invocation."""

    def execute(self, runtime: "CommandRuntime", command_input: CommandInput) -> CommandResult:
        ...


class CommandFactory(Protocol):
    """Declares a command's spec and builds instances with runtime access."""

    def spec(self) -> CommandSpec:
        ...

    def create(self, runtime: "CommandRuntime") -> Command:
        ...


def to_result(value: HandlerReturn) -> CommandResult:
    """Normalize a handler's return value into a :class:`CommandResult`."""
    if isinstance(value, CommandResult):
        return value
    if isinstance(value, str):
        return CommandResult(messages=[OutputMessage(Severity.INFO, value)])
    return CommandResult()


@dataclass(frozen=True, slots=True)
class HandlerCommand:
    """Command instance that delegates to a plain function."""

    handler: CommandHandlerFunc

    def execute(self, runtime: "CommandRuntime", command_input: CommandInput) -> CommandResult:
        return to_result(self.handler(runtime, command_input))


@dataclass(frozen=True, slots=True)
class HandlerFactory:
    """Factory for a function-backed command."""

    command_spec: CommandSpec
    handler: CommandHandlerFunc

    def spec(self) -> CommandSpec:
        return self.command_spec

    def create(self, runtime: "CommandRuntime") -> Command:
        return HandlerCommand(self.handler)


def command(spec: CommandSpec) -> Callable[[CommandHandlerFunc], HandlerFactory]:
    """Decorate ``handler(runtime, command_input)`` into a registrable factory.

    The handler may return a :class:`CommandResult`, a string (shown as an
    info message) or ``None`` (plain success).
    """

    def decorate(handler: CommandHandlerFunc) -> HandlerFactory:
        return HandlerFactory(command_spec=spec, handler=handler)

    return decorate
