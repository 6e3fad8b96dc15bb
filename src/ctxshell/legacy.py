"""Adapter for commands written against the older name/help/exec interface."""

from __future__ import annotations

import contextlib
import io
from typing import Protocol, Sequence

from .commands import Command
from .results import CommandInput, CommandResult, CommandStatus
from .runtime import CommandRuntime
from .specs import ROOT_CONTEXT, ArgSpec, CommandSpec


class LegacyCommand(Protocol):
    def name(self) -> str:
        ...

    def help(self) -> str:
        ...

    def exec(self, args: Sequence[str]) -> None:
        ...


class LegacyAdapter:
    """Command and factory wrapping a :class:`LegacyCommand`.

    Legacy commands take raw tokens and print directly; their stdout is
    captured and forwarded to the invocation's output channel.
    """

    def __init__(self, legacy: LegacyCommand, context: str = ROOT_CONTEXT) -> None:
        self.legacy = legacy
        self.context = context

    def spec(self) -> CommandSpec:
        return CommandSpec(
            name=self.legacy.name(),
            summary=self.legacy.help(),
            context=self.context,
            args=(ArgSpec("args", repeatable=True, description="Raw arguments"),),
        )

    def create(self, runtime: CommandRuntime) -> Command:
        return self

    def execute(self, runtime: CommandRuntime, command_input: CommandInput) -> CommandResult:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            self.legacy.exec(list(command_input.raw))
        for line in buffer.getvalue().splitlines():
            runtime.output.info(line)
        return CommandResult(status=CommandStatus.SUCCESS)
