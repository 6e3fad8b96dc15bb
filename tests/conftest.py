"""Pytest configuration and fixtures for ctxshell tests."""

import io
import logging

import pytest

from ctxshell.commands import command
from ctxshell.engine import Engine
from ctxshell.results import CommandResult
from ctxshell.specs import ArgKind, ArgSpec, CommandSpec, ContextSpec, FlagSpec


class FakeReader:
    """Scripted line reader: returns queued lines, then raises EOFError.

    Queue an exception instance to have it raised from ``read``.
    """

    def __init__(self, lines=(), history=()):
        self.lines = list(lines)
        self.prompts = []
        self.completions = []
        self.history = list(history)

    def read(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        item = self.lines.pop(0)
        if isinstance(item, BaseException):
            raise item
        self.history.append(item)
        return item

    def set_completions(self, tree):
        self.completions.append(tree)

    def history_entries(self):
        return list(self.history)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging.disable() and handler changes made by setup_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    logging.disable(logging.NOTSET)
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.disable(logging.NOTSET)


@pytest.fixture
def stream():
    """In-memory output stream for engines under test."""
    return io.StringIO()


@pytest.fixture
def engine(stream):
    """Engine writing to an in-memory stream."""
    return Engine(stream=stream)


@pytest.fixture
def calls():
    """Record of handler invocations."""
    return []


@pytest.fixture
def servers_engine(engine, calls):
    """Engine with a ``servers`` context (alias ``srv``) holding ``list`` and ``count``."""
    engine.register_context(
        ContextSpec(name="servers", aliases=("srv",), description="Server fleet")
    )
    engine.register_context(ContextSpec(name="db", description="Databases"))

    @command(CommandSpec(name="list", aliases=("ls-servers",), summary="List servers", context="servers"))
    def list_servers(runtime, command_input):
        calls.append(("list", command_input))
        return "web-1 web-2"

    @command(
        CommandSpec(
            name="count",
            summary="Count things",
            context="servers",
            flags=(FlagSpec(name="n", kind=ArgKind.INT, shorthand="n"),),
        )
    )
    def count(runtime, command_input):
        calls.append(("count", command_input))
        return CommandResult.ok(command_input.flags.int("n"))

    @command(
        CommandSpec(
            name="deploy",
            summary="Deploy a target",
            description="Deploy a build to one target.",
            args=(ArgSpec(name="target", required=True, description="Target host"),),
            flags=(FlagSpec(name="force", kind=ArgKind.BOOL, shorthand="f"),),
        )
    )
    def deploy(runtime, command_input):
        calls.append(("deploy", command_input))
        return None

    engine.register_command(list_servers)
    engine.register_command(count)
    engine.register_command(deploy)
    return engine
