"""Interceptors wrapped around command execution."""

from __future__ import annotations

import logging
import time
import traceback
from typing import Callable, Sequence

from .logging import log_event
from .registry import CommandEntry
from .results import CommandError, CommandInput, CommandResult, CommandStatus
from .runtime import CommandRuntime

NextHandler = Callable[[CommandRuntime, CommandInput], CommandResult]
Middleware = Callable[[CommandRuntime, CommandInput, CommandEntry, NextHandler], CommandResult]


def compose(middleware: Sequence[Middleware], entry: CommandEntry, core: NextHandler) -> NextHandler:
    """Fold ``middleware`` around ``core``; the first item becomes the outermost."""
    handler = core
    for mw in reversed(middleware):
        handler = _bind(mw, entry, handler)
    return handler


def _bind(mw: Middleware, entry: CommandEntry, next_handler: NextHandler) -> NextHandler:
    def call(runtime: CommandRuntime, command_input: CommandInput) -> CommandResult:
        return mw(runtime, command_input, entry, next_handler)

    return call


def recovery_middleware(
    runtime: CommandRuntime,
    command_input: CommandInput,
    entry: CommandEntry,
    next_handler: NextHandler,
) -> CommandResult:
    """Turn any exception escaping the inner chain into a ``failed`` result."""
    try:
        return next_handler(runtime, command_input)
    except Exception as e:
        log_event(
            "command_panic",
            level=logging.ERROR,
            command=entry.spec.name,
            context=entry.spec.context,
            error_type=type(e).__name__,
            error=str(e),
            traceback="".join(traceback.format_exception(type(e), e, e.__traceback__)),
        )
        return CommandResult(
            status=CommandStatus.FAILED,
            error=CommandError(f"command {entry.spec.name} failed: {e}", cause=e),
        )


def timing_middleware(
    runtime: CommandRuntime,
    command_input: CommandInput,
    entry: CommandEntry,
    next_handler: NextHandler,
) -> CommandResult:
    """Report how long the wrapped command took."""
    start = time.perf_counter()
    result = next_handler(runtime, command_input)
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    runtime.output.info(f"{entry.spec.name} finished in {elapsed_ms}ms")
    return result
