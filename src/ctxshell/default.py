"""Process-wide default engine for application wiring.

Library code should construct its own :class:`~ctxshell.engine.Engine`;
these helpers exist for small programs that want module-level registration.
"""

from __future__ import annotations

import threading
from typing import Any, TextIO

from .commands import CommandFactory
from .engine import Engine, LineReader
from .legacy import LegacyAdapter, LegacyCommand
from .middleware import Middleware
from .output import OutputLevel
from .specs import ContextSpec

_lock = threading.Lock()
_engine: Engine | None = None


def default_engine() -> Engine:
    """Return the shared engine, creating it on first use."""
    global _engine
    with _lock:
        if _engine is None:
            _engine = Engine()
        return _engine


def reset_engine(**kwargs: Any) -> Engine:
    """Replace the shared engine; keyword arguments go to :class:`Engine`."""
    global _engine
    with _lock:
        _engine = Engine(**kwargs)
        return _engine


def register_context(
    name: str,
    description: str = "",
    *,
    parent: str = "",
    prompt: str = "",
    aliases: tuple[str, ...] = (),
    tags: tuple[str, ...] = (),
    hidden: bool = False,
) -> ContextSpec:
    spec = ContextSpec(
        name=name,
        parent=parent,
        description=description,
        prompt=prompt,
        aliases=tuple(aliases),
        tags=tuple(tags),
        hidden=hidden,
    )
    default_engine().register_context(spec)
    return spec


def register_command(factory: CommandFactory) -> CommandFactory:
    """Register ``factory``; returns it so this can wrap ``@command`` definitions."""
    default_engine().register_command(factory)
    return factory


def register_legacy_command(context: str, legacy: LegacyCommand) -> None:
    default_engine().register_command(LegacyAdapter(legacy, context))


def use_middleware(*middleware: Middleware) -> None:
    default_engine().use(*middleware)


def set_prompt(prompt: str) -> None:
    default_engine().set_prompt(prompt)


def set_help_header(header: str) -> None:
    default_engine().set_help_header(header)


def set_output_level(level: OutputLevel) -> None:
    default_engine().set_output_level(level)


def set_output_stream(stream: TextIO | None) -> TextIO | None:
    return default_engine().set_output_stream(stream)


def run(reader: LineReader) -> None:
    default_engine().run(reader)
