"""Leveled console output for commands and the engine."""

from __future__ import annotations

import io
import json
import sys
from enum import IntEnum
from typing import Any, Iterable, Sequence, TextIO

from .results import OutputMessage, Severity


class OutputLevel(IntEnum):
    """Output verbosity, from least to most chatty."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3

    @classmethod
    def from_name(cls, name: str) -> "OutputLevel":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown output level: {name}") from None


class OutputChannel:
    """Write leveled text, JSON and tables to a stream, keeping a copy in a buffer."""

    def __init__(self, stream: TextIO | None = None, level: OutputLevel = OutputLevel.NORMAL) -> None:
        self._stream = stream
        self.level = level
        self._buffer = io.StringIO()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, text: str) -> None:
        self.stream.write(text + "\n")
        self._buffer.write(text + "\n")

    def info(self, message: str) -> None:
        if self.level >= OutputLevel.NORMAL:
            self._emit(message)

    def warn(self, message: str) -> None:
        if self.level >= OutputLevel.NORMAL:
            self._emit(f"WARNING: {message}")

    def error(self, message: str) -> None:
        self._emit(f"ERROR: {message}")

    def verbose(self, message: str) -> None:
        if self.level >= OutputLevel.VERBOSE:
            self._emit(message)

    def debug(self, message: str) -> None:
        if self.level >= OutputLevel.DEBUG:
            self._emit(f"DEBUG: {message}")

    def write_json(self, value: Any) -> None:
        if self.level < OutputLevel.NORMAL:
            return
        try:
            text = json.dumps(value, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self.error(f"failed to encode json: {e}")
            return
        self._emit(text)

    def write_table(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
        if self.level < OutputLevel.NORMAL or not headers:
            return
        for line in format_table(headers, rows):
            self._emit(line)

    def getvalue(self) -> str:
        """Return everything written through this channel."""
        return self._buffer.getvalue()

    def reset_buffer(self) -> None:
        self._buffer = io.StringIO()


def format_table(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> list[str]:
    """Render a borderless table: a ``|``-separated header plus indented rows."""
    header_cells = [str(h).strip() for h in headers]
    body = [[str(cell) for cell in row] for row in rows]
    widths = [len(h) for h in header_cells]
    for row in body:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(cell))

    header = "|" + "|".join(f" {header_cells[i].ljust(w)} " for i, w in enumerate(widths)) + "|"
    lines = [header]
    for row in body:
        cells = [(row[i] if i < len(row) else "").ljust(w) for i, w in enumerate(widths)]
        lines.append(("  " + "   ".join(cells)).rstrip())
    return lines


def aggregate_messages(output: OutputChannel, messages: Iterable[OutputMessage]) -> None:
    """Render queued messages, stably ordered info < warning < error."""
    for message in sorted(messages, key=lambda m: m.level.rank):
        if message.level is Severity.INFO:
            output.info(message.content)
        elif message.level is Severity.WARNING:
            output.warn(message.content)
        else:
            output.error(message.content)
