"""Typed command results exchanged between commands and the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from .cancel import CancelScope
from .errors import AppError
from .values import ValueSet


class CommandStatus(str, Enum):
    """Outcome of one command invocation."""

    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"
    PENDING = "pending"


class Severity(str, Enum):
    """Severity of a user-facing message, ordered info < warning < error."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class CommandError(AppError):
    """Failure with user-facing metadata.

    Commands may either attach one to a :class:`CommandResult` or raise it;
    a raised ``CommandError`` becomes a ``failed`` result.
    """

    def __init__(
        self,
        message: str = "",
        *,
        cause: BaseException | None = None,
        severity: Severity = Severity.ERROR,
        hints: Iterable[str] = (),
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.severity = severity
        self.hints = tuple(hints)
        self.recoverable = recoverable

    def display_message(self) -> str:
        """Return the message, falling back to the wrapped cause's text."""
        if self.message:
            return self.message
        if self.cause is not None:
            return str(self.cause) or type(self.cause).__name__
        return "command failed"


@dataclass(frozen=True, slots=True)
class OutputMessage:
    """A message queued by a command for rendering after it returns."""

    level: Severity
    content: str
    format: str = "text"

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", Severity(self.level))


@dataclass(slots=True)
class CommandResult:
    """Outcome of one execution; ``status`` of ``None`` is normalized by the engine."""

    status: CommandStatus | None = None
    error: CommandError | None = None
    payload: Any = None
    messages: list[OutputMessage] = field(default_factory=list)
    next_context: str = ""
    pipeline: Any = None

    @classmethod
    def ok(cls, payload: Any = None, *, message: str | None = None) -> "CommandResult":
        messages = [OutputMessage(Severity.INFO, message)] if message else []
        return cls(status=CommandStatus.SUCCESS, payload=payload, messages=messages)

    @classmethod
    def failed(
        cls,
        message: str,
        *,
        cause: BaseException | None = None,
        hints: Iterable[str] = (),
    ) -> "CommandResult":
        return cls(
            status=CommandStatus.FAILED,
            error=CommandError(message, cause=cause, hints=hints),
        )

    def normalized_status(self) -> CommandStatus:
        """Explicit status wins; otherwise an attached error means ``failed``."""
        if self.status is not None:
            return self.status
        return CommandStatus.FAILED if self.error is not None else CommandStatus.SUCCESS


@dataclass(frozen=True, slots=True)
class CommandInput:
    """Parsed invocation data handed to a command."""

    scope: CancelScope
    raw: tuple[str, ...]
    args: ValueSet
    flags: ValueSet
    pipeline: Any = None
