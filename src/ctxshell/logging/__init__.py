"""Structured logging primitives for ctxshell."""

from .events import (
    log_event,
    setup_logging,
    summarize_command_args,
    summarize_text,
)
from .formatter import DEFAULT_EVENT_KEY_ORDER, EVENT_KEY_ORDER, StructuredTextFormatter

__all__ = [
    "DEFAULT_EVENT_KEY_ORDER",
    "EVENT_KEY_ORDER",
    "StructuredTextFormatter",
    "log_event",
    "setup_logging",
    "summarize_command_args",
    "summarize_text",
]
