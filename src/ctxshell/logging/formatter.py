"""Structured plaintext log formatter implementation."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

EVENT_KEY_ORDER: dict[str, list[str]] = {
    "app_start": ["ts", "level", "config_file", "log_file", "history_file", "extensions"],
    "app_stop": ["ts", "level", "reason", "uptime_ms", "error_type", "error"],
    "session_start": ["ts", "level", "prompt"],
    "session_stop": ["ts", "level", "context"],
    "command_exec": ["ts", "level", "command", "context", "status", "duration_ms", "args"],
    "command_error": ["ts", "level", "command", "context", "error_type", "error", "args"],
    "command_panic": ["ts", "level", "command", "context", "error_type", "error", "traceback"],
    "context_change": ["ts", "level", "from_context", "to_context", "depth"],
    "extension_loaded": ["ts", "level", "extension"],
    "extension_failed": ["ts", "level", "extension", "error_type", "error"],
    "task_spawned": ["ts", "level", "task_id", "task_name"],
    "task_finished": ["ts", "level", "task_id", "status", "error"],
}
DEFAULT_EVENT_KEY_ORDER = ["ts", "level"]


# Fields printed as an indented block below their key instead of on one line.
BLOCK_FIELDS = frozenset({"traceback"})


def _record_time(record: logging.LogRecord) -> str:
    stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return stamp.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _decode_payload(message: str) -> dict[str, Any] | None:
    """Return the event payload of a ``log_event`` record, or None for plain messages."""
    if not (message.startswith("{") and message.endswith("}")):
        return None
    try:
        parsed = json.loads(message)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class StructuredTextFormatter(logging.Formatter):
    """Render shell events as ``=== event ===`` blocks of ``key: value`` lines.

    Records emitted through ``log_event`` carry a JSON payload whose keys are
    ordered per event; any other record is shown under its logger name with
    the raw message. Entries after the first are preceded by a blank line.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._entries = 0

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, list):
            return ", ".join(str(item) for item in value)
        return str(value).replace("\n", "\\n")

    @staticmethod
    def _ordered_keys(event_name: str, data: dict[str, Any]) -> list[str]:
        preferred = EVENT_KEY_ORDER.get(event_name, DEFAULT_EVENT_KEY_ORDER)
        present = [key for key in preferred if data.get(key) is not None]
        rest = sorted(key for key, value in data.items() if key not in preferred and value is not None)
        return present + rest

    def _render_field(self, key: str, value: Any) -> list[str]:
        if key in BLOCK_FIELDS:
            return [f"{key}:", *(f"  {line}" for line in str(value).rstrip().splitlines())]
        return [f"{key}: {self._format_value(value)}"]

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "ts_utc": _record_time(record),
            "level": record.levelname,
            "logger": record.name,
        }
        message = record.getMessage()
        payload = _decode_payload(message)
        if payload is None:
            fields["message"] = message
        else:
            fields.update(payload)

        event_name = str(fields.pop("event", record.name))
        lines = [f"=== {event_name} ==="]
        for key in self._ordered_keys(event_name, fields):
            lines.extend(self._render_field(key, fields[key]))
        if record.exc_info:
            lines.extend(self._render_field("traceback", self.formatException(record.exc_info)))

        self._entries += 1
        body = "\n".join(lines)
        return body if self._entries == 1 else "\n" + body
