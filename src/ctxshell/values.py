"""Typed value containers produced by the argument parser.

Every parsed argument or flag is stored as a :class:`Value`, a small tagged
variant (``kind`` + ``payload``). :class:`ValueSet` exposes total accessors
over those variants; the coercion rules are:

=============  ==========================================================
accessor       coercion
=============  ==========================================================
``string``     ints/floats formatted, bools as ``true``/``false``,
               durations in ``1h2m3s`` form, JSON re-encoded compactly,
               lists joined with single spaces
``strings``    lists element-wise, scalars as a one-element list
``int``        floats truncated, bools as 1/0, numeric strings parsed
``float``      ints widened, numeric strings parsed, durations in seconds
``bool``       boolean literals parsed, numbers compared against zero
``duration``   duration literals parsed, numbers read as seconds
=============  ==========================================================

Anything that cannot be coerced degrades to the zero value of the accessor.
``raw`` and ``decode_json`` are the only accessors that report absence.
"""

from __future__ import annotations

import copy
import json
import math
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import MissingValueError

_INT_RE = re.compile(r"^[+-]?\d+$")
_DURATION_PART_RE = re.compile(r"(\d*)(?:\.(\d*))?(ns|us|µs|μs|ms|s|m|h)")
_NANOS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_TRUE_LITERALS = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE_LITERALS = frozenset(("0", "f", "F", "FALSE", "false", "False"))


class ValueKind(str, Enum):
    """Discriminator of a parsed value."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DURATION = "duration"
    JSON = "json"
    LIST = "list"


def parse_bool(text: str) -> bool:
    """Parse a canonical boolean literal."""
    if text in _TRUE_LITERALS:
        return True
    if text in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean literal: {text!r}")


def parse_int(text: str) -> int:
    """Parse a base-10 integer literal with optional sign."""
    if not _INT_RE.match(text):
        raise ValueError(f"invalid integer literal: {text!r}")
    return int(text)


def parse_duration(text: str) -> timedelta:
    """Parse a duration literal such as ``1500ms``, ``2h`` or ``-1h30m``.

    Sub-microsecond precision is truncated.
    """
    body = text
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration: {text!r}")

    total_ns = 0
    pos = 0
    while pos < len(body):
        match = _DURATION_PART_RE.match(body, pos)
        if not match or not (match.group(1) or match.group(2)):
            raise ValueError(f"invalid duration: {text!r}")
        whole, fraction, unit = match.groups()
        scale = _NANOS_PER_UNIT[unit]
        total_ns += int(whole or "0") * scale
        if fraction:
            total_ns += int(fraction) * scale // (10 ** len(fraction))
        pos = match.end()

    micros = total_ns // 1_000
    try:
        return timedelta(microseconds=-micros if negative else micros)
    except OverflowError as e:
        raise ValueError(f"duration out of range: {text!r}") from e


def _trim_fraction(value: int, unit: int) -> str:
    whole, remainder = divmod(value, unit)
    if not remainder:
        return str(whole)
    digits = str(remainder).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(value: timedelta) -> str:
    """Format a duration so that :func:`parse_duration` reads it back exactly."""
    micros = value // timedelta(microseconds=1)
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1_000:
        return f"{sign}{micros}us"
    if micros < 1_000_000:
        return f"{sign}{_trim_fraction(micros, 1_000)}ms"

    hours, rest = divmod(micros, 3600 * 1_000_000)
    minutes, rest = divmod(rest, 60 * 1_000_000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + f"{_trim_fraction(rest, 1_000_000)}s"


@dataclass(frozen=True, slots=True)
class Value:
    """One parsed value: a kind discriminator plus its payload.

    ``LIST`` payloads are tuples of :class:`Value`.
    """

    kind: ValueKind
    payload: Any

    @classmethod
    def of(cls, payload: Any) -> "Value":
        """Wrap a plain Python value, inferring its kind."""
        if isinstance(payload, Value):
            return payload
        if isinstance(payload, bool):
            return cls(ValueKind.BOOL, payload)
        if isinstance(payload, int):
            return cls(ValueKind.INT, payload)
        if isinstance(payload, float):
            return cls(ValueKind.FLOAT, payload)
        if isinstance(payload, timedelta):
            return cls(ValueKind.DURATION, payload)
        if isinstance(payload, str):
            return cls(ValueKind.STRING, payload)
        if isinstance(payload, (list, tuple)):
            return cls(ValueKind.LIST, tuple(cls.of(item) for item in payload))
        return cls(ValueKind.JSON, payload)

    def to_python(self) -> Any:
        """Return the payload as a plain Python value."""
        if self.kind is ValueKind.LIST:
            return [item.to_python() for item in self.payload]
        if self.kind is ValueKind.JSON:
            return copy.deepcopy(self.payload)
        return self.payload

    def as_text(self) -> str:
        """Render the value using the ``string`` accessor rules."""
        kind = self.kind
        if kind is ValueKind.STRING:
            return self.payload
        if kind is ValueKind.BOOL:
            return "true" if self.payload else "false"
        if kind in (ValueKind.INT, ValueKind.FLOAT):
            return repr(self.payload)
        if kind is ValueKind.DURATION:
            return format_duration(self.payload)
        if kind is ValueKind.JSON:
            if isinstance(self.payload, str):
                return self.payload
            return json.dumps(self.payload, separators=(",", ":"), ensure_ascii=False)
        return " ".join(item.as_text() for item in self.payload)

    def canonical_text(self) -> str:
        """Render the value as a literal the parser casts back to an equal value."""
        if self.kind is ValueKind.JSON:
            return json.dumps(self.payload, separators=(",", ":"), ensure_ascii=False)
        if self.kind is ValueKind.LIST:
            raise ValueError("list values have no single-token form")
        return self.as_text()


class ValueSet(Mapping[str, Value]):
    """Immutable name → :class:`Value` mapping with total typed accessors."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Value] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    @classmethod
    def from_python(cls, values: Mapping[str, Any]) -> "ValueSet":
        return cls({name: Value.of(value) for name, value in values.items()})

    def __getitem__(self, name: str) -> Value:
        try:
            return self._values[name]
        except KeyError:
            raise MissingValueError(f"value {name!r} not present") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ValueSet({dict(self._values)!r})"

    def raw(self, name: str) -> Value | None:
        """Return the stored variant, or ``None`` when absent."""
        return self._values.get(name)

    def to_dict(self) -> dict[str, Any]:
        return {name: value.to_python() for name, value in self._values.items()}

    def string(self, name: str) -> str:
        value = self._values.get(name)
        return "" if value is None else value.as_text()

    def strings(self, name: str) -> list[str]:
        value = self._values.get(name)
        if value is None:
            return []
        if value.kind is ValueKind.LIST:
            return [item.as_text() for item in value.payload]
        return [value.as_text()]

    def int(self, name: str) -> int:
        value = self._values.get(name)
        if value is None:
            return 0
        payload = value.payload
        if value.kind in (ValueKind.INT, ValueKind.BOOL):
            return int(payload)
        if value.kind is ValueKind.FLOAT:
            return int(payload) if math.isfinite(payload) else 0
        if value.kind is ValueKind.STRING:
            try:
                return parse_int(payload)
            except ValueError:
                return 0
        if value.kind is ValueKind.JSON and isinstance(payload, (int, float)):
            if isinstance(payload, bool) or not math.isfinite(payload):
                return 0
            return int(payload)
        return 0

    def float(self, name: str) -> float:
        value = self._values.get(name)
        if value is None:
            return 0.0
        payload = value.payload
        if value.kind in (ValueKind.FLOAT, ValueKind.INT):
            return float(payload)
        if value.kind is ValueKind.DURATION:
            return payload.total_seconds()
        if value.kind is ValueKind.STRING:
            try:
                return float(payload)
            except ValueError:
                return 0.0
        if value.kind is ValueKind.JSON and isinstance(payload, (int, float)):
            return 0.0 if isinstance(payload, bool) else float(payload)
        return 0.0

    def bool(self, name: str) -> bool:
        value = self._values.get(name)
        if value is None:
            return False
        payload = value.payload
        if value.kind is ValueKind.BOOL:
            return payload
        if value.kind is ValueKind.STRING:
            try:
                return parse_bool(payload)
            except ValueError:
                return False
        if value.kind in (ValueKind.INT, ValueKind.FLOAT):
            return payload != 0
        if value.kind is ValueKind.JSON and isinstance(payload, (bool, int, float)):
            return bool(payload)
        return False

    def duration(self, name: str) -> timedelta:
        value = self._values.get(name)
        if value is None:
            return timedelta(0)
        payload = value.payload
        if value.kind is ValueKind.DURATION:
            return payload
        if value.kind is ValueKind.STRING:
            try:
                return parse_duration(payload)
            except ValueError:
                return timedelta(0)
        if value.kind in (ValueKind.INT, ValueKind.FLOAT):
            try:
                return timedelta(seconds=payload)
            except (OverflowError, ValueError):
                return timedelta(0)
        return timedelta(0)

    def decode_json(self, name: str) -> Any:
        """Return the value as a decoded JSON document.

        Raises:
            MissingValueError: If ``name`` was never supplied.
            ValueError: If a string value is not valid JSON.
        """
        value = self[name]
        if value.kind is ValueKind.STRING:
            return json.loads(value.payload)
        if value.kind is ValueKind.DURATION:
            return format_duration(value.payload)
        return value.to_python()

    def as_flag_tokens(self) -> list[str]:
        """Reconstruct the set as ``--name=value`` tokens."""
        return [f"--{name}={value.canonical_text()}" for name, value in self._values.items()]
