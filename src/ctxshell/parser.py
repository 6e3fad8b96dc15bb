"""Argument and flag parsing against declared command specs."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

from .errors import ParseError
from .specs import ArgKind, ArgSpec, CommandSpec, FlagSpec
from .values import (
    Value,
    ValueKind,
    ValueSet,
    parse_bool,
    parse_duration,
    parse_int,
)


@dataclass(frozen=True, slots=True)
class ParsedArgs:
    """Positional and flag values of one invocation."""

    args: ValueSet
    flags: ValueSet


def cast_value(kind: ArgKind, raw: str, enum_values: Sequence[str] = ()) -> Value:
    """Cast raw token text to a typed value of the given kind."""
    try:
        if kind is ArgKind.INT:
            return Value(ValueKind.INT, parse_int(raw))
        if kind is ArgKind.FLOAT:
            return Value(ValueKind.FLOAT, float(raw))
        if kind is ArgKind.BOOL:
            return Value(ValueKind.BOOL, parse_bool(raw))
        if kind is ArgKind.DURATION:
            return Value(ValueKind.DURATION, parse_duration(raw))
    except ValueError as e:
        raise ParseError(f"invalid {kind.value} value {raw!r}") from e

    if kind is ArgKind.ENUM:
        if enum_values and raw not in enum_values:
            raise ParseError(
                f"value {raw!r} not in enum (expected one of: {', '.join(enum_values)})"
            )
        return Value(ValueKind.STRING, raw)

    if kind is ArgKind.JSON:
        try:
            return Value(ValueKind.JSON, json.loads(raw))
        except ValueError as e:
            raise ParseError(f"invalid json for value {raw!r}") from e

    return Value(ValueKind.STRING, raw)


def _default_value(kind: ArgKind, default: Any, enum_values: Sequence[str]) -> Value:
    """Wrap a declared default, casting textual defaults of non-string kinds."""
    if isinstance(default, str) and kind not in (ArgKind.STRING, ArgKind.ENUM):
        return cast_value(kind, default, enum_values)
    if kind is ArgKind.JSON:
        return Value(ValueKind.JSON, default)
    return Value.of(default)


class ArgsParser:
    """Stateless single-pass parser: tokens + spec → :class:`ParsedArgs`."""

    def parse(self, tokens: Sequence[str], spec: CommandSpec) -> ParsedArgs:
        spec.validate()

        args: dict[str, Value] = {}
        repeated: dict[str, list[Value]] = {}
        flags: dict[str, Value] = {}

        positional = spec.args
        trailing = positional[-1] if positional and positional[-1].repeatable else None
        slot = 0

        i = 0
        while i < len(tokens):
            token = tokens[i]

            if token.startswith("--"):
                body = token[2:]
                name, has_inline, inline = body.partition("=")
                flag = spec.flag(name)
                if flag is None:
                    raise ParseError(f"unknown flag: --{name}")
                i = self._consume_flag(flag, tokens, i, inline if has_inline else None, flags)
                continue

            if token.startswith("-") and token != "-":
                body = token[1:]
                shorthand, has_inline, inline = body.partition("=")
                flag = spec.flag_for_shorthand(shorthand)
                if flag is None:
                    raise ParseError(f"unknown flag: -{shorthand}")
                i = self._consume_flag(flag, tokens, i, inline if has_inline else None, flags)
                continue

            if slot < len(positional):
                arg = positional[slot]
                value = cast_value(arg.kind, token, arg.enum_values)
                if arg.repeatable:
                    repeated.setdefault(arg.name, []).append(value)
                else:
                    args[arg.name] = value
                    slot += 1
            elif trailing is not None:
                value = cast_value(trailing.kind, token, trailing.enum_values)
                repeated.setdefault(trailing.name, []).append(value)
            else:
                raise ParseError(f"unexpected argument: {token}")
            i += 1

        for name, items in repeated.items():
            args[name] = Value(ValueKind.LIST, tuple(items))

        self._apply_arg_defaults(args, positional)
        self._apply_flag_defaults(flags, spec.flags)
        return ParsedArgs(args=ValueSet(args), flags=ValueSet(flags))

    @staticmethod
    def _consume_flag(
        flag: FlagSpec,
        tokens: Sequence[str],
        pos: int,
        inline: str | None,
        flags: dict[str, Value],
    ) -> int:
        """Store one flag value and return the index of the next unread token."""
        if inline is not None:
            flags[flag.name] = cast_value(flag.kind, inline, flag.enum_values)
            return pos + 1

        if flag.kind is ArgKind.BOOL:
            flags[flag.name] = Value(ValueKind.BOOL, True)
            return pos + 1

        if pos + 1 >= len(tokens):
            raise ParseError(f"flag --{flag.name} requires a value")

        flags[flag.name] = cast_value(flag.kind, tokens[pos + 1], flag.enum_values)
        return pos + 2

    @staticmethod
    def _apply_arg_defaults(values: dict[str, Value], specs: Sequence[ArgSpec]) -> None:
        for arg in specs:
            if arg.name in values:
                continue
            if arg.required and arg.default is None and not arg.repeatable:
                raise ParseError(f"missing required argument: {arg.name}")
            if arg.default is not None:
                values[arg.name] = _default_value(arg.kind, arg.default, arg.enum_values)

    @staticmethod
    def _apply_flag_defaults(values: dict[str, Value], specs: Sequence[FlagSpec]) -> None:
        for flag in specs:
            if flag.hidden or flag.name in values:
                continue
            if flag.required and flag.default is None and flag.kind is not ArgKind.BOOL:
                raise ParseError(f"missing required flag: --{flag.name}")
            if flag.default is not None:
                values[flag.name] = _default_value(flag.kind, flag.default, flag.enum_values)
            elif flag.kind is ArgKind.BOOL:
                values[flag.name] = Value(ValueKind.BOOL, False)


_DEFAULT_PARSER = ArgsParser()


def parse_args(tokens: Sequence[str], spec: CommandSpec) -> ParsedArgs:
    """Parse ``tokens`` against ``spec`` with a shared stateless parser."""
    return _DEFAULT_PARSER.parse(tokens, spec)
