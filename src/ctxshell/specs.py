"""Declarative metadata records for contexts, commands, arguments and flags."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any

from .errors import SpecError

ROOT_CONTEXT = ""
ROOT_PROMPT = "> "


class ArgKind(str, Enum):
    """Supported argument and flag value kinds."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DURATION = "duration"
    ENUM = "enum"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class ArgSpec:
    """Positional argument metadata."""

    name: str
    kind: ArgKind = ArgKind.STRING
    required: bool = False
    repeatable: bool = False
    description: str = ""
    default: Any = None
    enum_values: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class FlagSpec:
    """Flag metadata; ``shorthand`` is a single character used as ``-x``."""

    name: str
    kind: ArgKind = ArgKind.STRING
    shorthand: str = ""
    required: bool = False
    description: str = ""
    default: Any = None
    enum_values: tuple[str, ...] = ()
    hidden: bool = False


@dataclass(frozen=True, slots=True)
class Example:
    """One documented example invocation."""

    description: str
    command: str


@dataclass(frozen=True, slots=True)
class ContextSpec:
    """Identity record of a navigable context. The root context has name ``""``."""

    name: str
    parent: str = ""
    description: str = ""
    prompt: str = ""
    aliases: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    hidden: bool = False


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Command metadata used for resolution, parsing and help."""

    name: str
    aliases: tuple[str, ...] = ()
    summary: str = ""
    description: str = ""
    examples: tuple[Example, ...] = ()
    args: tuple[ArgSpec, ...] = ()
    flags: tuple[FlagSpec, ...] = ()
    permissions: tuple[str, ...] = ()
    hidden: bool = False
    tags: tuple[str, ...] = ()
    category: str = ""
    context: str = ROOT_CONTEXT
    usage: str = ""
    allows_pipeline: bool = False
    default_alias: str = ""
    timeout: timedelta | None = None

    def validate(self) -> None:
        """Reject argument layouts the parser cannot consume unambiguously."""
        for arg in self.args[:-1]:
            if arg.repeatable:
                raise SpecError(
                    f"invalid spec for {self.name}: only the last positional argument "
                    f"may be repeatable ({arg.name})"
                )

    def usage_text(self) -> str:
        """Return the declared usage line, or one derived from the metadata."""
        return self.usage or format_usage(self)

    def flag(self, name: str) -> FlagSpec | None:
        for flag in self.flags:
            if flag.name == name:
                return flag
        return None

    def flag_for_shorthand(self, shorthand: str) -> FlagSpec | None:
        if not shorthand:
            return None
        for flag in self.flags:
            if flag.shorthand == shorthand:
                return flag
        return None


def format_usage(spec: CommandSpec) -> str:
    """Render a usage string, e.g. ``deploy (aka d) <TARGET> [TAGS...] [flags]``."""
    parts = [spec.name]
    if spec.aliases:
        parts[0] += f" (aka {', '.join(spec.aliases)})"

    for arg in spec.args:
        name = arg.name.upper()
        if arg.repeatable:
            name += "..."
        parts.append(f"<{name}>" if arg.required else f"[{name}]")

    if spec.flags:
        parts.append("[flags]")

    return " ".join(parts)
