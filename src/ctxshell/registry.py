"""Context and command registration, alias resolution and listing."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from .errors import RegistrationError
from .specs import ROOT_CONTEXT, ROOT_PROMPT, CommandSpec, ContextSpec

if TYPE_CHECKING:
    from .commands import CommandFactory


@dataclass(frozen=True, slots=True)
class CommandEntry:
    """A command's metadata together with the factory that builds it per invocation."""

    spec: CommandSpec
    factory: "CommandFactory"


class RegistryWriter(Protocol):
    """Write-only registration capability handed to extensions."""

    def register_context(self, spec: ContextSpec) -> None:
        ...

    def register_command(self, factory: "CommandFactory") -> None:
        ...


class _RestrictedWriter:
    """Expose only the two registration methods of a registry."""

    __slots__ = ("_registry",)

    def __init__(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def register_context(self, spec: ContextSpec) -> None:
        self._registry.register_context(spec)

    def register_command(self, factory: "CommandFactory") -> None:
        self._registry.register_command(factory)


class CommandRegistry:
    """Owns registered contexts and commands.

    Commands are stored per context under their canonical name and again
    under every alias, all pointing at the same :class:`CommandEntry`.
    A single plain lock guards every map in place of a reader/writer lock;
    no method calls out while holding it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._contexts: dict[str, ContextSpec] = {
            ROOT_CONTEXT: ContextSpec(name=ROOT_CONTEXT, prompt=ROOT_PROMPT),
        }
        self._aliases: dict[str, str] = {}
        self._commands: dict[str, dict[str, CommandEntry]] = {}

    # Contexts -------------------------------------------------------------

    def register_context(self, spec: ContextSpec) -> None:
        """Insert or replace a context; its aliases resolve to it (last write wins)."""
        with self._lock:
            self._contexts[spec.name] = spec
            for alias in spec.aliases:
                self._aliases[alias] = spec.name

    def context(self, name: str) -> ContextSpec | None:
        """Look up a context by canonical name or alias."""
        with self._lock:
            name = self._aliases.get(name, name)
            return self._contexts.get(name)

    def resolve_context_name(self, name: str) -> str | None:
        """Return the canonical context name, or ``None`` when unknown."""
        if name == ROOT_CONTEXT:
            return ROOT_CONTEXT
        with self._lock:
            if name in self._aliases:
                return self._aliases[name]
            return name if name in self._contexts else None

    def contexts(self, include_hidden: bool = False) -> list[ContextSpec]:
        """List non-root contexts sorted by name."""
        with self._lock:
            specs = [
                spec
                for spec in self._contexts.values()
                if spec.name != ROOT_CONTEXT and (include_hidden or not spec.hidden)
            ]
        return sorted(specs, key=lambda spec: spec.name)

    # Commands -------------------------------------------------------------

    def register_command(self, factory: "CommandFactory") -> None:
        """Register a factory under its spec's context, name and aliases.

        Raises:
            RegistrationError: If the spec has an empty name.
        """
        spec = factory.spec()
        if not spec.name:
            raise RegistrationError("command spec must define name")

        entry = CommandEntry(spec=spec, factory=factory)
        with self._lock:
            commands = self._commands.setdefault(spec.context, {})
            commands[spec.name] = entry
            for alias in spec.aliases:
                commands[alias] = entry

    def unregister_command(self, context: str, name: str) -> bool:
        """Remove a command (by name or alias) together with all its alias keys."""
        with self._lock:
            commands = self._commands.get(context)
            if not commands or name not in commands:
                return False
            entry = commands[name]
            for key in [k for k, v in commands.items() if v is entry]:
                del commands[key]
            return True

    def resolve(self, context: str, token: str) -> CommandEntry | None:
        """Exact lookup within one context; parents and root are not searched."""
        with self._lock:
            return self._commands.get(context, {}).get(token)

    def commands(self, context: str, include_hidden: bool = False) -> list[CommandSpec]:
        """List a context's commands once each (aliases folded), sorted by name."""
        with self._lock:
            entries = list(self._commands.get(context, {}).values())
        return _unique_specs(entries, include_hidden)

    def namespace_commands(self, namespace: str = "", include_hidden: bool = False) -> list[CommandSpec]:
        """List commands of every context whose name starts with ``namespace``."""
        with self._lock:
            entries = [
                entry
                for context, commands in self._commands.items()
                if context.startswith(namespace)
                for entry in commands.values()
            ]
        specs: dict[tuple[str, str], CommandSpec] = {}
        for entry in entries:
            if entry.spec.hidden and not include_hidden:
                continue
            specs.setdefault((entry.spec.context, entry.spec.name), entry.spec)
        return sorted(specs.values(), key=lambda spec: (spec.name, spec.context))

    def writer(self) -> RegistryWriter:
        """Return the restricted registration capability for extensions."""
        return _RestrictedWriter(self)


def _unique_specs(entries: list[CommandEntry], include_hidden: bool) -> list[CommandSpec]:
    seen: dict[str, CommandSpec] = {}
    for entry in entries:
        spec = entry.spec
        if spec.name in seen or (spec.hidden and not include_hidden):
            continue
        seen[spec.name] = spec
    return sorted(seen.values(), key=lambda spec: spec.name)
