"""Navigation stack of active contexts and prompt derivation."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from .errors import NavigationError
from .registry import CommandRegistry
from .specs import ROOT_CONTEXT, ContextSpec

NAMESPACE_SEPARATOR = "::"


@dataclass(slots=True)
class ExecutionContext:
    """One frame of the navigation stack."""

    spec: ContextSpec
    state: dict[str, Any] = field(default_factory=dict)
    payload: Any = None

    @property
    def name(self) -> str:
        return self.spec.name

    def copy(self) -> "ExecutionContext":
        return ExecutionContext(spec=self.spec, state=dict(self.state), payload=self.payload)


class ContextManager:
    """Owns the navigation stack; frame 0 is always the root context.

    Readers get copies of frames, never the live objects. One plain lock
    serializes readers and writers alike in place of a reader/writer lock.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self._lock = threading.Lock()
        self._registry = registry
        root = registry.context(ROOT_CONTEXT)
        self._stack: list[ExecutionContext] = [ExecutionContext(spec=root)]

    def current(self) -> ExecutionContext:
        with self._lock:
            return self._stack[-1].copy()

    def stack(self) -> list[ExecutionContext]:
        with self._lock:
            return [frame.copy() for frame in self._stack]

    @property
    def depth(self) -> int:
        with self._lock:
            return len(self._stack)

    def path(self) -> list[str]:
        """Names of the non-root frames from bottom to top."""
        with self._lock:
            return [frame.name for frame in self._stack[1:]]

    def resolve_alias(self, name: str) -> str | None:
        """Canonicalize a context name; ``::`` is accepted as a ``.`` separator."""
        if name == ROOT_CONTEXT:
            return ROOT_CONTEXT
        name = name.replace(NAMESPACE_SEPARATOR, ".")
        spec = self._registry.context(name)
        return spec.name if spec is not None else None

    def _lookup(self, name: str) -> ContextSpec:
        spec = self._registry.context(name.replace(NAMESPACE_SEPARATOR, "."))
        if spec is None:
            raise NavigationError(f"unknown context: {name}")
        return spec

    def push(self, name: str, payload: Any = None) -> None:
        """Enter ``name`` on top of the current stack."""
        spec = self._lookup(name)
        with self._lock:
            self._stack.append(ExecutionContext(spec=spec, payload=payload))

    def pop(self) -> None:
        """Leave the current context; the root frame cannot be popped."""
        with self._lock:
            if len(self._stack) <= 1:
                raise NavigationError("already at root context")
            self._stack.pop()

    def pop_to_root(self) -> None:
        with self._lock:
            del self._stack[1:]

    def navigate(self, name: str, payload: Any = None) -> None:
        """Replace everything above root with a single frame for ``name``."""
        if name == ROOT_CONTEXT:
            self.pop_to_root()
            return
        spec = self._lookup(name)
        with self._lock:
            del self._stack[1:]
            self._stack.append(ExecutionContext(spec=spec, payload=payload))

    def attach_payload(self, payload: Any) -> None:
        """Set the pipeline payload of the current frame."""
        with self._lock:
            self._stack[-1].payload = payload

    def set_state(self, key: str, value: Any) -> None:
        """Store ``value`` in the current frame's local state."""
        with self._lock:
            self._stack[-1].state[key] = value

    def state_get(self, key: str, default: Any = None) -> Any:
        """Read a value from the current frame's local state."""
        with self._lock:
            return self._stack[-1].state.get(key, default)

    def prompt(self, base: str) -> str:
        """Derive the prompt: ``base`` at root, otherwise the context's template."""
        spec = self.current().spec
        if spec.name == ROOT_CONTEXT:
            return base
        if spec.prompt:
            return spec.prompt.replace("{base}", base).replace("{context}", spec.name)
        return f"{base}{spec.name}> "
