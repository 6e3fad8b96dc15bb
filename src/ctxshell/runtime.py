"""Runtime handle exposed to commands during one invocation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from .cancel import CancelScope
from .contexts import ContextManager
from .output import OutputChannel
from .session import ServiceRegistry, SessionStore
from .tasks import TaskManager

if TYPE_CHECKING:
    from .engine import Engine


class CommandRuntime(Protocol):
    """Services and navigation requests available to a running command."""

    @property
    def session(self) -> SessionStore:
        ...

    @property
    def services(self) -> ServiceRegistry:
        ...

    @property
    def output(self) -> OutputChannel:
        ...

    @property
    def contexts(self) -> ContextManager:
        ...

    @property
    def tasks(self) -> TaskManager:
        ...

    @property
    def cancellation(self) -> CancelScope:
        ...

    @property
    def pipeline_data(self) -> Any:
        ...

    def navigate_to(self, name: str, payload: Any = None) -> None:
        ...

    def push_context(self, name: str, payload: Any = None) -> None:
        ...

    def pop_context(self) -> None:
        ...

    def set_pipeline_data(self, value: Any) -> None:
        ...


class ExecutionRuntime:
    """Per-invocation :class:`CommandRuntime` bound to an engine.

    ``navigate_to`` only records the request; the engine applies it after the
    command returns, and it takes precedence over ``CommandResult.next_context``.
    """

    def __init__(
        self,
        engine: "Engine",
        scope: CancelScope,
        output: OutputChannel,
        pipeline: Any = None,
    ) -> None:
        self._engine = engine
        self._scope = scope
        self._output = output
        self._pipeline = pipeline
        self.next_context = ""
        self.next_payload: Any = None

    @property
    def session(self) -> SessionStore:
        return self._engine.session

    @property
    def services(self) -> ServiceRegistry:
        return self._engine.services

    @property
    def output(self) -> OutputChannel:
        return self._output

    @property
    def contexts(self) -> ContextManager:
        return self._engine.contexts

    @property
    def tasks(self) -> TaskManager:
        return self._engine.tasks

    @property
    def cancellation(self) -> CancelScope:
        return self._scope

    @property
    def pipeline_data(self) -> Any:
        return self._pipeline

    def set_pipeline_data(self, value: Any) -> None:
        self._pipeline = value

    def navigate_to(self, name: str, payload: Any = None) -> None:
        self.next_context = name
        self.next_payload = payload

    def push_context(self, name: str, payload: Any = None) -> None:
        self._engine.contexts.push(name, payload)

    def pop_context(self) -> None:
        self._engine.contexts.pop()

    def close(self) -> None:
        self._scope.cancel("invocation finished")
