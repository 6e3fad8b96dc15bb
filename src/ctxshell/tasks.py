"""Background task supervision for long-running command work."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum
from typing import Any, Callable

from .cancel import CancelScope
from .errors import OperationCancelled
from .logging import log_event
from .output import OutputChannel

TaskFunc = Callable[[CancelScope, OutputChannel], None]


class TaskStatus(str, Enum):
    """Background task lifecycle states."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset((TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELLED))


@dataclass(frozen=True, slots=True)
class TaskHandle:
    """Point-in-time snapshot of a background task."""

    id: str
    name: str
    status: TaskStatus
    error: BaseException | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class _TaskRecord:
    handle: TaskHandle
    scope: CancelScope
    done: threading.Event


class TaskManager:
    """Run task functions on daemon threads and track their status."""

    def __init__(self, output: OutputChannel) -> None:
        self._lock = threading.Lock()
        self._seq = 0
        self._tasks: dict[str, _TaskRecord] = {}
        self._output = output

    def set_output(self, output: OutputChannel) -> None:
        with self._lock:
            self._output = output

    def spawn(
        self,
        name: str,
        fn: TaskFunc,
        *,
        timeout: timedelta | float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> TaskHandle:
        """Start ``fn(scope, output)`` in the background and return its snapshot."""
        with self._lock:
            self._seq += 1
            task_id = f"task-{self._seq}"
            handle = TaskHandle(
                id=task_id,
                name=name,
                status=TaskStatus.PENDING,
                metadata=dict(metadata or {}),
            )
            record = _TaskRecord(handle=handle, scope=CancelScope(timeout), done=threading.Event())
            self._tasks[task_id] = record
            output = self._output

        log_event("task_spawned", level=logging.INFO, task_id=task_id, task_name=name)
        thread = threading.Thread(
            target=self._run,
            args=(task_id, fn, record.scope, output),
            name=f"ctxshell-{task_id}",
            daemon=True,
        )
        thread.start()
        return handle

    def _run(self, task_id: str, fn: TaskFunc, scope: CancelScope, output: OutputChannel) -> None:
        self._update(task_id, TaskStatus.RUNNING)
        try:
            fn(scope, output)
        except OperationCancelled as e:
            self._update(task_id, TaskStatus.CANCELLED, e)
        except Exception as e:
            logging.error("Background task %s failed: %s", task_id, e, exc_info=True)
            self._update(task_id, TaskStatus.FAILED, e)
        else:
            status = TaskStatus.CANCELLED if scope.cancelled else TaskStatus.SUCCEEDED
            self._update(task_id, status)
        finally:
            scope.cancel("task finished")
            with self._lock:
                record = self._tasks[task_id]
            record.done.set()

    def _update(self, task_id: str, status: TaskStatus, error: BaseException | None = None) -> None:
        with self._lock:
            record = self._tasks.get(task_id)
            if record is None or record.handle.status.terminal:
                return
            record.handle = replace(record.handle, status=status, error=error)
        if status.terminal:
            log_event(
                "task_finished",
                level=logging.INFO if status is TaskStatus.SUCCEEDED else logging.WARNING,
                task_id=task_id,
                status=status.value,
                error=str(error) if error else None,
            )

    def cancel(self, task_id: str) -> bool:
        """Request cancellation; return False for unknown task IDs."""
        with self._lock:
            record = self._tasks.get(task_id)
        if record is None:
            return False
        record.scope.cancel()
        return True

    def describe(self, task_id: str) -> TaskHandle | None:
        with self._lock:
            record = self._tasks.get(task_id)
            return None if record is None else _snapshot(record.handle)

    def tasks(self) -> list[TaskHandle]:
        with self._lock:
            records = list(self._tasks.values())
            return [_snapshot(r.handle) for r in sorted(records, key=lambda r: _seq_of(r.handle.id))]

    def wait(self, task_id: str, timeout: float | None = None) -> TaskHandle | None:
        """Block until the task reaches a terminal state, then return its snapshot."""
        with self._lock:
            record = self._tasks.get(task_id)
        if record is None:
            return None
        record.done.wait(timeout)
        return self.describe(task_id)


def _snapshot(handle: TaskHandle) -> TaskHandle:
    return replace(handle, metadata=dict(handle.metadata))


def _seq_of(task_id: str) -> int:
    return int(task_id.rsplit("-", 1)[-1])
