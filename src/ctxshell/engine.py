"""Line processing, command dispatch and the interactive loop."""

from __future__ import annotations

import logging
import os
import threading
import time
import traceback
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence, TextIO

from .cancel import CancelScope
from .commands import CommandFactory, command, to_result
from .config import ShellConfig
from .constants import DEBUG_ENV_VAR
from .contexts import ContextManager
from .errors import AppError, NavigationError, OperationCancelled, ResolutionError, UsageError
from .help import render_command_help, render_contexts, render_help
from .logging import log_event, summarize_command_args
from .middleware import Middleware, NextHandler, compose, recovery_middleware
from .output import OutputChannel, OutputLevel, aggregate_messages
from .parser import ArgsParser
from .registry import CommandEntry, CommandRegistry
from .results import CommandError, CommandInput, CommandResult, CommandStatus
from .runtime import CommandRuntime, ExecutionRuntime
from .session import ServiceRegistry, SessionStore
from .specs import ROOT_CONTEXT, ArgSpec, CommandSpec, ContextSpec
from .tasks import TaskManager

EXIT_VERBS = frozenset(("exit", "quit", "q"))
HELP_VERBS = frozenset(("help", "?", "h", "ls"))
BACK_VERBS = frozenset(("back", ".."))
ROOT_VERB = "/"

CompletionTree = dict[str, Any]


class LineReader(Protocol):
    """Line-editing collaborator driven by :meth:`Engine.run`."""

    def read(self, prompt: str) -> str:
        ...

    def set_completions(self, tree: CompletionTree) -> None:
        ...

    def history_entries(self) -> list[str]:
        ...


def tokenize(line: str) -> list[str]:
    """Split an input line on whitespace."""
    return line.split()


class Engine:
    """Interactive shell engine owning its registry, navigation stack and stores.

    Lines are processed one at a time. Built-in verbs win over everything;
    at root a bare context name enters that context; anything else resolves
    as a command of the current context.
    """

    def __init__(
        self,
        config: ShellConfig | None = None,
        *,
        stream: TextIO | None = None,
        middleware: Iterable[Middleware] = (),
        services: Mapping[str, Any] | None = None,
    ) -> None:
        self.config = config or ShellConfig()
        self.registry = CommandRegistry()
        self.contexts = ContextManager(self.registry)
        self.session = SessionStore()
        self.services = ServiceRegistry()
        for name, service in (services or {}).items():
            self.services.register(name, service)
        self.parser = ArgsParser()

        self._lock = threading.Lock()
        self._stream = stream
        self._output_level = self.config.output_level
        self._prompt = self.config.prompt
        self._help_header = self.config.help_header
        self._middleware: list[Middleware] = [recovery_middleware, *middleware]
        self._reader: LineReader | None = None

        self.tasks = TaskManager(self._new_output())
        self._register_builtins()

    # Wiring ---------------------------------------------------------------

    def register_context(self, spec: ContextSpec) -> None:
        self.registry.register_context(spec)

    def register_command(self, factory: CommandFactory) -> None:
        self.registry.register_command(factory)

    def use(self, *middleware: Middleware) -> None:
        """Append interceptors; they run inside the ones already installed."""
        with self._lock:
            self._middleware.extend(middleware)

    def set_prompt(self, prompt: str) -> None:
        if prompt:
            with self._lock:
                self._prompt = prompt

    def set_help_header(self, header: str) -> None:
        if header:
            with self._lock:
                self._help_header = header

    def set_output_level(self, level: OutputLevel) -> None:
        with self._lock:
            self._output_level = level

    def set_output_stream(self, stream: TextIO | None) -> TextIO | None:
        """Redirect command output and return the previous stream (``None`` means stdout)."""
        with self._lock:
            previous = self._stream
            self._stream = stream
        self.tasks.set_output(self._new_output())
        return previous

    def prompt(self) -> str:
        with self._lock:
            base = self._prompt
        return self.contexts.prompt(base)

    def _new_output(self) -> OutputChannel:
        with self._lock:
            return OutputChannel(self._stream, self._output_level)

    def _console(self) -> OutputChannel:
        """Channel for built-in verbs; listings are shown even at quiet level."""
        with self._lock:
            return OutputChannel(self._stream, max(self._output_level, OutputLevel.NORMAL))

    # Loop -----------------------------------------------------------------

    def run(self, reader: LineReader) -> None:
        """Read and process lines until an exit verb or end of input."""
        self._reader = reader
        log_event("session_start", level=logging.INFO, prompt=self.prompt())
        try:
            while True:
                try:
                    reader.set_completions(self.completion_tree())
                    line = reader.read(self.prompt())
                    if not self.process_line(line):
                        break

                except EOFError:
                    self._console().info("")
                    break

                except KeyboardInterrupt:
                    self._console().info("")
                    continue

                except AppError as e:
                    self._console().error(str(e))

                except Exception as e:
                    self._report_unexpected_error(e)
        finally:
            self._reader = None
            log_event("session_stop", level=logging.INFO, context=self.contexts.current().name)

    def _report_unexpected_error(self, error: Exception) -> None:
        """Print an unexpected exception with optional debug traceback."""
        logging.error("Unexpected error in shell loop: %s", error, exc_info=True)
        console = self._console()
        console.error(str(error) or type(error).__name__)
        if os.getenv(DEBUG_ENV_VAR):
            console.info("Debug traceback:")
            console.info(
                "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
            )

    def process_line(self, line: str) -> bool:
        """Process one input line; return False when an exit verb was read.

        Usage, resolution, parse and navigation errors are reported and
        leave the loop running.
        """
        tokens = tokenize(line)
        if not tokens:
            return True
        if tokens[0] in EXIT_VERBS:
            self._console().info("Shutting down.")
            return False

        try:
            self.execute(tokens)
        except AppError as e:
            log_event(
                "command_error",
                level=logging.WARNING,
                command=tokens[0],
                context=self.contexts.current().name,
                args=summarize_command_args(tokens[1:]),
                error_type=type(e).__name__,
                error=str(e),
            )
            self._console().error(str(e))
        return True

    # Dispatch -------------------------------------------------------------

    def execute(self, tokens: Sequence[str]) -> CommandResult | None:
        """Dispatch one tokenized line.

        Returns the command result for registered commands and ``None`` for
        built-in verbs and navigation.

        Raises:
            UsageError: Malformed built-in usage, unknown command or bad arguments.
            NavigationError: Invalid context transition.
        """
        tokens = list(tokens)
        if not tokens:
            return None

        context = self.contexts.current().name
        verb, rest = tokens[0], tokens[1:]

        if verb in HELP_VERBS:
            self._show_help(context, rest)
            return None
        if verb == "contexts":
            render_contexts(self._console(), self.registry)
            return None
        if verb == "ctx":
            self._ctx_command(rest)
            return None
        if verb in BACK_VERBS:
            self._change_context(self.contexts.pop)
            return None
        if verb == ROOT_VERB:
            self._change_context(self.contexts.pop_to_root)
            return None
        if verb == "history":
            self._show_history()
            return None

        if context == ROOT_CONTEXT:
            target = self.contexts.resolve_alias(verb)
            if target:
                self._change_context(self.contexts.navigate, target)
                return None

        entry = self.registry.resolve(context, verb)
        if entry is None:
            raise ResolutionError(f"unknown command: {verb}")
        return self._invoke(entry, rest)

    def _invoke(self, entry: CommandEntry, args: list[str]) -> CommandResult:
        parsed = self.parser.parse(args, entry.spec)

        current = self.contexts.current()
        scope = CancelScope(entry.spec.timeout)
        output = self._new_output()
        runtime = ExecutionRuntime(self, scope, output, pipeline=current.payload)
        command_input = CommandInput(
            scope=scope,
            raw=tuple(args),
            args=parsed.args,
            flags=parsed.flags,
            pipeline=current.payload,
        )

        with self._lock:
            middleware = list(self._middleware)
        handler = compose(middleware, entry, self._core_handler(entry))

        start = time.perf_counter()
        try:
            result = to_result(handler(runtime, command_input))
        finally:
            runtime.close()
        duration_ms = int((time.perf_counter() - start) * 1000)

        status = result.normalized_status()
        result.status = status

        aggregate_messages(output, result.messages)
        if result.error is not None:
            output.error(result.error.display_message())
            for hint in result.error.hints:
                output.info(f"hint: {hint}")

        log_event(
            "command_exec",
            level=logging.INFO,
            command=entry.spec.name,
            context=entry.spec.context,
            args=summarize_command_args(args),
            status=status.value,
            duration_ms=duration_ms,
        )

        if status is CommandStatus.FAILED:
            log_event(
                "command_error",
                level=logging.WARNING,
                command=entry.spec.name,
                context=entry.spec.context,
                error=result.error.display_message() if result.error else None,
            )
            return result

        next_context, next_payload = runtime.next_context, runtime.next_payload
        if not next_context and result.next_context:
            next_context, next_payload = result.next_context, result.pipeline

        if next_context:
            try:
                self._change_context(self.contexts.navigate, next_context, next_payload)
            except NavigationError as e:
                # The pipeline belongs to the frame that was never entered.
                output.error(str(e))
                return result

        if entry.spec.allows_pipeline and result.pipeline is not None:
            self.contexts.attach_payload(result.pipeline)

        return result

    @staticmethod
    def _core_handler(entry: CommandEntry) -> NextHandler:
        def core(runtime: CommandRuntime, command_input: CommandInput) -> CommandResult:
            try:
                cmd = entry.factory.create(runtime)
            except Exception as e:
                logging.error("Failed to create command %s: %s", entry.spec.name, e, exc_info=True)
                return CommandResult(
                    status=CommandStatus.FAILED,
                    error=CommandError("failed to create command", cause=e),
                )

            try:
                return to_result(cmd.execute(runtime, command_input))
            except CommandError as e:
                return CommandResult(status=CommandStatus.FAILED, error=e)
            except OperationCancelled as e:
                return CommandResult(
                    status=CommandStatus.FAILED,
                    error=CommandError(f"command {entry.spec.name} cancelled: {e}", cause=e),
                )

        return core

    # Built-ins ------------------------------------------------------------

    def _change_context(self, operation: Callable[..., None], *args: Any) -> None:
        before = self.contexts.current().name
        operation(*args)
        log_event(
            "context_change",
            level=logging.INFO,
            from_context=before,
            to_context=self.contexts.current().name,
            depth=self.contexts.depth,
        )

    def _ctx_command(self, args: list[str]) -> None:
        if not args:
            raise UsageError("ctx command requires arguments")
        action = args[0]
        if action == "goto":
            if len(args) < 2:
                raise UsageError("usage: ctx goto <name>")
            self._change_context(self.contexts.navigate, args[1])
        elif action == "push":
            if len(args) < 2:
                raise UsageError("usage: ctx push <name>")
            self._change_context(self.contexts.push, args[1])
        elif action == "pop":
            self._change_context(self.contexts.pop)
        else:
            raise ResolutionError(f"unknown ctx action: {action}")

    def _show_help(self, context: str, args: Sequence[str]) -> None:
        with self._lock:
            header = self._help_header
        console = self._console()
        if not args:
            render_help(console, self.registry, context, header)
            return

        entry = self.registry.resolve(context, args[0]) or self.registry.resolve(ROOT_CONTEXT, args[0])
        if entry is None:
            raise ResolutionError(f"unknown command: {args[0]}")
        render_command_help(console, entry.spec)

    def _show_history(self) -> None:
        console = self._console()
        entries = self._reader.history_entries() if self._reader is not None else []
        if not entries:
            console.info("No history available.")
            return
        width = len(str(len(entries)))
        for index, line in enumerate(entries, start=1):
            console.info(f"  {index:>{width}}  {line}")

    def completion_tree(self) -> CompletionTree:
        """Nested completion words for the current context."""
        context = self.contexts.current().name
        contexts = self.registry.contexts()
        context_names = {spec.name: None for spec in contexts}

        tree: CompletionTree = {}
        if context == ROOT_CONTEXT:
            for spec in contexts:
                tree[spec.name] = {cmd.name: None for cmd in self.registry.commands(spec.name)}
        for spec in self.registry.commands(context):
            tree[spec.name] = None

        tree.update({verb: None for verb in ("help", "contexts", "back", "history", "exit", "quit")})
        tree["ctx"] = {"goto": dict(context_names), "push": dict(context_names), "pop": None}
        return tree

    def _register_builtins(self) -> None:
        @command(
            CommandSpec(
                name="help",
                aliases=("?", "h"),
                summary="Show help for commands and contexts",
                args=(ArgSpec("command", description="Command to describe"),),
            )
        )
        def help_command(runtime: CommandRuntime, command_input: CommandInput) -> CommandResult:
            name = command_input.args.string("command")
            try:
                self._show_help(runtime.contexts.current().name, [name] if name else [])
            except ResolutionError as e:
                raise CommandError(str(e), cause=e, hints=("type 'help' to list commands",)) from e
            return CommandResult.ok()

        @command(CommandSpec(name="tasks", summary="List background tasks"))
        def tasks_command(runtime: CommandRuntime, command_input: CommandInput) -> CommandResult:
            handles = runtime.tasks.tasks()
            rows = [
                (handle.id, handle.name, handle.status.value, str(handle.error) if handle.error else "")
                for handle in handles
            ]
            if rows:
                runtime.output.write_table(("ID", "Name", "Status", "Error"), rows)
            else:
                runtime.output.info("No background tasks.")
            return CommandResult.ok(handles)

        self.registry.register_command(help_command)
        self.registry.register_command(tasks_command)
