"""Help and listing output for contexts and commands."""

from __future__ import annotations

from .output import OutputChannel
from .registry import CommandRegistry
from .specs import ROOT_CONTEXT, CommandSpec, ContextSpec


def _row(name: str, text: str, width: int) -> str:
    return f"  {name:<{width}} {text}".rstrip()


def render_context_list(output: OutputChannel, contexts: list[ContextSpec]) -> None:
    output.info("Contexts:")
    for spec in contexts:
        output.info(_row(spec.name, spec.description, 15))


def render_help(output: OutputChannel, registry: CommandRegistry, context: str, header: str) -> None:
    """Render the help screen for ``context``.

    At root this lists contexts and global commands; elsewhere it lists the
    commands of the current context only.
    """
    output.info(header)
    if context == ROOT_CONTEXT:
        contexts = registry.contexts()
        if contexts:
            render_context_list(output, contexts)
        commands = registry.commands(ROOT_CONTEXT)
        if commands:
            output.info("")
            output.info("Global Commands:")
            for spec in commands:
                output.info(_row(spec.name, spec.summary, 20))
        output.info("")
        output.info("Type a context name to enter it or 'ctx goto <name>'.")
        return

    commands = registry.commands(context)
    if not commands:
        output.info(f"No commands registered for context {context}")
        return
    output.info(f"Commands in {context}:")
    for spec in commands:
        output.info(_row(spec.name, spec.summary, 20))


def render_contexts(output: OutputChannel, registry: CommandRegistry) -> None:
    contexts = registry.contexts()
    if not contexts:
        output.info("No contexts registered.")
        return
    render_context_list(output, contexts)


def render_command_help(output: OutputChannel, spec: CommandSpec) -> None:
    """Render usage, description, arguments, flags and examples of one command."""
    output.info(f"Usage: {spec.usage_text()}")
    text = spec.description or spec.summary
    if text:
        output.info("")
        output.info(text)

    if spec.args:
        output.info("")
        output.info("Arguments:")
        for arg in spec.args:
            details = [arg.kind.value]
            if arg.required:
                details.append("required")
            if arg.repeatable:
                details.append("repeatable")
            if arg.default is not None:
                details.append(f"default: {arg.default}")
            if arg.enum_values:
                details.append(f"one of: {', '.join(arg.enum_values)}")
            output.info(_row(arg.name, f"{arg.description} ({'; '.join(details)})".strip(), 15))

    flags = [flag for flag in spec.flags if not flag.hidden]
    if flags:
        output.info("")
        output.info("Flags:")
        for flag in flags:
            label = f"--{flag.name}"
            if flag.shorthand:
                label = f"-{flag.shorthand}, {label}"
            details = [flag.kind.value]
            if flag.required:
                details.append("required")
            if flag.default is not None:
                details.append(f"default: {flag.default}")
            if flag.enum_values:
                details.append(f"one of: {', '.join(flag.enum_values)}")
            output.info(_row(label, f"{flag.description} ({'; '.join(details)})".strip(), 20))

    if spec.examples:
        output.info("")
        output.info("Examples:")
        for example in spec.examples:
            output.info(f"  {example.command}")
            if example.description:
                output.info(f"      {example.description}")
