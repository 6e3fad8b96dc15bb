"""Loading of registration routines contributed by other packages."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from importlib import metadata
from typing import Callable, Iterable

from .errors import ExtensionError
from .logging import log_event
from .registry import RegistryWriter

ENTRY_POINT_GROUP = "ctxshell.extensions"

RegisterFunc = Callable[[RegistryWriter], None]


@dataclass(slots=True)
class ExtensionReport:
    """Names of extensions that registered cleanly and of those that failed."""

    loaded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=ENTRY_POINT_GROUP)


def resolve_reference(reference: str) -> RegisterFunc:
    """Import ``module:function`` (the function part may be dotted).

    Raises:
        ExtensionError: If the reference is malformed or does not name a callable.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ExtensionError(f"invalid extension reference: {reference} (expected module:function)")

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise ExtensionError(f"cannot import extension module {module_name}: {e}") from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise ExtensionError(f"extension {reference} not found") from e

    if not callable(target):
        raise ExtensionError(f"extension {reference} is not callable")
    return target


def register_extension(name: str, register: RegisterFunc, writer: RegistryWriter) -> None:
    """Run one registration routine against the restricted writer.

    Raises:
        ExtensionError: Wrapping whatever the routine raised.
    """
    try:
        register(writer)
    except Exception as e:
        raise ExtensionError(f"extension {name} failed to register: {e}") from e
    log_event("extension_loaded", level=logging.INFO, extension=name)


def load_extensions(
    writer: RegistryWriter,
    references: Iterable[str] = (),
    *,
    entry_points: bool = True,
) -> ExtensionReport:
    """Load entry-point extensions, then explicit ``module:function`` references.

    Each extension is isolated: a failure is logged and recorded in the
    report, and loading continues with the next one.
    """
    report = ExtensionReport()
    candidates: list[tuple[str, Callable[[], RegisterFunc]]] = []

    if entry_points:
        for ep in iter_entry_points():
            candidates.append((ep.name, ep.load))
    for reference in references:
        candidates.append((reference, lambda ref=reference: resolve_reference(ref)))

    for name, load in candidates:
        try:
            register = load()
            register_extension(name, register, writer)
        except Exception as e:
            logging.warning("Extension %s failed: %s", name, e, exc_info=True)
            log_event(
                "extension_failed",
                level=logging.WARNING,
                extension=name,
                error_type=type(e).__name__,
                error=str(e),
            )
            report.failed[name] = str(e)
        else:
            report.loaded.append(name)

    return report
