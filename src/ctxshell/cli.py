"""CLI bootstrap entry point for ctxshell."""

import argparse
import logging
import sys
import time
from typing import Sequence

from .config import ShellConfig, load_config, map_path
from .constants import APP_NAME, DEFAULT_HISTORY_FILE
from .engine import Engine
from .errors import AppError
from .extensions import load_extensions
from .logging import log_event, setup_logging
from .output import OutputLevel
from .repl import PromptLineReader

__all__ = ["build_parser", "main"]


def _map_cli_arg(path: str | None, arg_name: str) -> str | None:
    """Map a CLI path argument, naming the argument in errors."""
    if path is None:
        return None
    try:
        return map_path(path)
    except ValueError as e:
        raise ValueError(f"Invalid {arg_name} path: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="ctxshell - context-aware interactive command shell",
    )
    parser.add_argument("-c", "--config", help="Path to JSON config file (optional)")
    parser.add_argument("-l", "--log", help="Path to log file (optional; logging is off without it)")
    parser.add_argument(
        "-e",
        "--extension",
        action="append",
        default=[],
        metavar="MODULE:FUNC",
        help="Registration function to load (repeatable)",
    )
    parser.add_argument(
        "-o",
        "--output-level",
        choices=[level.name.lower() for level in OutputLevel],
        help="Output verbosity (overrides the config file)",
    )
    parser.add_argument(
        "--no-entry-points",
        action="store_true",
        help=f"Skip extensions registered under the '{APP_NAME}.extensions' entry-point group",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the ctxshell CLI."""
    args = build_parser().parse_args(argv)
    app_started = time.perf_counter()

    try:
        config_path = _map_cli_arg(args.config, "config")
        config = load_config(config_path) if config_path else ShellConfig()

        log_path = _map_cli_arg(args.log, "log") or config.log_file
        setup_logging(log_path)

        engine = Engine(config)
        if args.output_level:
            engine.set_output_level(OutputLevel.from_name(args.output_level))

        report = load_extensions(
            engine.registry.writer(),
            [*config.extensions, *args.extension],
            entry_points=config.load_entry_points and not args.no_entry_points,
        )
        for name, error in report.failed.items():
            print(f"Warning: extension {name} was not loaded: {error}")

        log_event(
            "app_start",
            level=logging.INFO,
            config_file=config_path,
            log_file=log_path,
            history_file=config.history_file,
            extensions=report.loaded,
        )

        print("Type 'help' for commands, 'exit' or 'quit' to exit, or Ctrl-D")
        reader = PromptLineReader(config.history_file or map_path(DEFAULT_HISTORY_FILE))
        engine.run(reader)

        log_event(
            "app_stop",
            level=logging.INFO,
            reason="normal",
            uptime_ms=round((time.perf_counter() - app_started) * 1000, 1),
        )

    except KeyboardInterrupt:
        log_event(
            "app_stop",
            level=logging.INFO,
            reason="keyboard_interrupt",
            uptime_ms=round((time.perf_counter() - app_started) * 1000, 1),
        )
        print("\nInterrupted")
        sys.exit(0)
    except (AppError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        log_event(
            "app_stop",
            level=logging.ERROR,
            reason="startup_error",
            error_type=type(e).__name__,
            error=str(e),
        )
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        log_event(
            "app_stop",
            level=logging.ERROR,
            reason="fatal_error",
            error_type=type(e).__name__,
            error=str(e),
            uptime_ms=round((time.perf_counter() - app_started) * 1000, 1),
        )
        logging.error("Fatal error: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
