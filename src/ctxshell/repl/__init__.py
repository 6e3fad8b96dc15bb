"""Interactive line reading for the shell loop."""

from .input import PromptLineReader, build_completer, ensure_history_file

__all__ = ["PromptLineReader", "build_completer", "ensure_history_file"]
