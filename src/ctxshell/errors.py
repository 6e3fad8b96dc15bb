"""Custom exception hierarchy for ctxshell."""


class AppError(Exception):
    """Base exception for framework failures reported to the user."""


class UsageError(ValueError, AppError):
    """Command usage or user-input errors."""


class ParseError(UsageError):
    """Argument or flag parsing failures."""


class SpecError(ParseError):
    """Structurally invalid command metadata detected while parsing."""


class ResolutionError(UsageError):
    """Unknown command, context, or built-in sub-action."""


class NavigationError(AppError):
    """Context stack transitions that cannot be applied."""


class RegistrationError(AppError):
    """Precondition violations while registering commands."""


class ConfigError(ValueError, AppError):
    """Configuration file validation errors."""


class ExtensionError(AppError):
    """An extension failed to load or register."""


class MissingValueError(KeyError, AppError):
    """A parsed value was requested but never supplied."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "value not present"


class OperationCancelled(AppError):
    """Raised by cooperative cancellation checks."""
