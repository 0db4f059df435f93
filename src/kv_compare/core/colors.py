"""Console colors and formatting utilities for kv_compare.

Provides ANSI color codes for terminal output with auto-detection
of TTY support and Windows compatibility.
"""

import os
import sys


class ConsoleColors:
    """ANSI color codes for terminal output.

    Auto-detects TTY support and handles Windows compatibility.
    Every formatter accepts an optional ``enabled`` flag that overrides the
    global setting for a single call (renderers pass their ``use_color``).
    """

    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    BOLD = "\033[1m"
    DIM = "\033[90m"
    RESET = "\033[0m"

    # Disable colors if not a TTY or on Windows without ANSI support
    _enabled = sys.stdout.isatty() and (os.name != "nt" or bool(os.environ.get("TERM")))

    @classmethod
    def configure(cls, no_color: bool = False) -> None:
        """Apply the global color policy (--no-color and NO_COLOR env var)."""
        if no_color or os.environ.get("NO_COLOR"):
            cls._enabled = False

    @classmethod
    def _wrap(cls, color: str, text: str, enabled: bool | None) -> str:
        active = cls._enabled if enabled is None else enabled
        if active:
            return f"{color}{text}{cls.RESET}"
        return text

    @classmethod
    def success(cls, text: str, enabled: bool | None = None) -> str:
        """Format text as success (green)"""
        return cls._wrap(cls.GREEN, text, enabled)

    @classmethod
    def error(cls, text: str, enabled: bool | None = None) -> str:
        """Format text as error (red)"""
        return cls._wrap(cls.RED, text, enabled)

    @classmethod
    def warning(cls, text: str, enabled: bool | None = None) -> str:
        """Format text as warning (yellow)"""
        return cls._wrap(cls.YELLOW, text, enabled)

    @classmethod
    def bold(cls, text: str, enabled: bool | None = None) -> str:
        """Format text as bold"""
        return cls._wrap(cls.BOLD, text, enabled)

    @classmethod
    def dim(cls, text: str, enabled: bool | None = None) -> str:
        """Format text as dim/gray"""
        return cls._wrap(cls.DIM, text, enabled)

    @classmethod
    def status(cls, success: bool, text: str, enabled: bool | None = None) -> str:
        """Format text based on success/failure status"""
        return cls.success(text, enabled) if success else cls.error(text, enabled)


def _format_error_msg(operation: str, item_type: str | None = None, error: Exception | None = None) -> str:
    """
    Format error messages consistently across the application.

    Args:
        operation: Description of the operation that failed (e.g., "listing secrets")
        item_type: Optional context (e.g., the store label)
        error: Optional exception to include in the message

    Returns:
        Formatted error message string
    """
    msg = f"Error {operation}"
    if item_type:
        msg += f" for {item_type}"
    if error:
        msg += f": {error!s}"
    return msg
