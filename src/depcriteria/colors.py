"""Terminal colors for depcriteria's diagnostic output.

All diagnostics go to stderr (stdout carries the JSON result), so color
support is detected on stderr. Respects NO_COLOR (https://no-color.org/)
and FORCE_COLOR.

Example:
    >>> c = get_colors()
    >>> print(c.error("Unable to resolve import id: ./missing"), file=sys.stderr)
"""

import logging
import os
import sys


class Colors:
    """ANSI color helper with automatic terminal detection.

    Attributes:
        enabled: Whether colors are enabled (auto-detected or manually set).
    """

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"

    def __init__(self, enabled: bool = None, stream=None):
        """Initialize Colors with optional override.

        Args:
            enabled: Force colors on/off. If None, auto-detect.
            stream: Stream checked for TTY support (default: stderr).
        """
        self.stream = stream if stream is not None else sys.stderr
        if enabled is not None:
            self.enabled = enabled
        else:
            self.enabled = self._should_enable_colors()

    def _should_enable_colors(self) -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        if os.environ.get("FORCE_COLOR"):
            return True
        if not hasattr(self.stream, "isatty") or not self.stream.isatty():
            return False
        return os.environ.get("TERM", "") != "dumb"

    def _colorize(self, text: str, color: str) -> str:
        if not self.enabled:
            return text
        return f"{color}{text}{self.RESET}"

    def red(self, text: str) -> str:
        return self._colorize(text, self.RED)

    def yellow(self, text: str) -> str:
        return self._colorize(text, self.YELLOW)

    def cyan(self, text: str) -> str:
        return self._colorize(text, self.CYAN)

    def dim(self, text: str) -> str:
        return self._colorize(text, self.DIM)

    def error(self, text: str) -> str:
        """Error message (bold red)."""
        if not self.enabled:
            return text
        return f"{self.BOLD}{self.RED}{text}{self.RESET}"


class ColorFormatter(logging.Formatter):
    """Log formatter that colors the level name."""

    LEVEL_COLORS = {
        logging.DEBUG: "dim",
        logging.INFO: "cyan",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "error",
    }

    def __init__(self, colors: Colors, fmt: str = "%(levelname)s %(name)s: %(message)s"):
        super().__init__(fmt)
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        style = self.LEVEL_COLORS.get(record.levelno)
        if style is None:
            return message
        level = record.levelname
        return message.replace(level, getattr(self.colors, style)(level), 1)


def get_colors(no_color: bool = False) -> Colors:
    """Get a Colors instance, optionally disabling colors."""
    if no_color:
        return Colors(enabled=False)
    return Colors()
