"""Logging setup and terminal-safe text handling for deadwood.

Every module logs through a stdlib logger under the ``deadwood`` namespace.
The CLI routes those records to a Rich handler bound to a SafeConsole, so
warnings about skipped nodes and files share the console with the report.
"""
import sys
import locale
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "deadwood"

# Unicode to ASCII mapping for terminals without UTF-8 support
ICON_MAP = {
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except Exception:
        return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can handle UTF-8 Unicode characters."""
    return detect_terminal_encoding().replace('-', '').replace('_', '') == 'utf8'


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if terminal doesn't support UTF-8.

    Args:
        text: Text potentially containing Unicode icons

    Returns:
        str: Sanitized text safe for current terminal
    """
    if is_utf8_capable():
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)
    return sanitized


class SanitizingFilter(logging.Filter):
    """Rewrite log messages so non-UTF-8 terminals never see raw icons."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = sanitize_for_terminal(str(record.msg))
        return True


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the ``deadwood`` namespace.

    Module names that already start with the namespace are used as is, so
    ``get_logger(__name__)`` works from any package module.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: int = logging.INFO, console: Optional[Console] = None) -> logging.Logger:
    """Attach a Rich handler to the ``deadwood`` logger.

    Calling it again replaces the previously installed handler instead of
    stacking a second one.

    Args:
        level: Threshold for the package logger
        console: Console to render on (defaults to a stderr SafeConsole)

    Returns:
        The configured package logger
    """
    if console is None:
        from .safe_console import SafeConsole
        console = SafeConsole(stderr=True)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_deadwood_handler", False):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=level <= logging.DEBUG,
        markup=False,
        rich_tracebacks=True,
    )
    handler._deadwood_handler = True
    handler.addFilter(SanitizingFilter())

    root.addHandler(handler)
    root.setLevel(level)
    return root
