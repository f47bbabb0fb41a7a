"""Terminal and logging helpers."""
from .logger import configure_logging, get_logger, sanitize_for_terminal
from .safe_console import SafeConsole

__all__ = ["configure_logging", "get_logger", "sanitize_for_terminal", "SafeConsole"]
