"""Rich Console wrapper that degrades gracefully on non-UTF-8 terminals.

Report summaries echo type names and file paths taken from the scanned
corpus, so anything printed may contain characters the terminal cannot
encode.
"""
from typing import Any

from rich.console import Console

from collections_explorer.utils.logger import sanitize_for_terminal, is_utf8_capable


class SafeConsole(Console):
    """Console that sanitizes string output when the terminal is not UTF-8."""

    def __init__(self, *args, **kwargs):
        self._needs_sanitization = not is_utf8_capable()

        if self._needs_sanitization:
            kwargs.setdefault('legacy_windows', True)

        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        """Print like Rich, sanitizing plain string arguments first."""
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)
