"""
Console Reporter Adapter

Coloured terminal output for the CLI. Results go to stdout; nothing here
is used for ``--json`` output.
"""

import sys
from typing import Any, List, Optional, TextIO


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    HEADER = "\033[95m"


class ConsoleReporter:
    """
    Formatted terminal output with optional colors.

    Colors default to on only when the stream is a terminal.
    """

    def __init__(self, use_color: Optional[bool] = None, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        if use_color is None:
            use_color = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.use_color = use_color

    def _color(self, text: str, color: str) -> str:
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def write(self, text: str) -> None:
        """Plain output, e.g. an already rendered report."""
        self._print(text.rstrip("\n"))

    def info(self, message: str) -> None:
        self._print(self._color(message, Colors.CYAN))

    def success(self, message: str) -> None:
        self._print(self._color(message, Colors.GREEN))

    def warning(self, message: str) -> None:
        self._print(self._color(f"warning: {message}", Colors.YELLOW))

    def error(self, message: str) -> None:
        self._print(self._color(message, Colors.RED))

    def table(self, headers: List[str], rows: List[List[Any]]) -> None:
        """Display tabular data."""
        if not headers or not rows:
            return

        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))

        header_line = " | ".join(str(h).ljust(widths[i]) for i, h in enumerate(headers))
        self._print(self._color(header_line, Colors.BOLD))
        self._print("-" * len(header_line))
        for row in rows:
            self._print(" | ".join(
                str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
                for i, cell in enumerate(row)
            ))

