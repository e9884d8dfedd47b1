from .console_reporter import Colors, ConsoleReporter
from .file_store import LocalFileStore

__all__ = ["Colors", "ConsoleReporter", "LocalFileStore"]
