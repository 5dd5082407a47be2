"""Logging utilities for adjtree."""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Log levels for the adjtree logger."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


class ILoggable(ABC):
    """Interface for logging functionality."""

    @abstractmethod
    def log(self, level: LogLevel, message: str, *args: Any) -> None:
        """Log a message at the specified level."""
        ...

    def debug(self, message: str, *args: Any) -> None:
        """Log a debug message."""
        self.log(LogLevel.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> None:
        """Log an info message."""
        self.log(LogLevel.INFO, message, *args)

    def warning(self, message: str, *args: Any) -> None:
        """Log a warning message."""
        self.log(LogLevel.WARNING, message, *args)

    def error(self, message: str, *args: Any) -> None:
        """Log an error message."""
        self.log(LogLevel.ERROR, message, *args)


class MemoryLogger(ILoggable):
    """Logger that keeps formatted records in memory, at or above *min_level*."""

    def __init__(self, min_level: LogLevel = LogLevel.DEBUG) -> None:
        self.min_level = min_level
        self.records: list[tuple[LogLevel, str]] = []

    def log(self, level: LogLevel, message: str, *args: Any) -> None:
        if level < self.min_level:
            return
        self.records.append((level, message % args if args else message))

    @property
    def messages(self) -> list[str]:
        return [message for _, message in self.records]
