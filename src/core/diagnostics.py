"""
Diagnostic sinks for solver progress, warnings and errors.

The engine never depends on a sink doing anything: every sink may be a
no-op. LoggingDiagnostics, the default, forwards to the ``logging`` module.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
import logging


class DiagnosticSink(ABC):
    """Receiver of free-form diagnostic text."""

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass


class NullDiagnostics(DiagnosticSink):
    """Discards everything."""

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class LoggingDiagnostics(DiagnosticSink):
    """Forwards diagnostics to a standard library logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("src.optimization")

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)


class RecordingDiagnostics(DiagnosticSink):
    """
    Keeps (level, message) pairs in memory.

    Example:
        >>> sink = RecordingDiagnostics()
        >>> sink.error("Invalid dimensions")
        >>> sink.errors
        ['Invalid dimensions']
    """

    def __init__(self):
        self.records: List[Tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    @property
    def errors(self) -> List[str]:
        return [msg for level, msg in self.records if level == "error"]

    @property
    def warnings(self) -> List[str]:
        return [msg for level, msg in self.records if level == "warning"]

    def clear(self) -> None:
        self.records.clear()
