"""Diagnostics channel for prepare/clean runs.

Every fallback or ambiguity decision taken while materializing resources is
recorded here so the caller can decide what to surface. Entries are also
forwarded to the standard ``logging`` logger named by the emitter.

Usage:
    diag = Diagnostics()
    diag.verbose("Updating icons at %s", res_dir)
    diag.warn("Monochrome icon found but without adaptive properties.")
    for event in diag.events(Severity.WARN):
        print(event)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class Severity(str, Enum):
    """Operator-facing importance of a diagnostic."""

    VERBOSE = "verbose"  # file operations, defaults taken
    LOG = "log"          # noteworthy guesses (e.g. several activity candidates)
    WARN = "warn"        # invalid or unsupported configuration


_LEVELS = {
    Severity.VERBOSE: logging.DEBUG,
    Severity.LOG: logging.INFO,
    Severity.WARN: logging.WARNING,
}


@dataclass
class DiagnosticEvent:
    """Single diagnostic entry.

    Attributes:
        severity: How loud the operator should hear about it
        message: Fully formatted message
        source: Logger name of the emitting module
        timestamp: Wall clock time the event was recorded
    """
    severity: Severity
    message: str
    source: str = "droidprep"
    timestamp: float = field(default_factory=time.time)

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {"severity": self.severity.value, "message": self.message, "source": self.source}


class Diagnostics:
    """Ordered collector of :class:`DiagnosticEvent` entries.

    ``child(name)`` returns a view that records into the same list but logs
    under another logger name, so each materializer keeps its own logger.
    """

    def __init__(self, name: str = "droidprep", *, _events: Optional[list[DiagnosticEvent]] = None):
        self.name = name
        self.logger = logging.getLogger(name)
        self._events: list[DiagnosticEvent] = [] if _events is None else _events
        self._subscribers: list[Callable[[DiagnosticEvent], None]] = []

    def child(self, name: str) -> "Diagnostics":
        view = Diagnostics(name, _events=self._events)
        view._subscribers = self._subscribers
        return view

    def subscribe(self, callback: Callable[[DiagnosticEvent], None]) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def emit(self, severity: Severity, message: str, *args: object) -> DiagnosticEvent:
        if args:
            message = message % args
        event = DiagnosticEvent(severity, message, source=self.name)
        self._events.append(event)
        self.logger.log(_LEVELS[severity], message)
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception as e:
                self.logger.error("[events] Subscriber error: %s", e, exc_info=True)
        return event

    def verbose(self, message: str, *args: object) -> DiagnosticEvent:
        return self.emit(Severity.VERBOSE, message, *args)

    def log(self, message: str, *args: object) -> DiagnosticEvent:
        return self.emit(Severity.LOG, message, *args)

    def warn(self, message: str, *args: object) -> DiagnosticEvent:
        return self.emit(Severity.WARN, message, *args)

    def file_op(self, message: str) -> DiagnosticEvent:
        """Record a file operation, indented like the rest of the sync log."""
        return self.verbose("  " + message)

    def events(self, severity: Optional[Severity] = None) -> list[DiagnosticEvent]:
        if severity is None:
            return list(self._events)
        return [e for e in self._events if e.severity is severity]

    def messages(self, severity: Optional[Severity] = None) -> list[str]:
        return [e.message for e in self.events(severity)]

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
