"""Diagnostic audit log.

The session log is what the user asked for; this is what the simulator
did about it.  The dispatcher records every routine it runs and every
input it refuses, the engine records startup, read failures and
terminal-mode trouble.  Nothing here is shown on screen: tests and
embedding code inspect it through ``filter``.

Levels are an IntEnum so ``min_level`` filtering is a plain ``>=``.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity of an audit entry."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One audit record.

    Attributes:
        level: Severity of the event.
        message: What happened, e.g. ``"dispatch listc"``.
        source: The component that recorded it, ``"engine"`` or
            ``"dispatcher"``.

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Unbounded, append-only audit trail owned by an engine context."""

    def __init__(self) -> None:
        """Create an empty audit trail."""
        self._entries: list[LogEntry] = []

    def __len__(self) -> int:
        """Return the number of recorded entries."""
        return len(self._entries)

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every entry, oldest first."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Record *message* from *source* at *level*."""
        self._entries.append(LogEntry(level=level, message=message, source=source))

    def filter(
        self,
        *,
        min_level: LogLevel = LogLevel.DEBUG,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries at or above *min_level*, optionally from one *source*."""
        return [
            entry
            for entry in self._entries
            if entry.level >= min_level and source in (None, entry.source)
        ]
