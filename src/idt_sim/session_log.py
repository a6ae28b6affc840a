"""Bounded session log.

Every input the dispatcher accepts (a typed command name or a single
symbol key) is recorded here with a timestamp, and the ``logs`` command
prints the record back.

The log has a fixed number of slots.  When they are all used, new
entries are **dropped**, not rotated in: the log keeps the opening of
the session.  ``append`` reports the drop through its return value but
never raises, so a full log is invisible to the user.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TypeAlias

from idt_sim.keys import render_text

DEFAULT_LOG_CAPACITY = 30
DEFAULT_TEXT_LIMIT = 49
DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

Clock: TypeAlias = Callable[[], datetime]


@dataclass(frozen=True)
class SessionEntry:
    """One recorded input."""

    timestamp: datetime
    text: str

    def format(self, timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
        """Format as ``[timestamp]: text`` with control keys shown as mnemonics."""
        return f"[{self.timestamp.strftime(timestamp_format)}]: {render_text(self.text)}"


class SessionLog:
    """Fixed-capacity, drop-newest record of accepted inputs."""

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_LOG_CAPACITY,
        text_limit: int = DEFAULT_TEXT_LIMIT,
        clock: Clock = datetime.now,
    ) -> None:
        """Create an empty log.

        Args:
            capacity: Maximum number of entries kept.
            text_limit: Entries longer than this are truncated.
            clock: Source of timestamps.

        """
        self._capacity = capacity
        self._text_limit = text_limit
        self._clock = clock
        self._entries: list[SessionEntry] = []

    @property
    def capacity(self) -> int:
        """Return the number of slots in the log."""
        return self._capacity

    @property
    def entries(self) -> list[SessionEntry]:
        """Return all entries in insertion order."""
        return list(self._entries)

    @property
    def is_full(self) -> bool:
        """Return True once every slot is used."""
        return len(self._entries) >= self._capacity

    def __len__(self) -> int:
        """Return the number of stored entries."""
        return len(self._entries)

    def append(self, text: str) -> bool:
        """Record *text* with the current time.

        Returns:
            True if the entry was stored, False if the log was full and
            the entry was dropped.

        """
        if self.is_full:
            return False
        self._entries.append(SessionEntry(timestamp=self._clock(), text=text[: self._text_limit]))
        return True
