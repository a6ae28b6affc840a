"""Input parser: turns raw bytes into dispatchable events.

The parser is a two-state machine fed one byte at a time:

    IDLE ──':'──▶ LINE_MODE ──'\\n' (non-empty)──▶ IDLE
     │                                               ▲
     └── any other byte: emit a symbol ──────────────┘

In **IDLE** every byte is a symbol: a direct trigger such as ``^L``
or ``q``.  A newline is ignored.  The colon switches to **LINE_MODE**,
where bytes collect into a command name until newline.

The line buffer has a fixed capacity.  Once full, further characters
are ignored until the newline arrives; backspace still works, so the
user can edit a full line.  A newline on an empty buffer is ignored
and the parser stays in line mode waiting for a name.

The parser does no I/O and no dispatching.  ``feed()`` returns an
event (or None) and the caller decides what to do with it.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from idt_sim.idt import MAX_COMMAND_NAME
from idt_sim.keys import ERASE_KEYS, KEY_COLON, KEY_NEWLINE


class ParserState(StrEnum):
    """The two input modes."""

    IDLE = "idle"
    LINE_MODE = "line_mode"


@dataclass(frozen=True)
class CommandName:
    """A complete command name typed in line mode."""

    name: str


@dataclass(frozen=True)
class SymbolInput:
    """A single byte typed outside line mode."""

    key: int


ParsedInput: TypeAlias = CommandName | SymbolInput


class InputParser:
    """Byte-at-a-time state machine for the two input modes."""

    def __init__(self, *, line_capacity: int = MAX_COMMAND_NAME) -> None:
        """Create a parser in the IDLE state.

        Args:
            line_capacity: Maximum characters in a command name.

        """
        self._line_capacity = line_capacity
        self._state = ParserState.IDLE
        self._buffer: list[str] = []

    @property
    def state(self) -> ParserState:
        """Return the current input mode."""
        return self._state

    @property
    def buffer(self) -> str:
        """Return the partially typed command name."""
        return "".join(self._buffer)

    @property
    def line_capacity(self) -> int:
        """Return the maximum command-name length."""
        return self._line_capacity

    def reset(self) -> None:
        """Drop any partial line and return to IDLE."""
        self._state = ParserState.IDLE
        self._buffer.clear()

    def feed(self, byte: int) -> ParsedInput | None:
        """Consume one byte.

        Args:
            byte: The raw input byte.

        Returns:
            A ``CommandName`` when a line completes, a ``SymbolInput``
            for a direct key, or None when the byte was absorbed.

        """
        if self._state is ParserState.IDLE:
            return self._feed_idle(byte)
        return self._feed_line(byte)

    def _feed_idle(self, byte: int) -> ParsedInput | None:
        if byte == KEY_COLON:
            self._state = ParserState.LINE_MODE
            self._buffer.clear()
            return None
        if byte == KEY_NEWLINE:
            return None
        return SymbolInput(key=byte)

    def _feed_line(self, byte: int) -> ParsedInput | None:
        if byte == KEY_NEWLINE:
            if not self._buffer:
                return None
            name = self.buffer
            self.reset()
            return CommandName(name=name)
        if byte in ERASE_KEYS:
            if self._buffer:
                self._buffer.pop()
            return None
        # Full buffer: ignore until newline.
        if len(self._buffer) < self._line_capacity:
            self._buffer.append(chr(byte))
        return None
