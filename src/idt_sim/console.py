"""Console collaborators: terminal mode, byte input, text output.

The engine never touches ``stdin``/``stdout`` directly.  It talks to a
**Console**, the interface every console must implement:

    ``enter_raw_mode()`` / ``restore_mode()``: switch the line discipline.
    ``read_byte()``: block for exactly one input byte.
    ``write_line()``: print one line of text.
    ``clear_screen()``: wipe the display.

Two consoles are provided:
    - ``TerminalConsole``: the real thing, backed by a file descriptor
      and ``termios``.
    - ``ScriptedConsole``: a FIFO of pre-loaded bytes that records
      everything written to it, so whole sessions can be replayed in
      tests without a terminal.

Why raw mode?
    A terminal normally runs in *canonical* mode: it collects a whole
    line, handles backspace itself, and turns ``^C`` into SIGINT.  The
    simulator wants every keystroke the moment it is typed, including
    ``^C``, so it clears ``ICANON`` (and ``ISIG``) for the duration of
    the run and puts the saved settings back on the way out.
"""

import os
import sys
import termios
from collections import deque
from typing import Any, Protocol, TextIO

_LFLAG = 3
_CC = 6
_CLEAR_SEQUENCE = "\033[2J\033[H"


class InputReadError(Exception):
    """Raised when the input source produced no byte."""


class TerminalModeError(Exception):
    """Raised when terminal settings cannot be changed or restored."""


class Console(Protocol):
    """Interface the engine needs from its terminal."""

    def enter_raw_mode(self, *, disable_signal_keys: bool = True) -> bool:
        """Switch to raw mode; return False if there is no terminal."""
        ...  # pragma: no cover

    def restore_mode(self) -> None:
        """Put back the settings saved by ``enter_raw_mode``."""
        ...  # pragma: no cover

    def read_byte(self) -> int:
        """Return the next input byte."""
        ...  # pragma: no cover

    def write_line(self, text: str = "") -> None:
        """Print one line of text."""
        ...  # pragma: no cover

    def clear_screen(self) -> None:
        """Wipe the display."""
        ...  # pragma: no cover


class TerminalConsole:
    """Console backed by a real file descriptor and output stream."""

    def __init__(self, *, fd: int | None = None, stdout: TextIO | None = None) -> None:
        """Create a console.

        Args:
            fd: Input file descriptor (defaults to stdin).
            stdout: Output stream (defaults to ``sys.stdout``).

        """
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._stdout = sys.stdout if stdout is None else stdout
        self._saved: list[Any] | None = None

    @property
    def is_raw(self) -> bool:
        """Return True while raw mode is active."""
        return self._saved is not None

    def enter_raw_mode(self, *, disable_signal_keys: bool = True) -> bool:
        """Disable canonical input (and signal keys) on the terminal.

        Returns:
            True if raw mode was entered, False if the input is not a
            terminal and there is nothing to change.

        Raises:
            TerminalModeError: If the terminal refused the new settings.

        """
        if self._saved is not None:
            return True
        if not os.isatty(self._fd):
            return False
        try:
            saved = termios.tcgetattr(self._fd)
            raw = list(saved)
            raw[_CC] = list(saved[_CC])
            flags = termios.ICANON | (termios.ISIG if disable_signal_keys else 0)
            raw[_LFLAG] &= ~flags
            raw[_CC][termios.VMIN] = 1
            raw[_CC][termios.VTIME] = 0
            termios.tcsetattr(self._fd, termios.TCSANOW, raw)
        except termios.error as e:
            msg = f"Cannot enter raw mode: {e}"
            raise TerminalModeError(msg) from e
        self._saved = saved
        return True

    def restore_mode(self) -> None:
        """Reapply the settings saved by ``enter_raw_mode``.

        Calling this without a prior successful ``enter_raw_mode`` is a
        no-op.

        Raises:
            TerminalModeError: If the terminal refused the settings.

        """
        if self._saved is None:
            return
        saved, self._saved = self._saved, None
        try:
            termios.tcsetattr(self._fd, termios.TCSANOW, saved)
        except termios.error as e:
            msg = f"Cannot restore terminal settings: {e}"
            raise TerminalModeError(msg) from e

    def read_byte(self) -> int:
        """Block until one byte arrives.

        Raises:
            InputReadError: On end of input or an OS-level read error.

        """
        try:
            data = os.read(self._fd, 1)
        except OSError as e:
            msg = f"Read failed: {e}"
            raise InputReadError(msg) from e
        if not data:
            msg = "End of input"
            raise InputReadError(msg)
        return data[0]

    def write_line(self, text: str = "") -> None:
        """Print *text* followed by a newline."""
        print(text, file=self._stdout, flush=True)  # noqa: T201

    def clear_screen(self) -> None:
        """Clear the screen and home the cursor."""
        self._stdout.write(_CLEAR_SEQUENCE)
        self._stdout.flush()


class ScriptedConsole:
    """In-memory console that replays queued bytes.

    Models a terminal as a FIFO: ``feed()`` enqueues keystrokes and
    ``read_byte()`` dequeues them.  Output lines, screen clears and
    terminal-mode calls are recorded for inspection.
    """

    def __init__(self, data: bytes | str = b"", *, fail_restore: bool = False) -> None:
        """Create a console preloaded with *data*.

        Args:
            data: Initial keystrokes.
            fail_restore: Make ``restore_mode`` raise, to exercise the
                warning path.

        """
        self._input: deque[int] = deque()
        self._fail_restore = fail_restore
        self.lines: list[str] = []
        self.clears = 0
        self.raw_entered = 0
        self.restored = 0
        self.feed(data)

    @property
    def pending(self) -> int:
        """Return the number of unread bytes."""
        return len(self._input)

    @property
    def output(self) -> str:
        """Return everything written, joined by newlines."""
        return "\n".join(self.lines)

    def feed(self, data: bytes | str) -> None:
        """Queue more keystrokes."""
        if isinstance(data, str):
            data = data.encode("latin-1")
        self._input.extend(data)

    def enter_raw_mode(self, *, disable_signal_keys: bool = True) -> bool:  # noqa: ARG002
        """Record the call; a scripted console is always raw."""
        self.raw_entered += 1
        return True

    def restore_mode(self) -> None:
        """Record the call, or fail if configured to."""
        self.restored += 1
        if self._fail_restore:
            msg = "Cannot restore terminal settings: scripted failure"
            raise TerminalModeError(msg)

    def read_byte(self) -> int:
        """Return the next queued byte.

        Raises:
            InputReadError: When the script is exhausted.

        """
        if not self._input:
            msg = "End of input"
            raise InputReadError(msg)
        return self._input.popleft()

    def write_line(self, text: str = "") -> None:
        """Record *text* as output lines."""
        self.lines.extend(text.split("\n"))

    def clear_screen(self) -> None:
        """Count the clear."""
        self.clears += 1
