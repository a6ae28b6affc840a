"""Tests for the console collaborators.

TerminalConsole is exercised against a pipe (which is not a terminal)
and against patched ``termios`` calls for the raw-mode flag handling.
"""

import io
import os
import termios
from collections.abc import Generator
from contextlib import suppress
from unittest.mock import MagicMock, patch

import pytest

from idt_sim.console import InputReadError, ScriptedConsole, TerminalConsole, TerminalModeError

NCCS = 32
BASE_LFLAG = termios.ICANON | termios.ISIG | termios.ECHO


@pytest.fixture
def pipe() -> Generator[tuple[int, int]]:
    """Yield a (read, write) pipe and close both ends afterwards."""
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        with suppress(OSError):
            os.close(fd)


def _saved_attrs() -> list[object]:
    return [0, 0, 0, BASE_LFLAG, 0, 0, [0] * NCCS]


class TestTerminalConsoleIO:
    """Verify byte reads and text writes."""

    def test_reads_one_byte_at_a_time(self, pipe: tuple[int, int]) -> None:
        """Each read returns the next byte value."""
        read_fd, write_fd = pipe
        os.write(write_fd, b"ab")
        console = TerminalConsole(fd=read_fd, stdout=io.StringIO())
        assert console.read_byte() == ord("a")
        assert console.read_byte() == ord("b")

    def test_end_of_input_raises(self, pipe: tuple[int, int]) -> None:
        """A closed writer makes the next read fail."""
        read_fd, write_fd = pipe
        os.close(write_fd)
        console = TerminalConsole(fd=read_fd, stdout=io.StringIO())
        with pytest.raises(InputReadError, match="End of input"):
            console.read_byte()

    def test_os_error_raises(self) -> None:
        """OS-level read errors become InputReadError."""
        console = TerminalConsole(fd=0, stdout=io.StringIO())
        with (
            patch("idt_sim.console.os.read", side_effect=OSError("bad fd")),
            pytest.raises(InputReadError, match="bad fd"),
        ):
            console.read_byte()

    def test_write_line_and_clear(self) -> None:
        """Lines end with newline; clear emits the ANSI clear sequence."""
        out = io.StringIO()
        console = TerminalConsole(fd=0, stdout=out)
        console.write_line("hello")
        console.clear_screen()
        assert out.getvalue() == "hello\n\033[2J\033[H"


class TestTerminalConsoleRawMode:
    """Verify termios handling."""

    def test_not_a_terminal_skips_raw_mode(self, pipe: tuple[int, int]) -> None:
        """A pipe is not a TTY, so raw mode is skipped and restore is a no-op."""
        read_fd, _write_fd = pipe
        console = TerminalConsole(fd=read_fd, stdout=io.StringIO())
        assert console.enter_raw_mode() is False
        assert console.is_raw is False
        console.restore_mode()

    def test_raw_mode_clears_canon_and_signal_keys(self) -> None:
        """ICANON and ISIG are cleared; ECHO is kept."""
        console = TerminalConsole(fd=0, stdout=io.StringIO())
        setattr_mock = MagicMock()
        with (
            patch("idt_sim.console.os.isatty", return_value=True),
            patch("idt_sim.console.termios.tcgetattr", return_value=_saved_attrs()),
            patch("idt_sim.console.termios.tcsetattr", setattr_mock),
        ):
            assert console.enter_raw_mode() is True
        lflag = setattr_mock.call_args.args[2][3]
        assert not lflag & termios.ICANON
        assert not lflag & termios.ISIG
        assert lflag & termios.ECHO
        assert console.is_raw

    def test_signal_keys_can_stay_enabled(self) -> None:
        """disable_signal_keys=False keeps ISIG."""
        console = TerminalConsole(fd=0, stdout=io.StringIO())
        setattr_mock = MagicMock()
        with (
            patch("idt_sim.console.os.isatty", return_value=True),
            patch("idt_sim.console.termios.tcgetattr", return_value=_saved_attrs()),
            patch("idt_sim.console.termios.tcsetattr", setattr_mock),
        ):
            console.enter_raw_mode(disable_signal_keys=False)
        lflag = setattr_mock.call_args.args[2][3]
        assert lflag & termios.ISIG
        assert not lflag & termios.ICANON

    def test_restore_reapplies_saved_settings(self) -> None:
        """restore_mode writes back exactly what was saved, once."""
        console = TerminalConsole(fd=0, stdout=io.StringIO())
        saved = _saved_attrs()
        setattr_mock = MagicMock()
        with (
            patch("idt_sim.console.os.isatty", return_value=True),
            patch("idt_sim.console.termios.tcgetattr", return_value=saved),
            patch("idt_sim.console.termios.tcsetattr", setattr_mock),
        ):
            console.enter_raw_mode()
            console.restore_mode()
            console.restore_mode()
        expected_calls = 2
        assert setattr_mock.call_count == expected_calls
        assert setattr_mock.call_args.args[2] is saved
        assert console.is_raw is False

    def test_restore_failure_raises(self) -> None:
        """A refused restore surfaces as TerminalModeError."""
        console = TerminalConsole(fd=0, stdout=io.StringIO())
        with (
            patch("idt_sim.console.os.isatty", return_value=True),
            patch("idt_sim.console.termios.tcgetattr", return_value=_saved_attrs()),
            patch(
                "idt_sim.console.termios.tcsetattr",
                side_effect=[None, termios.error("refused")],
            ),
        ):
            console.enter_raw_mode()
            with pytest.raises(TerminalModeError, match="restore"):
                console.restore_mode()

    def test_enter_failure_raises(self) -> None:
        """A refused tcgetattr surfaces as TerminalModeError."""
        console = TerminalConsole(fd=0, stdout=io.StringIO())
        with (
            patch("idt_sim.console.os.isatty", return_value=True),
            patch("idt_sim.console.termios.tcgetattr", side_effect=termios.error("nope")),
            pytest.raises(TerminalModeError, match="raw mode"),
        ):
            console.enter_raw_mode()


class TestScriptedConsole:
    """Verify the in-memory console used by the engine tests."""

    def test_replays_fed_bytes(self) -> None:
        """Bytes come back in FIFO order, strings are accepted too."""
        console = ScriptedConsole(b"a")
        console.feed(":q")
        assert [console.read_byte() for _ in range(3)] == [ord("a"), ord(":"), ord("q")]

    def test_exhausted_raises(self) -> None:
        """Reading past the script raises InputReadError."""
        with pytest.raises(InputReadError):
            ScriptedConsole().read_byte()

    def test_records_output(self) -> None:
        """Multi-line writes are split into lines."""
        console = ScriptedConsole()
        console.write_line("a\nb")
        console.write_line()
        assert console.lines == ["a", "b", ""]
        assert console.output == "a\nb\n"
