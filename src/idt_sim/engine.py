"""The engine: drives input through the parser and dispatcher.

The engine owns the run.  It prints the banner, puts the terminal in
raw mode, and then loops:

    1. **Check**: has a handler asked to quit?  If so, stop.
    2. **Read**: block for one byte from the console.
    3. **Parse**: feed the byte to the parser.
    4. **Dispatch**: hand any completed event to the dispatcher.

Lifecycle::

    RUNNING  →  STOPPED

The quit flag is polled once per iteration, before the read.  A quit
requested inside a handler therefore takes effect after the handler
returns and before the next keystroke is consumed.

Read failures are reported and retried; they never stop the loop
unless ``EngineConfig.max_read_failures`` caps them.  Raw mode is held
as a scoped resource, so the terminal is restored on every way out of
``run()``, including exceptions.  A failed restore becomes a warning
rather than a crash.
"""

from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from enum import StrEnum

from idt_sim.config import EngineConfig
from idt_sim.console import Console, InputReadError, TerminalModeError
from idt_sim.context import EngineContext
from idt_sim.dispatcher import Dispatcher
from idt_sim.logging import Logger, LogLevel
from idt_sim.parser import InputParser
from idt_sim.session_log import Clock

_SOURCE = "engine"

FAREWELL = "INTERRUPTION: Program interrupted by user"


class EngineState(StrEnum):
    """Lifecycle phases of the engine."""

    RUNNING = "running"
    STOPPED = "stopped"


def format_banner() -> str:
    """Return the startup banner."""
    return (
        "IDT simulator\n\n"
        "  Type ':' to enter in command line\n"
        "  Use the 'listc' (in command line) command or the '^L' symbol to see all "
        "available commands\n"
    )


class Engine:
    """Read-parse-dispatch loop over a console."""

    def __init__(
        self,
        *,
        console: Console,
        config: EngineConfig | None = None,
        clock: Clock = datetime.now,
    ) -> None:
        """Build the tables, log, parser and dispatcher for one run.

        Args:
            console: Terminal collaborator for all I/O.
            config: Run parameters (defaults to ``EngineConfig()``).
            clock: Timestamp source for the session log.

        """
        self._context = EngineContext.create(console, config=config, clock=clock)
        self._parser = InputParser(line_capacity=self._context.config.line_capacity)
        self._dispatcher = Dispatcher(self._context)
        self._state = EngineState.RUNNING
        self._read_failures = 0

        for key, names in self._context.commands.ambiguous_keymaps().items():
            self.logger.log(
                LogLevel.WARNING,
                f"keymap {key:#04x} claimed by {', '.join(names)}; {names[0]} wins",
                source=_SOURCE,
            )
        self.logger.log(
            LogLevel.INFO,
            f"{len(self._context.commands)} commands, {len(self._context.signals)} signals",
            source=_SOURCE,
        )

    @property
    def state(self) -> EngineState:
        """Return the current lifecycle phase."""
        return self._state

    @property
    def context(self) -> EngineContext:
        """Return the shared run state."""
        return self._context

    @property
    def parser(self) -> InputParser:
        """Return the input parser."""
        return self._parser

    @property
    def dispatcher(self) -> Dispatcher:
        """Return the dispatcher."""
        return self._dispatcher

    @property
    def logger(self) -> Logger:
        """Return the diagnostic audit log."""
        return self._context.logger

    @property
    def quit_requested(self) -> bool:
        """Return True once a handler has asked to stop."""
        return self._context.quit

    def step(self, byte: int) -> None:
        """Feed one byte through the parser and dispatch any event."""
        event = self._parser.feed(byte)
        if event is not None:
            self._dispatcher.handle(event)

    def read_once(self) -> bool:
        """Read and process one byte.

        Returns:
            True if a byte was read, False if the read failed (the
            failure has been reported).

        """
        try:
            byte = self._context.console.read_byte()
        except InputReadError as e:
            self._read_failures += 1
            self.logger.log(LogLevel.ERROR, f"read failed: {e}", source=_SOURCE)
            self._context.console.write_line("The entered key could not be read")
            return False
        self._read_failures = 0
        self.step(byte)
        return True

    def run(self) -> None:
        """Run until a handler requests quit.

        Raises:
            RuntimeError: If the engine has already stopped.

        """
        if self._state is not EngineState.RUNNING:
            msg = f"Cannot run: engine is {self._state}, expected running"
            raise RuntimeError(msg)

        console = self._context.console
        console.write_line(format_banner())
        self.logger.log(LogLevel.INFO, "engine started", source=_SOURCE)

        try:
            with self._raw_mode():
                while not self._context.quit:
                    if self._read_failures_exhausted():
                        self.logger.log(
                            LogLevel.ERROR, "giving up after repeated read failures", source=_SOURCE
                        )
                        break
                    self.read_once()
        finally:
            self._state = EngineState.STOPPED

        if self._context.quit:
            console.write_line(FAREWELL)
        self.logger.log(LogLevel.INFO, "engine stopped", source=_SOURCE)

    def _read_failures_exhausted(self) -> bool:
        limit = self._context.config.max_read_failures
        return limit is not None and self._read_failures >= limit

    @contextmanager
    def _raw_mode(self) -> Generator[None]:
        """Hold the terminal in raw mode for the duration of the block."""
        console = self._context.console
        try:
            entered = console.enter_raw_mode(
                disable_signal_keys=self._context.config.disable_signal_keys
            )
        except TerminalModeError as e:
            self._warn(str(e))
            entered = False
        else:
            if not entered:
                self.logger.log(
                    LogLevel.INFO, "input is not a terminal; raw mode skipped", source=_SOURCE
                )
        try:
            yield
        finally:
            if entered:
                try:
                    console.restore_mode()
                except TerminalModeError as e:
                    self._warn(str(e))

    def _warn(self, message: str) -> None:
        self.logger.log(LogLevel.WARNING, message, source=_SOURCE)
        self._context.console.write_line(f"Warning: {message}")
