"""The dispatcher: resolves parsed input and runs command routines.

The parser hands over one of two events and the dispatcher takes it
from there:

    - **CommandName** (``:mask``): log it, look the name up in the
      command table, check the signal gates of the command's keymaps,
      then run the routine.
    - **SymbolInput** (``^L``): log it, check the signal gate of that
      key, look the key up among all keymaps, then run the routine.

Every refusal is an exception from the ``DispatchError`` family,
raised where it is detected and turned into a user-facing message in
one place (``_report``).  Refusals never change state.

Design choices:
    - **Routines dispatched via a dict keyed by CommandKind.**  The
      table stores tags, the dispatcher owns the code.  Adding a
      command means writing a method and adding one dict entry.
    - **Logging happens before the routine runs**, so ``logs`` sees
      itself and a quitting session still records ``quit``.
    - **Index prompts read from the same console** as the main loop,
      one byte at a time.
"""

from collections.abc import Callable

from idt_sim.console import InputReadError
from idt_sim.context import EngineContext
from idt_sim.idt import Command, CommandKind
from idt_sim.keys import ERASE_KEYS, KEY_NEWLINE, mnemonic
from idt_sim.logging import LogLevel
from idt_sim.parser import CommandName, ParsedInput, SymbolInput
from idt_sim.signals import Signal, SignalIndexError, parse_signal_index

_SOURCE = "dispatcher"

# Longest index a prompt accepts before it stops reading.
_MAX_INDEX_DIGITS = 3


class DispatchError(Exception):
    """Base class for input the dispatcher refuses."""


class CommandNotFoundError(DispatchError):
    """Raised when a typed name matches no command."""


class SymbolNotMappedError(DispatchError):
    """Raised when a key matches no command's keymaps."""


class SignalDisabledError(DispatchError):
    """Raised when the signal gating a command or key is masked."""


class Dispatcher:
    """Route parsed input to command routines."""

    def __init__(self, context: EngineContext) -> None:
        """Create a dispatcher operating on *context*."""
        self._context = context

        # Routine table: maps each command kind to its handler method.
        self._handlers: dict[CommandKind, Callable[[], None]] = {
            CommandKind.LIST_COMMANDS: self._list_commands,
            CommandKind.TRIGGER: self._trigger_signal,
            CommandKind.QUIT: self._quit_program,
            CommandKind.MASK: self._mask_signal,
            CommandKind.UNMASK: self._unmask_signal,
            CommandKind.MASK_ALL: self._mask_all_signals,
            CommandKind.UNMASK_ALL: self._unmask_all_signals,
            CommandKind.CLEAR: self._clear_screen,
            CommandKind.PRINT_LOGS: self._print_logs,
        }

    def handle(self, event: ParsedInput) -> None:
        """Dispatch a parser event."""
        match event:
            case CommandName(name=name):
                self.dispatch_command(name)
            case SymbolInput(key=key):
                self.dispatch_symbol(key)

    def dispatch_command(self, name: str) -> None:
        """Run the command typed as *name* in line mode."""
        self._accept(name)
        try:
            command = self._context.commands.find_by_name(name)
            if command is None:
                msg = f"Command '{name}' not found"
                raise CommandNotFoundError(msg)
            self._check_command_gates(command)
        except DispatchError as e:
            self._report(e)
            return
        self._invoke(command)

    def dispatch_symbol(self, key: int, *, record: bool = True) -> None:
        """Run the command mapped to a single *key*.

        Args:
            key: The raw byte typed outside line mode.
            record: Whether to log the key; False for keys raised
                internally by ``trigger``.

        """
        if record:
            self._accept(chr(key))
        try:
            if not self._context.signals.is_enabled(key):
                msg = f"The signal associated to '{mnemonic(key)}' is current disabled"
                raise SignalDisabledError(msg)
            command = self._context.commands.find_by_symbol(key)
            if command is None:
                msg = f"Symbol '{mnemonic(key)}' not mapped"
                raise SymbolNotMappedError(msg)
        except DispatchError as e:
            self._report(e)
            return
        self._invoke(command)

    # -- Dispatch plumbing -------------------------------------------------

    def _accept(self, text: str) -> None:
        if self._context.config.clear_before_dispatch:
            self._context.console.clear_screen()
        self._context.session_log.append(text)

    def _check_command_gates(self, command: Command) -> None:
        """Refuse *command* if a signal governing one of its keymaps is masked.

        Only keymaps that a signal actually owns take part, so this does
        not go through ``SignalTable.is_enabled``: with ``fail_open``
        off, unowned keymaps would otherwise block every typed command.
        With the default ``fail_open`` the result is the same.
        """
        for key in command.keymaps:
            signal = self._context.signals.find_by_key(key)
            if signal is not None and not signal.enabled:
                msg = f"The signal associated to '{command.name}' is current disabled"
                raise SignalDisabledError(msg)

    def _invoke(self, command: Command) -> None:
        self._context.logger.log(LogLevel.INFO, f"dispatch {command.name}", source=_SOURCE)
        self._handlers[command.kind]()

    def _report(self, error: DispatchError) -> None:
        self._context.logger.log(
            LogLevel.WARNING, f"{type(error).__name__}: {error}", source=_SOURCE
        )
        self._write(f"  {error}")

    def _write(self, text: str = "") -> None:
        self._context.console.write_line(text)

    # -- Index prompt ------------------------------------------------------

    def _choose_signal(self, verb: str) -> tuple[int, Signal] | None:
        """List the signals and ask the user to pick one by 1-based index.

        Returns:
            The 0-based index and the chosen signal, or None if the
            answer was unusable (already reported to the user).

        """
        signals = self._context.signals
        for number, signal in enumerate(signals.list(), start=1):
            self._write(f"{signal.name}: {number}")
        self._write()
        self._write(f"Enter the index of the signal you want to {verb}:")
        try:
            index = parse_signal_index(self._read_index(), signals)
        except InputReadError as e:
            self._context.logger.log(LogLevel.ERROR, f"prompt read failed: {e}", source=_SOURCE)
            self._write("  The key could not be read")
            return None
        except SignalIndexError as e:
            self._context.logger.log(LogLevel.WARNING, str(e), source=_SOURCE)
            self._write(f"  {e}")
            return None
        return index, signals.get(index)

    def _read_index(self) -> str:
        digits: list[str] = []
        while len(digits) < _MAX_INDEX_DIGITS:
            byte = self._context.console.read_byte()
            if byte == KEY_NEWLINE:
                break
            if byte in ERASE_KEYS:
                if digits:
                    digits.pop()
                continue
            digits.append(chr(byte))
        return "".join(digits)

    # -- Command routines --------------------------------------------------

    def _list_commands(self) -> None:
        """Print every command with its description and keymaps."""
        for command in self._context.commands.list():
            keys = "".join(f" {mnemonic(key)}" for key in command.keymaps)
            self._write(f" {command.name}: {command.description} [{keys} ]")

    def _trigger_signal(self) -> None:
        """Raise the key of a chosen signal as if it had been typed."""
        choice = self._choose_signal("trigger")
        if choice is None:
            return
        _index, signal = choice
        if not signal.enabled:
            self._write(f"  {signal.name} is current disabled")
            return
        self.dispatch_symbol(signal.key, record=False)

    def _quit_program(self) -> None:
        """Ask the engine to stop before its next read."""
        self._context.quit = True
        self._context.logger.log(LogLevel.INFO, "quit requested", source=_SOURCE)

    def _mask_signal(self) -> None:
        """Disable a chosen signal."""
        choice = self._choose_signal("mask")
        if choice is None:
            return
        index, signal = choice
        if not signal.enabled:
            self._write(f"  {signal.name} signal is already disabled")
            return
        self._context.signals.set_enabled(index, False)  # noqa: FBT003
        self._write(f"  {signal.name} signal has been disabled")

    def _unmask_signal(self) -> None:
        """Enable a chosen signal."""
        choice = self._choose_signal("unmask")
        if choice is None:
            return
        index, signal = choice
        if signal.enabled:
            self._write(f"  {signal.name} signal is already active")
            return
        self._context.signals.set_enabled(index, True)  # noqa: FBT003
        self._write(f"  {signal.name} signal has been activated")

    def _mask_all_signals(self) -> None:
        self._context.signals.set_all(False)  # noqa: FBT003
        self._write("  All signals were masked")

    def _unmask_all_signals(self) -> None:
        self._context.signals.set_all(True)  # noqa: FBT003
        self._write("  All signals were unmasked")

    def _clear_screen(self) -> None:
        self._context.console.clear_screen()

    def _print_logs(self) -> None:
        """Print the session log with formatted timestamps."""
        timestamp_format = self._context.config.timestamp_format
        for entry in self._context.session_log.entries:
            if entry.text:
                self._write(entry.format(timestamp_format))
