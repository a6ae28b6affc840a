"""IDT simulator: an interrupt descriptor table you drive from the keyboard.

Re-exports public symbols so callers can write::

    from idt_sim import Engine, ScriptedConsole
"""

from idt_sim.config import EngineConfig
from idt_sim.console import (
    Console,
    InputReadError,
    ScriptedConsole,
    TerminalConsole,
    TerminalModeError,
)
from idt_sim.context import EngineContext
from idt_sim.dispatcher import (
    CommandNotFoundError,
    DispatchError,
    Dispatcher,
    SignalDisabledError,
    SymbolNotMappedError,
)
from idt_sim.engine import Engine, EngineState
from idt_sim.idt import Command, CommandKind, CommandTable, build_default_commands
from idt_sim.parser import CommandName, InputParser, ParserState, SymbolInput
from idt_sim.session_log import SessionEntry, SessionLog
from idt_sim.signals import (
    Signal,
    SignalError,
    SignalIndexError,
    SignalTable,
    build_default_signals,
)

__all__ = [
    "Command",
    "CommandKind",
    "CommandName",
    "CommandNotFoundError",
    "CommandTable",
    "Console",
    "DispatchError",
    "Dispatcher",
    "Engine",
    "EngineConfig",
    "EngineContext",
    "EngineState",
    "InputParser",
    "InputReadError",
    "ParserState",
    "ScriptedConsole",
    "SessionEntry",
    "SessionLog",
    "Signal",
    "SignalDisabledError",
    "SignalError",
    "SignalIndexError",
    "SignalTable",
    "SymbolInput",
    "SymbolNotMappedError",
    "TerminalConsole",
    "TerminalModeError",
    "build_default_commands",
    "build_default_signals",
]
