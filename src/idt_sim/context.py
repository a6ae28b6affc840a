"""Shared run state handed to the dispatcher and the engine.

Everything a handler may read or change lives on one object built at
startup: both tables, the session log, the audit logger, the console,
and the quit flag.  Nothing is a module-level global, so two engines
(or two tests) never share state.
"""

from dataclasses import dataclass, field
from datetime import datetime

from idt_sim.config import EngineConfig
from idt_sim.console import Console
from idt_sim.idt import CommandTable, build_default_commands
from idt_sim.logging import Logger
from idt_sim.session_log import Clock, SessionLog
from idt_sim.signals import SignalTable, build_default_signals


@dataclass
class EngineContext:
    """Mutable state of one simulator run."""

    console: Console
    config: EngineConfig
    signals: SignalTable
    commands: CommandTable
    session_log: SessionLog
    logger: Logger = field(default_factory=Logger)
    quit: bool = False

    @classmethod
    def create(
        cls,
        console: Console,
        *,
        config: EngineConfig | None = None,
        clock: Clock = datetime.now,
    ) -> "EngineContext":
        """Build a context populated with the default tables.

        Args:
            console: Terminal collaborator for all I/O.
            config: Run parameters (defaults to ``EngineConfig()``).
            clock: Timestamp source for the session log.

        """
        config = EngineConfig() if config is None else config
        return cls(
            console=console,
            config=config,
            signals=build_default_signals(
                capacity=config.signal_capacity, fail_open=config.fail_open
            ),
            commands=build_default_commands(capacity=config.command_capacity),
            session_log=SessionLog(
                capacity=config.log_capacity,
                text_limit=config.log_text_limit,
                clock=clock,
            ),
        )
