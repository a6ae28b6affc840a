"""Interactive entrypoint for the simulator.

This module is the thin I/O wrapper around the engine.  It connects a
``TerminalConsole`` to ``stdin``/``stdout``, builds an engine with the
default configuration, and runs it until the user quits.

The engine itself is fully testable with a ``ScriptedConsole``; only
``run()`` touches the real terminal.
"""

from idt_sim.config import EngineConfig
from idt_sim.console import TerminalConsole
from idt_sim.engine import Engine


def run() -> None:
    """Start the simulator on the controlling terminal.

    Handles:
    - Raw-mode setup and restoration (inside the engine).
    - Ctrl+C when signal keys were left enabled.
    """
    console = TerminalConsole()
    engine = Engine(console=console, config=EngineConfig())
    try:
        engine.run()
    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201
