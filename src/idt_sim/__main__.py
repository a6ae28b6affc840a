"""Allow ``python -m idt_sim``."""

from idt_sim.repl import run

run()
