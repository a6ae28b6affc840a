"""The interrupt descriptor table: command registry.

In real hardware the IDT maps a vector number to the routine the CPU
runs when that interrupt fires.  Our table maps two things to a
routine:

    - a **command name** typed in line mode (``:listc``), and
    - up to three **keymaps**, raw bytes that fire the routine on a
      single keystroke (``^L``).

Handlers are not stored as callables.  Each entry carries a
``CommandKind`` tag and the dispatcher owns the routine for every tag,
so the table stays plain data that can be listed, compared and tested.

Keymap conflicts (two commands claiming the same byte) are a
configuration bug rather than a runtime case.  The table accepts them,
resolves lookups by lowest index, and reports them through
``ambiguous_keymaps()`` so startup code can flag them.
"""

from dataclasses import dataclass
from enum import StrEnum

from idt_sim.keys import (
    KEY_CTRL_A,
    KEY_CTRL_C,
    KEY_CTRL_K,
    KEY_CTRL_L,
    KEY_CTRL_M,
    KEY_CTRL_T,
    KEY_CTRL_U,
    validate_byte,
)

DEFAULT_COMMAND_CAPACITY = 10
MAX_COMMAND_NAME = 14
MAX_DESCRIPTION = 49
MAX_KEYMAPS = 3


class CommandKind(StrEnum):
    """The routine a command runs when dispatched."""

    LIST_COMMANDS = "list_commands"
    TRIGGER = "trigger"
    QUIT = "quit"
    MASK = "mask"
    UNMASK = "unmask"
    MASK_ALL = "mask_all"
    UNMASK_ALL = "unmask_all"
    CLEAR = "clear"
    PRINT_LOGS = "print_logs"


@dataclass(frozen=True)
class Command:
    """A slot in the descriptor table.

    Attributes:
        name: Unique line-mode name (at most fourteen characters).
        description: One-line help text.
        keymaps: Bytes that trigger the command directly.
        kind: Which routine to run.

    """

    name: str
    description: str
    keymaps: tuple[int, ...]
    kind: CommandKind


class CommandTable:
    """Fixed-capacity command registry in insertion order."""

    def __init__(self, *, capacity: int = DEFAULT_COMMAND_CAPACITY) -> None:
        """Create an empty table with *capacity* slots."""
        self._capacity = capacity
        self._commands: list[Command] = []

    @property
    def capacity(self) -> int:
        """Return the number of slots in the table."""
        return self._capacity

    def __len__(self) -> int:
        """Return the number of registered commands."""
        return len(self._commands)

    def register(
        self,
        name: str,
        description: str,
        keymaps: tuple[int, ...],
        kind: CommandKind,
    ) -> Command:
        """Install a command in the next free slot.

        Args:
            name: Unique, case-sensitive command name.
            description: Help text shown by ``listc``.
            keymaps: Up to three trigger bytes.
            kind: The routine to run.

        Returns:
            The newly registered Command.

        Raises:
            ValueError: If the table is full, the name is taken, or a
                field exceeds its limit.

        """
        if len(self._commands) >= self._capacity:
            msg = f"Command table full ({self._capacity} slots)"
            raise ValueError(msg)
        if not name or len(name) > MAX_COMMAND_NAME:
            msg = f"Command name {name!r} must be 1-{MAX_COMMAND_NAME} characters"
            raise ValueError(msg)
        if len(description) > MAX_DESCRIPTION:
            msg = f"Description for {name} exceeds {MAX_DESCRIPTION} characters"
            raise ValueError(msg)
        if len(keymaps) > MAX_KEYMAPS:
            msg = f"Command {name} has {len(keymaps)} keymaps (max {MAX_KEYMAPS})"
            raise ValueError(msg)
        if self.find_by_name(name) is not None:
            msg = f"Command {name} already registered"
            raise ValueError(msg)
        for key in keymaps:
            validate_byte(key)
        command = Command(name=name, description=description, keymaps=tuple(keymaps), kind=kind)
        self._commands.append(command)
        return command

    def find_by_name(self, name: str) -> Command | None:
        """Return the command with exactly this *name*, or None."""
        for command in self._commands:
            if command.name == name:
                return command
        return None

    def find_by_symbol(self, key: int) -> Command | None:
        """Return the first command whose keymaps contain *key*, or None."""
        for command in self._commands:
            if key in command.keymaps:
                return command
        return None

    def ambiguous_keymaps(self) -> dict[int, list[str]]:
        """Return keymaps claimed by more than one command.

        Returns:
            Map of key byte to the names of every command claiming it,
            in table order.  Empty when the table is consistent.

        """
        owners: dict[int, list[str]] = {}
        for command in self._commands:
            for key in command.keymaps:
                owners.setdefault(key, []).append(command.name)
        return {key: names for key, names in owners.items() if len(names) > 1}

    def list(self) -> list[Command]:
        """Return all commands in table order."""
        return list(self._commands)


def build_default_commands(*, capacity: int = DEFAULT_COMMAND_CAPACITY) -> CommandTable:
    """Create the command table installed at startup."""
    table = CommandTable(capacity=capacity)
    table.register(
        "listc", "Lists all available commands", (KEY_CTRL_L,), CommandKind.LIST_COMMANDS
    )
    table.register("trigger", "Triggers a signal", (KEY_CTRL_T,), CommandKind.TRIGGER)
    table.register(
        "quit", "Interrupts the program", (ord("q"), ord("Q"), KEY_CTRL_C), CommandKind.QUIT
    )
    table.register("mask", "Masks an enabled signal", (KEY_CTRL_M,), CommandKind.MASK)
    table.register("unmask", "Unmasks a disabled signal", (KEY_CTRL_U,), CommandKind.UNMASK)
    table.register("maskall", "Masks all signals", (KEY_CTRL_K,), CommandKind.MASK_ALL)
    table.register("unmaskall", "Unmasks all signals", (KEY_CTRL_A,), CommandKind.UNMASK_ALL)
    table.register("clear", "Clears the screen", (ord("C"),), CommandKind.CLEAR)
    table.register(
        "logs",
        "Print some logs of the current session",
        (ord("L"), ord("l")),
        CommandKind.PRINT_LOGS,
    )
    return table
