"""Simulated signal table.

Signals here are not delivered by the operating system.  Each one is a
named, maskable gate tied to a trigger key: while the gate is open
(``enabled``) the key can fire its command, while it is closed the
dispatcher refuses the key.

Four signals are installed at startup:
    - **SIGINT** (``^C``): gates the interrupt key of ``quit``.
    - **SIGQUIT** (``q``): gates the plain quit key.
    - **SIGLIST** (``^L``): gates ``listc``.
    - **SIGTRI** (``^T``): gates ``trigger``.

Design choices:
    - **Fixed capacity**: the table has a set number of slots, like a
      hardware mask register.  Registering past the limit is an error.
    - **Fail-open lookups**: asking about a key no signal owns answers
      ``True`` by default, so unmapped keys are never blocked.  The
      default can be flipped per table with ``fail_open=False``.
    - **Only ``enabled`` mutates**: name and key are fixed for the
      lifetime of the run.
"""

from dataclasses import dataclass

from idt_sim.keys import KEY_CTRL_C, KEY_CTRL_L, KEY_CTRL_T, validate_byte

DEFAULT_SIGNAL_CAPACITY = 5
MAX_SIGNAL_NAME = 9


class SignalError(Exception):
    """Raised when the signal table is misused."""


class SignalIndexError(SignalError):
    """Raised when a signal index is out of range or not a number."""


@dataclass
class Signal:
    """One maskable gate in the signal table.

    Attributes:
        name: Unique display name (at most nine characters).
        key: The trigger byte this signal gates.
        enabled: Whether the gate is open.

    """

    name: str
    key: int
    enabled: bool = True


class SignalTable:
    """Fixed-capacity registry of signals in insertion order."""

    def __init__(self, *, capacity: int = DEFAULT_SIGNAL_CAPACITY, fail_open: bool = True) -> None:
        """Create an empty table.

        Args:
            capacity: Maximum number of signals.
            fail_open: Value ``is_enabled`` returns when nothing matches.

        """
        self._capacity = capacity
        self._fail_open = fail_open
        self._signals: list[Signal] = []

    @property
    def capacity(self) -> int:
        """Return the number of slots in the table."""
        return self._capacity

    @property
    def fail_open(self) -> bool:
        """Return the answer given for unknown keys and names."""
        return self._fail_open

    def __len__(self) -> int:
        """Return the number of registered signals."""
        return len(self._signals)

    def register(self, name: str, key: int, *, enabled: bool = True) -> Signal:
        """Add a signal to the next free slot.

        Args:
            name: Unique signal name.
            key: Unique trigger byte.
            enabled: Initial gate state.

        Returns:
            The newly registered Signal.

        Raises:
            SignalError: If the table is full, the name is too long, or
                the name or key is already taken.
            ValueError: If the key is not a byte.

        """
        validate_byte(key)
        if len(self._signals) >= self._capacity:
            msg = f"Signal table full ({self._capacity} slots)"
            raise SignalError(msg)
        if not name or len(name) > MAX_SIGNAL_NAME:
            msg = f"Signal name {name!r} must be 1-{MAX_SIGNAL_NAME} characters"
            raise SignalError(msg)
        if self.find_by_name(name) is not None:
            msg = f"Signal {name} already registered"
            raise SignalError(msg)
        if self.find_by_key(key) is not None:
            msg = f"Key {key:#04x} already bound to a signal"
            raise SignalError(msg)
        signal = Signal(name=name, key=key, enabled=enabled)
        self._signals.append(signal)
        return signal

    def find_by_key(self, key: int) -> Signal | None:
        """Return the signal bound to *key*, or None."""
        for signal in self._signals:
            if signal.key == key:
                return signal
        return None

    def find_by_name(self, name: str) -> Signal | None:
        """Return the signal called *name*, or None."""
        for signal in self._signals:
            if signal.name == name:
                return signal
        return None

    def is_enabled(self, key_or_name: int | str) -> bool:
        """Return whether the matching signal's gate is open.

        An ``int`` is matched against keys and a ``str`` against names.
        When nothing matches, the table's ``fail_open`` default is
        returned.
        """
        if isinstance(key_or_name, str):
            signal = self.find_by_name(key_or_name)
        else:
            signal = self.find_by_key(key_or_name)
        if signal is None:
            return self._fail_open
        return signal.enabled

    def get(self, index: int) -> Signal:
        """Return the signal at a 0-based *index*.

        Raises:
            SignalIndexError: If the index is out of range.

        """
        if not 0 <= index < len(self._signals):
            msg = f"Signal not available for the index '{index + 1}'"
            raise SignalIndexError(msg)
        return self._signals[index]

    def set_enabled(self, index: int, value: bool) -> None:  # noqa: FBT001
        """Open or close the gate of the signal at a 0-based *index*.

        Raises:
            SignalIndexError: If the index is out of range.

        """
        self.get(index).enabled = value

    def set_all(self, value: bool) -> int:  # noqa: FBT001
        """Set every gate to *value*, touching only entries that differ.

        Returns:
            The number of signals whose state changed.

        """
        changed = 0
        for signal in self._signals:
            if signal.enabled != value:
                signal.enabled = value
                changed += 1
        return changed

    def list(self) -> list[Signal]:
        """Return all signals in table order."""
        return list(self._signals)


def build_default_signals(
    *, capacity: int = DEFAULT_SIGNAL_CAPACITY, fail_open: bool = True
) -> SignalTable:
    """Create the signal table installed at startup."""
    table = SignalTable(capacity=capacity, fail_open=fail_open)
    table.register("SIGINT", KEY_CTRL_C)
    table.register("SIGQUIT", ord("q"))
    table.register("SIGLIST", KEY_CTRL_L)
    table.register("SIGTRI", KEY_CTRL_T)
    return table


def parse_signal_index(text: str, table: SignalTable) -> int:
    """Convert a user-typed 1-based index into a 0-based table index.

    Args:
        text: The characters the user typed.
        table: The table the index refers to.

    Returns:
        The 0-based index of an existing signal.

    Raises:
        SignalIndexError: If the text is not a number or names no signal.

    """
    stripped = text.strip()
    if not (stripped.isascii() and stripped.isdigit()):
        msg = f"Signal not available for the index '{stripped}'"
        raise SignalIndexError(msg)
    number = int(stripped)
    if not 1 <= number <= len(table):
        msg = f"Signal not available for the index '{number}'"
        raise SignalIndexError(msg)
    return number - 1
