"""Engine configuration.

All tunables live in one frozen dataclass built before the engine
starts, the way a kernel image carries its boot parameters.  The
defaults reproduce the classic simulator: thirty log slots, fourteen
characters per command line, fail-open signal lookups.
"""

from dataclasses import dataclass

from idt_sim.idt import DEFAULT_COMMAND_CAPACITY, MAX_COMMAND_NAME
from idt_sim.session_log import DEFAULT_LOG_CAPACITY, DEFAULT_TEXT_LIMIT, DEFAULT_TIMESTAMP_FORMAT
from idt_sim.signals import DEFAULT_SIGNAL_CAPACITY


@dataclass(frozen=True)
class EngineConfig:
    """Parameters fixed for the lifetime of one run.

    Attributes:
        log_capacity: Session log slots; later entries are dropped.
        log_text_limit: Maximum characters stored per log entry.
        line_capacity: Maximum characters in a line-mode command.
        signal_capacity: Signal table slots.
        command_capacity: Command table slots.
        fail_open: What signal lookups answer for unknown keys.
        clear_before_dispatch: Clear the screen before handling each
            accepted input.
        disable_signal_keys: Also stop the terminal turning ``^C`` and
            friends into real signals while in raw mode.
        max_read_failures: Stop after this many consecutive failed
            reads; None retries forever.
        timestamp_format: ``strftime`` format for printed log entries.

    """

    log_capacity: int = DEFAULT_LOG_CAPACITY
    log_text_limit: int = DEFAULT_TEXT_LIMIT
    line_capacity: int = MAX_COMMAND_NAME
    signal_capacity: int = DEFAULT_SIGNAL_CAPACITY
    command_capacity: int = DEFAULT_COMMAND_CAPACITY
    fail_open: bool = True
    clear_before_dispatch: bool = True
    disable_signal_keys: bool = True
    max_read_failures: int | None = None
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT

    def __post_init__(self) -> None:
        """Reject capacities that leave no room to work."""
        for field_name in ("log_capacity", "line_capacity", "signal_capacity", "command_capacity"):
            if getattr(self, field_name) < 1:
                msg = f"{field_name} must be at least 1"
                raise ValueError(msg)
        if self.max_read_failures is not None and self.max_read_failures < 1:
            msg = "max_read_failures must be at least 1 or None"
            raise ValueError(msg)
