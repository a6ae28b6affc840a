"""Tests for the interrupt descriptor table (command registry)."""

import pytest

from idt_sim.idt import (
    DEFAULT_COMMAND_CAPACITY,
    CommandKind,
    CommandTable,
    build_default_commands,
)
from idt_sim.keys import KEY_CTRL_A, KEY_CTRL_C, KEY_CTRL_K, KEY_CTRL_L, KEY_CTRL_M, KEY_CTRL_T

DEFAULT_COMMAND_COUNT = 9


class TestDefaultCommands:
    """Verify the table populated at startup."""

    def test_names_in_order(self) -> None:
        """Every default command should be present in table order."""
        table = build_default_commands()
        assert [c.name for c in table.list()] == [
            "listc",
            "trigger",
            "quit",
            "mask",
            "unmask",
            "maskall",
            "unmaskall",
            "clear",
            "logs",
        ]

    def test_population_and_capacity(self) -> None:
        """Nine commands fill a ten-slot table."""
        table = build_default_commands()
        assert len(table) == DEFAULT_COMMAND_COUNT
        assert table.capacity == DEFAULT_COMMAND_CAPACITY

    def test_quit_keymaps(self) -> None:
        """quit is bound to q, Q and ^C."""
        table = build_default_commands()
        quit_cmd = table.find_by_name("quit")
        assert quit_cmd is not None
        assert quit_cmd.keymaps == (ord("q"), ord("Q"), KEY_CTRL_C)
        assert quit_cmd.kind is CommandKind.QUIT

    def test_default_table_is_unambiguous(self) -> None:
        """No keymap should be claimed twice in the default table."""
        assert build_default_commands().ambiguous_keymaps() == {}

    @pytest.mark.parametrize(
        ("key", "name"),
        [
            (KEY_CTRL_L, "listc"),
            (KEY_CTRL_T, "trigger"),
            (KEY_CTRL_M, "mask"),
            (KEY_CTRL_K, "maskall"),
            (KEY_CTRL_A, "unmaskall"),
            (ord("C"), "clear"),
            (ord("l"), "logs"),
            (ord("L"), "logs"),
        ],
    )
    def test_symbol_lookup(self, key: int, name: str) -> None:
        """Each documented key should resolve to its command."""
        command = build_default_commands().find_by_symbol(key)
        assert command is not None
        assert command.name == name


class TestLookup:
    """Verify name and symbol lookups."""

    def test_find_by_name_is_case_sensitive(self) -> None:
        """LISTC is not listc."""
        table = build_default_commands()
        assert table.find_by_name("listc") is not None
        assert table.find_by_name("LISTC") is None
        assert table.find_by_name("Listc") is None

    def test_find_by_name_requires_exact_match(self) -> None:
        """Prefixes and unknown names are not found."""
        table = build_default_commands()
        assert table.find_by_name("list") is None
        assert table.find_by_name("nothing") is None
        assert table.find_by_name("") is None

    def test_unmapped_symbol(self) -> None:
        """A key no command claims yields None."""
        assert build_default_commands().find_by_symbol(ord("z")) is None

    def test_shared_keymap_lowest_index_wins(self) -> None:
        """When two commands share a key, the earlier one wins every time."""
        table = CommandTable()
        table.register("first", "first", (0x20,), CommandKind.CLEAR)
        table.register("second", "second", (0x21, 0x20), CommandKind.QUIT)
        for _ in range(3):
            command = table.find_by_symbol(0x20)
            assert command is not None
            assert command.name == "first"
        assert table.ambiguous_keymaps() == {0x20: ["first", "second"]}


class TestRegistration:
    """Verify registration limits."""

    def test_duplicate_name_rejected(self) -> None:
        """Names are unique."""
        table = CommandTable()
        table.register("a", "a", (), CommandKind.CLEAR)
        with pytest.raises(ValueError, match="already registered"):
            table.register("a", "b", (), CommandKind.CLEAR)

    def test_long_name_rejected(self) -> None:
        """Names are limited to fourteen characters."""
        table = CommandTable()
        with pytest.raises(ValueError, match="1-14 characters"):
            table.register("x" * 15, "d", (), CommandKind.CLEAR)

    def test_too_many_keymaps_rejected(self) -> None:
        """At most three keymaps per command."""
        table = CommandTable()
        with pytest.raises(ValueError, match="max 3"):
            table.register("a", "d", (1, 2, 3, 4), CommandKind.CLEAR)

    def test_long_description_rejected(self) -> None:
        """Descriptions are limited to 49 characters."""
        table = CommandTable()
        with pytest.raises(ValueError, match="exceeds"):
            table.register("a", "d" * 50, (), CommandKind.CLEAR)

    def test_full_table_rejected(self) -> None:
        """Registering past capacity should raise."""
        table = CommandTable(capacity=1)
        table.register("a", "a", (), CommandKind.CLEAR)
        with pytest.raises(ValueError, match="full"):
            table.register("b", "b", (), CommandKind.CLEAR)

    def test_default_table_needs_nine_slots(self) -> None:
        """A table too small for the defaults cannot be built."""
        with pytest.raises(ValueError, match="full"):
            build_default_commands(capacity=DEFAULT_COMMAND_COUNT - 1)
