"""Raw key bytes and control-character mnemonics.

A terminal in raw mode hands us one byte per keystroke.  Printable keys
arrive as their ASCII value; holding Ctrl folds a letter down into the
range 0-31 (Ctrl+L is ``0x0C``, Ctrl+C is ``0x03``).

Displaying those bytes directly would move the cursor or ring the bell,
so anything shown to the user goes through ``mnemonic()`` first, which
renders control bytes the way ``stty -a`` does: ``^L``, ``^C``, ``^?``.
"""

KEY_CTRL_A = 0x01
KEY_CTRL_C = 0x03
KEY_BACKSPACE = 0x08
KEY_NEWLINE = 0x0A
KEY_CTRL_K = 0x0B
KEY_CTRL_L = 0x0C
KEY_CTRL_M = 0x0D
KEY_CTRL_T = 0x14
KEY_CTRL_U = 0x15
KEY_COLON = 0x3A
KEY_DELETE = 0x7F

ERASE_KEYS: frozenset[int] = frozenset({KEY_BACKSPACE, KEY_DELETE})
"""Bytes that erase the previous character in line mode."""

_CONTROL_LIMIT = 32
_CARET_OFFSET = 64
_MAX_BYTE = 0xFF


def validate_byte(value: int) -> int:
    """Return *value* unchanged if it fits in one byte.

    Raises:
        ValueError: If the value is outside 0-255.

    """
    if not 0 <= value <= _MAX_BYTE:
        msg = f"Key {value} is not a byte (expected 0-255)"
        raise ValueError(msg)
    return value


def mnemonic(key: int) -> str:
    """Render a key byte for display.

    Args:
        key: The raw byte value.

    Returns:
        ``^X`` for control bytes 0-31, ``^?`` for DEL, and the literal
        character for everything else.

    """
    if key < _CONTROL_LIMIT:
        return "^" + chr(key + _CARET_OFFSET)
    if key == KEY_DELETE:
        return "^?"
    return chr(key)


def render_text(text: str) -> str:
    """Render every character of *text* through ``mnemonic()``."""
    return "".join(mnemonic(ord(ch)) if ord(ch) <= KEY_DELETE else ch for ch in text)
