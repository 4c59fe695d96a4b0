"""Byte-addressed little-endian memory and operand text helpers."""

from itertools import takewhile

from .opcodes import AssemblyError

__all__ = ["Memory", "read_memtype", "read_number", "register_by_name"]

_REGISTER_NAMES = (
    "ra", "rb", "rc", "rd", "re", "rf", "rg", "rh",
    "ri", "rj", "rk", "rl", "rm", "rn", "rs", "rp",
)
_REGISTERS = {
    **{name: index for index, name in enumerate(_REGISTER_NAMES)},
    **{name.upper(): index for index, name in enumerate(_REGISTER_NAMES)},
}

_DIGITS = {
    8: frozenset("01234567"),
    10: frozenset("0123456789"),
    16: frozenset("0123456789abcdefABCDEF"),
}

_MEMTYPES = {"single": 1, "double": 2, "quad": 3}


class Memory:
    """Fixed-size zero-initialised memory with little-endian multi-byte access."""

    def __init__(self, size):
        if size < 0:
            raise ValueError(f"memory size must not be negative: {size}")
        self._data = bytearray(size)

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def _check(self, address, width):
        if address < 0 or address + width > len(self._data):
            raise IndexError(
                f"access of {width} byte(s) at 0x{address:x} is outside memory"
            )

    def _read(self, address, width):
        self._check(address, width)
        return int.from_bytes(self._data[address:address + width], "little")

    def _write(self, address, value, width):
        self._check(address, width)
        mask = (1 << (8 * width)) - 1
        self._data[address:address + width] = (value & mask).to_bytes(width, "little")
        return address + width

    def read8(self, address):
        """Return the byte at ``address``."""
        return self._read(address, 1)

    def read16(self, address):
        """Return the little-endian 16-bit value at ``address``."""
        return self._read(address, 2)

    def read32(self, address):
        """Return the little-endian 32-bit value at ``address``."""
        return self._read(address, 4)

    def write8(self, address, value):
        """Store the low byte of ``value``; return the next address."""
        return self._write(address, value, 1)

    def write16(self, address, value):
        """Store the low 16 bits of ``value`` little-endian; return the next address."""
        return self._write(address, value, 2)

    def write32(self, address, value):
        """Store the low 32 bits of ``value`` little-endian; return the next address."""
        return self._write(address, value, 4)


def _leading_value(text, base):
    digits = "".join(takewhile(_DIGITS[base].__contains__, text))
    return int(digits, base) if digits else 0


def _scan_integer(text):
    """Read an integer the way a ``%i`` conversion does: base from its prefix."""
    sign = 1
    if text.startswith(("+", "-")):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text[:2] in ("0x", "0X") and text[2:3] and text[2] in _DIGITS[16]:
        return sign * _leading_value(text[2:], 16)
    if text.startswith("0"):
        return sign * _leading_value(text, 8)
    return sign * _leading_value(text, 10)


def read_number(text):
    """Parse a signed decimal, octal or ``0x`` hex literal into a 32-bit value.

    Unparsable text yields 0; negative numbers wrap to their two's complement.
    """
    sign = -1 if text.startswith("-") else 1
    if text.startswith(("-", "+")):
        text = text[1:]
    if text.startswith("0x"):
        value = _leading_value(text[2:], 16)
    else:
        value = _scan_integer(text)
    return (value * sign) & 0xFFFFFFFF


def read_memtype(text):
    """Return 1, 2 or 3 for ``single``, ``double`` or ``quad``, otherwise 0."""
    return _MEMTYPES.get(text, 0)


def register_by_name(text):
    """Return the register number for a name such as ``ra`` or ``RP``."""
    try:
        return _REGISTERS[text]
    except KeyError:
        raise AssemblyError(f"unknown register {text!r}") from None