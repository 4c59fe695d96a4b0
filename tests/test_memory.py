import pytest

from hvmasm.memory import Memory, read_memtype, read_number, register_by_name
from hvmasm.opcodes import AssemblyError


def test_new_memory_is_zeroed():
    memory = Memory(16)
    assert len(memory) == 16
    assert bytes(memory) == bytes(16)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Memory(-1)


def test_write32_is_little_endian():
    memory = Memory(8)
    memory.write32(0, 0xDEAD1234)
    assert bytes(memory)[:4] == b"\x34\x12\xad\xde"


@pytest.mark.parametrize(
    "write, read, value",
    [
        ("write8", "read8", 0xAB),
        ("write16", "read16", 0x1234),
        ("write32", "read32", 0xDEAD1234),
    ],
)
def test_round_trip(write, read, value):
    memory = Memory(16)
    getattr(memory, write)(3, value)
    assert getattr(memory, read)(3) == value


@pytest.mark.parametrize("write, width", [("write8", 1), ("write16", 2), ("write32", 4)])
def test_write_returns_next_address(write, width):
    memory = Memory(16)
    assert getattr(memory, write)(5, 0) == 5 + width


def test_writes_truncate_to_width():
    memory = Memory(8)
    memory.write8(0, 0x1FF)
    memory.write16(2, 0x12345)
    assert memory.read8(0) == 0xFF
    assert memory.read16(2) == 0x2345


def test_multi_byte_reads_combine_bytes():
    memory = Memory(8)
    memory.write16(0, 0x1234)
    memory.write16(2, 0xDEAD)
    assert memory.read32(0) == 0xDEAD1234
    assert memory.read8(1) == 0x12


def test_out_of_range_access_raises():
    memory = Memory(4)
    with pytest.raises(IndexError):
        memory.read32(1)
    with pytest.raises(IndexError):
        memory.write8(4, 0)
    with pytest.raises(IndexError):
        memory.read8(-1)


def test_read_number_hex_and_decimal():
    assert read_number("0x1234") == 0x1234
    assert read_number("0xFF8") == 0xFF8
    assert read_number("1000") == 1000
    assert read_number("+0x1000") == 0x1000


def test_read_number_negative_wraps():
    assert read_number("-1") == 0xFFFFFFFF
    assert (read_number("-0x1000") + read_number("0x1000")) & 0xFFFFFFFF == 0


def test_read_number_octal_prefix():
    assert read_number("010") == 8


def test_read_number_garbage_is_zero():
    assert read_number("abc") == 0
    assert read_number("") == 0


def test_read_memtype():
    assert read_memtype("single") == 1
    assert read_memtype("double") == 2
    assert read_memtype("quad") == 3
    assert read_memtype("octa") == 0


def test_register_by_name_both_cases():
    assert register_by_name("ra") == 0
    assert register_by_name("RA") == 0
    assert register_by_name("rs") == 0b1110
    assert register_by_name("RP") == 0b1111


def test_register_names_are_distinct():
    names = "abcdefghijklmnsp"
    numbers = [register_by_name("r" + letter) for letter in names]
    assert numbers == list(range(16))


@pytest.mark.parametrize("name", ["rz", "Ra", "r", "", "rax"])
def test_register_by_name_unknown(name):
    with pytest.raises(AssemblyError):
        register_by_name(name)