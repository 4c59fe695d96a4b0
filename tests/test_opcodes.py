import pytest

from hvmasm.opcodes import (
    EXT_PREFIX_ADDRSIZE,
    AssemblyError,
    Opcode,
    Prefix,
    pack_registers,
    unpack_registers,
)


def test_prefix_from_byte_decodes_bits():
    decoded = Prefix(0b01011000)
    assert Prefix.SYM in decoded
    assert Prefix.REG in decoded
    assert Prefix.VAL in decoded
    assert Prefix.OFF not in decoded
    assert Prefix.EXT not in decoded
    assert int(decoded) == (1 << 3) | (1 << 4) | (1 << 6)


def test_prefix_from_byte_matches_format_positions():
    assert Prefix(1 << 3) is Prefix.SYM
    assert Prefix(1 << 4) is Prefix.REG
    assert Prefix(1 << 5) is Prefix.OFF
    assert Prefix(1 << 6) is Prefix.VAL
    assert Prefix(1 << 7) is Prefix.EXT
    assert EXT_PREFIX_ADDRSIZE == 1


def test_opcode_values_are_fixed():
    assert Opcode.MOV_1 == 0x40
    assert Opcode.MOV_2 == 0x41
    assert Opcode.STP == 0x90
    assert Opcode(0x5A) is Opcode.RETURN


def test_opcode_lookup_by_value_round_trips():
    for member in Opcode:
        assert Opcode(member.value) is member


def test_opcode_unknown_value_rejected():
    with pytest.raises(ValueError):
        Opcode(0x00)


@pytest.mark.parametrize("sreg", range(16))
@pytest.mark.parametrize("dreg", [0, 5, 15])
def test_pack_unpack_round_trip(sreg, dreg):
    pair = unpack_registers(pack_registers(sreg, dreg))
    assert pair.sreg == sreg
    assert pair.dreg == dreg


def test_pack_places_source_in_high_nibble():
    assert pack_registers(0b1111, 0) == 0b11110000
    assert pack_registers(0, 0b1111) == 0b1111


def test_pack_masks_to_four_bits():
    assert pack_registers(0x1F, 0x12) == pack_registers(0xF, 0x2)


def test_unpack_rejects_out_of_range():
    with pytest.raises(ValueError):
        unpack_registers(0x100)
    with pytest.raises(ValueError):
        unpack_registers(-1)


def test_assembly_error_carries_message():
    error = AssemblyError("Unknown Instruction")
    assert str(error) == "Unknown Instruction"
    assert issubclass(AssemblyError, Exception)