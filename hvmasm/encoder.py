"""Encoders that write one machine instruction into memory per operand form.

Every encoder takes the target memory, the address to write at, the base
prefix and extended prefix bytes, the opcode and the operands, and returns
the address just past the written instruction.
"""

from .opcodes import AssemblyError, Opcode, Prefix, pack_registers

__all__ = [
    "instruction_label",
    "instruction_label_reg",
    "instruction_labeloff_reg",
    "instruction_opcode",
    "instruction_reg",
    "instruction_reg_label",
    "instruction_reg_labeloff",
    "instruction_reg_reg",
    "instruction_reg_regoff",
    "instruction_reg_value",
    "instruction_reg_valueoff",
    "instruction_regoff_reg",
    "instruction_value",
    "instruction_value_reg",
    "instruction_valueoff_reg",
]

_WIDTH_BITS = 0b11000
_UNCHECKED_WIDTH = frozenset({Opcode.LOD_1, Opcode.STR_1})


def _header(memory, pc, prefix, ext_prefix, opcode):
    """Write the prefix, the extended prefix when flagged, and the opcode."""
    pc = memory.write8(pc, prefix)
    if prefix & Prefix.EXT:
        pc = memory.write8(pc, ext_prefix)
    return memory.write8(pc, opcode)


def _with_symbol(prefix, sym):
    return prefix | Prefix.SYM if sym else prefix


def _write_symbol(memory, pc, sym):
    return memory.write8(pc, sym) if sym else pc


def instruction_reg_reg(memory, pc, prefix, ext_prefix, opcode, lreg, rreg, sym):
    """Encode ``op lreg -> rreg`` (or a comparison when ``sym`` is non-zero)."""
    prefix = _with_symbol(prefix | Prefix.REG, sym)
    if opcode not in _UNCHECKED_WIDTH and (lreg & _WIDTH_BITS) != (rreg & _WIDTH_BITS):
        raise AssemblyError("the bits of lreg are not the same as those of rreg")
    pc = _header(memory, pc, prefix, ext_prefix, opcode)
    pc = memory.write8(pc, pack_registers(lreg, rreg))
    return _write_symbol(memory, pc, sym)


def instruction_value_reg(memory, pc, prefix, ext_prefix, opcode, rreg, sym, value):
    """Encode ``op value -> rreg`` with a 32-bit immediate."""
    prefix = _with_symbol(prefix | Prefix.VAL | Prefix.REG, sym)
    pc = _header(memory, pc, prefix, ext_prefix, opcode)
    pc = memory.write8(pc, pack_registers(0, rreg))
    pc = _write_symbol(memory, pc, sym)
    return memory.write32(pc, value)


def instruction_label_reg(memory, pc, prefix, ext_prefix, opcode, rreg, sym):
    """Encode ``op $label -> rreg``; the 32-bit address is left zero for patching."""
    return instruction_value_reg(memory, pc, prefix, ext_prefix, opcode, rreg, sym, 0)


def instruction_reg_value(memory, pc, prefix, ext_prefix, opcode, lreg, sym, value):
    """Encode ``op lreg (sym) value``; the 32-bit value field is written as zero."""
    prefix = _with_symbol(prefix | Prefix.VAL | Prefix.REG, sym)
    pc = _header(memory, pc, prefix, ext_prefix, opcode)
    pc = memory.write8(pc, pack_registers(lreg, 0))
    pc = _write_symbol(memory, pc, sym)
    return memory.write32(pc, 0)


def instruction_reg_label(memory, pc, prefix, ext_prefix, opcode, lreg, sym):
    """Encode ``op lreg (sym) $label``; the address is left zero for patching."""
    return instruction_reg_value(memory, pc, prefix, ext_prefix, opcode, lreg, sym, 0)


def _reg_pair_offset(memory, pc, prefix, ext_prefix, opcode, lreg, rreg, offset):
    prefix |= Prefix.OFF | Prefix.VAL
    pc = _header(memory, pc, prefix, ext_prefix, opcode)
    pc = memory.write8(pc, pack_registers(lreg, rreg))
    return memory.write16(pc, offset)


def instruction_regoff_reg(memory, pc, prefix, ext_prefix, opcode, lreg, rreg, offset):
    """Encode ``op lreg(offset) -> rreg`` with a signed 16-bit offset."""
    return _reg_pair_offset(memory, pc, prefix, ext_prefix, opcode, lreg, rreg, offset)


def instruction_reg_regoff(memory, pc, prefix, ext_prefix, opcode, lreg, rreg, offset):
    """Encode ``op lreg -> rreg(offset)`` with a signed 16-bit offset."""
    return _reg_pair_offset(memory, pc, prefix, ext_prefix, opcode, lreg, rreg, offset)


def _offset_value(memory, pc, prefix, ext_prefix, opcode, registers, offset, value):
    prefix |= Prefix.VAL | Prefix.REG | Prefix.OFF
    pc = _header(memory, pc, prefix, ext_prefix, opcode)
    pc = memory.write8(pc, registers)
    pc = memory.write16(pc, offset)
    return memory.write32(pc, value)


def instruction_valueoff_reg(memory, pc, prefix, ext_prefix, opcode, rreg, offset, value):
    """Encode ``op value(offset) -> rreg``."""
    return _offset_value(
        memory, pc, prefix, ext_prefix, opcode, pack_registers(0, rreg), offset, value
    )


def instruction_labeloff_reg(memory, pc, prefix, ext_prefix, opcode, rreg, offset):
    """Encode ``op $label(offset) -> rreg``; the address is left zero for patching."""
    return instruction_valueoff_reg(memory, pc, prefix, ext_prefix, opcode, rreg, offset, 0)


def instruction_reg_valueoff(memory, pc, prefix, ext_prefix, opcode, lreg, offset, value):
    """Encode ``op lreg -> value(offset)``."""
    return _offset_value(
        memory, pc, prefix, ext_prefix, opcode, pack_registers(lreg, 0), offset, value
    )


def instruction_reg_labeloff(memory, pc, prefix, ext_prefix, opcode, lreg, offset):
    """Encode ``op lreg -> $label(offset)``; the address is left zero for patching."""
    return instruction_reg_valueoff(memory, pc, prefix, ext_prefix, opcode, lreg, offset, 0)


def instruction_reg(memory, pc, prefix, ext_prefix, opcode, rreg):
    """Encode ``op rreg``; only the low three bits of the register are kept."""
    pc = _header(memory, pc, prefix, ext_prefix, opcode)
    return memory.write8(pc, pack_registers(0, rreg & 0b111))


def instruction_value(memory, pc, prefix, ext_prefix, opcode, value):
    """Encode ``op value`` with a 32-bit immediate."""
    pc = _header(memory, pc, prefix | Prefix.VAL, ext_prefix, opcode)
    return memory.write32(pc, value)


def instruction_label(memory, pc, prefix, ext_prefix, opcode):
    """Encode ``op $label``; the address is left zero for patching."""
    return instruction_value(memory, pc, prefix, ext_prefix, opcode, 0)


def instruction_opcode(memory, pc, prefix, ext_prefix, opcode):
    """Encode an operand-less instruction: prefix with its low nibble set, then opcode.

    No extended prefix byte is written, whatever the prefix says.
    """
    pc = memory.write8(pc, prefix | 0x0F)
    return memory.write8(pc, opcode)