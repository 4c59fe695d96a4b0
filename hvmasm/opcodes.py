"""Instruction encoding constants: prefix bits, opcodes and register bytes."""

from enum import IntEnum, IntFlag
from typing import NamedTuple

__all__ = [
    "AssemblyError",
    "EXT_PREFIX_ADDRSIZE",
    "Opcode",
    "Prefix",
    "RegisterPair",
    "pack_registers",
    "unpack_registers",
]


class AssemblyError(Exception):
    """Raised when source text or an encoding request cannot be assembled."""


class Prefix(IntFlag):
    """Bits of the first instruction byte telling which operand fields follow."""

    NONE = 0
    SYM = 1 << 3
    REG = 1 << 4
    OFF = 1 << 5
    VAL = 1 << 6
    EXT = 1 << 7


EXT_PREFIX_ADDRSIZE = 1 << 0


class Opcode(IntEnum):
    """Operation codes understood by the virtual machine."""

    ADD_1 = 0x30
    ADD_2 = 0x31
    SUB_1 = 0x33
    SUB_2 = 0x34
    MUL_1 = 0x36
    MUL_2 = 0x37
    DIV_1 = 0x39
    DIV_2 = 0x3A
    PUSH_1 = 0x3B
    PUSH_2 = 0x3C
    POP_1 = 0x3D
    LOD_1 = 0x3E
    LOD_2 = 0x3F
    MOV_1 = 0x40
    MOV_2 = 0x41
    PUSH_RM32 = 0x44
    PUSH_VALUE = 0x45
    POP_REG = 0x46
    AND_1 = 0x47
    AND_2 = 0x48
    OR_1 = 0x49
    OR_2 = 0x4A
    NOT = 0x4B
    NAND_1 = 0x4C
    NAND_2 = 0x4D
    NOR_1 = 0x4E
    NOR_2 = 0x4F
    XOR_1 = 0x50
    XOR_2 = 0x51
    XNOR_1 = 0x52
    XNOR_2 = 0x53
    CND_1 = 0x54
    CND_2 = 0x55
    CND_3 = 0x56
    CALL_1 = 0x58
    CALL_2 = 0x59
    RETURN = 0x5A
    GO_1 = 0x5B
    GO_2 = 0x5C
    GOC_1 = 0x5D
    GOC_2 = 0x5E
    STR_1 = 0x5F
    STR_2 = 0x60
    STRS_1 = 0x61
    STRS_2 = 0x62
    STRD_1 = 0x63
    STRD_2 = 0x64
    LODS_1 = 0x65
    LODS_2 = 0x66
    LODD_1 = 0x67
    LODD_2 = 0x68
    MOVS_1 = 0x69
    MOVS_2 = 0x6A
    MOVD_1 = 0x6B
    MOVD_2 = 0x6C
    PNT_1 = 0x6D
    PNT_2 = 0x6E
    PCT_1 = 0x6F
    PCT_2 = 0x70
    STP = 0x90


class RegisterPair(NamedTuple):
    """Source and destination register numbers held in one register byte."""

    sreg: int
    dreg: int


def pack_registers(sreg, dreg):
    """Pack two 4-bit register numbers into one byte: source high, destination low."""
    return ((sreg & 0xF) << 4) | (dreg & 0xF)


def unpack_registers(byte):
    """Split a register byte into its source and destination register numbers."""
    if not 0 <= byte <= 0xFF:
        raise ValueError(f"register byte out of range: {byte!r}")
    return RegisterPair(sreg=byte >> 4, dreg=byte & 0xF)