"""Register file and fetch/dispatch loop of the virtual machine."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Iterable, List

from .opcodes import Prefix

__all__ = ["FLAG_CONDITION", "Cpu", "Register", "RegisterFile"]

FLAG_CONDITION = 1 << 2
REGISTER_COUNT = 16


class Register(IntEnum):
    """General-purpose registers; S is the stack pointer, P the base pointer."""

    A = 0b0000
    B = 0b0001
    C = 0b0010
    D = 0b0011
    E = 0b0100
    F = 0b0101
    G = 0b0110
    H = 0b0111
    I = 0b1000  # noqa: E741
    J = 0b1001
    K = 0b1010
    L = 0b1011
    M = 0b1100
    N = 0b1101
    S = 0b1110
    P = 0b1111


@dataclass
class RegisterFile:
    """Sixteen 32-bit registers plus the program counter and 16-bit flags."""

    values: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    pc: int = 0
    flags: int = 0

    def get(self, index):
        """Return the value of register ``index``."""
        if not 0 <= index < REGISTER_COUNT:
            raise IndexError(f"no such register: {index}")
        return self.values[index]

    def set(self, index, value):
        """Store the low 32 bits of ``value`` in register ``index``."""
        if not 0 <= index < REGISTER_COUNT:
            raise IndexError(f"no such register: {index}")
        self.values[index] = value & 0xFFFFFFFF


Handler = Callable[["Cpu", int, int, int], None]


class Cpu:
    """Fetches instructions from memory and offers each to every handler.

    A handler is called as ``handler(cpu, prefix, ext_prefix, opcode)`` after
    the prefix bytes and opcode have been fetched; it reads its operands from
    ``cpu.memory`` at ``cpu.registers.pc`` and advances the counter itself.
    """

    def __init__(self, memory, handlers: Iterable[Handler] = ()):
        self.memory = memory
        self.handlers = tuple(handlers)
        self.registers = RegisterFile()
        self.running = True

    def _fetch8(self):
        value = self.memory.read8(self.registers.pc)
        self.registers.pc += 1
        return value

    def step(self):
        """Fetch one instruction header and dispatch it to all handlers."""
        prefix = self._fetch8()
        ext_prefix = self._fetch8() if prefix & Prefix.EXT else 0
        opcode = self._fetch8()
        for handler in self.handlers:
            handler(self, prefix, ext_prefix, opcode)

    def run(self):
        """Execute until stopped or the program counter leaves memory."""
        while self.running and self.registers.pc < len(self.memory):
            self.step()

    def stop(self):
        """Halt execution after the current instruction."""
        self.running = False

    def output(self):
        """Return a dump of all registers, the flags and the program counter."""
        regs = self.registers
        lines = ["=============== OUTPUT ================"]
        lines.extend(
            f"R{register.name}: {regs.get(register):8x}" for register in Register
        )
        lines.append("")
        lines.append(
            f"FLAGS: {regs.flags:16b} ({regs.flags:4x}), PC: {regs.pc:8x}"
        )
        return "\n".join(lines)