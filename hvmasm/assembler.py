"""Line assembler: matches instruction text against operand forms and encodes it."""

import re
from dataclasses import dataclass
from enum import Enum

from . import encoder
from .directives import assemble_ascii, assemble_datatype
from .labels import LabelTable
from .memory import read_number, register_by_name
from .opcodes import EXT_PREFIX_ADDRSIZE, AssemblyError

__all__ = ["Assembler", "InstructionSet", "OpcodeEntry", "OperandForm"]


class OperandForm(Enum):
    """The operand shapes an instruction line can take."""

    REG_REG = "reg_reg"
    VALUE_REG = "value_reg"
    LABEL_REG = "label_reg"
    REG_VALUE = "reg_value"
    REG_LABEL = "reg_label"
    REGOFF_REG = "regoff_reg"
    VALUEOFF_REG = "valueoff_reg"
    LABELOFF_REG = "labeloff_reg"
    REG_REGOFF = "reg_regoff"
    REG_VALUEOFF = "reg_valueoff"
    REG_LABELOFF = "reg_labeloff"
    LABEL = "label"
    REG = "reg"
    ONLY = "only"
    VALUE = "value"


@dataclass(frozen=True)
class OpcodeEntry:
    """One mnemonic of an operand form and the bytes it is encoded with."""

    name: str
    opcode: int
    prefix: int = 0
    ext_prefix: int = 0


class InstructionSet:
    """Mnemonic tables per operand form, plus the codes of comparison symbols.

    ``tables`` maps an :class:`OperandForm` to an iterable of
    :class:`OpcodeEntry`; ``conditions`` maps a comparison symbol such as
    ``"=="`` or ``"<="`` to the byte that encodes it. Symbols missing from
    ``conditions`` encode as 0.
    """

    def __init__(self, tables=None, conditions=None):
        self._tables = {form: [] for form in OperandForm}
        for form, entries in (tables or {}).items():
            self._tables[OperandForm(form)].extend(entries)
        self._conditions = dict(conditions or {})

    def add(self, form, entry):
        """Append ``entry`` to the table of ``form``."""
        self._tables[OperandForm(form)].append(entry)

    def lookup(self, form, name):
        """Return every entry of ``form`` named ``name``, in table order."""
        return tuple(entry for entry in self._tables[OperandForm(form)] if entry.name == name)

    def condition_code(self, symbol):
        """Return the byte encoding comparison ``symbol``, or 0 if unknown."""
        return self._conditions.get(symbol, 0)


_OP = r"(\w+)"
_REG = r"([rR][a-z])"
_NUM = r"(0x[0-9a-fA-F]+|[0-9]+)"
_OFF = r"(?:\(([-+]?0x[0-9a-fA-F]+|[-+]?[0-9]+)\))"
_LABEL = r"(\$\w*)"
_SYM = r"(->|==|<=?|>=?)"
_ARROW = r"\s*->\s*"


def _pattern(text):
    return re.compile(text, re.ASCII)


_FORMS = (
    (OperandForm.REG_REG, _pattern(rf"{_OP}\s+{_REG}\s*{_SYM}\s*{_REG}\s*")),
    (OperandForm.VALUE_REG, _pattern(rf"{_OP}\s+{_NUM}\s*{_SYM}\s*{_REG}\s*")),
    (OperandForm.LABEL_REG, _pattern(rf"{_OP}\s+{_LABEL}\s*{_SYM}\s*{_REG}\s*")),
    (OperandForm.REG_VALUE, _pattern(rf"{_OP}\s+{_REG}\s*{_SYM}\s*{_NUM}\s*")),
    (OperandForm.REG_LABEL, _pattern(rf"{_OP}\s+{_REG}\s*{_SYM}\s*{_LABEL}\s*")),
    (OperandForm.REGOFF_REG, _pattern(rf"{_OP}\s+{_REG}{_OFF}{_ARROW}{_REG}\s*")),
    (OperandForm.VALUEOFF_REG, _pattern(rf"{_OP}\s+{_NUM}{_OFF}{_ARROW}{_REG}\s*")),
    (OperandForm.LABELOFF_REG, _pattern(rf"{_OP}\s+{_LABEL}{_OFF}{_ARROW}{_REG}\s*")),
    (OperandForm.REG_REGOFF, _pattern(rf"{_OP}\s+{_REG}{_ARROW}{_REG}{_OFF}\s*")),
    (OperandForm.REG_VALUEOFF, _pattern(rf"{_OP}\s+{_REG}{_ARROW}{_NUM}{_OFF}\s*")),
    (OperandForm.REG_LABELOFF, _pattern(rf"{_OP}\s+{_REG}{_ARROW}{_LABEL}{_OFF}\s*")),
    (OperandForm.LABEL, _pattern(rf"{_OP}\s+{_LABEL}")),
    (OperandForm.REG, _pattern(rf"{_OP}\s+([rR][a-z]+)")),
    (OperandForm.ONLY, _pattern(_OP)),
    (OperandForm.VALUE, _pattern(rf"{_OP}\s+{_NUM}")),
)
_DEFINED_LABEL = _pattern(r"(\w+):")

# Forms whose address field is flagged as such in the extended prefix.
_ADDRSIZE_FORMS = frozenset({OperandForm.LABEL_REG, OperandForm.REG_LABEL})
# Forms that record a label reference after each encoded entry.
_PER_ENTRY_REFERENCE = frozenset(
    {OperandForm.LABEL_REG, OperandForm.REG_LABEL, OperandForm.LABEL}
)
# Forms that record one label reference after all entries are encoded.
_ONCE_REFERENCE = frozenset({OperandForm.LABELOFF_REG, OperandForm.REG_LABELOFF})


def _bind(func, *operands):
    """Return an encoder taking only the header arguments."""

    def encode(memory, pc, prefix, ext_prefix, opcode):
        return func(memory, pc, prefix, ext_prefix, opcode, *operands)

    return encode


class Assembler:
    """Assembles source lines one at a time into memory.

    ``pc`` is the address the next instruction is written at; ``labels``
    collects label definitions and references until :meth:`finish`.
    """

    def __init__(self, instruction_set, memory):
        self.instruction_set = instruction_set
        self.memory = memory
        self.pc = 0
        self.labels = LabelTable()

    def assemble_line(self, text):
        """Assemble one trimmed line and return the address after it.

        A line whose form is recognised but whose mnemonic is not in the
        instruction set emits nothing. Raises :class:`AssemblyError` when the
        line matches no form, label definition or data directive.
        """
        for form, pattern in _FORMS:
            match = pattern.fullmatch(text)
            if match is not None:
                self._emit(form, match.groups())
                return self.pc

        match = _DEFINED_LABEL.fullmatch(text)
        if match is not None:
            self.labels.define(match.group(1), self.pc)
            return self.pc

        for directive in (assemble_ascii, assemble_datatype):
            end = directive(text, self.memory, self.pc)
            if end is not None:
                self.pc = end
                return self.pc

        raise AssemblyError(f"unknown instruction {text!r} at 0x{self.pc:x}")

    def finish(self):
        """Patch every label reference, forget the labels and return their listing."""
        listing = self.labels.listing()
        self.labels.resolve(self.memory)
        self.labels.clear()
        return listing

    def _symbol(self, text):
        return 0 if text == "->" else self.instruction_set.condition_code(text)

    def _emit(self, form, groups):
        name, *operands = groups
        encode, label = self._encoder_for(form, operands)
        entries = self.instruction_set.lookup(form, name)
        for entry in entries:
            ext_prefix = entry.ext_prefix
            if form in _ADDRSIZE_FORMS:
                ext_prefix |= EXT_PREFIX_ADDRSIZE
            self.pc = encode(self.memory, self.pc, entry.prefix, ext_prefix, entry.opcode)
            if form in _PER_ENTRY_REFERENCE:
                self.labels.reference(label, self.pc - 4)
        if entries and form in _ONCE_REFERENCE:
            self.labels.reference(label, self.pc - 4)

    def _encoder_for(self, form, operands):
        """Parse the operands of ``form``; return an encoder and the label, if any."""
        reg = register_by_name
        F = OperandForm
        if form is F.REG_REG:
            lreg, sym, rreg = operands
            return _bind(encoder.instruction_reg_reg, reg(lreg), reg(rreg), self._symbol(sym)), None
        if form is F.VALUE_REG:
            value, sym, rreg = operands
            return _bind(
                encoder.instruction_value_reg, reg(rreg), self._symbol(sym), read_number(value)
            ), None
        if form is F.LABEL_REG:
            label, sym, rreg = operands
            return _bind(encoder.instruction_label_reg, reg(rreg), self._symbol(sym)), label[1:]
        if form is F.REG_VALUE:
            lreg, sym, value = operands
            return _bind(
                encoder.instruction_reg_value, reg(lreg), self._symbol(sym), read_number(value)
            ), None
        if form is F.REG_LABEL:
            lreg, sym, label = operands
            return _bind(encoder.instruction_reg_label, reg(lreg), self._symbol(sym)), label[1:]
        if form is F.REGOFF_REG:
            lreg, offset, rreg = operands
            return _bind(
                encoder.instruction_regoff_reg, reg(lreg), reg(rreg), read_number(offset)
            ), None
        if form is F.VALUEOFF_REG:
            value, offset, rreg = operands
            return _bind(
                encoder.instruction_valueoff_reg, reg(rreg), read_number(offset), read_number(value)
            ), None
        if form is F.LABELOFF_REG:
            label, offset, rreg = operands
            return _bind(encoder.instruction_labeloff_reg, reg(rreg), read_number(offset)), label[1:]
        if form is F.REG_REGOFF:
            lreg, rreg, offset = operands
            return _bind(
                encoder.instruction_reg_regoff, reg(lreg), reg(rreg), read_number(offset)
            ), None
        if form is F.REG_VALUEOFF:
            lreg, value, offset = operands
            return _bind(
                encoder.instruction_reg_valueoff, reg(lreg), read_number(offset), read_number(value)
            ), None
        if form is F.REG_LABELOFF:
            lreg, label, offset = operands
            return _bind(encoder.instruction_reg_labeloff, reg(lreg), read_number(offset)), label[1:]
        if form is F.LABEL:
            (label,) = operands
            return _bind(encoder.instruction_label), label[1:]
        if form is F.REG:
            (rreg,) = operands
            return _bind(encoder.instruction_reg, reg(rreg)), None
        if form is F.VALUE:
            (value,) = operands
            return _bind(encoder.instruction_value, read_number(value)), None
        return _bind(encoder.instruction_opcode), None