"""Data directives: ``=ascii "text"`` and ``=single|double|quad number``."""

import re

from .memory import read_number

__all__ = ["assemble_ascii", "assemble_datatype"]

_ASCII = re.compile(r'=ascii\s+"([^"]*)"\s*')
_DATATYPE = re.compile(r"=(single|double|quad)\s+(0x[0-9a-fA-F]+|[0-9]+)")


def assemble_ascii(text, memory, pc):
    """Write the bytes of an ``=ascii "..."`` string at ``pc``.

    Returns the address after the string, or None when ``text`` is not an
    ascii directive. No terminating zero is written.
    """
    match = _ASCII.fullmatch(text)
    if match is None:
        return None
    for byte in match.group(1).encode("utf-8"):
        pc = memory.write8(pc, byte)
    return pc


def assemble_datatype(text, memory, pc):
    """Write a 1, 2 or 4 byte little-endian number for ``=single/double/quad``.

    Returns the address after the number, or None when ``text`` is not a
    datatype directive. The value is truncated to the directive's width.
    """
    match = _DATATYPE.fullmatch(text)
    if match is None:
        return None
    kind, literal = match.groups()
    value = read_number(literal)
    writers = {
        "single": memory.write8,
        "double": memory.write16,
        "quad": memory.write32,
    }
    return writers[kind](pc, value)