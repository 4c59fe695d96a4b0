"""Assemble source text or files into a fixed-size memory image."""

import logging
import re
from pathlib import Path

from .assembler import Assembler
from .memory import Memory

__all__ = ["MAX_MEMORY_SIZE", "clean_line", "compile_file", "compile_source"]

MAX_MEMORY_SIZE = 0x100000
OUTPUT_SUFFIX = ".ho"

_LINE_BREAK = re.compile("[\n\0]")

logger = logging.getLogger(__name__)


def clean_line(line):
    """Return ``line`` without its leading spaces, or None if nothing is to be assembled.

    Comment lines, which start with ``;``, and lines made only of spaces give
    None. Trailing characters are kept as they are.
    """
    text = line.lstrip(" ")
    if not text or text.startswith(";"):
        return None
    return text


def _complete_lines(text):
    """Yield every line that is closed by a line break; a final unterminated one is left out."""
    *lines, _unterminated = _LINE_BREAK.split(text)
    yield from lines


def compile_source(text, instruction_set, memory_size=MAX_MEMORY_SIZE):
    """Assemble ``text`` into a new :class:`Memory` of ``memory_size`` bytes.

    Each complete line is cleaned and assembled in turn; label references are
    patched once all lines are done. Raises :class:`AssemblyError` for a line
    that cannot be assembled.
    """
    memory = Memory(memory_size)
    assembler = Assembler(instruction_set, memory)
    for line in _complete_lines(text):
        cleaned = clean_line(line)
        if cleaned is None:
            continue
        logger.debug("Text: %s", cleaned)
        assembler.assemble_line(cleaned)
    for entry in assembler.finish():
        logger.debug("%s", entry)
    return memory


def compile_file(path, instruction_set, output_path=None, memory_size=MAX_MEMORY_SIZE):
    """Assemble the source file at ``path`` and write the whole memory image.

    The image goes to ``output_path``, or to ``path`` with ``.ho`` appended
    when none is given. Returns the path written to. Raises :class:`OSError`
    when a file cannot be opened.
    """
    source = Path(path)
    target = Path(output_path) if output_path else Path(f"{source}{OUTPUT_SUFFIX}")
    with source.open("r", encoding="utf-8", newline="") as handle:
        text = handle.read()
    memory = compile_source(text, instruction_set, memory_size)
    with target.open("wb") as handle:
        handle.write(bytes(memory))
    return target