import pytest

from hvmasm.assembler import InstructionSet, OpcodeEntry, OperandForm
from hvmasm.opcodes import AssemblyError, Opcode
from hvmasm.source_reader import (
    MAX_MEMORY_SIZE,
    clean_line,
    compile_file,
    compile_source,
)


@pytest.fixture
def iset():
    return InstructionSet(
        tables={
            OperandForm.ONLY: [OpcodeEntry("stp", Opcode.STP)],
            OperandForm.LABEL: [OpcodeEntry("go", Opcode.GO_2)],
            OperandForm.VALUE_REG: [OpcodeEntry("mov", Opcode.MOV_2)],
        }
    )


def test_clean_line_strips_leading_spaces():
    assert clean_line("   mov 1 -> ra") == "mov 1 -> ra"


def test_clean_line_keeps_trailing_text():
    assert clean_line("  stp  ") == "stp  "


@pytest.mark.parametrize("line", ["", "    ", "; a comment", "   ;indented comment"])
def test_clean_line_skips_blank_and_comments(line):
    assert clean_line(line) is None


def test_compile_source_encodes_stop(iset):
    memory = compile_source("stp\n", iset, 16)
    assert bytes(memory)[:2] == bytes([0x0F, Opcode.STP])
    assert bytes(memory)[2:] == bytes(14)


def test_compile_source_memory_has_requested_size(iset):
    memory = compile_source("stp\n", iset, 64)
    assert len(memory) == 64


def test_unterminated_last_line_is_not_assembled(iset):
    memory = compile_source("stp", iset, 16)
    assert bytes(memory) == bytes(16)


def test_comments_and_blank_lines_emit_nothing(iset):
    plain = compile_source("stp\n", iset, 16)
    commented = compile_source("; start\n\n   \nstp\n", iset, 16)
    assert bytes(commented) == bytes(plain)


def test_nul_ends_a_line(iset):
    assert bytes(compile_source("stp\0", iset, 16)) == bytes(compile_source("stp\n", iset, 16))


def test_label_reference_is_patched(iset):
    source = "go $end\nstp\nend:\n=single 0x55\n"
    memory = compile_source(source, iset, 32)
    data = bytes(memory)
    assert memory.read32(2) == data.index(0x55)


def test_unknown_instruction_raises(iset):
    with pytest.raises(AssemblyError):
        compile_source("mov ra -> \n", iset, 16)


def test_compile_file_default_output(tmp_path, iset):
    source = tmp_path / "prog.hm"
    source.write_text("stp\n", encoding="utf-8")
    written = compile_file(source, iset, memory_size=32)
    assert written == tmp_path / "prog.hm.ho"
    data = written.read_bytes()
    assert data == bytes(compile_source("stp\n", iset, 32))


def test_compile_file_explicit_output(tmp_path, iset):
    source = tmp_path / "prog.hm"
    source.write_text("mov 7 -> rb\nstp\n", encoding="utf-8")
    target = tmp_path / "out.bin"
    written = compile_file(source, iset, target, 48)
    assert written == target
    assert target.read_bytes() == bytes(compile_source("mov 7 -> rb\nstp\n", iset, 48))


def test_compile_file_writes_whole_image_by_default(tmp_path, iset):
    source = tmp_path / "prog.hm"
    source.write_text("stp\n", encoding="utf-8")
    written = compile_file(source, iset)
    assert len(written.read_bytes()) == MAX_MEMORY_SIZE


def test_compile_file_missing_source(tmp_path, iset):
    with pytest.raises(FileNotFoundError):
        compile_file(tmp_path / "absent.hm", iset)