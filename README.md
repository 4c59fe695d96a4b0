# hvmasm

`hvmasm` assembles a small, line-oriented assembly language into a flat
binary memory image. It also provides the register file and the
fetch/dispatch loop of a 32-bit register machine that runs such images.

The package is a library. Mnemonics are supplied by you as an
`InstructionSet`, and the machine's instruction behaviour is supplied as
handler functions.

## Installation

Install the package with pip. The `test` extra adds pytest for the test
suite. The package has no dependencies outside the standard library.

## The language

Each line holds one statement.

- Leading spaces are stripped.
- A line that starts with `;` is a comment.
- Lines made only of spaces are skipped.
- Lines are split on newlines (and NUL characters). A final line with no
  line break after it is not assembled.

Statement shapes (`OperandForm`):

| Form            | Example                   |
|-----------------|---------------------------|
| `ONLY`          | `stp`                     |
| `REG`           | `not ra`                  |
| `VALUE`         | `push 0xDEAD1234`         |
| `LABEL`         | `go $start`               |
| `REG_REG`       | `mov rs -> rp`, `cnd ra == rb` |
| `VALUE_REG`     | `mov 0x1000 -> rs`        |
| `LABEL_REG`     | `mov $buffer -> ra`       |
| `REG_VALUE`     | `cnd ra < 10`             |
| `REG_LABEL`     | `cnd ra == $limit`        |
| `REGOFF_REG`    | `lod rb(+8) -> rc`        |
| `VALUEOFF_REG`  | `lod 0x100(-4) -> rc`     |
| `LABELOFF_REG`  | `lod $buffer(4) -> rc`    |
| `REG_REGOFF`    | `str rc -> rb(8)`         |
| `REG_VALUEOFF`  | `str rc -> 0x100(2)`      |
| `REG_LABELOFF`  | `str rc -> $buffer(4)`    |

Registers:

- The registers are `ra`–`rn`, `rs` and `rp`, in all lower or all upper
  case.
- An unknown register name raises `AssemblyError`.
- In the `REG_REG` form both registers must come from the same half
  (`ra`–`rh` or `ri`–`rp`). `Opcode.LOD_1` and `Opcode.STR_1` are exempt
  from this rule.

Numbers:

- Numbers are decimal or hexadecimal with a `0x` prefix. A decimal
  literal with a leading `0` is read as octal.
- Offsets in parentheses may carry a sign.
- Values are stored as 32 bits and offsets as 16 bits, in two's
  complement.

Labels and comparisons:

- `name:` defines a label at the current address.
- `$name` refers to a label. References may come before the definition.
  They are patched in by `Assembler.finish()`.
- A label that is referenced but never defined resolves to 0.
- In the two-operand forms without offsets, a comparison (`==`, `<`,
  `<=`, `>`, `>=`) may stand in place of `->`. Its byte comes from the
  instruction set's `conditions`, and is 0 if it is not listed there.

Data directives:

- `=ascii "text"` emits the raw bytes of the text, with no terminator.
- `=single`, `=double` and `=quad` followed by a number emit it as 1, 2 or
  4 little-endian bytes.

Errors:

- A line that matches no form, no label definition and no directive
  raises `hvmasm.opcodes.AssemblyError`.
- A line that matches a form, but whose mnemonic has no entry for that
  form, emits nothing.

## Usage

```python
from hvmasm.assembler import InstructionSet, OpcodeEntry, OperandForm
from hvmasm.opcodes import Opcode
from hvmasm.source_reader import compile_source

instruction_set = InstructionSet(
    tables={
        OperandForm.VALUE_REG: [OpcodeEntry("mov", Opcode.MOV_2)],
        OperandForm.REG_REG: [OpcodeEntry("mov", Opcode.MOV_1)],
        OperandForm.LABEL: [OpcodeEntry("go", Opcode.GO_2)],
        OperandForm.ONLY: [OpcodeEntry("stp", Opcode.STP)],
    },
    conditions={"==": 1},
)

source = """start:
    mov 0x1000 -> rs
    mov rs -> rp
    stp
    go $start
=quad 0x12345678
"""
memory = compile_source(source, instruction_set, memory_size=0x1000)
image = bytes(memory)
```

`compile_file(path, instruction_set, output_path=None, memory_size=...)`
assembles a file. It writes the whole memory image (0x100000 bytes by
default) to `output_path`, or to `path` with `.ho` appended. It returns
the path written to.

Running an image:

```python
from hvmasm.cpu import Cpu
from hvmasm.opcodes import Opcode

def stop_handler(cpu, prefix, ext_prefix, opcode):
    if opcode == Opcode.STP:
        cpu.stop()

cpu = Cpu(memory, [stop_handler])
cpu.run()
print(cpu.output())
```

`Cpu.step()` fetches the prefix byte, the extended prefix byte (when
`Prefix.EXT` is set) and the opcode. It then calls every handler with
`(cpu, prefix, ext_prefix, opcode)`. Handlers read their own operands from
`cpu.memory` at `cpu.registers.pc` and advance the counter themselves.

`Cpu.run()` repeats this until `stop()` is called or the program counter
leaves memory. `Cpu.output()` returns a text dump of the sixteen
registers, the flags and the program counter.

## Modules

- `hvmasm.opcodes`: `Opcode`, `Prefix`, `EXT_PREFIX_ADDRSIZE`,
  `pack_registers` / `unpack_registers` (the register byte: source in the
  high nibble, destination in the low nibble) and `AssemblyError`.
- `hvmasm.memory`:
  - `Memory`, a zero-filled byte image with little-endian
    `read8/16/32` and `write8/16/32`. Writes return the next address;
    out-of-range access raises `IndexError`.
  - `read_number`, `read_memtype` and `register_by_name`.
- `hvmasm.encoder`: one `instruction_*` function per operand form. Each
  writes an instruction and returns the next address.
- `hvmasm.directives`: `assemble_ascii` and `assemble_datatype`. Each
  returns the next address, or `None` if the text is not its directive.
- `hvmasm.labels`: `LabelTable`, with `reference`, `define`, `resolve`,
  `listing` and `clear`.
- `hvmasm.assembler`:
  - `OperandForm`, `OpcodeEntry` and `InstructionSet` (`lookup`, `add`,
    `condition_code`).
  - `Assembler`, with `assemble_line` and `finish`.
- `hvmasm.source_reader`: `clean_line`, `compile_source` and
  `compile_file`.
- `hvmasm.cpu`: `Register`, `RegisterFile` (`get`, `set`, `pc`, `flags`)
  and `Cpu`.

## What the package does not do

- There is no command-line program. Assembling and running are done from
  Python code.
- `InstructionSet()` starts empty. No mnemonic table or condition codes
  are built in, so every mnemonic must be registered before it assembles
  to anything.
- The machine carries out no instructions by itself. `Cpu` only fetches
  and dispatches; arithmetic, stack, branch and stop behaviour must be
  supplied as handlers.